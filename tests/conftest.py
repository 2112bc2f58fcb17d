# File: tests/conftest.py
import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import List, Optional, Sequence, Union

import pytest
import pytest_asyncio
from aiohttp import web

from price_watch.browser.page import NavigationResponse
from price_watch.browser.snapshot import SnapshotPage
from price_watch.config import MonitorConfig
from price_watch.exceptions import NavigationError
from price_watch.logger import init_logging

# --------------------------------------------------------------------------- #
#                               HTML fixtures                                 #
# --------------------------------------------------------------------------- #

#: value in a large-text span right next to the label
LABELED_HTML = """
<html><head><title>Sunrise</title><style>.text-2xl { font-size: 24px }</style></head>
<body>
  <div class="rounded-2xl border p-4">
    <div class="flex flex-col">
      <p class="text-sm">Current Price</p>
      <span class="text-2xl font-bold">4.74</span>
    </div>
    <p>USDrise per ATOM</p>
  </div>
</body></html>
"""

#: no value span, the number only appears somewhere inside the card
CARD_HTML = """
<html><body>
  <div class="mt-2 rounded-2xl shadow">
    <div><p>Current Price</p></div>
    <div><b>4.74</b> USDrise per ATOM</div>
  </div>
</body></html>
"""

#: no label at all
NO_LABEL_HTML = """
<html><body><main><h1>Staking</h1><p>Price is 4.74 USDrise per ATOM today</p></main></body></html>
"""

#: label card without a number, price elsewhere in the markup glued to the unit
REGEX_HTML = """
<html><body>
  <div class="rounded-2xl"><p>Current Price</p><p>loading</p></div>
  <div data-role="ticker">4.74USDrise per ATOM</div>
</body></html>
"""

#: unit phrase present, but the number is not a decimal right before it
UNIT_LOCATOR_HTML = """
<html><body>
  <div class="rounded-2xl"><p>Current Price</p><p>-</p></div>
  <p>Rate: 5 USDrise per ATOM</p>
</body></html>
"""

#: label present, no price anywhere; the footer year must not be picked up
NO_PRICE_HTML = """
<html><body>
  <div class="rounded-2xl"><p>Current Price</p><p>n/a</p></div>
  <footer>(c) 2024</footer>
</body></html>
"""


# --------------------------------------------------------------------------- #
#                                Test doubles                                 #
# --------------------------------------------------------------------------- #

Outcome = Union[NavigationResponse, None, Exception]


class ScriptedPage(SnapshotPage):
    """SnapshotPage whose navigations follow a script and are recorded."""

    def __init__(self, html: str, outcomes: Optional[Sequence[Outcome]] = None) -> None:
        super().__init__(html)
        self.outcomes: List[Outcome] = list(outcomes or [NavigationResponse(200, "OK")])
        self.goto_calls: list = []
        self.waits: List[float] = []

    async def goto(self, url, *, wait_until, timeout):
        self.goto_calls.append((url, wait_until, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def wait(self, seconds):
        self.waits.append(seconds)


class FakeSession:
    """Session factory yielding a prepared page and remembering closure."""

    def __init__(self, page) -> None:
        self.page = page
        self.opened = 0
        self.closed = 0

    def __call__(self, config):
        @asynccontextmanager
        async def _session():
            self.opened += 1
            try:
                yield self.page
            finally:
                self.closed += 1

        return _session()


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent = []

    async def send(self, message):
        self.sent.append(message)
        return 204


def nav_timeout(msg: str = "Timeout 30000ms exceeded") -> NavigationError:
    return NavigationError(msg)


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


class Webhook:
    """Fake Discord endpoint: records JSON bodies, answers with a preset status."""

    def __init__(self) -> None:
        self.received: list = []
        self.status = 204
        self.body = ""
        self.delay = 0.0
        self.url = ""

    async def handle(self, request: web.Request) -> web.Response:
        self.received.append(await request.json())
        if self.delay:
            await asyncio.sleep(self.delay)
        return web.Response(status=self.status, text=self.body or None)


@pytest_asyncio.fixture
async def webhook(unused_tcp_port: int) -> AsyncIterator[Webhook]:
    hook = Webhook()
    app = web.Application()
    app.router.add_post("/api/webhooks/1/token", hook.handle)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", unused_tcp_port)
    await site.start()
    hook.url = f"http://localhost:{unused_tcp_port}/api/webhooks/1/token"
    try:
        yield hook
    finally:
        await runner.cleanup()


@pytest.fixture(autouse=True)
def _logging():
    """Bind the project logger to the stdout captured for the current test."""
    init_logging(level="DEBUG")
    yield


@pytest.fixture()
def monitor_config() -> MonitorConfig:
    """
    Return a valid MonitorConfig with no settle delay.
    """
    return MonitorConfig(
        target_url="https://app.example.com/staking",
        threshold_low="2.0",
        threshold_high="5.0",
        discord_webhook_url="https://discord.com/api/webhooks/123/secret-token",
        settle_delay=0,
    )
