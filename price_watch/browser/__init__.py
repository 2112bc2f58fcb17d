"""Browser access: capability interface, Playwright adapter and static snapshots."""
from price_watch.browser.page import Element, NavigationResponse, Page
from price_watch.browser.snapshot import SnapshotPage

__all__ = ["Element", "NavigationResponse", "Page", "SnapshotPage"]
