# setup.py
from setuptools import setup, find_packages

setup(
    name="price_watch",
    version="0.1.0",
    description="Headless-browser price watcher with Discord webhook alerts",
    packages=find_packages(exclude=["tests", "tests.*"]),  # автоматически найдёт папку price_watch
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "playwright>=1.40",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "price-watch=price_watch.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
