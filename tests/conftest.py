"""Shared fixtures: on-disk asset folders and a fake Playwright object graph.

The fake mirrors just the sync API surface the render driver touches
(chromium.launch -> new_page -> set_content / locator / wait_for_function /
wait_for_timeout / pdf -> browser.close), so no real Chromium is needed.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from mdreport import AppConfig

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)

FAKE_PDF = b"%PDF-1.7\n% fake report\n%%EOF\n"

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d49444154789c6360000002000005000155c3d7a60000000049454e44ae426082"
)


# ---------------------------------------------------------------------------
# Fake Playwright
# ---------------------------------------------------------------------------


class FakeLocator:
    def __init__(self, n: int):
        self._n = n

    def count(self) -> int:
        return self._n


class FakePage:
    def __init__(self, owner: "FakePlaywright"):
        self.owner = owner
        self.content: Optional[str] = None
        self.set_content_kwargs: Dict[str, Any] = {}
        self.function_waits: List[Dict[str, Any]] = []
        self.sleeps: List[int] = []
        self.pdf_kwargs: Dict[str, Any] = {}

    def set_content(self, html: str, **kwargs: Any) -> None:
        if self.owner.fail_on == "load":
            raise PlaywrightError("net::ERR_ABORTED while loading content")
        self.content = html
        self.set_content_kwargs = kwargs

    def locator(self, selector: str) -> FakeLocator:
        n = self.content.count('class="mermaid"') if self.content else 0
        return FakeLocator(n)

    def wait_for_function(self, expression: str, timeout: float = 0) -> None:
        self.function_waits.append({"expression": expression, "timeout": timeout})
        if not self.owner.diagrams_render:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    def wait_for_timeout(self, ms: float) -> None:
        self.sleeps.append(ms)

    def pdf(self, **kwargs: Any) -> bytes:
        if self.owner.fail_on == "export":
            raise PlaywrightError("Printing failed")
        if self.owner.fail_on == "crash":
            raise KeyError("pageRanges")
        self.pdf_kwargs = kwargs
        return FAKE_PDF


class FakeBrowser:
    def __init__(self, owner: "FakePlaywright"):
        self.owner = owner
        self.closed = False
        self.pages: List[FakePage] = []

    def new_page(self) -> FakePage:
        page = FakePage(self.owner)
        self.pages.append(page)
        return page

    def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, owner: "FakePlaywright"):
        self.owner = owner

    def launch(self, **kwargs: Any) -> FakeBrowser:
        if self.owner.fail_on == "launch":
            raise PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")
        browser = FakeBrowser(self.owner)
        self.owner.browsers.append(browser)
        return browser


class FakePlaywright:
    """Callable stand-in for sync_playwright()."""

    def __init__(self, *, diagrams_render: bool = True, fail_on: Optional[str] = None):
        self.diagrams_render = diagrams_render
        self.fail_on = fail_on
        self.browsers: List[FakeBrowser] = []
        self.chromium = FakeChromium(self)
        self.entered = 0
        self.exited = 0

    def __call__(self) -> "FakePlaywright":
        return self

    def __enter__(self) -> "FakePlaywright":
        self.entered += 1
        return self

    def __exit__(self, *exc: Any) -> bool:
        self.exited += 1
        return False

    @property
    def page(self) -> FakePage:
        return self.browsers[-1].pages[-1]


@pytest.fixture
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()


# ---------------------------------------------------------------------------
# Asset folders
# ---------------------------------------------------------------------------


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """public/ with a logo, a cover background and one inline image."""
    root = tmp_path / "public"
    (root / "images").mkdir(parents=True)
    (root / "images" / "diagram.png").write_bytes(PNG_BYTES)
    (root / "logo.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>', encoding="utf-8")
    (root / "cover-bg.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>', encoding="utf-8")
    return root


@pytest.fixture
def app_config(public_dir: Path, tmp_path: Path) -> AppConfig:
    return AppConfig(public_dir=public_dir, upload_root=tmp_path / "uploads")
