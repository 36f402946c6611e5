# mdreport/driver.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .models import PdfOptions

log = logging.getLogger(__name__)

DIAGRAM_SELECTOR = ".mermaid"

# true once every diagram node holds an svg or carries mermaid's processed flag
DIAGRAMS_READY_SCRIPT = """() => Array.from(document.querySelectorAll('.mermaid')).every(
    (el) => el.querySelector('svg') !== null || el.getAttribute('data-processed') === 'true'
)"""


class RenderError(RuntimeError):
    pass


def wait_for_diagrams(page: Any, timeout_ms: int) -> bool:
    """
    Block until every client-side diagram has rendered, at most `timeout_ms`.

    Returns True when the page has no diagrams or they finished, False on
    timeout. A timeout is not an error: capture goes ahead with whatever is
    on the page.
    """
    if page.locator(DIAGRAM_SELECTOR).count() == 0:
        return True
    t0 = time.perf_counter()
    try:
        page.wait_for_function(DIAGRAMS_READY_SCRIPT, timeout=timeout_ms)
    except PlaywrightTimeoutError:
        log.warning("Diagram wait timed out after %sms, proceeding anyway", timeout_ms)
        return False
    log.debug("Diagrams ready in %.2fs", time.perf_counter() - t0)
    return True


def render_pdf(
    html: str,
    options: Optional[PdfOptions] = None,
    *,
    playwright_factory: Callable[[], Any] = sync_playwright,
) -> bytes:
    """
    Render a composed HTML document to PDF bytes in a fresh headless Chromium.

    One browser per call, always closed. Any failure during launch, load or
    export surfaces as RenderError.
    """
    opts = options or PdfOptions()
    t0 = time.perf_counter()

    try:
        with playwright_factory() as p:
            browser = p.chromium.launch(headless=True)
            try:
                page = browser.new_page()
                page.set_content(html, wait_until="networkidle", timeout=opts.navigation_timeout_ms)
                wait_for_diagrams(page, opts.diagram_timeout_ms)
                page.wait_for_timeout(opts.settle_ms)
                pdf = page.pdf(**opts.pdf_kwargs())
            finally:
                browser.close()
    except Exception as exc:
        log.error("PDF rendering failed: %s", exc)
        raise RenderError(f"PDF rendering failed: {exc}") from exc

    log.info("Rendered PDF (%s bytes) in %.2fs", len(pdf), time.perf_counter() - t0)
    return pdf
