"""Render driver: browser lifecycle, diagram wait, PDF export options."""

from __future__ import annotations

import pytest

from conftest import FAKE_PDF, FakePlaywright
from mdreport import PdfOptions, RenderError, compose_document, render_markdown, render_pdf, wait_for_diagrams
from mdreport.driver import DIAGRAMS_READY_SCRIPT

PLAIN_DOC = compose_document("<p>Hello</p>", None)
DIAGRAM_DOC = compose_document(render_markdown("```mermaid\ngraph TD\nA-->B\n```\n"), None)


class TestRenderPdf:
    def test_returns_pdf_bytes(self, fake_playwright: FakePlaywright):
        pdf = render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        assert pdf == FAKE_PDF
        assert pdf.startswith(b"%PDF-")

    def test_one_browser_per_call_and_always_closed(self, fake_playwright: FakePlaywright):
        render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        assert len(fake_playwright.browsers) == 2
        assert all(b.closed for b in fake_playwright.browsers)
        assert fake_playwright.entered == fake_playwright.exited == 2

    def test_loads_content_with_network_idle(self, fake_playwright: FakePlaywright):
        render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        page = fake_playwright.page
        assert page.content == PLAIN_DOC
        assert page.set_content_kwargs["wait_until"] == "networkidle"

    def test_export_options(self, fake_playwright: FakePlaywright):
        render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        kw = fake_playwright.page.pdf_kwargs
        assert kw["format"] == "A4"
        assert kw["print_background"] is True
        assert kw["margin"] == {"top": "15mm", "bottom": "15mm", "left": "15mm", "right": "15mm"}
        assert kw["display_header_footer"] is True
        assert kw["header_template"] == "<div></div>"
        assert 'class="pageNumber"' in kw["footer_template"]
        assert 'class="totalPages"' in kw["footer_template"]
        assert "flex-end" in kw["footer_template"]

    def test_settle_delay_applied(self, fake_playwright: FakePlaywright):
        render_pdf(PLAIN_DOC, playwright_factory=fake_playwright)
        assert fake_playwright.page.sleeps == [1000]

    def test_custom_options(self, fake_playwright: FakePlaywright):
        opts = PdfOptions(margin="10mm", settle_ms=0, diagram_timeout_ms=250)
        fake = FakePlaywright(diagrams_render=False)
        render_pdf(DIAGRAM_DOC, opts, playwright_factory=fake)
        assert fake.page.pdf_kwargs["margin"]["left"] == "10mm"
        assert fake.page.sleeps == [0]
        assert fake.page.function_waits[0]["timeout"] == 250

    def test_diagram_timeout_is_not_fatal(self):
        fake = FakePlaywright(diagrams_render=False)
        pdf = render_pdf(DIAGRAM_DOC, playwright_factory=fake)
        assert pdf == FAKE_PDF
        assert fake.browsers[0].closed

    @pytest.mark.parametrize("stage", ["launch", "load", "export", "crash"])
    def test_failures_become_render_error(self, stage: str):
        fake = FakePlaywright(fail_on=stage)
        with pytest.raises(RenderError, match="PDF rendering failed"):
            render_pdf(PLAIN_DOC, playwright_factory=fake)
        assert all(b.closed for b in fake.browsers)
        assert fake.exited == 1

    def test_export_failure_still_closes_browser(self):
        fake = FakePlaywright(fail_on="export")
        with pytest.raises(RenderError):
            render_pdf(PLAIN_DOC, playwright_factory=fake)
        assert len(fake.browsers) == 1
        assert fake.browsers[0].closed

    def test_unexpected_error_is_wrapped_with_cause(self):
        fake = FakePlaywright(fail_on="crash")
        with pytest.raises(RenderError) as info:
            render_pdf(PLAIN_DOC, playwright_factory=fake)
        assert isinstance(info.value.__cause__, KeyError)
        assert fake.browsers[0].closed


class TestWaitForDiagrams:
    def _page(self, fake: FakePlaywright, doc: str):
        page = fake.chromium.launch().new_page()
        page.set_content(doc)
        return page

    def test_no_diagrams_skips_wait(self, fake_playwright: FakePlaywright):
        page = self._page(fake_playwright, PLAIN_DOC)
        assert wait_for_diagrams(page, 5000) is True
        assert page.function_waits == []

    def test_rendered_diagrams(self, fake_playwright: FakePlaywright):
        page = self._page(fake_playwright, DIAGRAM_DOC)
        assert wait_for_diagrams(page, 5000) is True
        assert page.function_waits == [{"expression": DIAGRAMS_READY_SCRIPT, "timeout": 5000}]

    def test_timeout_returns_false(self):
        fake = FakePlaywright(diagrams_render=False)
        page = self._page(fake, DIAGRAM_DOC)
        assert wait_for_diagrams(page, 5000) is False

    def test_timeout_logged(self, caplog):
        fake = FakePlaywright(diagrams_render=False)
        page = self._page(fake, DIAGRAM_DOC)
        with caplog.at_level("WARNING", logger="mdreport.driver"):
            wait_for_diagrams(page, 5000)
        assert any("timed out" in r.getMessage() for r in caplog.records)

    def test_ready_check_requires_every_diagram(self):
        assert "querySelectorAll('.mermaid')" in DIAGRAMS_READY_SCRIPT
        assert ".every(" in DIAGRAMS_READY_SCRIPT
        assert "querySelector('svg')" in DIAGRAMS_READY_SCRIPT
        assert "data-processed" in DIAGRAMS_READY_SCRIPT
