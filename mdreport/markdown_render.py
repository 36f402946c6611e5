# mdreport/markdown_render.py
from __future__ import annotations

import re

import markdown

PAGE_BREAK_MARKER = '<div class="page-break-marker"></div>'

# "\pagebreak" escape or "<!-- pagebreak -->" comment
_PAGE_BREAK_RE = re.compile(r"\\pagebreak\b|<!--\s*pagebreak\s*-->", re.IGNORECASE)

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


def insert_page_breaks(text: str) -> str:
    # Blank lines on both sides keep the marker a raw HTML block, not inline text.
    return _PAGE_BREAK_RE.sub(lambda _m: f"\n\n{PAGE_BREAK_MARKER}\n\n", text)


def render_markdown(text: str) -> str:
    """
    Convert report markdown to an HTML fragment.

    Fenced ```mermaid blocks come out as <pre><code class="language-mermaid">
    with the diagram source escaped but otherwise untouched; the composer
    promotes them to diagram containers later.
    """
    return markdown.markdown(insert_page_breaks(text or ""), extensions=MARKDOWN_EXTENSIONS)
