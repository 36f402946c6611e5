"""
mdreport: markdown -> styled, paginated PDF reports.

Pipeline:
- render_markdown      markdown (+ page-break markers) -> HTML fragment
- inline_images        ./images/... -> base64 data URIs
- compose_document     cover page + content + print stylesheet + diagram bootstrap
- render_pdf           headless Chromium -> A4 PDF bytes
"""
from .assets import inline_images, mime_type_for, read_asset_base64
from .composer import compose_document, promote_diagrams
from .config import AppConfig, ConfigError
from .driver import RenderError, render_pdf, wait_for_diagrams
from .frontmatter import extract_landing_page, parse_front_matter, split_metadata
from .markdown_render import PAGE_BREAK_MARKER, insert_page_breaks, render_markdown
from .models import METADATA_DEFAULTS, DiagramTheme, PdfOptions, ReportMetadata
from .pipeline import build_report_html, generate_report_pdf
from .uploads import StoredFile, UploadError, UploadStore

__all__ = [
    "AppConfig",
    "ConfigError",
    "DiagramTheme",
    "METADATA_DEFAULTS",
    "PAGE_BREAK_MARKER",
    "PdfOptions",
    "RenderError",
    "ReportMetadata",
    "StoredFile",
    "UploadError",
    "UploadStore",
    "build_report_html",
    "compose_document",
    "extract_landing_page",
    "generate_report_pdf",
    "inline_images",
    "insert_page_breaks",
    "mime_type_for",
    "parse_front_matter",
    "promote_diagrams",
    "read_asset_base64",
    "render_markdown",
    "render_pdf",
    "split_metadata",
    "wait_for_diagrams",
]
