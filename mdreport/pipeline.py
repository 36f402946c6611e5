# mdreport/pipeline.py
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from .assets import inline_images, mime_type_for, read_asset_base64
from .composer import compose_document
from .config import AppConfig
from .driver import render_pdf
from .markdown_render import render_markdown
from .models import ReportMetadata

log = logging.getLogger(__name__)


def build_report_html(
    markdown_text: str,
    metadata: Optional[ReportMetadata] = None,
    *,
    config: Optional[AppConfig] = None,
    extra_image_dirs: Iterable[Path] = (),
) -> str:
    """Markdown -> content HTML -> inlined images -> full report page."""
    cfg = config or AppConfig()
    t0 = time.perf_counter()

    content = render_markdown(markdown_text)
    log.debug("render_markdown: %s chars -> %s chars", len(markdown_text or ""), len(content))

    image_dirs = [*cfg.image_dirs, *extra_image_dirs]
    content = inline_images(content, image_dirs)

    doc = compose_document(
        content,
        metadata,
        logo_b64=read_asset_base64(cfg.logo),
        background_b64=read_asset_base64(cfg.background),
        logo_mime=mime_type_for(cfg.logo),
        background_mime=mime_type_for(cfg.background),
        institution=cfg.institution,
        program=cfg.program,
    )
    log.info("Composed report HTML (%s chars) in %.2fs", len(doc), time.perf_counter() - t0)
    return doc


def generate_report_pdf(
    markdown_text: str,
    metadata: Optional[ReportMetadata] = None,
    *,
    config: Optional[AppConfig] = None,
    extra_image_dirs: Iterable[Path] = (),
    renderer: Callable[..., Any] = render_pdf,
) -> bytes:
    cfg = config or AppConfig()
    doc = build_report_html(markdown_text, metadata, config=cfg, extra_image_dirs=extra_image_dirs)
    return renderer(doc, cfg.pdf)
