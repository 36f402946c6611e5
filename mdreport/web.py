# mdreport/web.py
"""
HTTP surface for the report generator.

    POST /api/generate-pdf   {markdown, metadata, basePath?, batchId?} -> application/pdf
         (also /generate-pdf and /generate-pdf-equivalent)
    POST /api/files          multipart upload (file, batchId, relativePath)
    GET  /api/uploads/<path> uploaded files, for editor previews
    GET  /health
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from flask import Flask, Response, current_app, jsonify, request, send_from_directory

from .config import AppConfig
from .driver import render_pdf
from .models import ReportMetadata
from .pipeline import generate_report_pdf
from .uploads import UploadError, UploadStore

log = logging.getLogger(__name__)

PDF_FILENAME = "report.pdf"


def _state() -> dict:
    return current_app.extensions["mdreport"]


def _upload_dirs(store: UploadStore, payload: dict) -> List[Path]:
    dirs: List[Path] = []
    base = store.resolve_base_path(payload.get("basePath"))
    if base is not None:
        dirs.append(base)
    batch_id = payload.get("batchId")
    if batch_id:
        batch_dir = store.batch_dir(batch_id)
        if batch_dir.is_dir():
            dirs.append(batch_dir)
    return dirs


def generate_pdf():
    state = _state()
    try:
        payload = request.get_json(force=True)
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
        markdown_text = payload["markdown"]
        metadata = ReportMetadata.from_dict(payload.get("metadata"))
        extra_dirs = _upload_dirs(state["uploads"], payload)

        pdf = generate_report_pdf(
            markdown_text,
            metadata,
            config=state["config"],
            extra_image_dirs=extra_dirs,
            renderer=state["renderer"],
        )
    except Exception as exc:
        log.exception("PDF generation error")
        message = str(exc) or exc.__class__.__name__
        if isinstance(exc, KeyError):
            message = f"Missing field: {exc.args[0]}"
        return jsonify({"error": message}), 500

    return Response(
        pdf,
        status=200,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'},
    )


def upload_file():
    store: UploadStore = _state()["uploads"]
    file = request.files.get("file")
    if file is None:
        return jsonify({"error": "No file uploaded"}), 400

    batch_id = request.form.get("batchId", "")
    relative_path = request.form.get("relativePath") or file.filename or ""
    try:
        stored = store.save(batch_id, relative_path, file.stream, original_name=file.filename or "")
    except UploadError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"file": stored.to_json()})


def serve_upload(subpath: str):
    store: UploadStore = _state()["uploads"]
    return send_from_directory(store.root.resolve(), subpath)


def health():
    return jsonify({"status": "ok"})


def create_app(
    config: Optional[AppConfig] = None,
    *,
    renderer: Optional[Callable[..., Any]] = None,
) -> Flask:
    cfg = config or AppConfig.from_env()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_upload_bytes
    app.extensions["mdreport"] = {
        "config": cfg,
        "uploads": UploadStore(cfg.upload_root),
        "renderer": renderer or render_pdf,
    }

    app.add_url_rule("/api/generate-pdf", "generate_pdf", generate_pdf, methods=["POST"])
    app.add_url_rule("/generate-pdf", "generate_pdf_alias", generate_pdf, methods=["POST"])
    app.add_url_rule("/generate-pdf-equivalent", "generate_pdf_equivalent", generate_pdf, methods=["POST"])
    app.add_url_rule("/api/files", "upload_file", upload_file, methods=["POST"])
    app.add_url_rule("/api/uploads/<path:subpath>", "serve_upload", serve_upload, methods=["GET"])
    app.add_url_rule("/health", "health", health, methods=["GET"])

    log.info(
        "mdreport app ready (public=%s uploads=%s)",
        cfg.public_dir,
        cfg.upload_root,
    )
    return app
