# report_run.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from mdreport import (
    AppConfig,
    RenderError,
    ReportMetadata,
    build_report_html,
    render_pdf,
    split_metadata,
)


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

METADATA_FLAGS = ("title", "subtitle", "course", "name", "roll", "reg", "batch", "date")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


# ----------------------------
# CLI
# ----------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="report",
        description="Markdown (+ ./images, mermaid) -> cover-paged A4 PDF report via headless Chromium.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render one markdown file to PDF.")
    r.add_argument("input", type=Path, help="Markdown file (its folder is searched for ./images/...)")
    r.add_argument("--out", type=Path, default=None, help="Output PDF path (default: <input>.pdf)")
    r.add_argument("--html", type=Path, default=None, help="Also write the composed HTML here.")
    r.add_argument("--metadata", type=Path, default=None, help="JSON file with cover metadata.")
    r.add_argument("--public-dir", type=Path, default=None, help="Static assets folder (logo, cover background).")
    for name in METADATA_FLAGS:
        r.add_argument(f"--{name}", default=None, help=f"Cover '{name}' (overrides front matter).")

    s = sub.add_parser("serve", help="Run the HTTP service.")
    s.add_argument("--host", default="127.0.0.1")
    s.add_argument("--port", type=int, default=5000)
    s.add_argument("--debug", action="store_true", help="Flask debug mode.")
    return p


def _load_metadata(args: argparse.Namespace, from_document: ReportMetadata) -> ReportMetadata:
    meta = from_document
    if args.metadata:
        data = json.loads(args.metadata.read_text(encoding="utf-8"))
        meta = meta.merged(ReportMetadata.from_dict(data))
    flags = {name: getattr(args, name) for name in METADATA_FLAGS if getattr(args, name)}
    return meta.merged(ReportMetadata(**flags))


def _cmd_render(args: argparse.Namespace, cfg: AppConfig) -> int:
    md_path = args.input.expanduser().resolve()
    if not md_path.exists():
        raise SystemExit(f"Missing markdown file: {md_path}")

    out_pdf = (args.out or md_path.with_suffix(".pdf")).expanduser().resolve()
    out_pdf.parent.mkdir(parents=True, exist_ok=True)

    doc_meta, body = split_metadata(md_path.read_text(encoding="utf-8"))
    metadata = _load_metadata(args, doc_meta)

    html = build_report_html(body, metadata, config=cfg, extra_image_dirs=[md_path.parent])
    if args.html:
        args.html.parent.mkdir(parents=True, exist_ok=True)
        args.html.write_text(html, encoding="utf-8")
        print(f"OK: wrote HTML -> {args.html}")

    try:
        pdf = render_pdf(html, cfg.pdf)
    except RenderError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    out_pdf.write_bytes(pdf)
    print(f"OK: wrote PDF  -> {out_pdf}")
    return 0


def _cmd_serve(args: argparse.Namespace, cfg: AppConfig) -> int:
    from mdreport.web import create_app

    app = create_app(cfg)
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    cfg = AppConfig.from_env()
    if getattr(args, "public_dir", None):
        cfg = replace(cfg, public_dir=args.public_dir)

    if args.command == "render":
        return _cmd_render(args, cfg)
    return _cmd_serve(args, cfg)


if __name__ == "__main__":
    raise SystemExit(main())
