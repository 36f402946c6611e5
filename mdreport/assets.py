# mdreport/assets.py
from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

# ./images/foo.png or images/foo.png
IMAGE_SRC_RE = re.compile(r"^(?:\./)?images/.+")

_TAG_NAME_RE = re.compile(r"<[^\s/>]+")
# one attribute at a time, same shape html.parser accepts
_ATTR_RE = re.compile(
    r"""[\s/]*(?P<name>[^\s/>"'=][^\s/>"'=]*)(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|[^\s"'>]+))?""",
)


@dataclass(frozen=True)
class ImageTag:
    start: int
    raw: str
    src: str


# -----------------------------
# Scanning
# -----------------------------

class ImageTagScanner(HTMLParser):
    """Collects every <img> start tag with its offset in the fed markup."""

    def __init__(self, html: str):
        super().__init__(convert_charrefs=True)
        self.html = html
        self.tags: List[ImageTag] = []
        self._line_starts = [0]
        for i, ch in enumerate(html):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def _offset(self) -> int:
        lineno, col = self.getpos()
        return self._line_starts[lineno - 1] + col

    def handle_starttag(self, tag, attrs):
        if tag != "img":
            return
        raw = self.get_starttag_text() or ""
        src = dict(attrs).get("src") or ""
        self.tags.append(ImageTag(start=self._offset(), raw=raw, src=src))


def find_image_tags(html: str) -> List[ImageTag]:
    scanner = ImageTagScanner(html)
    scanner.feed(html)
    scanner.close()
    return scanner.tags


# -----------------------------
# Encoding
# -----------------------------

def mime_type_for(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext == "svg":
        return "image/svg+xml"
    if ext == "jpg":
        return "image/jpeg"
    return f"image/{ext}"


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def read_asset_base64(path: Optional[Path]) -> str:
    """Base64 text of a static asset, or "" when it can't be read."""
    if path is None:
        return ""
    try:
        return base64.b64encode(Path(path).read_bytes()).decode("ascii")
    except OSError as exc:
        log.warning("Static asset unavailable, using empty image: %s (%s)", path, exc)
        return ""


# -----------------------------
# Resolution
# -----------------------------

def _relative_image_path(src: str) -> str:
    return src[2:] if src.startswith("./") else src


def resolve_image(src: str, base_dirs: Sequence[Path]) -> Optional[Path]:
    """First existing file for `src` under base_dirs, in order. Never escapes a base dir."""
    rel = _relative_image_path(src)
    for base in base_dirs:
        base_resolved = Path(base).resolve()
        candidate = (base_resolved / rel).resolve()
        if not candidate.is_relative_to(base_resolved):
            log.warning("Image path escapes base directory, skipping: %s", src)
            continue
        if candidate.is_file():
            return candidate
    return None


def _src_value_span(raw_tag: str) -> Optional[Tuple[int, int]]:
    """Span of the src attribute's value, walking attributes in order.

    Text inside other attributes' quoted values is never looked at. With
    duplicate src attributes the last one wins, as in HTMLParser's attrs.
    """
    m = _TAG_NAME_RE.match(raw_tag)
    if m is None:
        return None
    pos = m.end()
    span = None
    while True:
        attr = _ATTR_RE.match(raw_tag, pos)
        if attr is None or attr.end() == pos:
            break
        if attr.group("name").lower() == "src" and attr.group("value") is not None:
            span = attr.span("value")
        pos = attr.end()
    return span


def _rewrite_src(raw_tag: str, new_src: str) -> str:
    span = _src_value_span(raw_tag)
    if span is None:
        return raw_tag
    start, end = span
    value = raw_tag[start:end]
    quote = value[0] if value[:1] in ("'", '"') else '"'
    return f"{raw_tag[:start]}{quote}{new_src}{quote}{raw_tag[end:]}"


def inline_images(html: str, base_dirs: Iterable[Path]) -> str:
    """
    Replace relative ./images/... sources with base64 data URIs.

    Tags whose file can't be found in any of `base_dirs` are left exactly as
    they were.
    """
    dirs = [Path(d) for d in base_dirs]
    tags = [t for t in find_image_tags(html) if IMAGE_SRC_RE.match(t.src)]
    if not tags:
        return html

    encoded: Dict[str, Optional[str]] = {}
    edits: List[Tuple[int, int, str]] = []

    for tag in tags:
        if tag.src not in encoded:
            encoded[tag.src] = _encode_first_readable(tag.src, dirs)
        data_uri = encoded[tag.src]
        if data_uri is None:
            continue
        end = tag.start + len(tag.raw)
        if html[tag.start:end] != tag.raw:
            log.debug("Tag offset mismatch for %s at %s, leaving tag alone", tag.src, tag.start)
            continue
        edits.append((tag.start, end, _rewrite_src(tag.raw, data_uri)))

    out = html
    for start, end, replacement in sorted(edits, reverse=True):
        out = out[:start] + replacement + out[end:]
    return out


def _encode_first_readable(src: str, base_dirs: List[Path]) -> Optional[str]:
    for base in base_dirs:
        found = resolve_image(src, [base])
        if found is None:
            continue
        try:
            data = found.read_bytes()
        except OSError as exc:
            log.error("Error reading image %s: %s", found, exc)
            continue
        log.debug("Inlined image %s from %s (%s bytes)", src, found, len(data))
        return to_data_uri(data, mime_type_for(found))

    log.warning("Image not found in any asset directory, leaving reference: %s", src)
    return None
