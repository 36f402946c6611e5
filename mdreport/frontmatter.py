# mdreport/frontmatter.py
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from .models import ReportMetadata

# Human labels seen in report headers -> ReportMetadata field
FIELD_ALIASES: Dict[str, str] = {
    "title": "title",
    "report title": "title",
    "subtitle": "subtitle",
    "sub title": "subtitle",
    "course": "course",
    "course name": "course",
    "name": "name",
    "student": "name",
    "student name": "name",
    "author": "name",
    "roll": "roll",
    "roll no": "roll",
    "roll number": "roll",
    "reg": "reg",
    "reg no": "reg",
    "registration": "reg",
    "registration no": "reg",
    "registration number": "reg",
    "batch": "batch",
    "date": "date",
    "submission date": "date",
    "submitted": "date",
}

_FENCE = "---"
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")


def _normalize_label(label: str) -> str:
    s = label.strip().lower().rstrip(".")
    s = re.sub(r"[._]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _unquote(value: str) -> str:
    v = value.strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
        return v[1:-1]
    return v


def _parse_pair(line: str) -> Optional[Tuple[str, str]]:
    s = _LIST_MARKER_RE.sub("", line)
    s = s.replace("**", "").replace("__", "").strip()
    if ":" not in s:
        return None
    label, value = s.split(":", 1)
    field = FIELD_ALIASES.get(_normalize_label(label))
    value = _unquote(value)
    if not field or not value:
        return None
    return field, value


def parse_front_matter(text: str) -> Tuple[Dict[str, str], str]:
    """
    Split a leading `---` block of `key: value` lines off the document.

    Returns ({field: value}, body). Unknown keys are dropped; a document
    without front matter comes back unchanged with an empty dict.
    """
    lines = (text or "").splitlines(keepends=True)
    if not lines or lines[0].strip() != _FENCE:
        return {}, text or ""

    for end in range(1, len(lines)):
        if lines[end].strip() == _FENCE:
            break
    else:
        return {}, text

    found: Dict[str, str] = {}
    for line in lines[1:end]:
        pair = _parse_pair(line)
        if pair:
            found[pair[0]] = pair[1]
    body = "".join(lines[end + 1:]).lstrip("\n")
    return found, body


def extract_landing_page(text: str) -> Tuple[Dict[str, str], str]:
    """
    Pull metadata out of a "Landing Page" heading section and drop that
    section from the body. The section ends at the next heading of the same
    or a higher level.
    """
    lines = (text or "").splitlines(keepends=True)
    start: Optional[int] = None
    level = 0
    for i, line in enumerate(lines):
        m = _HEADING_RE.match(line.rstrip("\n"))
        if m and _normalize_label(m.group(2)) == "landing page":
            start, level = i, len(m.group(1))
            break
    if start is None:
        return {}, text or ""

    end = len(lines)
    for j in range(start + 1, len(lines)):
        m = _HEADING_RE.match(lines[j].rstrip("\n"))
        if m and len(m.group(1)) <= level:
            end = j
            break

    found: Dict[str, str] = {}
    for line in lines[start + 1:end]:
        pair = _parse_pair(line)
        if pair:
            found[pair[0]] = pair[1]

    kept: List[str] = lines[:start] + lines[end:]
    return found, "".join(kept).strip("\n") + ("\n" if kept else "")


def split_metadata(text: str) -> Tuple[ReportMetadata, str]:
    """Front matter first, then a Landing Page section; the later source wins per field."""
    front, body = parse_front_matter(text)
    landing, body = extract_landing_page(body)
    merged = {**front, **landing}
    return ReportMetadata.from_dict(merged), body
