# mdreport/uploads.py
from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional

from werkzeug.utils import secure_filename

log = logging.getLogger(__name__)

BATCH_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_URL_PREFIXES = ("/api/uploads/", "api/uploads/", "/uploads/", "uploads/")


class UploadError(ValueError):
    pass


@dataclass(frozen=True)
class StoredFile:
    original_name: str
    relative_path: str
    url: str
    path: Path

    def to_json(self) -> dict:
        return {
            "originalName": self.original_name,
            "relativePath": self.relative_path,
            "url": self.url,
        }


def _safe_segments(relative_path: str) -> List[str]:
    parts = re.split(r"[\\/]+", relative_path or "")
    out: List[str] = []
    for part in parts:
        if part in ("", ".", ".."):
            continue
        safe = secure_filename(part)
        if safe:
            out.append(safe)
    return out


class UploadStore:
    """
    Folder uploads, one directory per batch:

        <root>/<batch_id>/<relative/path/of/file>

    so a markdown file's ./images/... references resolve against the
    directory it was uploaded into.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def batch_dir(self, batch_id: str) -> Path:
        if not BATCH_ID_RE.match(batch_id or ""):
            raise UploadError(f"Invalid batch id: {batch_id!r}")
        return self.root / batch_id

    def save(self, batch_id: str, relative_path: str, stream: BinaryIO, original_name: str = "") -> StoredFile:
        segments = _safe_segments(relative_path) or _safe_segments(original_name)
        if not segments:
            raise UploadError("Upload has no usable file name")

        dest = self.batch_dir(batch_id).joinpath(*segments)
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("wb") as fh:
            shutil.copyfileobj(stream, fh)

        rel = "/".join(segments)
        log.info("Stored upload batch=%s path=%s (%s bytes)", batch_id, rel, dest.stat().st_size)
        return StoredFile(
            original_name=original_name or segments[-1],
            relative_path=rel,
            url=f"/uploads/{batch_id}/{rel}",
            path=dest,
        )

    def resolve_base_path(self, base_path: Optional[str]) -> Optional[Path]:
        """
        Map an editor base path like /api/uploads/<batch>/<dir> to a directory
        under the upload root. None when it doesn't name one.
        """
        if not base_path:
            return None
        rel = base_path.strip()
        for prefix in _URL_PREFIXES:
            if rel.startswith(prefix):
                rel = rel[len(prefix):]
                break
        else:
            log.debug("Base path is not an upload path, ignoring: %s", base_path)
            return None

        root = self.root.resolve()
        candidate = (root / rel).resolve()
        if not candidate.is_relative_to(root) or candidate == root:
            log.warning("Base path escapes upload root, ignoring: %s", base_path)
            return None
        if not candidate.is_dir():
            log.warning("Upload base path does not exist: %s", candidate)
            return None
        return candidate
