# mdreport/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .composer import DEFAULT_INSTITUTION, DEFAULT_PROGRAM
from .models import PdfOptions

DEFAULT_PUBLIC_DIR = Path("public")
DEFAULT_UPLOAD_DIR = Path("uploads")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class AppConfig:
    """
    Service settings. Only the web app and CLI read this; the render
    pipeline itself takes explicit arguments.
    """
    public_dir: Path = DEFAULT_PUBLIC_DIR
    logo_path: Optional[Path] = None           # None => <public_dir>/logo.svg
    background_path: Optional[Path] = None     # None => <public_dir>/cover-bg.svg
    image_base_dirs: Tuple[Path, ...] = ()     # () => (<public_dir>, <public_dir>/content-2)
    upload_root: Path = DEFAULT_UPLOAD_DIR
    max_upload_bytes: int = 16 * 1024 * 1024
    pdf: PdfOptions = field(default_factory=PdfOptions)
    institution: str = DEFAULT_INSTITUTION
    program: str = DEFAULT_PROGRAM

    @property
    def logo(self) -> Path:
        return self.logo_path or (self.public_dir / "logo.svg")

    @property
    def background(self) -> Path:
        return self.background_path or (self.public_dir / "cover-bg.svg")

    @property
    def image_dirs(self) -> Tuple[Path, ...]:
        return self.image_base_dirs or (self.public_dir, self.public_dir / "content-2")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        cfg = cls()

        if env.get("MDREPORT_PUBLIC_DIR"):
            cfg = replace(cfg, public_dir=Path(env["MDREPORT_PUBLIC_DIR"]))
        if env.get("MDREPORT_LOGO"):
            cfg = replace(cfg, logo_path=Path(env["MDREPORT_LOGO"]))
        if env.get("MDREPORT_COVER_BG"):
            cfg = replace(cfg, background_path=Path(env["MDREPORT_COVER_BG"]))
        if env.get("MDREPORT_UPLOAD_DIR"):
            cfg = replace(cfg, upload_root=Path(env["MDREPORT_UPLOAD_DIR"]))
        if env.get("MDREPORT_INSTITUTION"):
            cfg = replace(cfg, institution=env["MDREPORT_INSTITUTION"])
        if env.get("MDREPORT_PROGRAM"):
            cfg = replace(cfg, program=env["MDREPORT_PROGRAM"])

        pdf = cfg.pdf
        if env.get("MDREPORT_DIAGRAM_TIMEOUT_MS"):
            pdf = replace(pdf, diagram_timeout_ms=_env_int(env, "MDREPORT_DIAGRAM_TIMEOUT_MS"))
        if env.get("MDREPORT_SETTLE_MS"):
            pdf = replace(pdf, settle_ms=_env_int(env, "MDREPORT_SETTLE_MS"))
        return replace(cfg, pdf=pdf)


def _env_int(env: Mapping[str, str], key: str) -> int:
    raw = env[key].strip()
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{key} must be >= 0, got {value}")
    return value
