# mdreport/models.py
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional


METADATA_DEFAULTS: Dict[str, str] = {
    "title": "Public Key Infrastructure (PKI)",
    "subtitle": "Implementation & Web Application Integration",
    "course": "CSE 802 - Information Security and Cryptography",
    "name": "Nishan Paul",
    "roll": "JN-50028",
    "reg": "H-55",
    "batch": "05",
    "date": "December 18, 2025",
}


@dataclass(frozen=True)
class ReportMetadata:
    """
    Cover-page fields supplied by the caller.

    None (or an empty string) means "use the default" for that field; see
    METADATA_DEFAULTS. Use .resolved() to get the values that actually print.
    """
    title: Optional[str] = None
    subtitle: Optional[str] = None
    course: Optional[str] = None
    name: Optional[str] = None
    roll: Optional[str] = None
    reg: Optional[str] = None
    batch: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReportMetadata":
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError(f"metadata must be an object, got {type(data).__name__}")
        kwargs: Dict[str, Optional[str]] = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if raw is None:
                continue
            kwargs[f.name] = raw if isinstance(raw, str) else str(raw)
        return cls(**kwargs)

    def merged(self, overrides: "ReportMetadata") -> "ReportMetadata":
        """Return a copy where every non-empty field of `overrides` wins."""
        changes = {f.name: getattr(overrides, f.name) for f in fields(self) if getattr(overrides, f.name)}
        return replace(self, **changes)

    def resolved(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value if value else METADATA_DEFAULTS[f.name]
        return out


def _default_theme_variables() -> Dict[str, str]:
    return {
        "primaryColor": "#e0f2fe",
        "primaryTextColor": "#0369a1",
        "primaryBorderColor": "#0ea5e9",
        "lineColor": "#0ea5e9",
        "secondaryColor": "#f0f9ff",
        "tertiaryColor": "#ffffff",
        "fontFamily": "Inter, sans-serif",
        "fontSize": "14px",
        "mainBkg": "#ffffff",
        "nodeBorder": "#cbd5e1",
        "clusterBkg": "#f1f5f9",
        "titleColor": "#0f172a",
        "edgeLabelBackground": "#ffffff",
    }


@dataclass(frozen=True)
class DiagramTheme:
    """Mermaid theme handed to mermaid.initialize() inside the composed page."""
    theme: str = "base"
    variables: Dict[str, str] = field(default_factory=_default_theme_variables)

    def to_config(self) -> Dict[str, Any]:
        return {
            "startOnLoad": True,
            "theme": self.theme,
            "themeVariables": dict(self.variables),
        }


DEFAULT_FOOTER_TEMPLATE = (
    "<div style=\"font-family: 'Inter', sans-serif; font-size: 9px; width: 100%; "
    "display: flex; justify-content: flex-end; padding-right: 15mm; color: #64748b;\">"
    "<div>Page <span class=\"pageNumber\"></span> of <span class=\"totalPages\"></span></div>"
    "</div>"
)


@dataclass(frozen=True)
class PdfOptions:
    page_format: str = "A4"
    margin: str = "15mm"
    print_background: bool = True
    header_template: str = "<div></div>"
    footer_template: str = DEFAULT_FOOTER_TEMPLATE
    navigation_timeout_ms: int = 30_000
    diagram_timeout_ms: int = 5_000
    settle_ms: int = 1_000

    def pdf_kwargs(self) -> Dict[str, Any]:
        return {
            "format": self.page_format,
            "print_background": self.print_background,
            "margin": {
                "top": self.margin,
                "bottom": self.margin,
                "left": self.margin,
                "right": self.margin,
            },
            "display_header_footer": True,
            "header_template": self.header_template,
            "footer_template": self.footer_template,
        }
