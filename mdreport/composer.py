# mdreport/composer.py
from __future__ import annotations

import html
import json
import re
from typing import Optional

from .models import DiagramTheme, ReportMetadata

MERMAID_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mermaid/dist/mermaid.min.js"
FONTS_URL = "https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&family=Lora&display=swap"

DEFAULT_INSTITUTION = "University of Dhaka"
DEFAULT_PROGRAM = "Professional Masters in Information and Cyber Security"

DEFAULT_THEME = DiagramTheme()

_DIAGRAM_BLOCK_RE = re.compile(
    r'(?:<pre>\s*)?<code class="language-mermaid">(.*?)</code>(?:\s*</pre>)?',
    re.DOTALL,
)
_PLACEHOLDER_RE = re.compile(r"__[A-Z_]+?__")


STYLESHEET = """
@import url('__FONTS_URL__');

body {
  font-family: 'Inter', sans-serif;
  padding: 0;
  margin: 0;
  color: #1a1a1a;
  background: white;
}
.report-container { padding: 0; }

h1 {
  font-size: 28pt;
  color: #0f172a;
  page-break-after: avoid;
}
h2 {
  font-size: 24pt;
  color: #0369a1;
  border-left: 10px solid #0ea5e9;
  padding: 15px 0 15px 25px;
  margin-top: 0;
  margin-bottom: 1cm;
  page-break-before: always;
  page-break-after: avoid;
  background: #f8fafc;
  border-radius: 0 8px 8px 0;
}
h3 {
  font-size: 18pt;
  color: #0369a1;
  margin-top: 1.2cm;
  margin-bottom: 0.6cm;
  page-break-after: avoid;
  display: flex;
  align-items: center;
}
h3::before {
  content: "";
  display: inline-block;
  width: 8px;
  height: 8px;
  background-color: #0ea5e9;
  border-radius: 50%;
  margin-right: 12px;
}

p {
  text-align: justify;
  line-height: 1.8;
  font-family: 'Lora', serif;
  font-size: 11.5pt;
  color: #334155;
  margin-bottom: 0.8cm;
}
ul, ol {
  margin-bottom: 0.8cm;
  color: #334155;
  font-family: 'Lora', serif;
  font-size: 11.5pt;
}
li { margin-bottom: 0.3cm; line-height: 1.6; }

.page-break-marker { page-break-before: always; height: 0; }

pre {
  background: #0f172a;
  color: #f8fafc;
  padding: 20px;
  border-radius: 12px;
  font-size: 10pt;
  white-space: pre-wrap;
  margin: 1cm 0;
  border: 1px solid rgba(255,255,255,0.05);
  line-height: 1.5;
  page-break-inside: avoid;
}
code { font-family: 'JetBrains Mono', 'Fira Code', Consolas, monospace; }
p code, li code, td code {
  background: #f1f5f9;
  color: #0f172a;
  padding: 1px 5px;
  border-radius: 4px;
  font-size: 0.9em;
}

.mermaid-wrapper {
  margin: 1cm 0;
  padding: 0;
  display: flex;
  justify-content: center;
  width: 100%;
  page-break-inside: avoid;
}
.mermaid { text-align: center; width: 100%; }

table {
  width: 100%;
  border-collapse: collapse;
  margin: 1cm 0;
  font-size: 10.5pt;
  page-break-inside: auto;
}
thead { display: table-header-group; }
th {
  background: #f8fafc;
  color: #0369a1;
  font-weight: 700;
  text-transform: uppercase;
  font-size: 9pt;
  letter-spacing: 0.05em;
  padding: 12px;
  border-bottom: 2px solid #e2e8f0;
  text-align: left;
}
td {
  padding: 12px;
  border-bottom: 1px solid #f1f5f9;
  color: #475569;
}
tr {
  page-break-inside: avoid;
  page-break-after: auto;
}
img {
  max-width: 100%;
  height: auto;
  border-radius: 8px;
}

.content-page {
  padding: 0;
  word-break: break-word;
}

.cover-page {
  min-height: 90vh;
  width: 100%;
  background-image: url('__BACKGROUND_URI__');
  background-size: cover;
  background-position: center;
  background-color: #0c4a6e;
  color: white;
  display: flex;
  flex-direction: column;
  align-items: center;
  text-align: center;
  padding: 2cm;
  page-break-after: always;
  position: relative;
  box-sizing: border-box;
}
.logo-container {
  margin-top: 2cm;
  padding: 15px;
  display: flex;
  justify-content: center;
}
.logo { width: 140px; height: auto; border-radius: 0; }
.university {
  font-size: 32px;
  letter-spacing: 2px;
  font-weight: 700;
  margin-top: 10px;
  text-transform: uppercase;
}
.program {
  font-size: 18px;
  font-weight: 400;
  margin-top: 8px;
  opacity: 0.9;
}
.title-section {
  margin-top: 2.5cm;
  margin-bottom: 2cm;
}
.report-title {
  font-size: 34px;
  font-weight: 800;
  line-height: 1.2;
  margin-bottom: 20px;
  width: 100%;
  padding: 0 40px;
  box-sizing: border-box;
  word-wrap: break-word;
}
.report-subtitle {
  font-size: 20px;
  font-weight: 600;
  opacity: 0.95;
  width: 100%;
  padding: 0 40px;
  box-sizing: border-box;
  word-wrap: break-word;
}
.course-info {
  margin-top: 1.5cm;
  font-size: 16px;
  width: 90%;
  border-bottom: 1px solid rgba(255,255,255,0.2);
  padding-bottom: 12px;
  text-align: center;
  box-sizing: border-box;
  word-wrap: break-word;
}
.student-details {
  margin-top: 1cm;
  display: table;
  font-size: 15px;
}
.details-row { display: table-row; }
.details-label {
  display: table-cell;
  text-align: right;
  padding: 4px 12px 4px 0;
  font-weight: 600;
  opacity: 0.85;
}
.details-value {
  display: table-cell;
  text-align: left;
  padding: 4px 0;
}
"""


HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>__TITLE__</title>
  <style>__STYLE__</style>
  <script src="__MERMAID_URL__"></script>
  <script>
    mermaid.initialize(__MERMAID_CONFIG__);
  </script>
</head>
<body>
  <div class="cover-page">
    <div class="logo-container">
      <img src="__LOGO_URI__" class="logo" alt="" />
    </div>

    <div class="university">__INSTITUTION__</div>
    <div class="program">__PROGRAM__</div>

    <div class="title-section">
      <div class="report-title">__META_TITLE__</div>
      <div class="report-subtitle">__META_SUBTITLE__</div>
    </div>

    <div class="course-info">
      Course: __META_COURSE__
    </div>

    <div class="student-details">
      <div class="details-row">
        <div class="details-label">Name:</div>
        <div class="details-value">__META_NAME__</div>
      </div>
      <div class="details-row">
        <div class="details-label">Roll No:</div>
        <div class="details-value">__META_ROLL__</div>
      </div>
      <div class="details-row">
        <div class="details-label">Reg. No:</div>
        <div class="details-value">__META_REG__</div>
      </div>
      <div class="details-row">
        <div class="details-label">Batch:</div>
        <div class="details-value">__META_BATCH__</div>
      </div>
      <div class="details-row">
        <div class="details-label">Submission Date:</div>
        <div class="details-value">__META_DATE__</div>
      </div>
    </div>
  </div>
  <div class="report-container">
    <div class="content-page">
__CONTENT__
    </div>
  </div>
</body>
</html>
"""


def promote_diagrams(content_html: str) -> str:
    """Turn mermaid code blocks into <div class="mermaid"> containers for client rendering."""
    return _DIAGRAM_BLOCK_RE.sub(
        lambda m: f'<div class="mermaid-wrapper"><div class="mermaid">{m.group(1)}</div></div>',
        content_html,
    )


def mermaid_config_json(theme: DiagramTheme) -> str:
    # "</" would end the inline <script> early
    return json.dumps(theme.to_config(), sort_keys=True).replace("</", "<\\/")


def _image_uri(b64: str, mime: str) -> str:
    return f"data:{mime};base64,{b64}" if b64 else ""


def compose_document(
    content_html: str,
    metadata: Optional[ReportMetadata] = None,
    *,
    logo_b64: str = "",
    background_b64: str = "",
    logo_mime: str = "image/png",
    background_mime: str = "image/png",
    theme: DiagramTheme = DEFAULT_THEME,
    institution: str = DEFAULT_INSTITUTION,
    program: str = DEFAULT_PROGRAM,
) -> str:
    """
    Build the full report page: cover, content, stylesheet and diagram bootstrap.

    Pure string assembly. Metadata values are HTML-escaped so they print
    exactly as supplied; missing fields fall back to METADATA_DEFAULTS.
    """
    meta = (metadata or ReportMetadata()).resolved()
    esc = lambda s: html.escape(s, quote=False)  # noqa: E731

    style = (
        STYLESHEET
        .replace("__FONTS_URL__", FONTS_URL)
        .replace("__BACKGROUND_URI__", _image_uri(background_b64, background_mime))
    )

    values = {
        "__STYLE__": style,
        "__TITLE__": esc(meta["title"]),
        "__MERMAID_URL__": MERMAID_SCRIPT_URL,
        "__MERMAID_CONFIG__": mermaid_config_json(theme),
        "__LOGO_URI__": _image_uri(logo_b64, logo_mime),
        "__INSTITUTION__": esc(institution),
        "__PROGRAM__": esc(program),
        "__CONTENT__": promote_diagrams(content_html),
    }
    for key, value in meta.items():
        values[f"__META_{key.upper()}__"] = esc(value)

    # Single pass: substituted values are never rescanned for placeholders.
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(0), m.group(0)), HTML_TEMPLATE)
