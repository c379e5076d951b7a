# Role: Turns the last analysis text into a downloadable, paginated PDF. Stateless: same text in, same pages out.
# wrap_report_text() is the pure word-wrap step; export_report() adds the "nothing to export" guard and rendering.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Callable, List, Optional

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

import investment_advisor.config as config

logger = logging.getLogger(__name__)

REPORT_TITLE = "Investment Analysis Report"
REPORT_FILENAME = "investment_analysis_report.pdf"
NOTHING_TO_EXPORT = "No report generated yet."

TITLE_FONT = "Helvetica-Bold"
TITLE_SIZE = 16
BODY_FONT = "Helvetica"
BODY_SIZE = 12
LINE_HEIGHT = BODY_SIZE * 1.25
MARGIN = 10 * mm

# Used only for glyphs the chosen font can't draw.
TRANSLITERATIONS = {
    "₹": "Rs.",
    "€": "EUR",
    "→": "->",
    "←": "<-",
    "≥": ">=",
    "≤": "<=",
    "≈": "~",
}

_TOKENS = re.compile(r"\S+|\s+")


@dataclass(frozen=True)
class ExportResult:
    ok: bool
    message: str
    data: Optional[bytes] = None
    filename: Optional[str] = None
    mime: str = "application/pdf"
    page_count: int = 0


@dataclass(frozen=True)
class ReportFonts:
    body: str
    title: str
    has_glyph: Callable[[str], bool]


def _winansi_glyph(ch: str) -> bool:
    # Key line: base-14 fonts draw WinAnsi (cp1252) only.
    try:
        ch.encode("cp1252")
    except UnicodeEncodeError:
        return False
    return True


BUILTIN_FONTS = ReportFonts(body=BODY_FONT, title=TITLE_FONT, has_glyph=_winansi_glyph)


@lru_cache(maxsize=None)
def _register_ttf(path: str) -> Optional[ReportFonts]:
    name = f"Report-{Path(path).stem}"
    try:
        font = TTFont(name, path)
    except (TTFError, OSError) as e:
        logger.warning("Could not load report font %s (%s); using Helvetica", path, e)
        return None
    pdfmetrics.registerFont(font)
    glyphs = font.face.charToGlyph
    return ReportFonts(body=name, title=name, has_glyph=lambda ch: ord(ch) in glyphs)


def resolve_fonts() -> ReportFonts:
    path = config.report_font_path()
    if not path:
        return BUILTIN_FONTS
    return _register_ttf(path) or BUILTIN_FONTS


def prepare_text(text: str, fonts: ReportFonts) -> str:
    # 1) Tabs -> spaces (indentation is measured in spaces)
    # 2) Missing glyphs -> known ASCII spelling, else "?"
    out: List[str] = []
    for ch in text.replace("\t", "    "):
        if ch == "\n" or fonts.has_glyph(ch):
            out.append(ch)
        elif ch in TRANSLITERATIONS:
            out.append(TRANSLITERATIONS[ch])
        else:
            out.append("?")
    return "".join(out)


def _break_long_word(word: str, width: float, font: str, size: float) -> List[str]:
    pieces: List[str] = []
    current = ""
    for ch in word:
        if current and stringWidth(current + ch, font, size) > width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    if current:
        pieces.append(current)
    return pieces


def wrap_report_text(
    text: str,
    width: float,
    font: str = BODY_FONT,
    size: float = BODY_SIZE,
) -> List[str]:
    # 1) Keep source line breaks (blank lines stay blank) and each line's leading indentation
    # 2) Greedy fill measured with the real font metrics; spacing between words is kept as written
    # 3) Continuation lines reuse the indentation; words wider than the page are hard-broken
    out: List[str] = []
    for raw_line in text.splitlines():
        body = raw_line.lstrip(" ")
        indent = raw_line[: len(raw_line) - len(body)]
        body = body.rstrip()
        if not body:
            out.append("")
            continue
        if stringWidth(indent, font, size) > width / 2:
            indent = ""

        current = indent
        gap = ""
        for token in _TOKENS.findall(body):
            if token.isspace():
                gap = token
                continue

            candidate = current + gap + token if current.strip() else indent + token
            gap = ""
            if stringWidth(candidate, font, size) <= width:
                current = candidate
                continue

            if current.strip():
                out.append(current)

            if stringWidth(indent + token, font, size) <= width:
                current = indent + token
            else:
                room = width - stringWidth(indent, font, size)
                pieces = _break_long_word(token, room, font, size)
                out.extend(indent + piece for piece in pieces[:-1])
                current = indent + pieces[-1]

        if current.strip():
            out.append(current)
    return out


def render_report_pdf(text: str, fonts: Optional[ReportFonts] = None) -> tuple[bytes, int]:
    fonts = fonts or resolve_fonts()
    page_width, page_height = letter
    lines = wrap_report_text(prepare_text(text, fonts), page_width - 2 * MARGIN, fonts.body, BODY_SIZE)

    buf = BytesIO()
    pdf = canvas.Canvas(buf, pagesize=letter)
    pdf.setTitle(REPORT_TITLE)

    pdf.setFont(fonts.title, TITLE_SIZE)
    pdf.drawString(MARGIN, page_height - MARGIN - TITLE_SIZE, REPORT_TITLE)
    y = page_height - MARGIN - TITLE_SIZE - 2 * LINE_HEIGHT
    pages = 1

    pdf.setFont(fonts.body, BODY_SIZE)
    for line in lines:
        if y < MARGIN:
            pdf.showPage()
            pdf.setFont(fonts.body, BODY_SIZE)
            y = page_height - MARGIN - BODY_SIZE
            pages += 1
        if line:
            pdf.drawString(MARGIN, y, line)
        y -= LINE_HEIGHT

    pdf.save()
    return buf.getvalue(), pages


def export_report(text: Optional[str]) -> ExportResult:
    if not text or not text.strip():
        logger.info("Export skipped: no report available")
        return ExportResult(ok=False, message=NOTHING_TO_EXPORT)

    data, pages = render_report_pdf(text)
    logger.info("Exported %s (%d page(s), %d bytes)", REPORT_FILENAME, pages, len(data))
    return ExportResult(
        ok=True,
        message=f"Report ready ({pages} page{'s' if pages != 1 else ''}).",
        data=data,
        filename=REPORT_FILENAME,
        page_count=pages,
    )
