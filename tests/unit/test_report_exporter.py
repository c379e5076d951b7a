"""Tests for core/report_exporter.py."""

from io import BytesIO

import pytest
from pypdf import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfbase.pdfmetrics import stringWidth

import investment_advisor.config as config
from investment_advisor.core.report_exporter import (
    BODY_FONT,
    BODY_SIZE,
    BUILTIN_FONTS,
    MARGIN,
    NOTHING_TO_EXPORT,
    REPORT_FILENAME,
    REPORT_TITLE,
    export_report,
    prepare_text,
    resolve_fonts,
    wrap_report_text,
)

PAGE_TEXT_WIDTH = letter[0] - 2 * MARGIN

RUPEE_REPORT = "Target allocation: ₹50,000 in TCS\n\n|  Metric  |  Value |\n    - nested item"


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(BytesIO(data))
    return "\n".join(page.extract_text() for page in reader.pages)


class TestExportGuard:
    def test_no_report_is_noop(self):
        result = export_report("")
        assert result.ok is False
        assert result.message == NOTHING_TO_EXPORT
        assert result.data is None
        assert result.filename is None

    def test_none_and_whitespace_are_noop(self):
        assert export_report(None).ok is False
        assert export_report("  \n\t ").ok is False


class TestExportDocument:
    def test_produces_pdf_with_fixed_filename(self, sample_analysis):
        result = export_report(sample_analysis)
        assert result.ok is True
        assert result.filename == REPORT_FILENAME
        assert result.mime == "application/pdf"
        assert result.data.startswith(b"%PDF")
        assert result.page_count == 1

    def test_long_report_spans_pages(self):
        text = "\n".join(f"Paragraph {i}: the allocation stays balanced." for i in range(200))
        result = export_report(text)
        assert result.ok is True
        assert result.page_count > 1
        assert "pages" in result.message

    def test_non_latin_text_does_not_fail(self):
        result = export_report("Investment Amount: ₹50,000 🚀")
        assert result.ok is True


class TestWrapReportText:
    def test_keeps_words_in_order(self, sample_analysis):
        lines = wrap_report_text(sample_analysis, PAGE_TEXT_WIDTH)
        assert " ".join(lines).split() == sample_analysis.split()

    def test_lines_fit_width(self):
        text = " ".join(["diversification"] * 120)
        lines = wrap_report_text(text, 200)
        assert len(lines) > 1
        for line in lines:
            assert stringWidth(line, BODY_FONT, BODY_SIZE) <= 200

    def test_preserves_blank_lines(self):
        assert wrap_report_text("Summary\n\nBuy", PAGE_TEXT_WIDTH) == ["Summary", "", "Buy"]

    def test_breaks_words_wider_than_page(self):
        word = "X" * 200
        lines = wrap_report_text(word, 100)
        assert "".join(lines) == word
        for line in lines:
            assert stringWidth(line, BODY_FONT, BODY_SIZE) <= 100

    def test_short_text_unchanged(self):
        assert wrap_report_text("Hold TCS.", PAGE_TEXT_WIDTH) == ["Hold TCS."]

    def test_keeps_indentation(self):
        assert wrap_report_text("- item\n    - nested item", PAGE_TEXT_WIDTH) == ["- item", "    - nested item"]

    def test_continuation_lines_keep_indentation(self):
        text = "    - " + " ".join(["rebalance"] * 40)
        lines = wrap_report_text(text, 300)
        assert len(lines) > 1
        assert all(line.startswith("    ") for line in lines)
        for line in lines:
            assert stringWidth(line, BODY_FONT, BODY_SIZE) <= 300

    def test_keeps_spacing_between_words(self):
        assert wrap_report_text("|  Metric  |  Value |", PAGE_TEXT_WIDTH) == ["|  Metric  |  Value |"]


class TestRenderedText:
    def test_unicode_font_keeps_report_text(self):
        if config.report_font_path() is None:
            pytest.skip("no Unicode TrueType font installed")
        result = export_report(RUPEE_REPORT)
        text = _pdf_text(result.data)
        assert "₹50,000" in text
        assert text.split() == REPORT_TITLE.split() + RUPEE_REPORT.split()

    def test_builtin_font_transliterates_known_symbols(self, monkeypatch):
        monkeypatch.setattr(config, "report_font_path", lambda: None)
        result = export_report(RUPEE_REPORT + " 📈")
        text = _pdf_text(result.data)
        assert "Rs.50,000" in text
        assert "nested item" in text
        assert text.rstrip().endswith("?")

    def test_unreadable_font_falls_back_to_builtin(self, monkeypatch, tmp_path):
        bogus = tmp_path / "broken.ttf"
        bogus.write_bytes(b"not a font " * 100)
        monkeypatch.setattr(config, "report_font_path", lambda: str(bogus))
        assert resolve_fonts() is BUILTIN_FONTS
        assert export_report("Hold ₹10").ok is True


class TestPrepareText:
    def test_builtin_keeps_winansi_punctuation(self):
        assert prepare_text("“Buy” — hold", BUILTIN_FONTS) == "“Buy” — hold"

    def test_builtin_transliterates_then_replaces(self):
        assert prepare_text("₹5 → 6 📈", BUILTIN_FONTS) == "Rs.5 -> 6 ?"

    def test_tabs_become_spaces(self):
        assert prepare_text("\t- item", BUILTIN_FONTS) == "    - item"
