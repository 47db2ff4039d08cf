"""
Unit tests for PDF decoding.

Test documents are generated on the fly with PyMuPDF.
"""

import unittest

import fitz  # PyMuPDF
import pytest

from docstruct.data_models import PositionedToken
from docstruct.document_processor import DocumentProcessor
from docstruct.logging_config import DocumentDecodeError
from docstruct.pdf_extractor import PDFExtractor, extract_pdf_pages


def build_pdf() -> bytes:
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 72), "Annual Report", fontsize=20)
    page.insert_text((72, 120), "Revenue grew 12% in 2024", fontsize=11)
    page.insert_text((72, 200), "Name", fontsize=11)
    page.insert_text((300, 200), "Age", fontsize=11)
    second = doc.new_page(width=612, height=792)
    second.insert_text((72, 72), "Appendix", fontsize=11)
    doc.set_metadata({"title": "Test Report", "author": "Finance Team"})
    data = doc.tobytes()
    doc.close()
    return data


class TestPDFExtractor(unittest.TestCase):
    """Test cases for PDF extractor functionality."""

    @classmethod
    def setUpClass(cls):
        cls.pdf_bytes = build_pdf()

    def setUp(self):
        self.extractor = PDFExtractor()

    def test_extractor_initialization(self):
        self.assertEqual(self.extractor.supported_extensions, {'.pdf'})
        self.assertEqual(self.extractor.gap_factor, 1.0)

    def test_positioned_tokens(self):
        pages, _ = self.extractor.extract_pages(self.pdf_bytes)

        self.assertEqual([p.page_num for p in pages], [1, 2])
        self.assertEqual((pages[0].width, pages[0].height), (612.0, 792.0))

        tokens = {t.text: t for t in pages[0].tokens}
        self.assertIn("Annual Report", tokens)
        title = tokens["Annual Report"]
        self.assertIsInstance(title, PositionedToken)
        self.assertAlmostEqual(title.font_size, 20.0, places=1)
        self.assertAlmostEqual(title.y, 72.0, delta=1.0)
        self.assertAlmostEqual(title.x, 72.0, delta=2.0)
        self.assertGreater(title.width, 0)

    def test_distant_text_splits_into_tokens(self):
        pages, _ = self.extractor.extract_pages(self.pdf_bytes)
        texts = [t.text for t in pages[0].tokens]

        self.assertIn("Name", texts)
        self.assertIn("Age", texts)

    def test_metadata(self):
        _, metadata = self.extractor.extract_pages(self.pdf_bytes)
        self.assertEqual(metadata["Title"], "Test Report")
        self.assertEqual(metadata["Author"], "Finance Team")

    def test_text_only_mode(self):
        pages, _ = self.extractor.extract_pages(self.pdf_bytes, text_only=True)

        self.assertTrue(pages[0].is_text_only)
        self.assertIn("Annual Report", pages[0].text)
        self.assertEqual(pages[0].tokens, ())

    def test_file_path(self):
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "report.pdf"
            path.write_bytes(self.pdf_bytes)
            pages, metadata = extract_pdf_pages(path)

        self.assertEqual(len(pages), 2)
        self.assertEqual(metadata["Title"], "Test Report")

    def test_garbage_bytes(self):
        with self.assertRaises(DocumentDecodeError):
            self.extractor.extract_pages(b"this is not a pdf at all")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.extractor.extract_pages("/nonexistent/report.pdf")

    def test_unsupported_extension(self):
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "notes.txt"
            path.write_text("plain text", encoding="utf-8")
            with self.assertRaises(DocumentDecodeError):
                self.extractor.extract_pages(path)

    def test_normalize_text(self):
        self.assertEqual(self.extractor._normalize_text("cafe\u0301\u200b  bar "), "caf\u00e9 bar")
        self.assertEqual(self.extractor._normalize_text("a\n  b", keep_lines=True), "a\n  b")
        self.assertEqual(self.extractor._normalize_text(""), "")


@pytest.fixture(scope="module")
def pdf_bytes():
    return build_pdf()


def test_large_font_becomes_level_one_heading(pdf_bytes):
    structure = DocumentProcessor().process_pdf(pdf_bytes)

    level_one = [h.text for h in structure.get_headings_by_level(1)]
    assert level_one == ["Annual Report"]
    assert structure.headings[0].page == 1
    assert structure.metadata["Title"] == "Test Report"
    assert any(e.type == "percentage" and e.value == "12%" for e in structure.entities)


def test_text_only_document_has_no_headings(pdf_bytes):
    structure = DocumentProcessor().process_pdf(pdf_bytes, text_only=True)

    assert structure.headings == ()
    assert "Appendix" in structure.pages[1].text
