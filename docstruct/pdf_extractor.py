"""
PDF decoding with PyMuPDF integration.

This module turns a PDF container into the page records the structure engine
consumes: positioned tokens with font sizes, or plain page text in text-only mode,
plus the document information dictionary.
"""

import re
import unicodedata
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import fitz  # PyMuPDF

from .data_models import PageInput, PositionedToken
from .logging_config import DocumentDecodeError, setup_logging

logger = setup_logging()

PdfSource = Union[str, Path, bytes]

# PyMuPDF metadata key -> document info key of the output record
METADATA_KEYS = {
    "title": "Title",
    "author": "Author",
    "subject": "Subject",
    "creator": "Creator",
    "producer": "Producer",
    "creationDate": "CreationDate",
    "modDate": "ModDate",
}

ZERO_WIDTH = re.compile('[\u200b\u200c\u200d\ufeff]')


class PDFExtractor:
    """
    Decodes PDF documents into PageInput records.

    In positioned mode each span of ``page.get_text("rawdict")`` is cut into
    tokens at runs of two or more whitespace characters and at horizontal gaps
    wider than the span's font size, so separate table cells on one baseline
    become separate tokens while ordinary word spaces stay inside a token.
    """

    def __init__(self, gap_factor: float = 1.0):
        """
        Initialize the PDF extractor.

        Args:
            gap_factor: Horizontal gap, in multiples of the font size, that splits a span
        """
        self.supported_extensions = {'.pdf'}
        self.gap_factor = gap_factor

    def _open(self, source: PdfSource) -> fitz.Document:
        if isinstance(source, (bytes, bytearray)):
            try:
                return fitz.open(stream=bytes(source), filetype="pdf")
            except Exception as e:
                raise DocumentDecodeError(f"Could not decode PDF stream: {e}") from e

        pdf_path = Path(source)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF file not found: {pdf_path}")
        if pdf_path.suffix.lower() not in self.supported_extensions:
            raise DocumentDecodeError(f"Unsupported file type: {pdf_path.suffix}")

        try:
            return fitz.open(str(pdf_path))
        except Exception as e:
            raise DocumentDecodeError(f"Could not open PDF {pdf_path}: {e}") from e

    def extract_pages(self, source: PdfSource,
                      text_only: bool = False) -> Tuple[List[PageInput], Dict[str, Any]]:
        """
        Decode every page of a PDF.

        Args:
            source: Path to the PDF file or its raw bytes
            text_only: Emit plain page text instead of positioned tokens

        Returns:
            Tuple of (pages in page order, document metadata)

        Raises:
            FileNotFoundError: If the path does not exist
            DocumentDecodeError: If the container cannot be decoded
        """
        doc = self._open(source)
        try:
            metadata = self._extract_metadata(doc)
            pages = []
            for index in range(doc.page_count):
                page = doc[index]
                page_num = index + 1
                if text_only:
                    pages.append(PageInput(
                        page_num=page_num,
                        text=self._normalize_text(page.get_text("text"), keep_lines=True),
                        width=float(page.rect.width),
                        height=float(page.rect.height),
                    ))
                else:
                    tokens = self._extract_page_tokens(page, page_num)
                    pages.append(PageInput(
                        page_num=page_num,
                        tokens=tuple(tokens),
                        width=float(page.rect.width),
                        height=float(page.rect.height),
                    ))
                    logger.debug(f"Extracted {len(tokens)} tokens from page {page_num}")
        except DocumentDecodeError:
            raise
        except Exception as e:
            raise DocumentDecodeError(f"Failed to decode PDF pages: {e}") from e
        finally:
            doc.close()

        logger.info(f"Decoded {len(pages)} pages ({'text-only' if text_only else 'positioned'} mode)")
        return pages, metadata

    def _extract_metadata(self, doc: fitz.Document) -> Dict[str, Any]:
        raw = doc.metadata or {}
        metadata = {}
        for key, name in METADATA_KEYS.items():
            value = raw.get(key)
            if value:
                metadata[name] = self._normalize_text(str(value))
        return metadata

    def _extract_page_tokens(self, page: fitz.Page, page_num: int) -> List[PositionedToken]:
        """
        Extract positioned tokens from a single page.

        Args:
            page: PyMuPDF page object
            page_num: Page number (1-indexed)

        Returns:
            List of tokens in content order
        """
        tokens: List[PositionedToken] = []
        raw = page.get_text("rawdict")

        for block in raw.get("blocks", []):
            if block.get("type") != 0:
                continue  # Skip image blocks
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    tokens.extend(self._span_tokens(span, page_num))

        return tokens

    def _span_tokens(self, span: Dict[str, Any], page_num: int) -> List[PositionedToken]:
        chars = span.get("chars", [])
        if not chars:
            return []

        font_size = float(span.get("size", 0.0))
        baseline = float(span.get("origin", span["bbox"][:2])[1])
        gap_limit = max(font_size, 1.0) * self.gap_factor

        tokens: List[PositionedToken] = []
        run_text: List[str] = []
        run_boxes: List[Tuple[float, float, float, float]] = []
        spaces = 0

        def flush() -> None:
            text = self._normalize_text("".join(run_text))
            if text:
                x0 = min(b[0] for b in run_boxes)
                y0 = min(b[1] for b in run_boxes)
                x1 = max(b[2] for b in run_boxes)
                y1 = max(b[3] for b in run_boxes)
                tokens.append(PositionedToken(
                    text=text,
                    page=page_num,
                    x=round(x0, 2),
                    y=round(baseline, 2),
                    width=round(x1 - x0, 2),
                    height=round(y1 - y0, 2),
                    font_size=round(font_size, 2),
                ))
            run_text.clear()
            run_boxes.clear()

        for char in chars:
            c = char.get("c", "")
            bbox = tuple(char["bbox"])
            if not c or c.isspace():
                spaces += 1
                if spaces >= 2 and run_text:
                    flush()
                continue

            if run_boxes and bbox[0] - run_boxes[-1][2] > gap_limit:
                flush()
            if spaces == 1 and run_text:
                run_text.append(" ")
            spaces = 0
            run_text.append(c)
            run_boxes.append(bbox)

        flush()
        return tokens

    def _normalize_text(self, text: str, keep_lines: bool = False) -> str:
        """
        Normalize text while preserving special characters.

        Args:
            text: Raw text from PDF
            keep_lines: Preserve line breaks and inner spacing (plain-text mode)

        Returns:
            NFC-normalized text without zero-width characters
        """
        if not text:
            return ""

        text = unicodedata.normalize('NFC', text)
        text = ZERO_WIDTH.sub('', text)

        if keep_lines:
            return text
        return re.sub(r'\s+', ' ', text).strip()


def extract_pdf_pages(source: PdfSource, text_only: bool = False) -> Tuple[List[PageInput], Dict[str, Any]]:
    """
    Convenience function to decode a PDF.

    Args:
        source: Path to the PDF file or its bytes
        text_only: Emit plain page text instead of positioned tokens

    Returns:
        Tuple of (pages, metadata)
    """
    extractor = PDFExtractor()
    return extractor.extract_pages(source, text_only=text_only)
