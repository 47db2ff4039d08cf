"""
Document processing pipeline.

This module wires the structure engine together: per-page token normalization
and row classification (optionally in parallel), then the sequential, page-ordered
table assembly, heading/section folding and text concatenation, and finally
entity extraction and keyword ranking over the full text.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .data_models import (
    DocumentStructure, PageInfo, PageInput, Row, TableBlock, Token, token_from_dict,
)
from .entity_extractor import extract_entities
from .heading_detector import HeadingDetector
from .keyword_ranker import MAX_KEYWORDS, extract_keywords
from .logging_config import setup_logging
from .pdf_extractor import PDFExtractor, PdfSource
from .row_classifier import RowClassifier
from .table_assembler import TableAssembler
from .text_table_finder import find_text_tables
from .token_normalizer import ROW_Y_TOLERANCE, group_rows

logger = setup_logging()

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class PreparedPage:
    """A page with its rows grouped and classified."""
    page: PageInput
    rows: Tuple[Row, ...]
    verdicts: Tuple[bool, ...]


class DocumentProcessor:
    """
    Infers the structure of one document at a time.

    Features:
    - Parallel per-page row grouping and classification (optional)
    - Geometric table assembly with a text-only fallback
    - Heading detection with per-page strategy selection
    - Entity and keyword extraction over the concatenated text

    The processor keeps no state between ``process`` calls.
    """

    def __init__(self, max_workers: int = 1, row_tolerance: float = ROW_Y_TOLERANCE,
                 classifier: Optional[RowClassifier] = None,
                 table_assembler: Optional[TableAssembler] = None,
                 heading_detector: Optional[HeadingDetector] = None,
                 keyword_limit: int = MAX_KEYWORDS):
        """
        Initialize the processor.

        Args:
            max_workers: Worker threads for the per-page phase
            row_tolerance: Vertical tolerance used to group tokens into rows
            classifier: Row classifier
            table_assembler: Table state machine
            heading_detector: Heading detector
            keyword_limit: Number of keywords to keep
        """
        self.max_workers = max(1, int(max_workers))
        self.row_tolerance = row_tolerance
        self.classifier = classifier or RowClassifier()
        self.table_assembler = table_assembler or TableAssembler(classifier=self.classifier)
        self.heading_detector = heading_detector or HeadingDetector()
        self.keyword_limit = keyword_limit

    def prepare_page(self, page: PageInput) -> PreparedPage:
        """Group a page's tokens into rows and classify each row."""
        rows = tuple(group_rows(page.tokens, self.row_tolerance))
        verdicts = tuple(self.classifier.is_structured(row) for row in rows)
        return PreparedPage(page=page, rows=rows, verdicts=verdicts)

    def _prepare_pages(self, pages: Sequence[PageInput]) -> List[PreparedPage]:
        if self.max_workers > 1 and len(pages) > 1:
            logger.debug(f"Preparing {len(pages)} pages with {self.max_workers} workers")
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                return list(executor.map(self.prepare_page, pages))
        return [self.prepare_page(page) for page in pages]

    def _page_tables(self, prepared: PreparedPage) -> List[TableBlock]:
        page = prepared.page
        if page.is_text_only:
            return find_text_tables(page.text or "", page.page_num)
        return self.table_assembler.assemble(prepared.rows, page.page_num, prepared.verdicts)

    def process(self, pages: Iterable[PageInput],
                metadata: Optional[Mapping[str, Any]] = None) -> DocumentStructure:
        """
        Infer the structure of a decoded document.

        Args:
            pages: Decoded pages (any order; processed in page-number order)
            metadata: Document information dictionary

        Returns:
            DocumentStructure record
        """
        ordered = sorted(pages, key=lambda p: p.page_num)
        logger.info(f"Processing document with {len(ordered)} pages")

        prepared_pages = self._prepare_pages(ordered)

        page_infos: List[PageInfo] = []
        tables: List[TableBlock] = []
        text_parts: List[str] = []
        for prepared in prepared_pages:
            page = prepared.page
            page_text = page.page_text()
            text_parts.append(page_text + PAGE_SEPARATOR)
            page_infos.append(PageInfo(
                page_num=page.page_num,
                text=page_text,
                width=page.width,
                height=page.height,
            ))
            tables.extend(self._page_tables(prepared))

        full_text = "".join(text_parts)
        headings, sections = self.heading_detector.detect(ordered)
        entities = extract_entities(full_text)
        keywords = extract_keywords(full_text, self.keyword_limit)

        logger.info(
            f"Found {len(tables)} tables, {len(headings)} headings, "
            f"{len(entities)} entities, {len(keywords)} keywords"
        )

        return DocumentStructure(
            text=full_text,
            pages=tuple(page_infos),
            tables=tuple(tables),
            headings=tuple(headings),
            sections=tuple(sections),
            entities=tuple(entities),
            keywords=tuple(keywords),
            metadata=dict(metadata or {}),
        )

    def process_pdf(self, source: PdfSource, text_only: bool = False,
                    extractor: Optional[PDFExtractor] = None) -> DocumentStructure:
        """
        Decode a PDF and infer its structure.

        Raises:
            DocumentDecodeError: If the PDF cannot be decoded
        """
        extractor = extractor or PDFExtractor()
        pages, metadata = extractor.extract_pages(source, text_only=text_only)
        return self.process(pages, metadata)


def _page_from_dict(raw: Mapping[str, Any], default_num: int) -> PageInput:
    page_num = int(raw.get("pageNum", raw.get("page_num", default_num)))

    tokens: List[Token] = []
    for item in raw.get("tokens") or raw.get("content") or []:
        if not isinstance(item, Mapping):
            logger.debug(f"Skipping non-mapping token on page {page_num}: {item!r}")
            continue
        try:
            tokens.append(token_from_dict(item, page_num))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed token on page {page_num}: {e}")

    dimensions = raw.get("dimensions") or {}
    text = raw.get("text")
    return PageInput(
        page_num=page_num,
        tokens=tuple(tokens),
        text=None if text is None else str(text),
        width=float(raw.get("width", dimensions.get("width", 0.0)) or 0.0),
        height=float(raw.get("height", dimensions.get("height", 0.0)) or 0.0),
    )


def load_pages_from_json(data: Any) -> Tuple[List[PageInput], Dict[str, Any]]:
    """
    Build page records from a JSON token dump.

    Accepts either ``{"metadata": {...}, "pages": [...]}`` or a bare list of pages.
    Each page holds ``tokens`` (``text``/``str``, ``x``, ``y``, ``width``, ``height``,
    ``fontSize``) and/or ``text``. Malformed tokens are skipped.

    Args:
        data: Parsed JSON document

    Returns:
        Tuple of (pages, metadata)

    Raises:
        ValueError: If the top-level shape is not recognised
    """
    if isinstance(data, Mapping):
        raw_pages = data.get("pages")
        metadata = dict(data.get("metadata") or {})
    else:
        raw_pages = data
        metadata = {}

    if not isinstance(raw_pages, list):
        raise ValueError("Token dump must contain a list of pages")

    pages = [
        _page_from_dict(raw, index + 1)
        for index, raw in enumerate(raw_pages)
        if isinstance(raw, Mapping)
    ]
    return pages, metadata


def process_document(pages: Iterable[PageInput],
                     metadata: Optional[Mapping[str, Any]] = None,
                     max_workers: int = 1) -> DocumentStructure:
    """Convenience function running the full pipeline with default settings."""
    return DocumentProcessor(max_workers=max_workers).process(pages, metadata)
