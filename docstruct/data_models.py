"""
Core data models for the document structure engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Token:
    """
    A single unit of text produced by the document-decoding collaborator.
    """
    text: str
    page: int

    def is_empty(self) -> bool:
        """Check if the token carries no visible text."""
        return not self.text or self.text.isspace()


@dataclass(frozen=True)
class PositionedToken(Token):
    """
    Token with geometry. ``font_size`` is None when the upstream collaborator only
    supplied a coarse glyph height.
    """
    x: float
    y: float
    width: float
    height: float
    font_size: Optional[float] = None

    @property
    def center(self) -> float:
        """Horizontal center of the token."""
        return self.x + self.width / 2

    @property
    def right(self) -> float:
        """Right edge of the token."""
        return self.x + self.width


@dataclass(frozen=True)
class TextOnlyToken(Token):
    """Token without positional metadata."""
    pass


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def token_from_dict(item: Mapping[str, Any], page: int) -> Token:
    """
    Resolve a raw token mapping into its tagged variant.

    Accepts both the ``str`` key used by pdf.js style dumps and ``text``.
    In pdf.js dumps ``height`` is the font size, so a ``str`` item without an
    explicit ``fontSize`` takes its font size from ``height``.

    Args:
        item: Raw token mapping
        page: Page number the token belongs to

    Returns:
        PositionedToken when x, y and width are present, otherwise TextOnlyToken

    Raises:
        ValueError, TypeError: If numeric fields cannot be converted
    """
    text = item.get("text", item.get("str", ""))
    text = "" if text is None else str(text)

    if all(item.get(key) is not None for key in ("x", "y", "width")):
        font_size = item.get("fontSize", item.get("font_size"))
        if font_size is None and "str" in item and item.get("height"):
            font_size = item["height"]
        return PositionedToken(
            text=text,
            page=page,
            x=float(item["x"]),
            y=float(item["y"]),
            width=float(item["width"]),
            height=float(item.get("height") or 0.0),
            font_size=_as_float(font_size),
        )

    return TextOnlyToken(text=text, page=page)


@dataclass(frozen=True)
class Row:
    """Tokens sharing a vertical position, ordered left to right."""
    y: float
    tokens: Tuple[PositionedToken, ...]

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True)
class ColumnBand:
    """Estimated horizontal interval of a table column."""
    start: float
    end: float
    center: float

    def to_json_dict(self) -> Dict[str, float]:
        return {"start": self.start, "end": self.end, "center": self.center}


@dataclass(frozen=True)
class TableBlock:
    """
    A detected table.

    For text tables (``source == "text"``) the y bounds are 0-based line indexes
    into the page text and ``columns`` is empty.
    """
    page: int
    start_y: float
    end_y: float
    columns: Tuple[ColumnBand, ...]
    rows: Tuple[Tuple[str, ...], ...]
    header_row: Tuple[str, ...]
    source: str = "geometric"

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "startY": self.start_y,
            "endY": self.end_y,
            "columns": [band.to_json_dict() for band in self.columns],
            "rows": [list(row) for row in self.rows],
            "headerRow": list(self.header_row),
            "source": self.source,
        }


@dataclass(frozen=True)
class Heading:
    """A heading with its level (1 to 3) and page position."""
    text: str
    level: int
    page: int
    position: Optional[Tuple[float, float]] = None

    def to_json_dict(self) -> Dict[str, Any]:
        position = None
        if self.position is not None:
            position = {"x": self.position[0], "y": self.position[1]}
        return {"text": self.text, "level": self.level, "page": self.page, "position": position}


@dataclass(frozen=True)
class Section:
    """A region introduced by a heading and the body text that follows it."""
    title: str
    page: int
    content: str

    def to_json_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "page": self.page, "content": self.content}


@dataclass(frozen=True)
class Entity:
    """A typed span found in the concatenated document text."""
    type: str
    value: str
    source_offset: int

    def to_json_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value, "sourceOffset": self.source_offset}


@dataclass(frozen=True)
class PageInput:
    """
    One decoded page as handed over by the decoding collaborator.

    A page without positioned tokens but with ``text`` is processed in plain-text mode.
    """
    page_num: int
    tokens: Tuple[Token, ...] = ()
    text: Optional[str] = None
    width: float = 0.0
    height: float = 0.0

    @property
    def positioned_tokens(self) -> List[PositionedToken]:
        return [t for t in self.tokens if isinstance(t, PositionedToken)]

    @property
    def is_text_only(self) -> bool:
        """True when the page carries no geometry at all."""
        return not self.positioned_tokens

    def page_text(self) -> str:
        """Text of the page as it appears in the concatenated document text."""
        if self.is_text_only and self.text is not None:
            return self.text
        return " ".join(t.text for t in self.tokens if not t.is_empty())


@dataclass(frozen=True)
class PageInfo:
    """Per-page summary included in the output record."""
    page_num: int
    text: str
    width: float
    height: float

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "pageNum": self.page_num,
            "text": self.text,
            "dimensions": {"width": self.width, "height": self.height},
        }


@dataclass(frozen=True)
class DocumentStructure:
    """
    Complete inferred structure of one document.
    """
    text: str
    pages: Tuple[PageInfo, ...] = ()
    tables: Tuple[TableBlock, ...] = ()
    headings: Tuple[Heading, ...] = ()
    sections: Tuple[Section, ...] = ()
    entities: Tuple[Entity, ...] = ()
    keywords: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def get_headings_by_level(self, level: int) -> List[Heading]:
        """Get all headings of a specific level."""
        return [h for h in self.headings if h.level == level]

    def get_tables_by_page(self, page: int) -> List[TableBlock]:
        """Get all tables detected on a specific page."""
        return [t for t in self.tables if t.page == page]

    def to_json_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary matching the output contract."""
        return {
            "text": self.text,
            "pages": [p.to_json_dict() for p in self.pages],
            "tables": [t.to_json_dict() for t in self.tables],
            "headings": [h.to_json_dict() for h in self.headings],
            "sections": [s.to_json_dict() for s in self.sections],
            "entities": [e.to_json_dict() for e in self.entities],
            "keywords": list(self.keywords),
            "metadata": dict(self.metadata),
        }

    def is_empty(self) -> bool:
        """Check if nothing at all was extracted."""
        return not self.text.strip() and not self.tables and not self.headings


@dataclass(frozen=True)
class VisualizationSuggestion:
    type: str
    description: str
    data_required: str

    def to_json_dict(self) -> Dict[str, str]:
        return {"type": self.type, "description": self.description, "dataRequired": self.data_required}


@dataclass(frozen=True)
class Summary:
    """Executive summary of a document, produced remotely or locally."""
    summary: str
    insights: Tuple[str, ...]
    visualization_suggestions: Tuple[VisualizationSuggestion, ...]
    data_gaps: Tuple[str, ...]

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Any]) -> "Summary":
        """Build a Summary from the camelCase reply shape."""
        return cls(
            summary=str(data["summary"]),
            insights=tuple(str(i) for i in data["insights"]),
            visualization_suggestions=tuple(
                VisualizationSuggestion(
                    type=str(v["type"]),
                    description=str(v["description"]),
                    data_required=str(v["dataRequired"]),
                )
                for v in data["visualizationSuggestions"]
            ),
            data_gaps=tuple(str(g) for g in data["dataGaps"]),
        )

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "insights": list(self.insights),
            "visualizationSuggestions": [v.to_json_dict() for v in self.visualization_suggestions],
            "dataGaps": list(self.data_gaps),
        }


class SummarySource(Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class SummaryResult:
    """A summary tagged with where it came from."""
    summary: Summary
    source: SummarySource

    @property
    def is_remote(self) -> bool:
        return self.source is SummarySource.REMOTE
