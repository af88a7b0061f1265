"""Data models for the OneNote to Markdown conversion pipeline."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

logger = logging.getLogger('onenote_markdown_exporter')

# Markup that OneNote embeds directly inside a T element's CDATA
MARKUP_OPENING_PATTERN = re.compile(r'<(?:span|a\s|b>|i>|strong>|em>)', re.IGNORECASE)
TAG_PATTERN = re.compile(r'<[^>]+>')


class ListMarker(Enum):
    """List classification of a content item (OE element)."""
    NONE = "none"
    BULLET = "bullet"
    NUMBERED = "numbered"


@dataclass(frozen=True)
class StyleFlags:
    """The recognized inline style vocabulary, parsed once from a CSS style string."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    highlight: bool = False

    @classmethod
    def from_style(cls, style: Optional[str]) -> 'StyleFlags':
        """
        Parse a CSS declaration list such as ``font-weight:bold;font-style:italic``.

        Args:
            style: Raw value of a ``style`` attribute (may be None)

        Returns:
            StyleFlags with one flag per recognized declaration
        """
        if not style:
            return cls()

        declarations: Dict[str, str] = {}
        for declaration in style.split(';'):
            if ':' not in declaration:
                continue
            prop, value = declaration.split(':', 1)
            declarations[prop.strip().lower()] = value.strip().lower()

        weight = declarations.get('font-weight', '')
        bold = 'bold' in weight or (weight.isdigit() and int(weight) >= 700)

        italic = declarations.get('font-style', '') in ('italic', 'oblique')

        strikethrough = 'line-through' in declarations.get('text-decoration', '')

        highlight = any(
            'yellow' in declarations.get(prop, '')
            for prop in ('background', 'background-color', 'mso-highlight')
        )

        return cls(bold=bold, italic=italic, strikethrough=strikethrough, highlight=highlight)

    @property
    def is_styled(self) -> bool:
        return self.bold or self.italic or self.strikethrough or self.highlight


@dataclass(frozen=True)
class TextRun:
    """A single T element: plain text with a style attribute, or pre-embedded HTML."""

    text: str = ''
    style: str = ''

    @property
    def has_markup(self) -> bool:
        """True when the run carries OneNote's embedded rich-text HTML."""
        return bool(self.text) and MARKUP_OPENING_PATTERN.search(self.text) is not None

    @property
    def flags(self) -> StyleFlags:
        return StyleFlags.from_style(self.style)

    @property
    def plain_text(self) -> str:
        """Text with every embedded tag removed."""
        return TAG_PATTERN.sub('', self.text or '')


@dataclass(frozen=True)
class Image:
    """An Image element with either an inline base64 payload or a callback id."""

    data: Optional[str] = None
    format: str = 'png'
    callback_id: Optional[str] = None

    @property
    def has_inline_data(self) -> bool:
        return bool(self.data and self.data.strip())


@dataclass(frozen=True)
class Cell:
    """Table cell; owns a Child-List of content items."""

    children: Tuple['ContentItem', ...] = ()


@dataclass(frozen=True)
class Row:
    cells: Tuple[Cell, ...] = ()


@dataclass(frozen=True)
class Table:
    rows: Tuple[Row, ...] = ()


@dataclass(frozen=True)
class ContentItem:
    """One OE element of a Child-List (OEChildren)."""

    list_marker: ListMarker = ListMarker.NONE
    runs: Tuple[TextRun, ...] = ()
    tables: Tuple[Table, ...] = ()
    images: Tuple[Image, ...] = ()
    children: Tuple['ContentItem', ...] = ()

    @property
    def is_list_item(self) -> bool:
        return self.list_marker is not ListMarker.NONE


@dataclass(frozen=True)
class Outline:
    """Top-level content container on a page."""

    children: Tuple[ContentItem, ...] = ()


@dataclass(frozen=True)
class Document:
    """A parsed OneNote page."""

    title: Optional[str] = None
    name: Optional[str] = None
    outlines: Tuple[Outline, ...] = ()
    images: Tuple[Image, ...] = ()


@dataclass
class ExportResult:
    """Statistics of one export run."""

    total_items: int = 0
    exported_pages: int = 0
    failed_pages: int = 0
    skipped_pages: int = 0
    error: Optional[str] = None
    written_files: list = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.error and self.failed_pages == 0
