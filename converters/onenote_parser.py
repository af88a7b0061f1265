"""Parser turning OneNote page XML into the immutable page model."""

import logging
from typing import List, Optional, Tuple

from lxml import etree

from models import (
    Cell,
    ContentItem,
    Document,
    Image,
    ListMarker,
    Outline,
    Row,
    Table,
    TextRun,
)

logger = logging.getLogger('onenote_markdown_exporter.converters.onenoteparser')

ONENOTE_NAMESPACE = 'http://schemas.microsoft.com/office/onenote/2013/onenote'


class OneNoteXmlParser:
    """Parses OneNote page XML (as returned by GetPageContent) into a Document."""

    def __init__(self, logger: logging.Logger = None):
        """Initialize parser with optional logger."""
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.onenoteparser')
        self._ns = ONENOTE_NAMESPACE

    def parse(self, page_xml: str) -> Optional[Document]:
        """
        Parse page XML into a Document.

        Args:
            page_xml: Raw page XML (str or bytes)

        Returns:
            Parsed Document, or None when the XML is empty or malformed
        """
        root = self._parse_root(page_xml)
        if root is None:
            return None

        # Use the namespace the page actually declares (2010 and 2013 schemas differ)
        self._ns = etree.QName(root).namespace or ''

        title = None
        title_element = self._find(root, 'Title')
        if title_element is not None:
            title = self._plain_text(self._find(title_element, 'OE'))

        outlines = tuple(
            Outline(children=self._parse_children(self._find(outline, 'OEChildren')))
            for outline in self._findall(root, 'Outline')
        )
        images = tuple(self._parse_image(image) for image in self._findall(root, 'Image'))

        document = Document(
            title=title,
            name=root.get('name'),
            outlines=outlines,
            images=images,
        )
        self.logger.debug(
            f"Parsed page '{document.name or ''}': {len(outlines)} outline(s), {len(images)} stray image(s)"
        )
        return document

    def page_name(self, page_xml: str) -> Optional[str]:
        """Return the page's ``name`` attribute without building the full model."""
        root = self._parse_root(page_xml)
        if root is None:
            return None
        return root.get('name')

    def _parse_root(self, page_xml) -> Optional[etree._Element]:
        if page_xml is None:
            return None
        if isinstance(page_xml, str):
            if not page_xml.strip():
                return None
            # lxml refuses str input that carries an encoding declaration
            page_xml = page_xml.encode('utf-8')
        elif not page_xml.strip():
            return None

        try:
            parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
            return etree.fromstring(page_xml, parser=parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            self.logger.warning(f"Malformed page XML, producing empty document: {e}")
            return None

    def _tag(self, local_name: str) -> str:
        return f'{{{self._ns}}}{local_name}' if self._ns else local_name

    def _find(self, element, local_name: str):
        if element is None:
            return None
        return element.find(self._tag(local_name))

    def _findall(self, element, local_name: str) -> List:
        if element is None:
            return []
        return element.findall(self._tag(local_name))

    def _parse_children(self, oe_children) -> Tuple[ContentItem, ...]:
        """Parse an OEChildren element into a Child-List."""
        return tuple(self._parse_item(oe) for oe in self._findall(oe_children, 'OE'))

    def _parse_item(self, oe) -> ContentItem:
        return ContentItem(
            list_marker=self._list_marker(oe),
            runs=tuple(self._parse_run(t) for t in self._findall(oe, 'T')),
            tables=tuple(self._parse_table(table) for table in self._findall(oe, 'Table')),
            images=tuple(self._parse_image(image) for image in self._findall(oe, 'Image')),
            children=self._parse_children(self._find(oe, 'OEChildren')),
        )

    def _list_marker(self, oe) -> ListMarker:
        list_element = self._find(oe, 'List')
        if list_element is None:
            return ListMarker.NONE
        if self._find(list_element, 'Bullet') is not None:
            return ListMarker.BULLET
        if self._find(list_element, 'Number') is not None:
            return ListMarker.NUMBERED
        return ListMarker.NONE

    def _parse_run(self, t) -> TextRun:
        # CDATA sections surface as ordinary text in lxml
        return TextRun(text=t.text or '', style=t.get('style', ''))

    def _parse_table(self, table) -> Table:
        rows = []
        for row in self._findall(table, 'Row'):
            cells = tuple(
                Cell(children=self._parse_children(self._find(cell, 'OEChildren')))
                for cell in self._findall(row, 'Cell')
            )
            rows.append(Row(cells=cells))
        return Table(rows=tuple(rows))

    def _parse_image(self, image) -> Image:
        data_element = self._find(image, 'Data')
        callback_element = self._find(image, 'CallbackID')
        return Image(
            data=data_element.text if data_element is not None else None,
            format=(image.get('format') or 'png').lower(),
            callback_id=callback_element.get('callbackID') if callback_element is not None else None,
        )

    def _plain_text(self, oe) -> str:
        """Concatenate the tag-stripped text of an OE's runs."""
        if oe is None:
            return ''
        return ''.join(self._parse_run(t).plain_text for t in self._findall(oe, 'T'))
