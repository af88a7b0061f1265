"""Markdown converter orchestrator for OneNote page XML to Markdown conversion."""

import html
import logging
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter as MarkdownifyConverter

from models import Document

from .image_handler import BinaryFetcher, ConversionSession, ImageResourceHandler
from .inline_renderer import InlineRunRenderer
from .markdown_cleanup import MarkdownCleaner
from .onenote_parser import OneNoteXmlParser
from .outline_walker import OutlineWalker
from .table_renderer import TableRenderer

logger = logging.getLogger('onenote_markdown_exporter.converters.markdownconverter')

# markdownify calls setext headings "underlined"
HEADING_STYLE_ALIASES = {'SETEXT': 'UNDERLINED'}


class DocumentAssembler:
    """Builds the canonical HTML document for one page: title, outlines, stray images."""

    def __init__(self, session: ConversionSession, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.markdownconverter')
        self.session = session
        inline_renderer = InlineRunRenderer(self.logger)
        self.image_handler = ImageResourceHandler(session, self.logger)
        self.walker = OutlineWalker(
            image_handler=self.image_handler,
            inline_renderer=inline_renderer,
            table_renderer=TableRenderer(inline_renderer, self.logger),
            logger=self.logger
        )

    def assemble(self, document: Document) -> str:
        parts = ['<html><body>\n']

        title = (document.title or '').strip()
        if title:
            parts.append(f'<h1>{html.escape(title)}</h1>\n')

        for outline in document.outlines:
            parts.append(self.walker.render_children(outline.children))

        for image in document.images:
            parts.append(self.image_handler.render(image))

        parts.append('</body></html>\n')
        return ''.join(parts)


class OneNoteMarkdownConverter(MarkdownifyConverter):
    """
    Main orchestrator for converting OneNote page XML to Markdown.

    This class extends markdownify.MarkdownConverter to provide:
    - Page XML parsing and canonical HTML assembly
    - Custom handlers for highlight marks and table-cell line breaks
    - Markdown cleanup (anchor rewriting, escapes, whitespace)

    The instance keeps no per-page state: every convert_page call builds its
    own ConversionSession, so one converter can serve many pages.
    """

    def __init__(self, logger: logging.Logger = None, config: Dict[str, Any] = None, **kwargs):
        """Initialize markdown converter with logger and configuration."""
        self.config = config or {}
        heading_style = str(self.config.get('heading_style', 'ATX')).upper()

        markdownify_options = {
            'heading_style': HEADING_STYLE_ALIASES.get(heading_style, heading_style),
            'bullets': self.config.get('bullets', '-'),
            'escape_asterisks': False,
            'escape_underscores': False,
            'escape_misc': False,
            'autolinks': True,
            'wrap': False,
        }
        markdownify_options.update(kwargs)

        super().__init__(**markdownify_options)

        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.markdownconverter')
        self.cleaner = MarkdownCleaner(self.logger)

    def convert_page(
        self,
        page_xml: str,
        assets_folder: str,
        relative_assets_path: str,
        binary_fetcher: Optional[BinaryFetcher] = None,
        page_prefix: str = ''
    ) -> str:
        """
        Convert one page of OneNote XML to Markdown.

        Args:
            page_xml: Page XML as returned by OneNote's GetPageContent
            assets_folder: Directory images are written into (created on demand)
            relative_assets_path: Prefix used for image links in the Markdown
            binary_fetcher: Optional callable resolving an image CallbackID to its data
            page_prefix: Prefix for image file names, to keep pages sharing one
                assets folder apart

        Returns:
            Markdown text; an empty string for empty or malformed XML
        """
        document = OneNoteXmlParser(self.logger).parse(page_xml)
        if document is None:
            return ''

        return self.convert_document(document, assets_folder, relative_assets_path, binary_fetcher, page_prefix)

    def convert_document(
        self,
        document: Document,
        assets_folder: str,
        relative_assets_path: str,
        binary_fetcher: Optional[BinaryFetcher] = None,
        page_prefix: str = ''
    ) -> str:
        """Convert an already parsed page; arguments as for convert_page."""
        session = ConversionSession(
            assets_folder=assets_folder,
            relative_assets_path=relative_assets_path,
            page_prefix=page_prefix,
            binary_fetcher=binary_fetcher,
        )

        canonical_html = DocumentAssembler(session, self.logger).assemble(document)
        raw_markdown = self._convert_to_markdown(canonical_html)
        markdown = self.cleaner.clean(raw_markdown)

        self.logger.debug(f"Converted page '{document.name or ''}' ({session.image_counter} image(s) saved)")
        return markdown

    def _convert_to_markdown(self, canonical_html: str) -> str:
        """Render canonical HTML with the markdownify base converter."""
        soup = BeautifulSoup(canonical_html, 'lxml')
        return self.convert_soup(soup)

    # Custom markdownify converters
    def convert_mark(self, el, text, parent_tags=None, **kwargs):
        """Render OneNote highlights as bold; Markdown has no portable highlight."""
        return self.convert_strong(el, text, parent_tags=parent_tags if parent_tags is not None else set())

    def convert_br(self, el, text, parent_tags=None, **kwargs):
        """Keep line breaks inside table cells as <br> so the row stays on one line."""
        parent_tags = parent_tags if parent_tags is not None else set()
        if 'td' in parent_tags or 'th' in parent_tags:
            return '<br>'
        return super().convert_br(el, text, parent_tags=parent_tags)
