"""Converters package for OneNote page XML to Markdown conversion."""

import logging

from .image_handler import BinaryFetcher, ConversionSession, ImageResourceHandler
from .inline_renderer import InlineRunRenderer
from .markdown_cleanup import AnchorScanner, MarkdownCleaner
from .markdown_converter import DocumentAssembler, OneNoteMarkdownConverter
from .onenote_parser import OneNoteXmlParser
from .outline_walker import OutlineWalker, has_real_content
from .table_renderer import TableRenderer

logger = logging.getLogger('onenote_markdown_exporter.converters')


def convert(page_xml, assets_folder, relative_assets_path, binary_fetcher=None, page_prefix='',
            config=None, logger=None):
    """
    Convenience function to convert one OneNote page XML document to Markdown.

    This orchestrates the full conversion pipeline:
    1. Page XML parsing into the page model
    2. Canonical HTML assembly (outline walker, tables, images)
    3. Markdown generation using markdownify
    4. Markdown cleanup (anchors, escapes, naked links, blank lines, entities)

    Args:
        page_xml: Page XML string
        assets_folder: Directory images are written into
        relative_assets_path: Prefix for image links in the Markdown
        binary_fetcher: Optional callable resolving image CallbackIDs
        page_prefix: Prefix for image file names
        config: Optional conversion settings (heading_style, bullets)
        logger: Optional logger instance (uses module logger if not provided)

    Returns:
        str: Markdown text ('' for empty or malformed XML)

    Example:
        >>> from converters import convert
        >>> markdown = convert(page_xml, 'out/assets', 'assets', page_prefix='Meeting')
    """
    if logger is None:
        logger = logging.getLogger('onenote_markdown_exporter.converters')

    converter = OneNoteMarkdownConverter(logger=logger, config=config)
    return converter.convert_page(page_xml, assets_folder, relative_assets_path, binary_fetcher, page_prefix)


__all__ = [
    'convert',
    'AnchorScanner',
    'BinaryFetcher',
    'ConversionSession',
    'DocumentAssembler',
    'ImageResourceHandler',
    'InlineRunRenderer',
    'MarkdownCleaner',
    'OneNoteMarkdownConverter',
    'OneNoteXmlParser',
    'OutlineWalker',
    'TableRenderer',
    'has_real_content',
]
