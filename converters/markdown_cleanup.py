"""Post-processing of rendered Markdown: anchor rewriting, escapes, links, whitespace."""

import logging
import re
from enum import Enum
from typing import Optional
from urllib.parse import unquote

logger = logging.getLogger('onenote_markdown_exporter.converters.markdowncleanup')

LINE_BREAK_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
ANCHOR_OPEN_PATTERN = re.compile(r'<a(?=[\s>])', re.IGNORECASE)
ANCHOR_CLOSE_PATTERN = re.compile(r'</a\s*>', re.IGNORECASE)
HREF_PATTERN = re.compile(r'''href\s*=\s*["']([^"']+)["']''', re.IGNORECASE | re.DOTALL)
LINK_DESTINATION_PATTERN = re.compile(r'\]\(([^)]+)\)')
SAME_TEXT_LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\((\1)\)')
URL_LINK_PATTERN = re.compile(r'(?<!!)\[(https?://[^\]]+)\]\((https?://[^\)]+)\)')
EXCESS_NEWLINES_PATTERN = re.compile(r'\n{3,}')

ENTITY_REPLACEMENTS = [
    ('&nbsp;', ' '),
    ('\xa0', ' '),
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
]


class ScanState(Enum):
    SEEKING_OPEN = "seeking_open"
    SEEKING_CLOSE = "seeking_close"
    DONE = "done"


def _normalize_link_part(value: str) -> str:
    return unquote(value.replace('\\_', '_').replace('\\', ''))


def links_equivalent(href: str, text: str) -> bool:
    """True when link text is just the URL (ignoring trailing slash, %-encoding and escapes)."""
    normalized_href = _normalize_link_part(href)
    normalized_text = _normalize_link_part(text)
    return (
        text == href
        or normalized_text == normalized_href
        or text.rstrip('/') == href.rstrip('/')
        or normalized_text.rstrip('/') == normalized_href.rstrip('/')
    )


def anchor_to_markdown(href: Optional[str], text: Optional[str]) -> str:
    """Choose autolink, inline link, or plain text for one anchor."""
    if href and text:
        href = href.replace('\\_', '_')
        if links_equivalent(href, text):
            return f'<{href}>'
        return f'[{text}]({href})'
    if href:
        return '<{}>'.format(href.replace('\\_', '_'))
    return text or ''


class AnchorScanner:
    """
    Rewrites leftover <a ...>...</a> tags into Markdown links.

    A small three-state scanner: seek an opening tag, seek its closing tag,
    replace, restart from the top. An opening tag without a closing tag ends
    the scan and leaves the rest of the text as it is. Nested anchors are not
    supported.
    """

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.markdowncleanup')

    def rewrite(self, text: str) -> str:
        state = ScanState.SEEKING_OPEN
        start = -1

        while state is not ScanState.DONE:
            if state is ScanState.SEEKING_OPEN:
                match = ANCHOR_OPEN_PATTERN.search(text)
                if match is None:
                    state = ScanState.DONE
                    continue
                start = match.start()
                state = ScanState.SEEKING_CLOSE

            elif state is ScanState.SEEKING_CLOSE:
                close_match = ANCHOR_CLOSE_PATTERN.search(text, start)
                if close_match is None:
                    self.logger.debug(f"Unclosed anchor at offset {start}, stopping anchor scan")
                    state = ScanState.DONE
                    continue

                replacement = self._convert_anchor(text[start:close_match.start()])
                text = text[:start] + replacement + text[close_match.end():]
                state = ScanState.SEEKING_OPEN

        return text

    @staticmethod
    def _convert_anchor(anchor: str) -> str:
        """Convert an anchor given as its opening tag plus content, without the closing tag."""
        href = None
        href_match = HREF_PATTERN.search(anchor)
        if href_match:
            href = href_match.group(1).strip()

        link_text = None
        content_start = anchor.find('>')
        if content_start != -1:
            link_text = anchor[content_start + 1:].strip()

        return anchor_to_markdown(href, link_text)


class MarkdownCleaner:
    """Final cleanup applied to the Markdown produced by the generic renderer."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.markdowncleanup')
        self.anchor_scanner = AnchorScanner(self.logger)

    def clean(self, markdown: str) -> str:
        """
        Run the cleanup steps in order.

        Args:
            markdown: Raw Markdown from the renderer

        Returns:
            Cleaned Markdown
        """
        if not markdown:
            return ''

        markdown = self.replace_line_breaks(markdown)
        markdown = self.anchor_scanner.rewrite(markdown)
        markdown = self.unescape_link_destinations(markdown)

        # OneNote text never contains Markdown emphasis syntax, so escapes are noise
        markdown = markdown.replace('\\_', '_')
        markdown = markdown.replace('\\*', '*')

        markdown = self.fold_naked_links(markdown)
        markdown = EXCESS_NEWLINES_PATTERN.sub('\n\n', markdown)
        markdown = self.decode_entities(markdown)
        markdown = EXCESS_NEWLINES_PATTERN.sub('\n\n', markdown)

        lines = [line.rstrip() for line in markdown.split('\n')]
        return '\n'.join(lines).strip()

    @staticmethod
    def replace_line_breaks(markdown: str) -> str:
        """Turn <br> tags into newlines, except on table rows (lines bounded by '|') where a newline would split the row."""
        lines = []
        for line in markdown.split('\n'):
            stripped = line.strip()
            if stripped.startswith('|') and stripped.endswith('|'):
                lines.append(line)
            else:
                lines.append(LINE_BREAK_PATTERN.sub('\n', line))
        return '\n'.join(lines)

    @staticmethod
    def unescape_link_destinations(markdown: str) -> str:
        def replace_destination(match):
            return '](' + match.group(1).replace('\\_', '_') + ')'

        return LINK_DESTINATION_PATTERN.sub(replace_destination, markdown)

    @staticmethod
    def fold_naked_links(markdown: str) -> str:
        """Rewrite [url](url) as <url>."""
        markdown = SAME_TEXT_LINK_PATTERN.sub(lambda m: f'<{m.group(1)}>', markdown)

        def fold_equivalent(match):
            link_text, href = match.group(1), match.group(2)
            decoded_text = unquote(link_text.replace('\\_', '_'))
            decoded_href = unquote(href.replace('\\_', '_'))
            if decoded_text == decoded_href or link_text == href:
                return f'<{href}>'
            return match.group(0)

        return URL_LINK_PATTERN.sub(fold_equivalent, markdown)

    @staticmethod
    def decode_entities(markdown: str) -> str:
        for entity, replacement in ENTITY_REPLACEMENTS:
            markdown = markdown.replace(entity, replacement)
        return markdown
