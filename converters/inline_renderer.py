"""Inline run renderer: one OneNote text run to canonical inline HTML."""

import html
import logging
import re

from models import StyleFlags, TextRun

logger = logging.getLogger('onenote_markdown_exporter.converters.inlinerenderer')

ANCHOR_OPEN_PATTERN = re.compile(r'<a\s([^>]*?)>', re.IGNORECASE | re.DOTALL)
STYLED_SPAN_PATTERN = re.compile(
    r"""<span\b[^>]*?style=(["'])(.*?)\1[^>]*>([^<]*)</span>""",
    re.IGNORECASE | re.DOTALL,
)
SPAN_OPEN_PATTERN = re.compile(r'<span\b[^>]*>', re.IGNORECASE)
SPAN_CLOSE_PATTERN = re.compile(r'</span\s*>', re.IGNORECASE)
MSO_DECLARATION_PATTERN = re.compile(r'''mso-[^;"']+;?''', re.IGNORECASE)


def wrap_with_flags(content: str, flags: StyleFlags) -> str:
    """Wrap content in canonical tags; strong ends up outermost, del innermost."""
    if flags.strikethrough:
        content = f'<del>{content}</del>'
    if flags.highlight:
        content = f'<mark>{content}</mark>'
    if flags.italic:
        content = f'<em>{content}</em>'
    if flags.bold:
        content = f'<strong>{content}</strong>'
    return content


class InlineRunRenderer:
    """Renders T elements: escapes plain text or normalizes OneNote's embedded HTML."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.inlinerenderer')

    def render(self, run: TextRun) -> str:
        """
        Render one text run.

        Args:
            run: TextRun from the page model

        Returns:
            Inline HTML, or an empty string for empty runs
        """
        if not run.text:
            return ''

        if run.has_markup:
            return self.normalize_markup(run.text)

        return self.render_plain(run.text, run.flags)

    def render_plain(self, text: str, flags: StyleFlags) -> str:
        """HTML-escape plain text and apply T-level style flags."""
        if not text:
            return ''
        # Plain runs only honor bold, italic and strikethrough
        flags = StyleFlags(bold=flags.bold, italic=flags.italic, strikethrough=flags.strikethrough)
        return wrap_with_flags(html.escape(text), flags)

    def normalize_markup(self, markup: str) -> str:
        """Convert OneNote's span-based rich text to canonical inline tags."""
        # Anchors may span lines (<a\nhref=...>), which breaks downstream parsing
        markup = ANCHOR_OPEN_PATTERN.sub(self._collapse_anchor, markup)

        markup = STYLED_SPAN_PATTERN.sub(self._rewrite_styled_span, markup)

        markup = SPAN_OPEN_PATTERN.sub('', markup)
        markup = SPAN_CLOSE_PATTERN.sub('', markup)

        markup = MSO_DECLARATION_PATTERN.sub('', markup)
        return markup

    @staticmethod
    def _collapse_anchor(match: re.Match) -> str:
        attributes = ' '.join(match.group(1).split())
        return f'<a {attributes}>'

    def _rewrite_styled_span(self, match: re.Match) -> str:
        flags = StyleFlags.from_style(match.group(2))
        if not flags.is_styled:
            # Left for the generic span stripping step
            return match.group(0)
        return wrap_with_flags(match.group(3), flags)
