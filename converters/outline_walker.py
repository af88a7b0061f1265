"""Outline walker: renders OneNote Child-Lists (OEChildren) with list-context tracking."""

import logging
from enum import Enum
from typing import Sequence

from models import ContentItem, ListMarker

from .image_handler import ImageResourceHandler
from .inline_renderer import InlineRunRenderer
from .table_renderer import TableRenderer

logger = logging.getLogger('onenote_markdown_exporter.converters.outlinewalker')


class ListState(Enum):
    """List wrapper currently open in one Child-List."""
    NONE = "none"
    IN_BULLET = "in_bullet"
    IN_NUMBERED = "in_numbered"


OPEN_TAGS = {
    ListState.IN_BULLET: '<ul>\n',
    ListState.IN_NUMBERED: '<ol>\n',
}
CLOSE_TAGS = {
    ListState.IN_BULLET: '</ul>\n',
    ListState.IN_NUMBERED: '</ol>\n',
}


def has_real_content(item: ContentItem) -> bool:
    """True if the item, or any item nested below it, carries visible content."""
    if any(run.plain_text.strip() for run in item.runs):
        return True
    if item.images or item.tables:
        return True
    return any(has_real_content(child) for child in item.children)


class OutlineWalker:
    """
    Renders a Child-List into canonical HTML.

    Each call to render_children runs its own list state machine, so sibling
    subtrees never share list state. Blank spacer items between list items do
    not close the open list.
    """

    def __init__(
        self,
        image_handler: ImageResourceHandler,
        inline_renderer: InlineRunRenderer = None,
        table_renderer: TableRenderer = None,
        logger: logging.Logger = None
    ):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.outlinewalker')
        self.inline_renderer = inline_renderer or InlineRunRenderer(self.logger)
        self.table_renderer = table_renderer or TableRenderer(self.inline_renderer, self.logger)
        self.image_handler = image_handler

    def render_children(self, items: Sequence[ContentItem]) -> str:
        """
        Render one Child-List.

        Args:
            items: Content items in source order

        Returns:
            Canonical HTML for the list
        """
        parts = []
        state = ListState.NONE

        for item in items:
            has_content = has_real_content(item)
            target = self._target_state(item.list_marker)

            if target is not ListState.NONE and state is not target:
                if state is not ListState.NONE:
                    parts.append(CLOSE_TAGS[state])
                parts.append(OPEN_TAGS[target])
                state = target
            elif target is ListState.NONE and state is not ListState.NONE and has_content:
                parts.append(CLOSE_TAGS[state])
                state = ListState.NONE

            if has_content or item.is_list_item:
                parts.append(self.render_item(item, state is not ListState.NONE))
            else:
                self.logger.debug("Dropping empty content item")

        if state is not ListState.NONE:
            parts.append(CLOSE_TAGS[state])

        return ''.join(parts)

    def render_item(self, item: ContentItem, in_list: bool) -> str:
        """Render one item: runs, then tables, then images, then its nested Child-List."""
        buffer = ''.join(self.inline_renderer.render(run) for run in item.runs)
        buffer += ''.join(self.table_renderer.render(table) for table in item.tables)
        buffer += ''.join(self.image_handler.render(image) for image in item.images)

        nested = self.render_children(item.children) if item.children else ''

        if not buffer:
            return nested

        if item.is_list_item or in_list:
            # Nested lists stay inside the <li> so the renderer indents them
            return f'<li>{buffer}{nested}</li>\n'

        return f'<p>{buffer}</p>\n{nested}'

    @staticmethod
    def _target_state(marker: ListMarker) -> ListState:
        if marker is ListMarker.BULLET:
            return ListState.IN_BULLET
        if marker is ListMarker.NUMBERED:
            return ListState.IN_NUMBERED
        return ListState.NONE
