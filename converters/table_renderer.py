"""Table renderer for OneNote Table elements."""

import logging

from models import Cell, Table

from .inline_renderer import InlineRunRenderer

logger = logging.getLogger('onenote_markdown_exporter.converters.tablerenderer')

CELL_LINE_BREAK = '<br/>'


class TableRenderer:
    """Renders a Table into <table>/<tr>/<th>/<td> markup; row 0 is the header."""

    def __init__(self, inline_renderer: InlineRunRenderer = None, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.tablerenderer')
        self.inline_renderer = inline_renderer or InlineRunRenderer(self.logger)

    def render(self, table: Table) -> str:
        """
        Render a table.

        Args:
            table: Table from the page model

        Returns:
            Table markup, or an empty string when the table has no rows
        """
        if not table.rows:
            return ''

        lines = ['<table>']
        for index, row in enumerate(table.rows):
            tag = 'th' if index == 0 else 'td'
            lines.append('<tr>')
            for cell in row.cells:
                lines.append(f'<{tag}>{self.render_cell(cell)}</{tag}>')
            lines.append('</tr>')
        lines.append('</table>')

        self.logger.debug(f"Rendered table with {len(table.rows)} row(s)")
        return '\n'.join(lines) + '\n'

    def render_cell(self, cell: Cell) -> str:
        """Render the direct text runs of a cell's items.

        Nested lists, sub-tables and images inside a cell are not rendered.
        """
        parts = []
        for item in cell.children:
            text = ''.join(self.inline_renderer.render(run) for run in item.runs)
            if text:
                parts.append(text)
        return CELL_LINE_BREAK.join(parts)
