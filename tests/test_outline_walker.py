"""Tests for Child-List rendering and list-context tracking."""

import pytest

from converters.image_handler import ConversionSession, ImageResourceHandler
from converters.outline_walker import OutlineWalker, has_real_content
from models import ContentItem, Image, ListMarker, Table, TextRun


def item(text='', marker=ListMarker.NONE, children=(), images=(), tables=()):
    runs = (TextRun(text=text),) if text is not None else ()
    return ContentItem(list_marker=marker, runs=runs, children=tuple(children),
                       images=tuple(images), tables=tuple(tables))


def bullet(text, children=()):
    return item(text, ListMarker.BULLET, children)


def numbered(text, children=()):
    return item(text, ListMarker.NUMBERED, children)


@pytest.fixture
def walker(tmp_path):
    session = ConversionSession(assets_folder=str(tmp_path / 'assets'), relative_assets_path='assets')
    return OutlineWalker(image_handler=ImageResourceHandler(session))


class TestHasRealContent:

    def test_whitespace_only_text(self):
        assert not has_real_content(item('   '))

    def test_markup_without_text(self):
        assert not has_real_content(item('<span style="font-weight:bold"></span>'))

    def test_image_counts_as_content(self):
        assert has_real_content(item('', images=[Image()]))

    def test_table_counts_as_content(self):
        assert has_real_content(item('', tables=[Table()]))

    def test_nested_content(self):
        assert has_real_content(item('', children=[item('deep')]))


class TestListGrouping:
    """Test how sibling items become lists."""

    def test_paragraphs(self, walker):
        result = walker.render_children([item('one'), item('two')])
        assert result == '<p>one</p>\n<p>two</p>\n'

    def test_consecutive_bullets_share_one_list(self, walker):
        result = walker.render_children([bullet('a'), bullet('b')])
        assert result == '<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n'

    def test_blank_spacer_does_not_close_list(self, walker):
        result = walker.render_children([bullet('a'), item(''), bullet('b')])
        assert result == '<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n'
        assert result.count('<ul>') == 1

    def test_text_item_closes_list(self, walker):
        result = walker.render_children([bullet('a'), item('para'), bullet('b')])
        assert result == '<ul>\n<li>a</li>\n</ul>\n<p>para</p>\n<ul>\n<li>b</li>\n</ul>\n'

    def test_switching_list_kind_closes_previous_list(self, walker):
        result = walker.render_children([bullet('a'), numbered('1')])
        assert result == '<ul>\n<li>a</li>\n</ul>\n<ol>\n<li>1</li>\n</ol>\n'

    def test_switching_back_to_bullets_closes_numbered_list(self, walker):
        result = walker.render_children([numbered('1'), bullet('a')])
        assert result == '<ol>\n<li>1</li>\n</ol>\n<ul>\n<li>a</li>\n</ul>\n'

    def test_empty_items_are_dropped(self, walker):
        result = walker.render_children([item(''), item('   '), item('text')])
        assert result == '<p>text</p>\n'

    def test_lists_always_balanced(self, walker):
        result = walker.render_children([numbered('1'), item(''), numbered('2')])
        assert result.count('<ol>') == result.count('</ol>') == 1


class TestNesting:
    """Test nested Child-Lists."""

    def test_nested_list_inside_list_item(self, walker):
        result = walker.render_children([bullet('Parent', children=[bullet('Child')])])
        assert result == '<ul>\n<li>Parent<ul>\n<li>Child</li>\n</ul>\n</li>\n</ul>\n'

    def test_nested_content_after_paragraph(self, walker):
        result = walker.render_children([item('Parent', children=[item('Child')])])
        assert result == '<p>Parent</p>\n<p>Child</p>\n'

    def test_item_without_own_content_yields_nested_only(self, walker):
        result = walker.render_children([item('', children=[bullet('Child')])])
        assert result == '<ul>\n<li>Child</li>\n</ul>\n'

    def test_nested_list_state_is_independent(self, walker):
        parent = item('Parent', children=[bullet('inner')])
        result = walker.render_children([bullet('outer'), parent])

        assert result.count('<ul>') == 2
        assert result.count('</ul>') == 2

    def test_unmarked_item_with_nested_content_closes_list(self, walker):
        result = walker.render_children([bullet('a'), item('', children=[item('x')]), bullet('b')])
        assert result == '<ul>\n<li>a</li>\n</ul>\n<p>x</p>\n<ul>\n<li>b</li>\n</ul>\n'

    def test_list_item_rendered_in_list_context(self, walker):
        assert walker.render_item(item('plain'), in_list=True) == '<li>plain</li>\n'


class TestItemContent:

    def test_runs_tables_images_order(self, walker):
        table = Table(rows=())
        result = walker.render_item(item('text', images=[Image()], tables=[table]), in_list=False)
        assert result.startswith('<p>text')
        assert '[Image - no embedded data]' in result
