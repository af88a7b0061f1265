"""Tests for image persistence and placeholders."""

import base64

from converters.image_handler import (
    NO_DATA_PLACEHOLDER,
    ConversionSession,
    ImageResourceHandler,
    extension_for,
    sanitize_prefix,
)
from models import Image


def make_handler(assets_dir, relative='assets', prefix='', fetcher=None):
    session = ConversionSession(
        assets_folder=str(assets_dir),
        relative_assets_path=relative,
        page_prefix=prefix,
        binary_fetcher=fetcher,
    )
    return ImageResourceHandler(session)


class TestImageFiles:
    """Test writing images into the assets folder."""

    def test_image_written_and_referenced(self, assets_dir, png_base64):
        handler = make_handler(assets_dir)

        result = handler.render(Image(data=png_base64))

        assert result == '<p><img src="assets/image_0001.png" alt="image" /></p>'
        assert (assets_dir / 'image_0001.png').read_bytes() == base64.b64decode(png_base64)

    def test_counter_increments_per_image(self, assets_dir, png_base64):
        handler = make_handler(assets_dir)

        handler.render(Image(data=png_base64))
        second = handler.render(Image(data=png_base64, format='jpeg'))

        assert 'assets/image_0002.jpg' in second
        assert handler.session.image_counter == 2

    def test_prefix_is_added_to_file_name(self, assets_dir, png_base64):
        handler = make_handler(assets_dir, prefix='Meeting Notes')

        result = handler.render(Image(data=png_base64))

        assert 'assets/Meeting_Notes_image_0001.png' in result
        assert (assets_dir / 'Meeting_Notes_image_0001.png').exists()

    def test_empty_relative_path_uses_bare_file_name(self, assets_dir, png_base64):
        handler = make_handler(assets_dir, relative='')
        assert 'src="image_0001.png"' in handler.render(Image(data=png_base64))

    def test_backslashes_in_relative_path_become_slashes(self, assets_dir, png_base64):
        handler = make_handler(assets_dir, relative='..\\assets')
        assert 'src="../assets/image_0001.png"' in handler.render(Image(data=png_base64))

    def test_base64_with_line_breaks(self, assets_dir, png_base64):
        wrapped = '\n'.join(png_base64[i:i + 20] for i in range(0, len(png_base64), 20))
        handler = make_handler(assets_dir)
        assert '<img' in handler.render(Image(data=wrapped))


class TestImagePlaceholders:
    """Test images that cannot be saved."""

    def test_no_data_gives_placeholder_without_consuming_number(self, assets_dir, png_base64):
        handler = make_handler(assets_dir)

        assert handler.render(Image()) == NO_DATA_PLACEHOLDER
        result = handler.render(Image(data=png_base64))

        assert 'image_0001.png' in result

    def test_invalid_base64_gives_failure_placeholder(self, assets_dir):
        handler = make_handler(assets_dir)

        result = handler.render(Image(data='not base64 !!!'))

        assert result.startswith('<p><em>[Image export failed:')
        assert result.endswith(']</em></p>')

    def test_callback_without_fetcher(self, assets_dir):
        handler = make_handler(assets_dir)
        assert handler.render(Image(callback_id='{abc}')) == NO_DATA_PLACEHOLDER

    def test_write_failure_gives_failure_placeholder(self, tmp_path, png_base64):
        blocker = tmp_path / 'not-a-folder'
        blocker.write_text('x')
        handler = make_handler(blocker)

        result = handler.render(Image(data=png_base64))

        assert result.startswith('<p><em>[Image export failed:')
        assert handler.session.image_counter == 1


class TestBinaryFetcher:
    """Test images resolved through a CallbackID."""

    def test_fetcher_returning_base64(self, assets_dir, png_base64):
        requested = []

        def fetcher(callback_id):
            requested.append(callback_id)
            return png_base64

        handler = make_handler(assets_dir, fetcher=fetcher)
        result = handler.render(Image(callback_id='{cb-1}'))

        assert requested == ['{cb-1}']
        assert 'image_0001.png' in result

    def test_fetcher_returning_bytes(self, assets_dir):
        handler = make_handler(assets_dir, fetcher=lambda _: b'\x89PNG raw')

        handler.render(Image(callback_id='{cb-1}'))

        assert (assets_dir / 'image_0001.png').read_bytes() == b'\x89PNG raw'

    def test_fetcher_returning_nothing(self, assets_dir):
        handler = make_handler(assets_dir, fetcher=lambda _: None)
        assert handler.render(Image(callback_id='{cb-1}')) == NO_DATA_PLACEHOLDER

    def test_fetcher_error_gives_failure_placeholder(self, assets_dir):
        def fetcher(_):
            raise RuntimeError('OneNote <busy>')

        handler = make_handler(assets_dir, fetcher=fetcher)
        result = handler.render(Image(callback_id='{cb-1}'))

        assert result == '<p><em>[Image export failed: OneNote &lt;busy&gt;]</em></p>'

    def test_inline_data_wins_over_fetcher(self, assets_dir, png_base64):
        handler = make_handler(assets_dir, fetcher=lambda _: b'other')

        handler.render(Image(data=png_base64, callback_id='{cb-1}'))

        assert (assets_dir / 'image_0001.png').read_bytes() == base64.b64decode(png_base64)


class TestHelpers:

    def test_extension_for(self):
        assert extension_for('png') == '.png'
        assert extension_for('JPEG') == '.jpg'
        assert extension_for('emf') == '.png'
        assert extension_for('unknown') == '.png'
        assert extension_for(None) == '.png'

    def test_sanitize_prefix(self):
        assert sanitize_prefix('test:page/name') == 'test_page_name'
        assert sanitize_prefix('') == ''
        assert sanitize_prefix(None) == ''
