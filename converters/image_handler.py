"""Image resource handling: decode embedded image payloads, persist them, emit references."""

import base64
import binascii
import html
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from models import Image

logger = logging.getLogger('onenote_markdown_exporter.converters.imagehandler')

# Resolves an out-of-band image (CallbackID) to raw bytes or base64 text
BinaryFetcher = Callable[[str], Optional[Union[bytes, str]]]

NO_DATA_PLACEHOLDER = '<p><em>[Image - no embedded data]</em></p>'

FORMAT_EXTENSIONS = {
    'png': '.png',
    'jpg': '.jpg',
    'jpeg': '.jpg',
    'gif': '.gif',
    'bmp': '.bmp',
    # Vector formats are not rasterized, only given a raster extension
    'emf': '.png',
    'wmf': '.png',
}
DEFAULT_EXTENSION = '.png'

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\s]')


def extension_for(image_format: Optional[str]) -> str:
    """Map an Image format attribute to a file extension."""
    return FORMAT_EXTENSIONS.get((image_format or '').lower(), DEFAULT_EXTENSION)


def sanitize_prefix(prefix: Optional[str]) -> str:
    """Make a page prefix safe for use in a file name."""
    if not prefix:
        return ''
    return INVALID_FILENAME_CHARS.sub('_', prefix.strip())


@dataclass
class ConversionSession:
    """Per-call conversion state. Created at the start of every conversion and discarded after."""

    assets_folder: str
    relative_assets_path: str
    page_prefix: str = ''
    binary_fetcher: Optional[BinaryFetcher] = None
    image_counter: int = 0

    def __post_init__(self) -> None:
        self.page_prefix = sanitize_prefix(self.page_prefix)

    def next_image_filename(self, extension: str) -> str:
        """Advance the image counter and build the next asset file name."""
        self.image_counter += 1
        filename = f'image_{self.image_counter:04d}{extension}'
        if self.page_prefix:
            filename = f'{self.page_prefix}_{filename}'
        return filename


class ImageResourceHandler:
    """Writes image payloads into the session's asset folder and returns <img> markup."""

    def __init__(self, session: ConversionSession, logger: logging.Logger = None):
        self.session = session
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.converters.imagehandler')

    def render(self, image: Image) -> str:
        """
        Persist one image and return its reference markup.

        A failing image yields a placeholder; it never aborts the page.

        Args:
            image: Image from the page model

        Returns:
            <img> markup wrapped in a paragraph, or a placeholder paragraph
        """
        try:
            payload = self._load_payload(image)
            if payload is None:
                self.logger.debug("Image has no embedded data")
                return NO_DATA_PLACEHOLDER

            filename = self.session.next_image_filename(extension_for(image.format))

            assets_folder = Path(self.session.assets_folder)
            if self.session.assets_folder and not assets_folder.exists():
                assets_folder.mkdir(parents=True, exist_ok=True)

            (assets_folder / filename).write_bytes(payload)
            self.logger.debug(f"Saved image {filename} ({len(payload)} bytes)")

            relative_path = filename
            if self.session.relative_assets_path:
                relative_path = f'{self.session.relative_assets_path}/{filename}'.replace('\\', '/')
            return f'<p><img src="{html.escape(relative_path)}" alt="image" /></p>'

        except Exception as e:
            self.logger.warning(f"Image export failed: {e}")
            return f'<p><em>[Image export failed: {html.escape(str(e))}]</em></p>'

    def _load_payload(self, image: Image) -> Optional[bytes]:
        """Return decoded image bytes, or None when there is nothing to decode."""
        if image.has_inline_data:
            return self._decode(image.data)

        if image.callback_id and self.session.binary_fetcher is not None:
            content = self.session.binary_fetcher(image.callback_id)
            if not content:
                self.logger.debug(f"Binary fetcher returned nothing for {image.callback_id}")
                return None
            if isinstance(content, bytes):
                return content
            if not content.strip():
                return None
            return self._decode(content)

        return None

    @staticmethod
    def _decode(data: str) -> bytes:
        compact = re.sub(r'\s+', '', data)
        try:
            return base64.b64decode(compact, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image data: {e}") from e
