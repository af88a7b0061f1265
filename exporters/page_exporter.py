"""Exports OneNote page XML files to Markdown files with a shared assets folder."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from converters import OneNoteMarkdownConverter, OneNoteXmlParser
from converters.image_handler import BinaryFetcher
from logger import ProgressTracker
from models import ExportResult

INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_file_name(name: str) -> str:
    """Replace characters that are not allowed in file names."""
    cleaned = INVALID_NAME_CHARS.sub('_', name).strip().rstrip('.')
    return cleaned or 'Untitled'


class PageExporter:
    """
    Writes one Markdown file per page XML file.

    The exporter:
    1. Collects page XML files (directories are searched recursively)
    2. Mirrors the folder structure below each input directory
    3. Converts each page, saving images into one shared assets folder
    4. Never overwrites an existing file unless overwrite is enabled
    """

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        binary_fetcher: Optional[BinaryFetcher] = None,
        show_progress: bool = True
    ):
        """
        Initialize the page exporter.

        Args:
            config: Configuration dictionary with export and conversion settings
            logger: Logger instance
            binary_fetcher: Optional resolver for images stored out of band
            show_progress: Display a tqdm progress bar
        """
        self.config = config
        self.logger = logger or logging.getLogger('onenote_markdown_exporter.exporters.page_exporter')

        export_config = config.get('export', {})
        self.output_directory = Path(export_config.get('output_directory', './onenote-export'))
        self.assets_folder = export_config.get('assets_folder', 'assets')
        self.overwrite = export_config.get('overwrite', False)
        self.dry_run = export_config.get('dry_run', False)
        self.binary_fetcher = binary_fetcher
        self.show_progress = show_progress

        self.converter = OneNoteMarkdownConverter(logger=self.logger, config=config.get('conversion', {}))
        self.parser = OneNoteXmlParser(self.logger)

    @property
    def assets_root(self) -> Path:
        return self.output_directory / self.assets_folder

    def export(self, inputs: Iterable[str]) -> ExportResult:
        """
        Export every page found in the given files and directories.

        Args:
            inputs: Page XML files or directories containing them

        Returns:
            ExportResult with page counts
        """
        result = ExportResult()
        pages = self.collect_pages(inputs)
        result.total_items = len(pages)

        if not pages:
            self.logger.warning("No page XML files found")
            return result

        self.logger.info(f"Found {len(pages)} page(s) to export")

        if self.dry_run:
            for source, relative_folder in pages:
                self.logger.info(f"[dry-run] Would export {source} -> {self.output_directory / relative_folder}")
                result.skipped_pages += 1
            return result

        try:
            self.output_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create output directory: {e}")
            result.error = str(e)
            return result

        with ProgressTracker(total_items=len(pages), item_type='pages') as tracker:
            for source, relative_folder in tqdm(pages, desc="Exporting pages", unit="page",
                                                disable=not self.show_progress):
                try:
                    written = self.export_page(source, self.output_directory / relative_folder)
                    result.exported_pages += 1
                    result.written_files.append(str(written))
                    tracker.increment(success=True)
                except Exception as e:
                    self.logger.error(f"Error exporting '{source}': {e}")
                    self.logger.debug("Export failure details", exc_info=True)
                    result.failed_pages += 1
                    tracker.increment(success=False)

        return result

    def export_page(self, source: Path, folder: Path) -> Path:
        """
        Convert one page XML file and write the Markdown next to its siblings.

        Args:
            source: Page XML file
            folder: Destination folder for the .md file

        Returns:
            Path of the written Markdown file
        """
        page_xml = source.read_text(encoding='utf-8-sig')
        document = self.parser.parse(page_xml)
        page_name = (document.name if document is not None else None) or source.stem

        folder.mkdir(parents=True, exist_ok=True)
        target = self.resolve_target_path(folder, safe_file_name(page_name))

        relative_assets_path = Path(os.path.relpath(self.assets_root, folder)).as_posix()

        markdown = ''
        if document is not None:
            markdown = self.converter.convert_document(
                document,
                str(self.assets_root),
                relative_assets_path,
                self.binary_fetcher,
                page_name,
            )

        target.write_text(markdown, encoding='utf-8')
        self.logger.info(f"Saved: {target}")
        return target

    def resolve_target_path(self, folder: Path, safe_name: str) -> Path:
        """Pick the .md path, adding ' (n)' when the file exists and overwrite is off."""
        target = folder / f"{safe_name}.md"
        if not target.exists():
            return target

        if self.overwrite:
            self.logger.debug(f"Overwriting existing: {target.name}")
            return target

        counter = 1
        while target.exists():
            target = folder / f"{safe_name} ({counter}).md"
            counter += 1
        return target

    def collect_pages(self, inputs: Iterable[str]) -> List[Tuple[Path, Path]]:
        """Return (xml file, relative output folder) pairs in a stable order."""
        pages = []
        for entry in inputs:
            path = Path(entry)
            if path.is_dir():
                for xml_file in sorted(path.rglob('*.xml')):
                    pages.append((xml_file, xml_file.parent.relative_to(path)))
            elif path.is_file():
                pages.append((path, Path('.')))
            else:
                self.logger.warning(f"Input not found: {entry}")
        return pages
