"""Markdown export package for OneNote page XML exports.

This package writes converted pages to local Markdown files with a shared
assets folder for images.

Package Structure:
- page_exporter: Converts page XML files and writes .md files, mirroring the
  folder structure of the input directories

Configuration Referenced:
- export.output_directory: Base output path for exported files
- export.assets_folder: Image folder below the output directory
- export.overwrite: Replace existing files instead of writing numbered copies
- export.dry_run: List pages without writing anything
"""

from .page_exporter import PageExporter, safe_file_name

__all__ = [
    'PageExporter',
    'safe_file_name',
]
