#!/usr/bin/env python3
"""
OneNote to Markdown Exporter - Main CLI Entry Point

Converts OneNote page XML (as saved from the OneNote GetPageContent API)
into Markdown files, writing embedded images into a shared assets folder.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from config_loader import ConfigLoader, get_nested
from exporters import PageExporter
from logger import log_config, log_section, setup_logging

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Convert OneNote page XML files to Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert one page
  onenote-md-export page.xml -o ./export

  # Convert a folder of pages (sub-folders become sub-folders of the export)
  onenote-md-export ./Notebook_XML -o ./export

  # Preview without writing
  onenote-md-export ./Notebook_XML --dry-run -v

  # Verbose logging
  onenote-md-export ./Notebook_XML -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'inputs',
        nargs='+',
        help='Page XML files or directories containing them'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        help='Output directory for Markdown files'
    )

    parser.add_argument(
        '--assets-folder',
        type=str,
        help='Image folder name below the output directory (default: assets)'
    )

    parser.add_argument(
        '--overwrite',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Overwrite existing files instead of creating numbered copies'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='List pages that would be exported without writing anything'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only report errors'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    return parser


def load_configuration(args: argparse.Namespace) -> dict:
    """Load the config file (explicit, or config.yaml when present) and apply CLI overrides."""
    if args.config:
        config = ConfigLoader.load(args.config)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        config = ConfigLoader.load(DEFAULT_CONFIG_PATH)
    else:
        config = ConfigLoader.defaults()

    config = ConfigLoader.merge_with_args(config, args)
    ConfigLoader.validate(config)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_configuration(args)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2

    logger = setup_logging(
        verbosity=args.verbose,
        log_file=get_nested(config, 'logging.file'),
        level=get_nested(config, 'logging.level') if not args.verbose else None,
        quiet=args.quiet
    )

    log_section("OneNote to Markdown Export")
    logger.info(f"Version: {__version__}")
    log_config(config)

    try:
        exporter = PageExporter(config, logger=logger, show_progress=not args.quiet)
        result = exporter.export(args.inputs)
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130

    if result.error:
        logger.error(f"Export failed: {result.error}")
        return 1

    if not args.quiet:
        if exporter.dry_run:
            print(f"Dry run: {result.skipped_pages} page(s) would be exported.")
        else:
            print(f"Export completed. {result.exported_pages} page(s) exported, {result.failed_pages} failed.")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
