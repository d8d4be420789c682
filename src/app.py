"""Application entry point for the sigexport command."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.signal_desktop import SQLiteRecipientDirectory, SignalDesktopSource, database_path
from adapters.destination import create_destination, remove_destination
from adapters.sqlite_export import SQLiteExportWriter
from adapters.text_export import TextExportWriter
from core.config import ExportConfig
from core.errors import ExportError
from core.exporter import MessageExporter
from core.ports import ExportWriter

NAME = "SIGEXPORT"
FONT = "tarty-1"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2

EXPORT_FORMATS = ("sqlite", "text")


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/sigexport.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_writer(fmt: str, dest: str, directory: SQLiteRecipientDirectory) -> ExportWriter:
    if fmt == "sqlite":
        writer = SQLiteExportWriter(dest)
        writer.init_db()
        return writer
    if fmt == "text":
        return TextExportWriter(dest, directory)
    raise ValueError(f"Unsupported export format: {fmt}")


def export_database(signal_dir: str, dest: str, config: ExportConfig, fmt: str = "sqlite") -> int:
    """Export the Signal Desktop store in signal_dir to a new file at dest.

    The recipient directory is loaded before the destination is created, so
    an unreadable source never leaves an empty export file behind. Once
    created, the destination is removed again unless the export completes.
    """

    logger = logging.getLogger(__name__)
    source_path = database_path(signal_dir)

    try:
        directory = SQLiteRecipientDirectory.load(source_path)
        create_destination(dest)
    except ExportError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR

    completed = False
    try:
        exporter = MessageExporter(
            source=SignalDesktopSource(source_path),
            directory=directory,
            writer=_build_writer(fmt, dest, directory),
            config=config,
        )
        stats = exporter.run()
        completed = True
    except ExportError as exc:
        logger.error("Export failed: %s", exc)
        return EXIT_ERROR
    finally:
        if not completed:
            remove_destination(dest)

    logger.info("Wrote %s messages to %s", stats.messages_written, dest)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sigexport",
        description="Export Signal Desktop messages to a new SQLite database or text file.",
    )
    parser.add_argument("file", help="Export file to create (must not exist)")
    parser.add_argument("-d", "--signal-dir", help="Signal Desktop directory")
    parser.add_argument("-c", "--config", help="Path to config.json")
    parser.add_argument("-f", "--format", choices=EXPORT_FORMATS, default="sqlite", help="Export format")
    parser.add_argument("--no-banner", action="store_true", help="Do not print the banner")

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_USAGE if exc.code else EXIT_OK

    logger = logging.getLogger(__name__)

    if args.config:
        try:
            settings.load(args.config, required=True)
        except (OSError, ValueError) as exc:
            logger.error("Cannot load config: %s", exc)
            return EXIT_USAGE

    if not args.no_banner:
        _print_banner()
    _configure_logging()

    try:
        config = ExportConfig(
            on_invalid_mention=settings.ON_INVALID_MENTION,
            unresolved_label=settings.UNRESOLVED_LABEL,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_USAGE

    signal_dir = args.signal_dir or settings.SIGNAL_DIR
    logger.info("Exporting %s to %s", signal_dir, args.file)
    return export_database(signal_dir, args.file, config, args.format)


if __name__ == "__main__":
    raise SystemExit(main())
