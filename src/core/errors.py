"""Error taxonomy for the export pipeline."""

from __future__ import annotations

from typing import Any, Optional


class ExportError(Exception):
    """Base class for errors that stop or affect an export run."""


class InvalidMention(ExportError):
    """A mention range is malformed, negative, out of bounds, or overlapping.

    message_id is filled in by the exporter once the owning message is known.
    """

    def __init__(self, reason: str, start: Any = None, length: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.start = start
        self.length = length
        self.message_id: Optional[str] = None

    def __str__(self) -> str:
        where = f" in message {self.message_id}" if self.message_id is not None else ""
        return f"Invalid mention{where} (start={self.start!r}, length={self.length!r}): {self.reason}"


class DirectoryUnavailable(ExportError):
    """The recipient directory cannot be read from the source store."""


class SourceUnavailable(ExportError):
    """The source message store cannot be opened, read, or decoded."""


class DestinationExists(ExportError):
    """The export destination path already exists."""


class DestinationWriteError(ExportError):
    """The export destination cannot be written."""
