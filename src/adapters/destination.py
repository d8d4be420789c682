"""Exclusive creation of export destinations."""

from __future__ import annotations

import os

from core.errors import DestinationExists, DestinationWriteError


def create_destination(path: str) -> None:
    """Create an empty file at path, failing if anything already exists.

    SQLite silently opens (and then writes into) an existing file, so the
    path is claimed exclusively before anything is written.
    """

    try:
        with open(path, "x"):
            pass
    except FileExistsError as exc:
        raise DestinationExists(f"Export destination already exists: {path}") from exc
    except OSError as exc:
        raise DestinationWriteError(f"Cannot create export destination {path}: {exc}") from exc


def remove_destination(path: str) -> None:
    """Delete a destination created by this run, if it is still there."""

    if os.path.exists(path):
        os.remove(path)
