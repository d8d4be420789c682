"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the source store, the recipient
directory and the export writer so that the core can be reused with
different backends.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Protocol

from core.models import RawMessage, Recipient, RenderedBody


class RecipientDirectory(Protocol):
    """Read-only identifier -> Recipient lookup, populated before export."""

    def lookup(self, identifier: str) -> Optional[Recipient]:
        ...

    def recipients(self) -> Iterable[Recipient]:
        ...


class MessageSource(Protocol):
    """Source of decoded message rows."""

    def iter_messages(self) -> Iterator[RawMessage]:
        ...


class ExportWriter(Protocol):
    """Destination operations required by the exporter."""

    def write_recipients(self, recipients: Iterable[Recipient]) -> None:
        ...

    def write_message(self, message: RawMessage, body: RenderedBody) -> None:
        ...
