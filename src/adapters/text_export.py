"""Plain-text export writer.

Writes one block per message with conversation, sender and date headers,
followed by the message text with mentions already inlined.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from email.utils import format_datetime
from typing import Iterable, Optional

from core.errors import DestinationWriteError
from core.models import UNKNOWN_NAME, RawMessage, Recipient, RenderedBody
from core.ports import RecipientDirectory


def format_timestamp(millis: int, tz: Optional[tzinfo] = None) -> str:
    """Format a millisecond timestamp as an RFC 2822 date."""

    moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return format_datetime(moment.astimezone(tz))


def format_message(
    message: RawMessage,
    body: RenderedBody,
    directory: RecipientDirectory,
    tz: Optional[tzinfo] = None,
) -> str:
    """Return the text block for one exported message."""

    def name_of(identifier: Optional[str]) -> str:
        recipient = directory.lookup(identifier) if identifier else None
        return recipient.display_name if recipient else UNKNOWN_NAME

    conversation = name_of(message.conversation_id)
    outgoing = message.type == "outgoing"

    lines = [f"Conversation: {conversation}"]
    if outgoing:
        lines.append(f"To: {conversation}")
    elif message.source:
        lines.append(f"From: {name_of(message.source)}")
    if message.sent_at is not None:
        lines.append(f"Sent: {format_timestamp(message.sent_at, tz)}")
    if not outgoing and message.received_at is not None:
        lines.append(f"Received: {format_timestamp(message.received_at, tz)}")
    if body.text:
        lines.extend(["", body.text])
    lines.append("")
    return "\n".join(lines) + "\n"


class TextExportWriter:
    """Append-only text file writer that satisfies the ExportWriter contract."""

    def __init__(self, path: str, directory: RecipientDirectory, tz: Optional[tzinfo] = None) -> None:
        self._path = path
        self._directory = directory
        self._tz = tz

    def write_recipients(self, recipients: Iterable[Recipient]) -> None:
        # Names are resolved per message through the directory.
        return None

    def write_message(self, message: RawMessage, body: RenderedBody) -> None:
        block = format_message(message, body, self._directory, self._tz)
        try:
            with open(self._path, "a", encoding="utf-8") as handle:
                handle.write(block)
        except OSError as exc:
            raise DestinationWriteError(f"Cannot write {self._path}: {exc}") from exc
