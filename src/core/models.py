"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the Signal Desktop schema or the export database layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from core.errors import InvalidMention

UNKNOWN_NAME = "Unknown"

CONTACT = "private"
GROUP = "group"


@dataclass(frozen=True)
class Recipient:
    """A conversation participant as known to the recipient directory."""

    id: str
    kind: str
    service_id: Optional[str] = None
    name: Optional[str] = None
    profile_name: Optional[str] = None
    profile_full_name: Optional[str] = None
    e164: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Return the best available name, falling back to "Unknown"."""

        if self.kind == GROUP:
            candidates = (self.name,)
        else:
            candidates = (self.name, self.profile_full_name, self.profile_name, self.e164)
        for candidate in candidates:
            if candidate:
                return candidate
        return UNKNOWN_NAME


@dataclass(frozen=True)
class Resolved:
    """Participant found in the directory.

    identifier is the id the message used, which may differ in case or kind
    from the ids stored on the recipient.
    """

    recipient: Recipient
    identifier: str


@dataclass(frozen=True)
class Unresolved:
    """Participant whose identifier is not in the directory."""

    identifier: str


Participant = Union[Resolved, Unresolved]


@dataclass(frozen=True)
class MentionDescriptor:
    """Raw mention range as stored alongside a message body."""

    start: int
    length: int
    participant_id: str


@dataclass(frozen=True)
class SourceMention:
    """Mention whose start and length count code points of the original text."""

    start: int
    length: int
    participant: Participant


@dataclass(frozen=True)
class OutputMention:
    """Mention whose start and length count UTF-8 bytes of the rendered text."""

    start: int
    length: int
    participant: Participant


@dataclass(frozen=True)
class MessageBody:
    """Message text with mention ranges that still point at placeholders."""

    text: str
    mentions: Tuple[SourceMention, ...] = ()


@dataclass(frozen=True)
class RenderedBody:
    """Flat message text with mentions inlined as "@Name"."""

    text: str
    mentions: Tuple[OutputMention, ...] = ()


@dataclass(frozen=True)
class RawMessage:
    """Message row decoded from the source store, before mention handling."""

    id: str
    conversation_id: Optional[str]
    type: Optional[str]
    sent_at: Optional[int]
    received_at: Optional[int]
    source: Optional[str]
    text: str
    mention_descriptors: Tuple[MentionDescriptor, ...] = ()
    # Set when the stored mention metadata could not be decoded.
    mention_error: Optional[InvalidMention] = field(default=None, compare=False)
