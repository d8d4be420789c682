"""Mention parsing and insertion (core domain).

Mention ranges arrive as code-point offsets into a text that holds a
placeholder character where each mention goes. Insertion splices the
"@Name" literal into the text and re-expresses every range as UTF-8 byte
offsets into the new text, since the export database indexes encoded bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Union

from core.errors import InvalidMention
from core.models import (
    UNKNOWN_NAME,
    MentionDescriptor,
    MessageBody,
    OutputMention,
    Participant,
    RenderedBody,
    Resolved,
    SourceMention,
    Unresolved,
)
from core.ports import RecipientDirectory

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rewritten:
    """Successful insertion result."""

    body: RenderedBody


@dataclass(frozen=True)
class Rejected:
    """Failed insertion result; the input body is left untouched."""

    error: InvalidMention


RewriteResult = Union[Rewritten, Rejected]


def parse_mentions(
    descriptors: Iterable[MentionDescriptor],
    directory: RecipientDirectory,
) -> List[SourceMention]:
    """Bind raw mention descriptors to directory participants.

    An unknown identifier does not stop parsing; the mention is kept as
    Unresolved and a warning is logged.
    """

    mentions: List[SourceMention] = []
    for descriptor in descriptors:
        recipient = directory.lookup(descriptor.participant_id)
        participant: Participant
        if recipient is None:
            LOGGER.warning("Cannot find mention recipient for %r", descriptor.participant_id)
            participant = Unresolved(descriptor.participant_id)
        else:
            participant = Resolved(recipient, descriptor.participant_id)
        mentions.append(
            SourceMention(
                start=descriptor.start,
                length=descriptor.length,
                participant=participant,
            )
        )
    return mentions


def mention_name(participant: Participant, unresolved_label: str = UNKNOWN_NAME) -> str:
    """Return the name rendered after "@" for a participant."""

    if isinstance(participant, Resolved):
        return participant.recipient.display_name
    if isinstance(participant, Unresolved):
        return unresolved_label
    raise TypeError(f"Unsupported participant: {participant!r}")


def _utf8_len(value: str) -> int:
    return len(value.encode("utf-8"))


def insert_mentions(body: MessageBody, unresolved_label: str = UNKNOWN_NAME) -> RewriteResult:
    """Inline mentions into the text and convert their ranges to byte offsets.

    Mentions are processed in (start, length) order with a cursor over the
    original text. A mention starting before the cursor overlaps the previous
    one and rejects the whole body.
    """

    if not body.mentions:
        return Rewritten(RenderedBody(text=body.text))

    text = body.text
    text_len = len(text)
    parts: List[str] = []
    out_len = 0
    off = 0
    rendered: List[OutputMention] = []

    for mention in sorted(body.mentions, key=lambda m: (m.start, m.length)):
        start, length = mention.start, mention.length
        if start < 0 or length < 0:
            return Rejected(InvalidMention("negative start or length", start, length))
        if start < off:
            return Rejected(InvalidMention("overlaps a preceding mention", start, length))
        if start + length > text_len:
            return Rejected(InvalidMention(f"exceeds text length {text_len}", start, length))

        preceding = text[off:start]
        parts.append(preceding)
        out_len += _utf8_len(preceding)

        replacement = "@" + mention_name(mention.participant, unresolved_label)
        replacement_len = _utf8_len(replacement)
        rendered.append(
            OutputMention(
                start=out_len,
                length=replacement_len,
                participant=mention.participant,
            )
        )
        parts.append(replacement)
        out_len += replacement_len
        off = start + length

    parts.append(text[off:])
    return Rewritten(RenderedBody(text="".join(parts), mentions=tuple(rendered)))


def rewrite_message(body: MessageBody, unresolved_label: str = UNKNOWN_NAME) -> RenderedBody:
    """Like insert_mentions, but raise InvalidMention on rejection."""

    result = insert_mentions(body, unresolved_label)
    if isinstance(result, Rejected):
        raise result.error
    return result.body
