"""Signal Desktop source adapter.

Reads a decrypted copy of the Signal Desktop database and maps its rows to
core models. Nothing here knows about mention insertion or the export
database.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from typing import Iterable, Iterator, Optional

from core.errors import DirectoryUnavailable, InvalidMention, SourceUnavailable
from core.models import MentionDescriptor, RawMessage, Recipient

LOGGER = logging.getLogger(__name__)

DB_RELATIVE_PATH = os.path.join("sql", "db.sqlite")

# Older releases key mentions by "mentionUuid", newer ones by "mentionAci".
MENTION_ID_FIELDS = ("mentionAci", "mentionUuid")

# Optional conversation columns, depending on the Signal Desktop release.
_OPTIONAL_CONVERSATION_COLUMNS = ("serviceId", "uuid", "e164", "profileName", "profileFullName")


def database_path(signal_dir: str) -> str:
    """Return the database path inside a Signal Desktop directory."""

    return os.path.join(signal_dir, DB_RELATIVE_PATH)


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return {row["name"] for row in rows}


def _recipient_from_row(row: sqlite3.Row) -> Recipient:
    keys = row.keys()

    def column(name: str) -> Optional[str]:
        return row[name] if name in keys else None

    return Recipient(
        id=row["id"],
        kind=row["type"],
        service_id=column("serviceId") or column("uuid"),
        name=row["name"],
        profile_name=column("profileName"),
        profile_full_name=column("profileFullName"),
        e164=column("e164"),
    )


class SQLiteRecipientDirectory:
    """In-memory recipient directory loaded once from the conversations table.

    Recipients are indexed by service id and by conversation id. The index
    is never modified after loading, so it can be shared freely.
    """

    def __init__(self, recipients: Iterable[Recipient]) -> None:
        self._recipients = list(recipients)
        self._index: dict[str, Recipient] = {}
        for recipient in self._recipients:
            self._index[recipient.id] = recipient
            if recipient.service_id:
                self._index[recipient.service_id] = recipient
                # Service ids are case-insensitive UUIDs; store both forms.
                self._index[recipient.service_id.lower()] = recipient

    @classmethod
    def load(cls, db_path: str) -> "SQLiteRecipientDirectory":
        """Read every conversation row, failing fast if the table is unusable."""

        if not os.path.isfile(db_path):
            raise DirectoryUnavailable(f"Signal database not found: {db_path}")

        try:
            with _connect(db_path) as conn:
                available = _table_columns(conn, "conversations")
                if not {"id", "type", "name"} <= available:
                    raise DirectoryUnavailable(f"No usable conversations table in {db_path}")
                columns = ["id", "type", "name"]
                columns.extend(c for c in _OPTIONAL_CONVERSATION_COLUMNS if c in available)
                rows = conn.execute(f"SELECT {', '.join(columns)} FROM conversations").fetchall()
        except sqlite3.Error as exc:
            raise DirectoryUnavailable(f"Cannot read recipients from {db_path}: {exc}") from exc

        directory = cls(_recipient_from_row(row) for row in rows)
        LOGGER.info("Loaded %s recipients", len(directory._recipients))
        return directory

    def lookup(self, identifier: str) -> Optional[Recipient]:
        if not isinstance(identifier, str):
            return None
        recipient = self._index.get(identifier)
        if recipient is None:
            recipient = self._index.get(identifier.lower())
        return recipient

    def recipients(self) -> list[Recipient]:
        return list(self._recipients)


def _range_int(body_range: dict, key: str) -> int:
    value = body_range.get(key, 0)
    # bool is an int subclass but never a valid offset.
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidMention(
            f"{key} is not an integer",
            body_range.get("start"),
            body_range.get("length"),
        )
    return value


def mention_descriptors_from_json(data: dict) -> tuple[MentionDescriptor, ...]:
    """Extract mention ranges from a message JSON object.

    Body ranges without a mention id are text styles and are ignored.
    Malformed mention ranges raise InvalidMention.
    """

    body_ranges = data.get("bodyRanges") or []
    if not isinstance(body_ranges, list):
        raise InvalidMention("bodyRanges is not a list")

    descriptors = []
    for body_range in body_ranges:
        if not isinstance(body_range, dict):
            raise InvalidMention("body range is not an object")
        participant_id = None
        for field in MENTION_ID_FIELDS:
            if body_range.get(field):
                participant_id = body_range[field]
                break
        if participant_id is None:
            continue
        if not isinstance(participant_id, str):
            raise InvalidMention(
                "mention id is not a string",
                body_range.get("start"),
                body_range.get("length"),
            )
        descriptors.append(
            MentionDescriptor(
                start=_range_int(body_range, "start"),
                length=_range_int(body_range, "length"),
                participant_id=participant_id,
            )
        )
    return tuple(descriptors)


def message_from_row(row: sqlite3.Row) -> RawMessage:
    """Build a RawMessage from a messages row and its JSON payload.

    Undecodable JSON is a source error; malformed mention metadata is kept on
    the message so the exporter can apply its invalid-mention policy.
    """

    try:
        data = json.loads(row["json"]) if row["json"] else {}
    except ValueError as exc:
        raise SourceUnavailable(f"Cannot decode message {row['id']}: {exc}") from exc
    if not isinstance(data, dict):
        raise SourceUnavailable(f"Cannot decode message {row['id']}: not a JSON object")

    try:
        descriptors = mention_descriptors_from_json(data)
        mention_error = None
    except InvalidMention as exc:
        descriptors = ()
        mention_error = exc

    text = data.get("body") or ""
    if not isinstance(text, str):
        raise SourceUnavailable(f"Cannot decode message {row['id']}: body is not a string")

    source = data.get("sourceServiceId") or data.get("sourceUuid") or data.get("source")
    return RawMessage(
        id=row["id"],
        conversation_id=row["conversationId"],
        type=row["type"],
        sent_at=row["sent_at"],
        received_at=row["received_at"],
        source=source,
        text=text,
        mention_descriptors=descriptors,
        mention_error=mention_error,
    )


class SignalDesktopSource:
    """Message source reading the messages table in received order."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def iter_messages(self) -> Iterator[RawMessage]:
        if not os.path.isfile(self._db_path):
            raise SourceUnavailable(f"Signal database not found: {self._db_path}")

        try:
            with _connect(self._db_path) as conn:
                cursor = conn.execute(
                    """
                    SELECT id, conversationId, type, sent_at, received_at, json
                    FROM messages
                    ORDER BY received_at, sent_at
                    """
                )
                for row in cursor:
                    yield message_from_row(row)
        except sqlite3.Error as exc:
            raise SourceUnavailable(f"Cannot read messages from {self._db_path}: {exc}") from exc
