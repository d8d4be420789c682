"""SQLite export writer.

Implements the core ExportWriter port on top of a new SQLite database.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterable, Iterator

from core.errors import DestinationWriteError
from core.models import RawMessage, Recipient, RenderedBody, Resolved


class SQLiteExportWriter:
    """Thin SQLite wrapper that satisfies the ExportWriter contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise DestinationWriteError(f"Cannot write {self._db_path}: {exc}") from exc

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - recipients: one row per conversation participant or group
        - messages: flat message bodies with mentions already inlined
        - mentions: byte ranges of each inlined "@Name" within its body
        """

        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS recipients (
                    id TEXT PRIMARY KEY,
                    type TEXT,
                    service_id TEXT,
                    display_name TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT PRIMARY KEY,
                    conversation_id TEXT,
                    type TEXT,
                    sent_at INTEGER,
                    received_at INTEGER,
                    source TEXT,
                    body TEXT
                )
                """
            )
            # start and length count UTF-8 bytes of messages.body.
            # recipient_id is NULL for mentions of unknown participants;
            # participant_id always keeps the identifier from the source.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS mentions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    message_id TEXT NOT NULL,
                    start INTEGER NOT NULL,
                    length INTEGER NOT NULL,
                    recipient_id TEXT,
                    participant_id TEXT
                )
                """
            )

    def write_recipients(self, recipients: Iterable[Recipient]) -> None:
        """Insert every recipient in a single transaction."""

        with self._transaction() as conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO recipients (id, type, service_id, display_name)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (recipient.id, recipient.kind, recipient.service_id, recipient.display_name)
                    for recipient in recipients
                ],
            )

    def write_message(self, message: RawMessage, body: RenderedBody) -> None:
        """Persist a rendered message and its mentions atomically."""

        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO messages (
                    id,
                    conversation_id,
                    type,
                    sent_at,
                    received_at,
                    source,
                    body
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.conversation_id,
                    message.type,
                    message.sent_at,
                    message.received_at,
                    message.source,
                    body.text,
                ),
            )
            rows = []
            for mention in body.mentions:
                participant = mention.participant
                recipient_id = participant.recipient.id if isinstance(participant, Resolved) else None
                rows.append((message.id, mention.start, mention.length, recipient_id, participant.identifier))
            conn.executemany(
                """
                INSERT INTO mentions (message_id, start, length, recipient_id, participant_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                rows,
            )

    def count_rows(self, table: str) -> int:
        """Return the number of rows in one of the export tables."""

        if table not in ("recipients", "messages", "mentions"):
            raise ValueError(f"Unknown export table: {table}")
        with self._transaction() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM {table}").fetchone()
        return int(row["n"])
