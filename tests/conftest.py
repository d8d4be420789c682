from __future__ import annotations

import json
import os
import sqlite3
from pathlib import Path

import pytest

CONVERSATIONS = [
    # id, type, name, profileName, profileFullName, serviceId, e164
    ("conv-bob", "private", "Bob", None, None, "AAAA-BOB", "+3100000001"),
    ("conv-carol", "private", None, "Carol", "Carol C", "aaaa-carol", None),
    ("conv-group", "group", "Climbing", None, None, None, None),
]

MESSAGES = [
    {
        "id": "msg-1",
        "conversationId": "conv-group",
        "type": "incoming",
        "sent_at": 100,
        "received_at": 101,
        "json": {
            "body": "Hi \ufffc and \ufffc!",
            "sourceServiceId": "aaaa-carol",
            "bodyRanges": [
                {"start": 9, "length": 1, "mentionAci": "aaaa-carol"},
                {"start": 3, "length": 1, "mentionUuid": "aaaa-bob"},
                {"start": 0, "length": 2, "style": 1},
            ],
        },
    },
    {
        "id": "msg-2",
        "conversationId": "conv-bob",
        "type": "outgoing",
        "sent_at": 200,
        "received_at": 201,
        "json": {"body": "héllo \ufffc", "bodyRanges": [{"start": 6, "length": 1, "mentionAci": "gone"}]},
    },
    {
        "id": "msg-3",
        "conversationId": "conv-bob",
        "type": "incoming",
        "sent_at": 300,
        "received_at": 301,
        "json": {"sourceUuid": "AAAA-BOB", "attachments": []},
    },
]


def build_signal_db(db_path: Path, messages: list[dict] = MESSAGES) -> None:
    os.makedirs(db_path.parent, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(
            """
            CREATE TABLE conversations (
                id TEXT PRIMARY KEY,
                type TEXT,
                name TEXT,
                profileName TEXT,
                profileFullName TEXT,
                serviceId TEXT,
                e164 TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE messages (
                id TEXT PRIMARY KEY,
                conversationId TEXT,
                type TEXT,
                sent_at INTEGER,
                received_at INTEGER,
                json TEXT
            )
            """
        )
        conn.executemany("INSERT INTO conversations VALUES (?, ?, ?, ?, ?, ?, ?)", CONVERSATIONS)
        conn.executemany(
            "INSERT INTO messages VALUES (?, ?, ?, ?, ?, ?)",
            [
                (
                    m["id"],
                    m["conversationId"],
                    m["type"],
                    m["sent_at"],
                    m["received_at"],
                    json.dumps(m["json"]),
                )
                for m in messages
            ],
        )
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def signal_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "Signal"
    build_signal_db(directory / "sql" / "db.sqlite")
    return directory
