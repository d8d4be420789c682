"""Core export pipeline.

This module is storage-agnostic. It only relies on ports for the source,
the recipient directory and the writer, so the same flow serves any backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.config import ExportConfig
from core.mentions import Rejected, RewriteResult, insert_mentions, parse_mentions
from core.models import MessageBody
from core.ports import ExportWriter, MessageSource, RecipientDirectory

LOGGER = logging.getLogger(__name__)


@dataclass
class ExportStats:
    """Counters reported at the end of an export run."""

    messages_written: int = 0
    messages_skipped: int = 0
    mentions_written: int = 0


class MessageExporter:
    """Orchestrates mention parsing, insertion and persistence per message."""

    def __init__(
        self,
        source: MessageSource,
        directory: RecipientDirectory,
        writer: ExportWriter,
        config: ExportConfig,
    ) -> None:
        self._source = source
        self._directory = directory
        self._writer = writer
        self._config = config

    def run(self) -> ExportStats:
        """Export the directory and every message of the source."""

        stats = ExportStats()
        self._writer.write_recipients(self._directory.recipients())

        for message in self._source.iter_messages():
            result: RewriteResult
            if message.mention_error is not None:
                result = Rejected(message.mention_error)
            else:
                mentions = parse_mentions(message.mention_descriptors, self._directory)
                result = insert_mentions(
                    MessageBody(text=message.text, mentions=tuple(mentions)),
                    self._config.unresolved_label,
                )
            if isinstance(result, Rejected):
                result.error.message_id = message.id
                if self._config.on_invalid_mention == "fail":
                    raise result.error
                # Skipped messages are never written, not even without mentions.
                LOGGER.warning("Skipping message: %s", result.error)
                stats.messages_skipped += 1
                continue

            self._writer.write_message(message, result.body)
            stats.messages_written += 1
            stats.mentions_written += len(result.body.mentions)

        LOGGER.info(
            "Export complete: messages=%s, skipped=%s, mentions=%s",
            stats.messages_written,
            stats.messages_skipped,
            stats.mentions_written,
        )
        return stats
