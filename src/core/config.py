"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.models import UNKNOWN_NAME

INVALID_MENTION_POLICIES = ("fail", "skip")


@dataclass(frozen=True)
class ExportConfig:
    """Export settings for the core pipeline.

    - on_invalid_mention: "fail" stops the run, "skip" drops the message
    - unresolved_label: name rendered for mentions of unknown participants
    """

    on_invalid_mention: str = "fail"
    unresolved_label: str = UNKNOWN_NAME

    def __post_init__(self) -> None:
        if self.on_invalid_mention not in INVALID_MENTION_POLICIES:
            raise ValueError(f"Unsupported invalid mention policy: {self.on_invalid_mention}")
