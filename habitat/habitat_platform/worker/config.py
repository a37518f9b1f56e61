"""Configuration helpers for the outbox worker."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class DispatchConfig:
    """Runtime knobs for the worker loop."""

    batch_size: int
    poll_interval: float
    max_attempts: int
    backoff_seconds: float
    backoff_multiplier: float

    @classmethod
    def from_env(cls) -> "DispatchConfig":
        return cls(
            batch_size=int(os.environ.get("OUTBOX_BATCH_SIZE", "50")),
            poll_interval=float(os.environ.get("OUTBOX_POLL_INTERVAL", "1")),
            max_attempts=int(os.environ.get("OUTBOX_MAX_ATTEMPTS", "5")),
            backoff_seconds=float(os.environ.get("OUTBOX_BACKOFF_SECONDS", "5")),
            backoff_multiplier=float(os.environ.get("OUTBOX_BACKOFF_MULTIPLIER", "2")),
        )

    def backoff_for(self, attempts: int) -> float:
        """Delay before the next try after ``attempts`` failed tries."""
        return self.backoff_seconds * (self.backoff_multiplier ** max(attempts - 1, 0))
