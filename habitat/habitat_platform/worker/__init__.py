"""Outbox worker that delivers scheduled welcome and reservation-reminder pushes."""

from habitat.habitat_platform.worker.config import DispatchConfig
from habitat.habitat_platform.worker.dispatcher import (
    claim_ready_messages,
    process_ready_batch,
    run_dispatcher,
)

__all__ = [
    "DispatchConfig",
    "claim_ready_messages",
    "process_ready_batch",
    "run_dispatcher",
]
