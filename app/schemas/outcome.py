"""Terminal outcome of one orchestrator operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    LOCAL_WRITE_FAILURE = "local_write_failure"
    READ_FAILURE = "read_failure"
    # Divergence closed; the requested change may still have been rolled back.
    COMPENSATED = "compensated"
    UNRECOVERABLE = "unrecoverable"


class OperationState(str, Enum):
    """Named steps of the per-operation state machines."""

    INIT = "init"
    SNAPSHOT_TAKEN = "snapshot_taken"
    LOCAL_WRITTEN = "local_written"
    CENTRAL_WRITTEN = "central_written"
    PRESENT = "present"
    LOCAL_DELETED = "local_deleted"
    CENTRAL_DELETED = "central_deleted"
    DIVERGED = "diverged"
    RESTORING = "restoring"
    RESTORED = "restored"
    UNRECOVERABLE = "unrecoverable"
    READ = "read"


@dataclass(slots=True)
class OrchestratorOutcome:
    """Single value threaded through an operation, ending in one HTTP response."""

    status_code: int
    body: Any
    kind: OutcomeKind
    state: OperationState
    detail: dict[str, Any] = field(default_factory=dict)
