"""Pydantic models for batch upload entries and run summaries."""

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UploadStatus(str, Enum):
    """Lifecycle of one file inside an upload run."""

    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


# Allowed moves of the per-entry state machine.
TRANSITIONS: dict[UploadStatus, frozenset[UploadStatus]] = {
    UploadStatus.PENDING: frozenset({UploadStatus.UPLOADING}),
    UploadStatus.UPLOADING: frozenset({UploadStatus.SUCCESS, UploadStatus.ERROR}),
    UploadStatus.SUCCESS: frozenset(),
    UploadStatus.ERROR: frozenset(),
}

TERMINAL_STATUSES: frozenset[UploadStatus] = frozenset(
    {UploadStatus.SUCCESS, UploadStatus.ERROR}
)


class UploadEntry(BaseModel):
    """One file's upload record inside an :class:`UploadQueue`.

    Entries are immutable; the queue swaps in an updated copy on every
    status change so a snapshot handed to a consumer never changes
    underneath it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    file: str
    image_name: str
    status: UploadStatus = UploadStatus.PENDING
    message: str | None = None


class RunOutcome(str, Enum):
    """Classification of a finished upload run."""

    ALL_SUCCESS = "all_success"
    MIXED = "mixed"
    ALL_FAILED = "all_failed"


class UploadSummary(BaseModel):
    """Result of :meth:`UploadOrchestrator.run`."""

    success_count: int
    error_count: int
    outcome: RunOutcome
    message: str
    entries: list[UploadEntry]
    """Final state of every entry processed by the run, in queue order."""

    cleanup_scheduled: bool = False
    """``True`` when the succeeded entries will be removed after a delay."""

    @property
    def total(self) -> int:
        return self.success_count + self.error_count
