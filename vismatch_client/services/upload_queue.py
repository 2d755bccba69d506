"""Ordered collection of per-file upload entries.

Insertion order is processing order.  Indices only shift when an entry
is removed, and only pending entries may be removed by consumers, so the
orchestrator can address in-flight entries by index for the whole run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence

from vismatch_client.exceptions import InvalidTransitionError, ValidationError
from vismatch_client.models.upload import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    UploadEntry,
    UploadStatus,
)
from vismatch_client.repositories.storage import StorageBackend

logger = logging.getLogger(__name__)

QueueListener = Callable[[tuple[UploadEntry, ...]], None]


class UploadQueue:
    """Owns :class:`UploadEntry` records and notifies listeners on change.

    Consumers read through :meth:`snapshot` (immutable entries) or by
    subscribing a listener.  Listener failures are logged but never
    propagate, so a broken observer cannot interrupt an upload run.
    """

    def __init__(self) -> None:
        self._entries: list[UploadEntry] = []
        self._listeners: list[QueueListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[UploadEntry]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> UploadEntry:
        return self._entries[index]

    def snapshot(self) -> tuple[UploadEntry, ...]:
        """Return the current entries in queue order."""
        return tuple(self._entries)

    def pending_indices(self) -> list[int]:
        """Return the indices of all ``pending`` entries, in order."""
        return [
            i
            for i, entry in enumerate(self._entries)
            if entry.status is UploadStatus.PENDING
        ]

    # ------------------------------------------------------------------
    # Consumer mutations
    # ------------------------------------------------------------------

    def add(
        self,
        files: Iterable[str],
        image_names: Sequence[str] | None = None,
    ) -> list[UploadEntry]:
        """Append one pending entry per file, in the given order.

        *image_names* overrides the stored name per file; by default the
        file's basename is used.  Names are stripped, and a blank name
        raises :class:`ValidationError` without queueing anything.
        Checking that each file is an image is the caller's job.
        """
        files = list(files)
        if image_names is not None and len(image_names) != len(files):
            raise ValueError(
                f"Got {len(image_names)} image names for {len(files)} files"
            )

        names = [
            (image_names[i] if image_names else StorageBackend.basename(file)).strip()
            for i, file in enumerate(files)
        ]
        for file, name in zip(files, names):
            if not name:
                raise ValidationError(f"Image name is required for {file}")

        added = [
            UploadEntry(file=file, image_name=name)
            for file, name in zip(files, names)
        ]
        if not added:
            return added

        self._entries.extend(added)
        logger.debug("Queued %d file(s), queue size %d", len(added), len(self))
        self._notify()
        return added

    def remove(self, index: int) -> bool:
        """Remove the entry at *index* if it is still pending.

        Out-of-range indices and entries that are uploading or resolved
        are left alone.  Returns whether an entry was removed.
        """
        if not 0 <= index < len(self._entries):
            return False
        if self._entries[index].status is not UploadStatus.PENDING:
            return False
        del self._entries[index]
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Orchestrator write path
    # ------------------------------------------------------------------

    def transition(
        self,
        index: int,
        new_status: UploadStatus,
        message: str | None = None,
    ) -> UploadEntry:
        """Move the entry at *index* to *new_status*.

        Only :class:`UploadOrchestrator` calls this.  The message is kept
        for ``success`` and ``error`` and dropped otherwise.
        """
        entry = self._entries[index]
        if new_status not in TRANSITIONS[entry.status]:
            raise InvalidTransitionError(
                f"Cannot move {entry.image_name} from {entry.status.value} "
                f"to {new_status.value}"
            )

        updated = entry.model_copy(
            update={
                "status": new_status,
                "message": message if new_status in TERMINAL_STATUSES else None,
            }
        )
        self._entries[index] = updated
        self._notify()
        return updated

    def discard(self, entry_ids: Iterable[str]) -> int:
        """Remove entries by id regardless of status; returns how many went."""
        ids = set(entry_ids)
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id not in ids]
        removed = before - len(self._entries)
        if removed:
            self._notify()
        return removed

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """Call *listener* with a snapshot after every change.

        Returns a function that unsubscribes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Upload queue listener %r raised", listener)
