"""Sequential batch upload of an :class:`UploadQueue`.

Drives every pending entry through ``pending -> uploading ->
success|error`` one file at a time, in queue order.  A failed file never
stops the files after it.  When the whole batch succeeds, the succeeded
entries are removed from the queue after a short delay so a UI can show
the success state first.
"""

from __future__ import annotations

import asyncio
import logging

from vismatch_client.exceptions import (
    ReadError,
    RequestFailure,
    RunInProgressError,
    ValidationError,
)
from vismatch_client.models.upload import (
    RunOutcome,
    UploadEntry,
    UploadStatus,
    UploadSummary,
)
from vismatch_client.services.api_client import ApiClient
from vismatch_client.services.codec import Codec
from vismatch_client.services.upload_queue import UploadQueue

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_DELAY: float = 2.0


def summarize(entries: list[UploadEntry], cleanup_scheduled: bool = False) -> UploadSummary:
    """Count the outcome of a finished run and phrase its summary message."""
    success_count = sum(1 for e in entries if e.status is UploadStatus.SUCCESS)
    error_count = sum(1 for e in entries if e.status is UploadStatus.ERROR)

    if error_count == 0:
        outcome = RunOutcome.ALL_SUCCESS
        message = f"Uploaded {success_count} images: {success_count} succeeded"
    elif success_count == 0:
        outcome = RunOutcome.ALL_FAILED
        message = f"Upload failed: all failed ({error_count} of {error_count})"
    else:
        outcome = RunOutcome.MIXED
        message = f"Upload finished: {success_count} succeeded, {error_count} failed"

    return UploadSummary(
        success_count=success_count,
        error_count=error_count,
        outcome=outcome,
        message=message,
        entries=entries,
        cleanup_scheduled=cleanup_scheduled,
    )


class UploadOrchestrator:
    """Uploads queued files one by one and reports an :class:`UploadSummary`.

    Only one :meth:`run` may be active at a time; a second call raises
    :class:`RunInProgressError`.  The post-success cleanup is an
    :mod:`asyncio` task owned by the orchestrator and is cancelled by
    :meth:`aclose`, so a discarded orchestrator never touches its queue
    again.
    """

    def __init__(
        self,
        api_client: ApiClient,
        codec: Codec,
        cleanup_delay: float = DEFAULT_CLEANUP_DELAY,
    ) -> None:
        self.api_client = api_client
        self.codec = codec
        self.cleanup_delay = cleanup_delay
        self._running = False
        # One scheduled cleanup per queue: (entry ids to remove, timer task).
        self._cleanups: dict[UploadQueue, tuple[list[str], asyncio.Task[None]]] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cleanup_pending(self) -> bool:
        return any(not task.done() for _, task in self._cleanups.values())

    async def __aenter__(self) -> UploadOrchestrator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, project_name: str, queue: UploadQueue) -> UploadSummary:
        """Upload every pending entry of *queue* into *project_name*.

        Steps:
        1. Validate input (no request is sent and no entry changes on failure).
        2. Apply any cleanup still scheduled for this queue by a previous run.
        3. Mark all pending entries ``uploading``.
        4. Encode and upload each entry in order, recording its outcome.
        5. Summarize, and schedule removal of the entries if all succeeded.
        """
        if self._running:
            raise RunInProgressError("An upload run is already in progress")

        name = project_name.strip()
        if not name:
            raise ValidationError("Project name is required")
        if len(queue) == 0:
            raise ValidationError("No files selected for upload")
        if not queue.pending_indices():
            raise ValidationError("No pending files to upload")

        self._running = True
        try:
            self._flush_cleanup(queue)

            indices = queue.pending_indices()
            logger.info(
                "Uploading %d file(s) to project %s", len(indices), name
            )
            for index in indices:
                queue.transition(index, UploadStatus.UPLOADING)

            for index in indices:
                await self._upload_one(name, queue, index)

            entries = [queue[index] for index in indices]
        finally:
            self._running = False

        all_succeeded = all(e.status is UploadStatus.SUCCESS for e in entries)
        if all_succeeded:
            self._schedule_cleanup(queue, [e.id for e in entries])

        summary = summarize(entries, cleanup_scheduled=all_succeeded)

        logger.info("Upload run for project %s: %s", name, summary.message)
        return summary

    async def _upload_one(self, project_name: str, queue: UploadQueue, index: int) -> None:
        entry = queue[index]
        try:
            data = await self.codec.encode_base64(entry.file)
            response = await self.api_client.upload_image(
                project_name, entry.image_name, data
            )
        except (ReadError, RequestFailure) as e:
            logger.warning("Upload of %s failed: %s", entry.image_name, e)
            queue.transition(index, UploadStatus.ERROR, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error uploading %s", entry.image_name)
            queue.transition(index, UploadStatus.ERROR, str(e) or type(e).__name__)
            return

        if response.success:
            logger.debug("Uploaded %s (token %s)", entry.image_name, response.token)
            queue.transition(
                index, UploadStatus.SUCCESS, response.message or "Upload succeeded"
            )
        else:
            logger.warning(
                "Server rejected %s: %s", entry.image_name, response.message
            )
            queue.transition(
                index, UploadStatus.ERROR, response.message or "Upload failed"
            )

    # ------------------------------------------------------------------
    # Delayed cleanup
    # ------------------------------------------------------------------

    def _schedule_cleanup(self, queue: UploadQueue, entry_ids: list[str]) -> None:
        task = asyncio.create_task(self._clear_after_delay(queue, entry_ids))
        self._cleanups[queue] = (entry_ids, task)

    async def _clear_after_delay(self, queue: UploadQueue, entry_ids: list[str]) -> None:
        await asyncio.sleep(self.cleanup_delay)
        removed = queue.discard(entry_ids)
        self._cleanups.pop(queue, None)
        logger.debug("Cleared %d uploaded entries from the queue", removed)

    def _flush_cleanup(self, queue: UploadQueue) -> None:
        """Apply the cleanup still scheduled for *queue* right away.

        Cleanups scheduled for other queues keep their own timers.
        """
        pending = self._cleanups.pop(queue, None)
        if pending is None:
            return
        entry_ids, task = pending
        task.cancel()
        queue.discard(entry_ids)

    async def wait_for_cleanup(self) -> None:
        """Wait until scheduled cleanups have removed the uploaded entries.

        Returns immediately if nothing is scheduled.
        """
        tasks = {task for _, task in self._cleanups.values()}
        if tasks:
            await asyncio.wait(tasks)

    def cancel_cleanup(self) -> None:
        """Drop every scheduled cleanup; the queues are left as they are."""
        for _, task in self._cleanups.values():
            task.cancel()
        self._cleanups.clear()

    async def aclose(self) -> None:
        """Cancel scheduled cleanups and wait for their tasks to finish."""
        tasks = {task for _, task in self._cleanups.values()}
        self.cancel_cleanup()
        if tasks:
            await asyncio.wait(tasks)
