"""Async client for the vismatch image similarity service."""

from vismatch_client.config import Settings, get_settings
from vismatch_client.exceptions import (
    InvalidTransitionError,
    ReadError,
    RequestFailure,
    RunInProgressError,
    ValidationError,
    VismatchError,
)
from vismatch_client.models.api import SimilarImageEntry
from vismatch_client.models.compare import CompareOutcome
from vismatch_client.models.upload import RunOutcome, UploadEntry, UploadStatus, UploadSummary
from vismatch_client.services.api_client import ApiClient
from vismatch_client.services.codec import Codec
from vismatch_client.services.compare_runner import CompareRunner
from vismatch_client.services.upload_orchestrator import UploadOrchestrator
from vismatch_client.services.upload_queue import UploadQueue

__all__ = [
    "ApiClient",
    "Codec",
    "CompareOutcome",
    "CompareRunner",
    "InvalidTransitionError",
    "ReadError",
    "RequestFailure",
    "RunInProgressError",
    "RunOutcome",
    "Settings",
    "SimilarImageEntry",
    "UploadEntry",
    "UploadOrchestrator",
    "UploadQueue",
    "UploadStatus",
    "UploadSummary",
    "ValidationError",
    "VismatchError",
    "get_settings",
]
