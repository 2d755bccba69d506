"""Pydantic model for the outcome of a single compare request."""

from pydantic import BaseModel

from vismatch_client.models.api import SimilarImageEntry


class CompareOutcome(BaseModel):
    """What :class:`CompareRunner` reports back to its caller."""

    success: bool
    message: str
    results: list[SimilarImageEntry] = []
