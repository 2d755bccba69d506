"""Single-shot image comparison against a project."""

from __future__ import annotations

import logging

from vismatch_client.exceptions import ReadError, RequestFailure, ValidationError
from vismatch_client.models.api import SimilarImageEntry
from vismatch_client.models.compare import CompareOutcome
from vismatch_client.services.api_client import ApiClient
from vismatch_client.services.codec import Codec

logger = logging.getLogger(__name__)


class CompareRunner:
    """Submits one query image and keeps the latest ranked matches.

    Every run replaces :attr:`results` entirely; a failed run leaves it
    empty.  Overlapping runs are not guarded here.
    """

    def __init__(self, api_client: ApiClient, codec: Codec) -> None:
        self.api_client = api_client
        self.codec = codec
        self.results: list[SimilarImageEntry] = []

    async def run(
        self,
        project_name: str,
        file: str | None,
        with_image: bool = True,
    ) -> CompareOutcome:
        """Compare *file* against *project_name*.

        Raises :class:`ValidationError` before any request when the file
        or project name is missing.  Protocol and transport failures are
        reported in the returned :class:`CompareOutcome`.
        """
        if not file:
            raise ValidationError("Select an image to compare first")
        name = project_name.strip()
        if not name:
            raise ValidationError("Project name is required")

        try:
            data = await self.codec.encode_base64(file)
            response = await self.api_client.compare_image(name, data, with_image)
        except (ReadError, RequestFailure) as e:
            logger.warning("Compare against %s failed: %s", name, e)
            return self._fail(str(e))

        if not response.success:
            logger.info("Compare against %s rejected: %s", name, response.message)
            return self._fail(response.message or "Compare failed")

        self.results = list(response.compare_result)
        message = f"Found {len(self.results)} similar images"
        logger.info("Compare against %s: %s", name, message)
        return CompareOutcome(success=True, message=message, results=self.results)

    def _fail(self, message: str) -> CompareOutcome:
        self.results = []
        return CompareOutcome(success=False, message=message)
