"""HTTP client for the vismatch image-similarity service.

Wraps the three remote operations (compare, upload, delete project)
over a single :class:`httpx.AsyncClient`.  ``success: false`` replies
are ordinary data; everything that goes wrong below that level
(non-2xx status, connection failure, timeout, malformed body) is raised
as one :class:`RequestFailure`.  Nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from vismatch_client.config import Settings
from vismatch_client.exceptions import RequestFailure
from vismatch_client.models.api import (
    ApiError,
    CompareImageRequest,
    CompareImageResponse,
    DeleteProjectResponse,
    UploadImageRequest,
    UploadImageResponse,
)

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

DEFAULT_TIMEOUT: float = 30.0


class ApiClient:
    """Async client for the vismatch REST API.

    *transport* replaces the network layer; tests pass an
    :class:`httpx.MockTransport` or an :class:`httpx.ASGITransport`
    wrapping a fake server.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ApiClient:
        """Build a client from :class:`Settings` (``api_url``, ``request_timeout``)."""
        return cls(
            settings.api_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def compare_image(
        self, project_name: str, data: str, with_image: bool
    ) -> CompareImageResponse:
        """Compare a base64 image against every image in *project_name*.

        The returned ``compare_result`` keeps the server's ordering
        (best match first).
        """
        body = CompareImageRequest(
            project_name=project_name.strip(),
            data=data,
            with_image=with_image,
        )
        return await self._request(
            "POST", "/diff", CompareImageResponse, json=body.model_dump()
        )

    async def upload_image(
        self, project_name: str, image_name: str, data: str
    ) -> UploadImageResponse:
        """Store a base64 image under *image_name* in *project_name*."""
        body = UploadImageRequest(
            project_name=project_name.strip(),
            image_name=image_name,
            data=data,
        )
        return await self._request(
            "POST", "/upload", UploadImageResponse, json=body.model_dump()
        )

    async def delete_project(self, project_name: str) -> DeleteProjectResponse:
        """Delete *project_name* and every image stored in it."""
        path = f"/project/{quote(project_name.strip(), safe='')}"
        return await self._request("DELETE", path, DeleteProjectResponse)

    # ------------------------------------------------------------------
    # Transport and error classification
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        response_model: type[ResponseT],
        json: dict[str, Any] | None = None,
    ) -> ResponseT:
        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out: %s", method, path, e)
            raise RequestFailure(
                f"Request to {path} timed out after {self.timeout:g}s"
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Cannot connect to %s: %s", self.base_url, e)
            raise RequestFailure(
                f"Unable to reach the image matching server at {self.base_url}; "
                "check that the backend service is running",
                unreachable=True,
            ) from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RequestFailure(str(e) or f"Request to {path} failed") from e

        if response.is_error:
            raise self._status_failure(response)

        try:
            result = response_model.model_validate_json(response.content)
        except PydanticValidationError as e:
            logger.warning(
                "Malformed %s response from %s: %s", response_model.__name__, path, e
            )
            raise RequestFailure(
                "Malformed response from server",
                status_code=response.status_code,
            ) from e

        logger.debug(
            "%s %s -> %d success=%s",
            method,
            path,
            response.status_code,
            getattr(result, "success", None),
        )
        return result

    @staticmethod
    def _status_failure(response: httpx.Response) -> RequestFailure:
        """Build a :class:`RequestFailure` for a non-2xx *response*.

        Prefers the ``message`` of a structured error body and falls back
        to a generic status message.
        """
        try:
            message = ApiError.model_validate_json(response.content).message
        except PydanticValidationError:
            message = f"Request failed with status code {response.status_code}"
        logger.warning(
            "%s %s returned %d: %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
            message,
        )
        return RequestFailure(message, status_code=response.status_code)
