"""Pydantic models for the vismatch HTTP API request/response bodies."""

from pydantic import BaseModel


class SimilarImageEntry(BaseModel):
    """A single match from a compare call.

    Lower *distance* means a closer match.  *data* is the base64-encoded
    image and is only present when the request asked for image data.
    """

    image_name: str
    distance: float
    data: str | None = None


class CompareImageRequest(BaseModel):
    """Request body for ``POST /diff``."""

    project_name: str
    data: str
    with_image: bool


class CompareImageResponse(BaseModel):
    """Response body for ``POST /diff``.

    ``compare_result`` is ordered best match first by the server and is
    kept in that order.
    """

    success: bool
    message: str
    project_name: str = ""
    compare_result: list[SimilarImageEntry] = []


class UploadImageRequest(BaseModel):
    """Request body for ``POST /upload``."""

    project_name: str
    image_name: str
    data: str


class UploadImageResponse(BaseModel):
    """Response body for ``POST /upload``."""

    success: bool
    message: str
    token: str = ""  # opaque server-issued id


class DeleteProjectResponse(BaseModel):
    """Response body for ``DELETE /project/{project_name}``."""

    success: bool
    message: str


class ApiError(BaseModel):
    """Structured error body returned with non-2xx responses."""

    message: str
