"""File encoding for the vismatch wire format.

Turns a file handle into the base64 payload the service expects, or into
a ``data:`` URL for local previews.  Nothing is cached: every call reads
the file again through :class:`StorageBackend`.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from io import BytesIO

from PIL import Image

from vismatch_client.exceptions import ReadError, ValidationError
from vismatch_client.repositories.storage import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE: str = "application/octet-stream"


def _identify_image(data: bytes) -> str | None:
    """Return the Pillow format name of *data*, or ``None`` if not an image."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.format
    except (OSError, Image.DecompressionBombError):
        return None


def guess_mime_type(data: bytes, name: str = "") -> str:
    """Best-effort mime type for *data*.

    Sniffs the image format from the bytes first, then falls back to the
    extension of *name*, then to ``application/octet-stream``.
    """
    image_format = _identify_image(data)
    if image_format and image_format in Image.MIME:
        return Image.MIME[image_format]
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_MIME_TYPE


class Codec:
    """Read files and encode them as base64 or data URLs."""

    def __init__(self, storage: StorageBackend | None = None) -> None:
        self.storage = storage or StorageBackend()

    async def _read(self, file: str) -> bytes:
        # fsspec reads block, so keep them off the event loop.
        try:
            return await asyncio.to_thread(self.storage.read_bytes, file)
        except (OSError, ValueError, ImportError) as e:
            # ValueError/ImportError: unknown protocol or missing fsspec backend
            logger.warning("Failed to read %s: %s", file, e)
            raise ReadError(file, str(e)) from e

    async def encode_base64(self, file: str) -> str:
        """Return the contents of *file* as bare base64 text (no data-URL prefix)."""
        data = await self._read(file)
        return base64.b64encode(data).decode("ascii")

    async def encode_data_url(self, file: str) -> str:
        """Return ``data:<mime>;base64,<payload>`` for previewing *file*."""
        data = await self._read(file)
        mime_type = guess_mime_type(data, self.storage.basename(file))
        payload = base64.b64encode(data).decode("ascii")
        return f"data:{mime_type};base64,{payload}"

    async def validate_image(self, file: str) -> str:
        """Ensure *file* is an image Pillow can identify.

        Returns the detected mime type.  Raises :class:`ValidationError`
        for anything else, and :class:`ReadError` if the file cannot be
        read at all.
        """
        data = await self._read(file)
        image_format = _identify_image(data)
        if image_format is None:
            raise ValidationError(
                f"{self.storage.basename(file)} is not an image file"
            )
        return Image.MIME.get(image_format, f"image/{image_format.lower()}")
