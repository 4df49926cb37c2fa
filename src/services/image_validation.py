from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from src.models.errors import ImageTooLargeError, InvalidRequestError

DEFAULT_MAX_IMAGE_SIZE = 5 * 1024 * 1024
PNG_MAGIC_BYTES = b"\x89PNG"

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]+=*$")


@dataclass(frozen=True)
class ValidatedImage:
    base64_data: str
    data: bytes
    size: int


def validate_image(image: str, max_size: int = DEFAULT_MAX_IMAGE_SIZE) -> ValidatedImage:
    """Validate a base64 PNG, optionally wrapped in a ``data:`` URL."""
    if image.startswith("data:"):
        _, _, base64_data = image.partition(",")
    else:
        base64_data = image

    if not base64_data or not _BASE64_PATTERN.match(base64_data):
        raise InvalidRequestError(message="Image must be valid base64-encoded data")

    try:
        data = base64.b64decode(base64_data + "=" * (-len(base64_data) % 4))
    except (binascii.Error, ValueError) as exc:
        raise InvalidRequestError(message="Invalid base64 encoding") from exc

    if len(data) < len(PNG_MAGIC_BYTES) or not data.startswith(PNG_MAGIC_BYTES):
        raise InvalidRequestError(message="Image must be PNG format")

    if len(data) > max_size:
        raise ImageTooLargeError(
            message=(
                f"Image size ({len(data) / 1024 / 1024:.2f}MB) exceeds limit of "
                f"{max_size / 1024 / 1024:.0f}MB"
            )
        )

    return ValidatedImage(base64_data=base64_data, data=data, size=len(data))
