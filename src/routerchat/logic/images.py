"""Image extraction and data-URL decoding for LLM responses."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Mapping
from typing import cast

from routerchat.core.config import DEFAULT_IMAGE_EXTENSION
from routerchat.core.models import DecodedImage

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:([^;]+);base64,([A-Za-z0-9+/=]+)$")

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def extension_for_mime(mime_type: str | None) -> str:
    """Map an image mime type to a file extension, defaulting to png."""
    if not mime_type:
        return DEFAULT_IMAGE_EXTENSION
    normalized = mime_type.split(";", maxsplit=1)[0].strip().lower()
    return MIME_EXTENSIONS.get(normalized, DEFAULT_IMAGE_EXTENSION)


def parse_data_url(value: object) -> DecodedImage | None:
    """Decode a ``data:<mime>;base64,<payload>`` string.

    Returns:
        The decoded image, or None when the value is not a base64 data URL
        or its payload cannot be decoded.

    """
    if not isinstance(value, str):
        return None
    match = DATA_URL_PATTERN.match(value)
    if not match:
        return None

    mime_type, payload = match.group(1), match.group(2)
    # Providers occasionally drop trailing padding
    padded = payload + "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(padded, validate=True)
    except (ValueError, binascii.Error):
        logger.debug("Discarding data URL with undecodable payload (%s)", mime_type)
        return None
    return DecodedImage(mime=mime_type, data=data)


def extension_for_data_url(value: object) -> str:
    """Return the file extension for a data URL without decoding its payload."""
    if isinstance(value, str) and (match := DATA_URL_PATTERN.match(value)):
        return extension_for_mime(match.group(1))
    return DEFAULT_IMAGE_EXTENSION


def _image_url_value(image: object) -> object:
    if not isinstance(image, Mapping):
        return None
    image_url = cast("Mapping[str, object]", image).get("image_url")
    if not isinstance(image_url, Mapping):
        return None
    return cast("Mapping[str, object]", image_url).get("url")


def extract_response_images(message: object) -> list[str]:
    """Collect ``images[*].image_url.url`` strings from a response message."""
    if not isinstance(message, Mapping):
        return []
    images = cast("Mapping[str, object]", message).get("images")
    if not isinstance(images, (list, tuple)):
        return []
    return [url for image in images if isinstance(url := _image_url_value(image), str)]
