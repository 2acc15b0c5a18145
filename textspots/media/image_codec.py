"""
Image codec for spot snapshots.

Live image spots hold a decoded ``PIL.Image.Image``; snapshots must stay
serializable, so the image travels as a PNG ``data:`` URL and is decoded again
when the snapshot is restored onto a new spot.
"""

import base64
import binascii
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..exceptions import MediaError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def encode_image(image: Image.Image, image_format: str = "PNG") -> str:
    """
    Serialize an image to a ``data:`` URL.

    Args:
        image: Decoded image
        image_format: Pillow format name used for encoding

    Returns:
        ``data:image/<format>;base64,...`` string
    """
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=image_format)
    except (OSError, ValueError, KeyError) as exc:
        raise MediaError(f"Could not encode image as {image_format}", str(exc)) from exc
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/{image_format.lower()}{_BASE64_MARKER}{payload}"


def decode_image(data_url: Optional[str]) -> Image.Image:
    """
    Decode a ``data:`` URL produced by ``encode_image`` (or any base64 image URL).

    Args:
        data_url: The URL to decode

    Returns:
        Fully loaded image

    Raises:
        MediaError: If the URL is missing, malformed or not a decodable image
    """
    if not data_url or not isinstance(data_url, str):
        raise MediaError("No image data URL to decode")
    if not data_url.startswith(DATA_URL_PREFIX) or _BASE64_MARKER not in data_url:
        raise MediaError("Not a base64 data URL", data_url[:40])

    encoded = data_url.split(_BASE64_MARKER, 1)[1]
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MediaError("Invalid base64 payload in image data URL", str(exc)) from exc

    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except Image.DecompressionBombError as exc:
        raise MediaError("Image is too large to decode", str(exc)) from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise MediaError("Image data could not be decoded", str(exc)) from exc

    logger.debug("Decoded %s image %dx%d", image.format, image.width, image.height)
    return image
