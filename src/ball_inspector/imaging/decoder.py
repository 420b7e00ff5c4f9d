"""
Image Decoder
=============

Dedicated module for turning uploaded or captured bytes into RawImage
and OpenCV matrices.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Validates shape and dtype
    - Fails fast on corrupt input with DecodeError
    - Data URLs (data:<mime>;base64,<payload>) are parsed here
"""

import base64
import binascii
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ball_inspector.models.image import RawImage


logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when input bytes cannot be decoded as an image."""
    pass


_MAGIC_MIME_TYPES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF8", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_mime_type(data: bytes) -> str:
    """Guess the mime type from leading magic bytes."""
    for magic, mime_type in _MAGIC_MIME_TYPES:
        if data.startswith(magic):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def decode_to_bgr(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes to a BGR numpy array.

    Args:
        data: Encoded image bytes

    Returns:
        BGR image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        DecodeError: If decoding fails or the image is invalid
    """
    if not data:
        raise DecodeError("Image data is empty")

    nparr = np.frombuffer(data, np.uint8)
    try:
        bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"cv2.imdecode failed: {e}") from e

    if bgr is None:
        raise DecodeError("Failed to decode image: cv2.imdecode returned None")

    if len(bgr.shape) != 3 or bgr.shape[2] != 3:
        raise DecodeError(f"Invalid image shape: {bgr.shape}")

    if bgr.dtype != np.uint8:
        raise DecodeError(f"Invalid dtype: {bgr.dtype}")

    return bgr


def decode_image(data: bytes, mime_type: Optional[str] = None) -> RawImage:
    """
    Validate encoded bytes and wrap them as a RawImage.

    Args:
        data: Encoded image bytes
        mime_type: Declared mime type (sniffed from the bytes if omitted)

    Returns:
        RawImage carrying the original bytes and intrinsic dimensions

    Raises:
        DecodeError: If the bytes are not a decodable image
    """
    bgr = decode_to_bgr(data)
    height, width = bgr.shape[:2]
    return RawImage(
        data=data,
        width=width,
        height=height,
        mime_type=mime_type or sniff_mime_type(data),
    )


def split_data_url(data_url: str) -> Tuple[str, str]:
    """
    Split a data URL into (mime_type, base64 payload).

    Raises:
        DecodeError: If the string is not a base64 data URL
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not payload:
        raise DecodeError("Invalid image format: expected data:<mime>;base64,<payload>")

    mime_type = "image/jpeg"
    if header.startswith("data:"):
        declared = header[len("data:"):].split(";")[0].strip()
        if declared:
            mime_type = declared

    return mime_type, payload.strip()


def decode_data_url(data_url: str) -> RawImage:
    """
    Decode a `data:<mime>;base64,<payload>` string into a RawImage.

    Raises:
        DecodeError: If the URL, the base64 payload, or the image is invalid
    """
    mime_type, payload = split_data_url(data_url)

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Base64 decode failed: {e}") from e

    return decode_image(data, mime_type=mime_type)
