"""
Image Preprocessor
==================

Normalizes an arbitrary-size RawImage into a bounded EncodedFrame.

Resize Policy:
    - Landscape or square (width >= height): scale by max_width / width
      when width exceeds max_width
    - Portrait: scale by max_height / height when height exceeds max_height
    - If the other axis still overflows its maximum, scale by that axis
      instead, so neither dimension ever exceeds its bound
    - Images already within bounds keep their dimensions
    - Aspect ratio is preserved to within integer rounding

Encoding:
    Always re-encoded as JPEG. Quality is the encoder default unless a
    quality is configured.
"""

import base64
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ball_inspector.imaging.decoder import DecodeError, decode_to_bgr
from ball_inspector.models.image import EncodedFrame, RawImage


logger = logging.getLogger(__name__)


def compute_target_size(
    width: int,
    height: int,
    max_width: int = 800,
    max_height: int = 600,
) -> Tuple[int, int]:
    """
    Compute bounded dimensions that preserve the aspect ratio.

    Args:
        width: Source width in pixels (> 0)
        height: Source height in pixels (> 0)
        max_width: Maximum output width
        max_height: Maximum output height

    Returns:
        Tuple of (width, height)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    scale = 1.0
    if width >= height:
        if width > max_width:
            scale = max_width / width
    else:
        if height > max_height:
            scale = max_height / height

    # Near-square frames can still overflow the other bound
    if height * scale > max_height:
        scale = max_height / height
    if width * scale > max_width:
        scale = max_width / width

    if scale == 1.0:
        return width, height

    target_width = max(1, min(max_width, round(width * scale)))
    target_height = max(1, min(max_height, round(height * scale)))
    return target_width, target_height


def encode_jpeg(bgr: np.ndarray, quality: Optional[int] = None) -> bytes:
    """Encode a BGR array as JPEG bytes."""
    params = [cv2.IMWRITE_JPEG_QUALITY, quality] if quality is not None else []
    ok, buf = cv2.imencode(".jpg", bgr, params)
    if not ok:
        raise DecodeError("cv2.imencode failed to produce a JPEG")
    return buf.tobytes()


class ImagePreprocessor:
    """
    Resizes and re-encodes images for the inference request.

    Attributes:
        max_width: Maximum output width
        max_height: Maximum output height
        jpeg_quality: JPEG quality, or None for the encoder default
    """

    def __init__(
        self,
        max_width: int = 800,
        max_height: int = 600,
        jpeg_quality: Optional[int] = None,
    ) -> None:
        self.max_width = max_width
        self.max_height = max_height
        self.jpeg_quality = jpeg_quality

        logger.info(
            f"ImagePreprocessor initialized: bounds={max_width}x{max_height}, "
            f"quality={jpeg_quality or 'default'}"
        )

    def target_size(self, width: int, height: int) -> Tuple[int, int]:
        return compute_target_size(width, height, self.max_width, self.max_height)

    def preprocess(self, raw: RawImage) -> EncodedFrame:
        """
        Produce a bounded JPEG frame from a RawImage.

        Args:
            raw: Captured or uploaded image

        Returns:
            EncodedFrame within the configured bounds

        Raises:
            DecodeError: If the source bytes cannot be decoded
        """
        bgr = decode_to_bgr(raw.data)
        height, width = bgr.shape[:2]
        target_width, target_height = self.target_size(width, height)

        if (target_width, target_height) != (width, height):
            bgr = cv2.resize(
                bgr,
                (target_width, target_height),
                interpolation=cv2.INTER_AREA,
            )
            logger.debug(
                f"Resized {width}x{height} -> {target_width}x{target_height}"
            )

        jpeg_bytes = encode_jpeg(bgr, self.jpeg_quality)

        return EncodedFrame(
            image_b64=base64.b64encode(jpeg_bytes).decode("ascii"),
            width=target_width,
            height=target_height,
            mime_type="image/jpeg",
        )
