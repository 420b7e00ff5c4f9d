"""
Image Data Models
=================

Internal image representations for the analysis pipeline.

    RawImage      - encoded still image as captured or uploaded
    EncodedFrame  - bounded, re-encoded JPEG ready for transmission

Design Rules:
    - Both types are immutable (frozen)
    - RawImage is transient: it exists only until preprocessed
    - EncodedFrame is owned by the request path and discarded after
      the inference call completes
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawImage:
    """
    Encoded still-image bytes plus intrinsic dimensions.

    Attributes:
        data: Encoded image bytes (JPEG, PNG, ...)
        width: Intrinsic width in pixels
        height: Intrinsic height in pixels
        mime_type: Declared mime type of `data`, if known
    """

    data: bytes
    width: int
    height: int
    mime_type: str = "application/octet-stream"

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image bytes."""
        return (
            f"RawImage(width={self.width}, height={self.height}, "
            f"bytes={len(self.data)}, mime_type={self.mime_type!r})"
        )


@dataclass(frozen=True, slots=True)
class EncodedFrame:
    """
    Resized, re-encoded still frame.

    Attributes:
        image_b64: Base64-encoded image payload (no data URL prefix)
        width: Encoded width in pixels
        height: Encoded height in pixels
        mime_type: Mime type of the encoded payload
    """

    image_b64: str
    width: int
    height: int
    mime_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        """Payload as an inline `data:` URL."""
        return f"data:{self.mime_type};base64,{self.image_b64}"

    def __repr__(self) -> str:
        return (
            f"EncodedFrame(width={self.width}, height={self.height}, "
            f"mime_type={self.mime_type!r})"
        )
