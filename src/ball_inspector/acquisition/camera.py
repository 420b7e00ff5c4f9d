"""
Camera Sources
==============

Frame sources for live acquisition.

Components:
    - FrameSource: Protocol for anything that yields one still frame
    - CV2Camera: OpenCV webcam capture
    - StaticFrameSource: Serves fixed bytes (tests, demos, headless hosts)

Design Rules:
    - grab() returns encoded JPEG bytes, never a raw matrix
    - Failures raise CaptureError; callers never receive None
"""

import logging
from typing import Optional, Protocol

import cv2


logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """Raised when a frame cannot be obtained from the camera."""
    pass


class FrameSource(Protocol):
    """Protocol for live frame sources."""

    def open(self) -> None:
        """Start (or resume) the live feed."""
        ...

    def grab(self) -> bytes:
        """Capture one still frame as encoded bytes."""
        ...

    def release(self) -> None:
        """Stop the live feed."""
        ...


class CV2Camera:
    """
    OpenCV webcam capture.

    Attributes:
        index: VideoCapture device index
    """

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> None:
        if self.is_open:
            return
        self._cap = cv2.VideoCapture(self.index)
        if not self._cap.isOpened():
            logger.error(f"CV2Camera: failed to open device {self.index}")
        else:
            logger.info(f"CV2Camera: opened device {self.index}")

    def grab(self) -> bytes:
        self.open()
        if not self.is_open:
            raise CaptureError(f"Camera device {self.index} is not available")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise CaptureError("Camera frame capture failed")

        ok, buf = cv2.imencode(".jpg", frame)
        if not ok:
            raise CaptureError("Failed to encode camera frame")
        return buf.tobytes()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info(f"CV2Camera: released device {self.index}")


class StaticFrameSource:
    """Serves the same encoded frame on every grab."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.is_open = False
        self.grab_count = 0

    def open(self) -> None:
        self.is_open = True

    def grab(self) -> bytes:
        if not self.is_open:
            raise CaptureError("Static source is not open")
        self.grab_count += 1
        return self.data

    def release(self) -> None:
        self.is_open = False
