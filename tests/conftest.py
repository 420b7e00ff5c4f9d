"""
Test Configuration
==================

Pytest fixtures and test doubles for the ball inspector.
"""

import asyncio
import base64
from typing import List, Optional

import cv2
import numpy as np
import pytest

from ball_inspector.inference.client import ServiceError
from ball_inspector.models.image import EncodedFrame


def make_jpeg(width: int, height: int) -> bytes:
    """Encode a synthetic BGR gradient as JPEG."""
    x = np.linspace(0, 255, width, dtype=np.uint8)
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = x
    image[:, :, 2] = 255 - x
    cv2.circle(image, (width // 2, height // 2), max(1, min(width, height) // 3), (0, 200, 0), -1)
    ok, buf = cv2.imencode(".jpg", image)
    assert ok
    return buf.tobytes()


def to_data_url(data: bytes, mime_type: str = "image/jpeg") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class FakeInferenceClient:
    """Returns a canned reply (or raises) and records every frame."""

    def __init__(self, reply: str = "STATUS: PASS\nREASON: Looks fine.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.frames: List[EncodedFrame] = []

    @property
    def call_count(self) -> int:
        return len(self.frames)

    async def analyze(self, frame: EncodedFrame) -> str:
        self.frames.append(frame)
        if self.error is not None:
            raise self.error
        return self.reply


class GatedInferenceClient(FakeInferenceClient):
    """Blocks each call until `release` is set. Create inside a running loop."""

    def __init__(self, reply: str = "STATUS: FAIL\nREASON: Visible crack.") -> None:
        super().__init__(reply=reply)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def analyze(self, frame: EncodedFrame) -> str:
        self.frames.append(frame)
        self.started.set()
        await self.release.wait()
        return self.reply


@pytest.fixture
def landscape_jpeg() -> bytes:
    return make_jpeg(1600, 1200)


@pytest.fixture
def small_jpeg() -> bytes:
    return make_jpeg(320, 240)


@pytest.fixture
def fake_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def failing_client() -> FakeInferenceClient:
    return FakeInferenceClient(error=ServiceError("upstream unavailable", status_code=503))
