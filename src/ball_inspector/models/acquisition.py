"""
Acquisition State Models
========================

Source selection for the acquisition controller.

The controller holds exactly one source at a time:
    LiveSource                 - next image comes from the camera
    UploadedSource(image=...)  - next image is the held upload

AcquisitionMode is derived from the active source, so "uploaded mode
without an image" cannot be represented.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ball_inspector.models.image import RawImage


class AcquisitionMode(str, Enum):
    """Which source supplies the next RawImage."""

    LIVE = "live"
    UPLOADED = "uploaded"


@dataclass(frozen=True, slots=True)
class LiveSource:
    """Camera feed is the active source."""

    @property
    def mode(self) -> AcquisitionMode:
        return AcquisitionMode.LIVE


@dataclass(frozen=True, slots=True)
class UploadedSource:
    """A decoded upload is held as the active source."""

    image: RawImage

    @property
    def mode(self) -> AcquisitionMode:
        return AcquisitionMode.UPLOADED


AcquisitionSource = Union[LiveSource, UploadedSource]
