"""
Acquisition Module
==================

Image source selection and analysis control.

Components:
    - FrameSource: Protocol for live frame sources
    - CV2Camera: OpenCV webcam source
    - StaticFrameSource: Fixed-image source
    - AcquisitionController: live/uploaded state machine
"""

from ball_inspector.acquisition.camera import (
    CaptureError,
    CV2Camera,
    FrameSource,
    StaticFrameSource,
)
from ball_inspector.acquisition.controller import (
    GENERIC_FAILURE_MESSAGE,
    AcquisitionController,
    InvalidModeError,
)

__all__ = [
    "CaptureError",
    "CV2Camera",
    "FrameSource",
    "StaticFrameSource",
    "GENERIC_FAILURE_MESSAGE",
    "AcquisitionController",
    "InvalidModeError",
]
