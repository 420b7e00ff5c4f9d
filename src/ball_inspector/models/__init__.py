"""
Data Models
===========

Models for the ball inspection service.

This module re-exports all data models for convenient access.

Models:
    Image:
        - RawImage: Captured or uploaded image bytes with dimensions
        - EncodedFrame: Bounded, re-encoded frame for transmission

    Request:
        - AnalysisRequest: Rubric prompt + frame for one inference call

    Verdict:
        - VerdictStatus: Closed set of outcomes
        - AnalysisVerdict: Status plus reason message

    Acquisition:
        - AcquisitionMode: live or uploaded
        - LiveSource, UploadedSource: Controller source variants

    API:
        - ImagePayload, ErrorResponse, AcquisitionSnapshot
"""

from ball_inspector.models.image import EncodedFrame, RawImage
from ball_inspector.models.request import AnalysisRequest
from ball_inspector.models.verdict import AnalysisVerdict, VerdictStatus
from ball_inspector.models.acquisition import (
    AcquisitionMode,
    AcquisitionSource,
    LiveSource,
    UploadedSource,
)
from ball_inspector.models.api import AcquisitionSnapshot, ErrorResponse, ImagePayload

__all__ = [
    # Image
    "RawImage",
    "EncodedFrame",
    # Request
    "AnalysisRequest",
    # Verdict
    "VerdictStatus",
    "AnalysisVerdict",
    # Acquisition
    "AcquisitionMode",
    "AcquisitionSource",
    "LiveSource",
    "UploadedSource",
    # API
    "ImagePayload",
    "ErrorResponse",
    "AcquisitionSnapshot",
]
