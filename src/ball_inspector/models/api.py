"""
HTTP Schemas
============

Pydantic models for the service's HTTP boundary.

Inbound (POST /api/analyze-ball, POST /acquisition/upload):
    {"image": "data:image/jpeg;base64,/9j/4AAQ..."}

Outbound:
    {"status": "pass", "message": "..."}     on success
    {"error": "No image provided"}           on failure (non-2xx)
"""

from typing import Optional

from pydantic import BaseModel, Field

from ball_inspector.models.acquisition import AcquisitionMode
from ball_inspector.models.verdict import AnalysisVerdict


class ImagePayload(BaseModel):
    """
    Inbound image submission.

    `image` is optional at the schema level so a missing image is
    reported as a 400 with an `error` body rather than a 422.
    """

    image: Optional[str] = Field(
        default=None,
        description="Data-URL encoded still image (data:<mime>;base64,<payload>)",
    )

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "image": "data:image/jpeg;base64,/9j/4AAQSkZJRg...",
            }
        }


class ErrorResponse(BaseModel):
    """Error body returned with non-2xx responses."""

    error: str


class AcquisitionSnapshot(BaseModel):
    """Observable controller state."""

    mode: AcquisitionMode
    busy: bool
    has_image: bool
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    last_verdict: Optional[AnalysisVerdict] = None
