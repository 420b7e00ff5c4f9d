"""
Verdict Models
==============

Structured outcome of one analysis.

Each analysis produces exactly ONE verdict whose status is drawn from a
closed set. `QUALITY_ERROR` is the safe default whenever the upstream
reply cannot be turned into one of the three definitive outcomes.

Output Contract:
    {
        "status": "pass" | "fail" | "no_ball" | "quality_error",
        "message": "The ball appears structurally sound."
    }
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VerdictStatus(str, Enum):
    """
    Closed set of analysis outcomes.

    Attributes:
        PASS: Ball present and structurally sound
        FAIL: Ball present with a structural defect
        NO_BALL: No ball in the frame
        QUALITY_ERROR: Outcome could not be determined
    """

    PASS = "pass"
    FAIL = "fail"
    NO_BALL = "no_ball"
    QUALITY_ERROR = "quality_error"

    @property
    def is_definitive(self) -> bool:
        """True for outcomes that came from a parsed reply."""
        return self is not VerdictStatus.QUALITY_ERROR


class AnalysisVerdict(BaseModel):
    """
    Verdict for a single analysis.

    Attributes:
        status: One of the four verdict states
        message: Human-readable reason
    """

    model_config = ConfigDict(frozen=True)

    status: VerdictStatus = Field(
        default=VerdictStatus.QUALITY_ERROR,
        description="Verdict state",
    )

    message: str = Field(
        ...,
        description="Human-readable reason for the verdict",
    )

    @classmethod
    def quality_error(cls, message: str) -> "AnalysisVerdict":
        """Build a QUALITY_ERROR verdict."""
        return cls(status=VerdictStatus.QUALITY_ERROR, message=message)
