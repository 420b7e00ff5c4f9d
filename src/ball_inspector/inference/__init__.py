"""
Inference Module
================

Request building and reply interpretation for the vision service.

Components:
    - RUBRIC_PROMPT: Fixed grading instruction
    - InferenceClient: Protocol for inference backends
    - VisionInferenceClient: OpenAI-compatible HTTP client
    - interpret_reply: Reply text -> AnalysisVerdict

Design Philosophy:
    The vision service is an opaque black box that accepts an image and
    returns text. All structure is recovered by the interpreter.
"""

from ball_inspector.inference.prompt import RUBRIC_PROMPT
from ball_inspector.inference.client import (
    InferenceClient,
    ServiceError,
    VisionInferenceClient,
    build_request,
)
from ball_inspector.inference.interpreter import FALLBACK_MESSAGE, interpret_reply

__all__ = [
    "RUBRIC_PROMPT",
    "InferenceClient",
    "ServiceError",
    "VisionInferenceClient",
    "build_request",
    "FALLBACK_MESSAGE",
    "interpret_reply",
]
