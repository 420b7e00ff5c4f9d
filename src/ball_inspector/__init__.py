"""
Ball Inspector
==============

Quality control for decorative balls using a vision-capable model.

An operator captures a camera frame or uploads a photo; the service
resizes it, sends it to the vision model with a fixed grading rubric,
and turns the free-text reply into a pass / fail / no_ball verdict.

Components:
    - imaging: Decoding and bounded JPEG preprocessing
    - inference: Rubric prompt, HTTP client, reply interpreter
    - pipeline: LangGraph workflow preprocess → infer → interpret
    - acquisition: Camera sources and the live/uploaded controller
    - storage: Optional persistence of submitted frames

Example:
    from ball_inspector.config import settings

    # Service is started via FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"
__author__ = "Rivertown Ball Company"

__all__ = [
    "__version__",
]
