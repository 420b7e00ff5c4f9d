"""
Ball Inspector Main Application
===============================

FastAPI entry point for the decorative ball quality-control service.

Endpoints:
    GET  /                     - Service information
    GET  /health               - Liveness probe
    GET  /metrics              - Pipeline counters
    POST /api/analyze-ball     - Analyze a data-URL image, return a verdict
    GET  /acquisition          - Acquisition controller state
    POST /acquisition/live     - Switch to the live camera
    POST /acquisition/upload   - Hold an uploaded image
    POST /acquisition/analyze  - Analyze from the active source
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ball_inspector.config import settings
from ball_inspector.acquisition import (
    AcquisitionController,
    CaptureError,
    CV2Camera,
    FrameSource,
    InvalidModeError,
    StaticFrameSource,
)
from ball_inspector.imaging import DecodeError, ImagePreprocessor, decode_data_url
from ball_inspector.imaging.decoder import split_data_url
from ball_inspector.inference import InferenceClient, ServiceError, VisionInferenceClient
from ball_inspector.models.api import ImagePayload
from ball_inspector.pipeline import AnalysisPipeline
from ball_inspector.storage import ImageStore


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_pipeline: Optional[AnalysisPipeline] = None
_controller: Optional[AcquisitionController] = None
_image_store: Optional[ImageStore] = None
_startup_time: float = 0.0


def get_pipeline() -> Optional[AnalysisPipeline]:
    return _pipeline

def get_controller() -> Optional[AcquisitionController]:
    return _controller


# =============================================================================
# Factories
# =============================================================================

def create_inference_client() -> InferenceClient:
    """Create the inference client from config."""
    return VisionInferenceClient(
        api_base=settings.inference.api_base,
        model=settings.inference.model,
        api_key=settings.inference.api_key,
        timeout_seconds=settings.inference.timeout_seconds,
        max_tokens=settings.inference.max_tokens,
    )


def create_frame_source() -> FrameSource:
    """
    Create the live frame source based on config.

    Fails fast if the static backend is requested without an image.
    """
    backend = settings.camera.backend

    if backend == "cv2":
        logger.info(f"Using CV2Camera: index={settings.camera.index}")
        return CV2Camera(index=settings.camera.index)

    elif backend == "static":
        path = settings.camera.static_path
        if not path or not os.path.exists(path):
            raise RuntimeError(f"Static camera backend requires an existing static_path, got {path!r}")
        logger.info(f"Using StaticFrameSource: {path}")
        with open(path, "rb") as f:
            return StaticFrameSource(f.read())

    else:
        raise ValueError(f"Unknown camera backend: {backend}")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _save_submission(image: str) -> None:
    """Persist a submitted data URL. Failures never affect the verdict."""
    if _image_store is None:
        return
    try:
        _, payload = split_data_url(image)
        _image_store.save(payload, f"ball_{int(time.time() * 1000)}.jpg")
    except (DecodeError, ValueError, OSError) as e:
        logger.error(f"Failed to save submitted image: {e}")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _pipeline, _controller, _image_store, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    preprocessor = ImagePreprocessor(
        max_width=settings.preprocess.max_width,
        max_height=settings.preprocess.max_height,
        jpeg_quality=settings.preprocess.jpeg_quality,
    )
    _pipeline = AnalysisPipeline(preprocessor, create_inference_client())

    camera = create_frame_source()
    _controller = AcquisitionController(_pipeline, camera)
    _controller.switch_to_live()

    if settings.storage.enabled:
        _image_store = ImageStore(settings.storage.directory)
        logger.info(f"Image storage enabled: {settings.storage.directory}")

    yield

    logger.info("Shutting down...")
    camera.release()
    _controller = None
    _pipeline = None
    _image_store = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Ball Inspector",
    description="Decorative ball quality control via a vision model",
    version=settings.service.version,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 {error} instead of 422."""
    logger.warning(f"{request.url.path}: invalid request body: {exc.errors()}")
    return _error("Invalid request body", 400)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "Ball Inspector",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "model": settings.inference.model,
        "camera_backend": settings.camera.backend,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe. Always returns 200 while the process is up."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Pipeline counters for observability."""
    pipeline = get_pipeline()
    controller = get_controller()
    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        **(pipeline.metrics.as_dict() if pipeline else {}),
        "acquisition_mode": controller.mode.value if controller else None,
        "busy": controller.is_busy if controller else False,
    })


@app.post("/api/analyze-ball")
async def analyze_ball(payload: ImagePayload) -> JSONResponse:
    """
    Analyze one data-URL image.

    Returns {status, message} on success, or {error} with 400 for a
    missing or undecodable image and 502 for an inference failure.
    """
    pipeline = get_pipeline()
    if pipeline is None:
        return _error("Service not ready", 503)

    if not payload.image:
        return _error("No image provided", 400)

    try:
        raw_image = decode_data_url(payload.image)
    except DecodeError as e:
        logger.warning(f"analyze-ball: rejected image: {e}")
        return _error(str(e), 400)

    _save_submission(payload.image)

    try:
        verdict = await pipeline.run(raw_image)
    except DecodeError as e:
        return _error(str(e), 400)
    except ServiceError as e:
        logger.error(f"analyze-ball: inference failed (status={e.status_code}): {e}")
        return _error(str(e) or "Analysis failed", 502)

    return JSONResponse(verdict.model_dump(mode="json"))


@app.get("/acquisition")
async def acquisition_state() -> JSONResponse:
    controller = get_controller()
    if controller is None:
        return _error("Service not ready", 503)
    return JSONResponse(controller.snapshot().model_dump(mode="json"))


@app.post("/acquisition/live")
async def acquisition_live() -> JSONResponse:
    controller = get_controller()
    if controller is None:
        return _error("Service not ready", 503)
    controller.switch_to_live()
    return JSONResponse(controller.snapshot().model_dump(mode="json"))


@app.post("/acquisition/upload")
async def acquisition_upload(payload: ImagePayload) -> JSONResponse:
    controller = get_controller()
    if controller is None:
        return _error("Service not ready", 503)
    if not payload.image:
        return _error("No image provided", 400)

    try:
        controller.upload_image(payload.image)
    except DecodeError as e:
        return _error(str(e), 400)

    return JSONResponse(controller.snapshot().model_dump(mode="json"))


@app.post("/acquisition/analyze")
async def acquisition_analyze() -> JSONResponse:
    """
    Analyze from the active source.

    409 while another analysis is in flight; the ignored request
    dispatches no inference call.
    """
    controller = get_controller()
    if controller is None:
        return _error("Service not ready", 503)

    try:
        verdict = await controller.analyze_current()
    except InvalidModeError as e:
        return _error(str(e), 409)
    except CaptureError as e:
        return _error(str(e), 503)
    except DecodeError as e:
        return _error(str(e), 400)

    if verdict is None:
        return _error("Analysis already in progress", 409)

    return JSONResponse(verdict.model_dump(mode="json"))


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "ball_inspector.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
