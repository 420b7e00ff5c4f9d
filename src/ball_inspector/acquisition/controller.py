"""
Acquisition Controller
======================

State machine that selects the image source and drives one analysis at
a time.

States:
    Idle(live)                 - camera feed is the source
    Idle(uploaded, image)      - a decoded upload is held
    Analyzing                  - pipeline in flight (busy flag set)

Transitions:
    switch_to_live      any state → Idle(live); drops the held upload
    upload_image        any state → Idle(uploaded, image) once decoded;
                        on DecodeError the state is unchanged
    capture_and_analyze Idle(live) → Analyzing → Idle(live) + verdict
    analyze_uploaded    Idle(uploaded) → Analyzing → Idle(uploaded) + verdict

Failure Policy:
    - Capture and decode failures are raised to the caller of the
      acquisition action; no verdict is produced
    - Inference and any other stage failure become a QUALITY_ERROR
      verdict with a generic message
    - While Analyzing, further analyze calls are ignored (return None)
      and dispatch no inference request
"""

import logging
from typing import Optional, Union

from ball_inspector.acquisition.camera import FrameSource
from ball_inspector.imaging.decoder import DecodeError, decode_data_url, decode_image
from ball_inspector.inference.client import ServiceError
from ball_inspector.models.acquisition import (
    AcquisitionMode,
    AcquisitionSource,
    LiveSource,
    UploadedSource,
)
from ball_inspector.models.api import AcquisitionSnapshot
from ball_inspector.models.image import RawImage
from ball_inspector.models.verdict import AnalysisVerdict
from ball_inspector.pipeline.graph import AnalysisPipeline


logger = logging.getLogger(__name__)


GENERIC_FAILURE_MESSAGE = "An error occurred during analysis."


class InvalidModeError(Exception):
    """Raised when an analyze action does not match the current mode."""
    pass


class AcquisitionController:
    """
    Single-operator acquisition state machine.

    Attributes:
        pipeline: Analysis pipeline (preprocess → infer → interpret)
        camera: Live frame source
    """

    def __init__(self, pipeline: AnalysisPipeline, camera: FrameSource) -> None:
        self.pipeline = pipeline
        self.camera = camera

        self._source: AcquisitionSource = LiveSource()
        self._busy: bool = False
        self._last_verdict: Optional[AnalysisVerdict] = None

        logger.info("AcquisitionController initialized: mode=live")

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> AcquisitionMode:
        return self._source.mode

    @property
    def source(self) -> AcquisitionSource:
        return self._source

    @property
    def uploaded_image(self) -> Optional[RawImage]:
        if isinstance(self._source, UploadedSource):
            return self._source.image
        return None

    @property
    def is_busy(self) -> bool:
        """True while an analysis is in flight."""
        return self._busy

    @property
    def last_verdict(self) -> Optional[AnalysisVerdict]:
        return self._last_verdict

    def snapshot(self) -> AcquisitionSnapshot:
        image = self.uploaded_image
        return AcquisitionSnapshot(
            mode=self.mode,
            busy=self._busy,
            has_image=image is not None,
            image_width=image.width if image else None,
            image_height=image.height if image else None,
            last_verdict=self._last_verdict,
        )

    # -------------------------------------------------------------------------
    # Source selection
    # -------------------------------------------------------------------------

    def switch_to_live(self) -> None:
        """Drop any held upload and request the live camera feed."""
        if isinstance(self._source, UploadedSource):
            logger.info("Discarding uploaded image")
        self._source = LiveSource()
        self.camera.open()
        logger.info("Acquisition mode: live")

    def upload_image(self, data: Union[bytes, str]) -> RawImage:
        """
        Decode and hold an uploaded image.

        Args:
            data: Encoded image bytes, or a data URL string

        Returns:
            The decoded RawImage now held by the controller

        Raises:
            DecodeError: If the upload is not a valid image (state unchanged)
        """
        try:
            image = decode_data_url(data) if isinstance(data, str) else decode_image(data)
        except DecodeError as e:
            logger.warning(f"Upload rejected: {e}")
            raise

        self._source = UploadedSource(image=image)
        self.camera.release()
        logger.info(f"Acquisition mode: uploaded ({image.width}x{image.height})")
        return image

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def capture_and_analyze(self) -> Optional[AnalysisVerdict]:
        """
        Grab one camera frame and analyze it.

        Returns:
            The verdict, or None if an analysis was already in flight

        Raises:
            InvalidModeError: If the controller is not in live mode
            CaptureError: If the camera cannot supply a frame
            DecodeError: If the captured frame cannot be decoded
        """
        if self._busy:
            logger.warning("capture_and_analyze ignored: analysis in progress")
            return None
        if not isinstance(self._source, LiveSource):
            raise InvalidModeError("capture_and_analyze requires live mode")

        self._busy = True
        try:
            image = decode_image(self.camera.grab())
            return await self._run_pipeline(image)
        finally:
            self._busy = False

    async def analyze_uploaded(self) -> Optional[AnalysisVerdict]:
        """
        Analyze the held upload.

        Returns:
            The verdict, or None if an analysis was already in flight

        Raises:
            InvalidModeError: If no upload is held
            DecodeError: If the held image cannot be preprocessed
        """
        if self._busy:
            logger.warning("analyze_uploaded ignored: analysis in progress")
            return None
        if not isinstance(self._source, UploadedSource):
            raise InvalidModeError("analyze_uploaded requires an uploaded image")

        self._busy = True
        try:
            return await self._run_pipeline(self._source.image)
        finally:
            self._busy = False

    async def analyze_current(self) -> Optional[AnalysisVerdict]:
        """Analyze from whichever source is active."""
        if self.mode is AcquisitionMode.LIVE:
            return await self.capture_and_analyze()
        return await self.analyze_uploaded()

    async def _run_pipeline(self, image: RawImage) -> AnalysisVerdict:
        try:
            verdict = await self.pipeline.run(image)
        except DecodeError:
            raise
        except ServiceError as e:
            logger.error(f"Inference failed (status={e.status_code}): {e}")
            verdict = AnalysisVerdict.quality_error(GENERIC_FAILURE_MESSAGE)
        except Exception as e:
            logger.exception(f"Analysis pipeline error: {e}")
            verdict = AnalysisVerdict.quality_error(GENERIC_FAILURE_MESSAGE)

        self._last_verdict = verdict
        logger.info(f"Analysis complete: status={verdict.status.value}")
        return verdict
