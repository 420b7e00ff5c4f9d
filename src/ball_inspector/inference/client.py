"""
Vision Inference Client
=======================

Sends one EncodedFrame plus the rubric prompt to an OpenAI-compatible
chat-completions endpoint and returns the raw reply text.

This client:
    - Builds exactly one AnalysisRequest per call
    - Issues exactly one HTTP request (no retries)
    - Runs the blocking HTTP call in a worker thread so callers simply
      await the reply
    - Raises ServiceError on transport failure, timeout, non-2xx status,
      malformed body, or an empty reply

Design Rules:
    - Never interprets the reply (see interpreter.py)
    - Log all API calls
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import requests

from ball_inspector.inference.prompt import RUBRIC_PROMPT
from ball_inspector.models.image import EncodedFrame
from ball_inspector.models.request import AnalysisRequest


logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Raised when the inference call fails.

    Attributes:
        status_code: Upstream HTTP status, when a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InferenceClient(Protocol):
    """
    Protocol for inference backends.

    Implementations take one EncodedFrame and return the service's
    free-text reply, raising ServiceError on failure.
    """

    async def analyze(self, frame: EncodedFrame) -> str:
        ...


def build_request(frame: EncodedFrame, prompt: str = RUBRIC_PROMPT) -> AnalysisRequest:
    """Pair the rubric prompt with a frame."""
    return AnalysisRequest(prompt=prompt, frame=frame)


class VisionInferenceClient:
    """
    OpenAI-compatible vision client.

    Attributes:
        api_base: Base URL, e.g. https://api.openai.com/v1
        model: Vision-capable model name
        timeout_seconds: Per-call timeout
        max_tokens: Reply token limit
    """

    def __init__(
        self,
        api_base: str,
        model: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 30.0,
        max_tokens: int = 300,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_base: Base URL of the API
            model: Model name
            api_key: Bearer token (requests are sent unauthenticated if None)
            timeout_seconds: Timeout applied to the HTTP call
            max_tokens: Reply token limit
            session: Optional requests.Session. If None, each call goes
                through requests.post, so no connection state is shared
                between worker threads
        """
        self.api_base = api_base.rstrip("/")
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._session = session

        if not api_key:
            logger.warning("VisionInferenceClient: no API key configured")

        logger.info(
            f"VisionInferenceClient initialized: model={model}, "
            f"endpoint={self.endpoint}, timeout={timeout_seconds}s"
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/chat/completions"

    async def analyze(self, frame: EncodedFrame) -> str:
        """
        Send one frame for grading and return the raw reply.

        Args:
            frame: Preprocessed frame

        Returns:
            Reply text from the service

        Raises:
            ServiceError: On any failure of the call
        """
        request = build_request(frame)
        payload = request.to_payload(self.model, self.max_tokens)

        logger.info(
            f"Inference call: model={self.model}, frame={frame.width}x{frame.height}"
        )
        reply = await asyncio.to_thread(self._post, payload)
        logger.debug(f"Inference reply: {reply!r}")
        return reply

    def _post(self, payload: Dict[str, Any]) -> str:
        """Blocking HTTP call. Runs in a worker thread."""
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        post = self._session.post if self._session is not None else requests.post

        try:
            response = post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as e:
            raise ServiceError(
                f"Inference call timed out after {self.timeout_seconds}s"
            ) from e
        except requests.RequestException as e:
            raise ServiceError(f"Inference transport error: {e}") from e

        if not response.ok:
            raise ServiceError(
                f"Inference service returned HTTP {response.status_code}: "
                f"{_upstream_message(response)}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ServiceError(
                f"Malformed inference response: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise ServiceError(
                "Inference service returned an empty reply",
                status_code=response.status_code,
            )

        return content


def _upstream_message(response: requests.Response) -> str:
    """Best-effort error message from an upstream error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return response.text[:300]
