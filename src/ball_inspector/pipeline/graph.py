"""
Analysis Pipeline Graph
=======================

LangGraph workflow for one analysis.

LangGraph is used for CONTROL FLOW only. Each node is one stage and
the stages run strictly in sequence:

    START → preprocess → infer → interpret → END

    preprocess: RawImage -> EncodedFrame   (may raise DecodeError)
    infer:      EncodedFrame -> reply text (may raise ServiceError)
    interpret:  reply text -> AnalysisVerdict (never raises)

Errors raised by a node propagate out of `run`. Folding them into a
verdict is the caller's policy (see acquisition/controller.py and the
HTTP layer in main.py).
"""

import logging
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import StateGraph, END

from ball_inspector.imaging.decoder import DecodeError
from ball_inspector.imaging.preprocessor import ImagePreprocessor
from ball_inspector.inference.client import InferenceClient, ServiceError
from ball_inspector.inference.interpreter import interpret_reply
from ball_inspector.models.image import EncodedFrame, RawImage
from ball_inspector.models.verdict import AnalysisVerdict
from ball_inspector.pipeline.metrics import PipelineMetrics


logger = logging.getLogger(__name__)


class AnalysisGraphState(TypedDict):
    """
    State passed through the analysis graph.

    Attributes:
        raw_image: Input image
        frame: Preprocessed frame
        reply: Raw reply text from the service
        verdict: Interpreted verdict
    """
    raw_image: RawImage
    frame: Optional[EncodedFrame]
    reply: Optional[str]
    verdict: Optional[AnalysisVerdict]


class AnalysisPipeline:
    """
    Preprocess → infer → interpret, as a compiled LangGraph.

    One `run` call issues exactly one inference request.
    """

    def __init__(
        self,
        preprocessor: ImagePreprocessor,
        client: InferenceClient,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            preprocessor: Resizer/encoder for input images
            client: Inference backend
        """
        self.preprocessor = preprocessor
        self.client = client
        self.metrics = PipelineMetrics()

        self._graph = self._build_graph()

        logger.info(f"AnalysisPipeline initialized: client={type(client).__name__}")

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(AnalysisGraphState)

        workflow.add_node("preprocess", self._preprocess_node)
        workflow.add_node("infer", self._infer_node)
        workflow.add_node("interpret", self._interpret_node)

        workflow.set_entry_point("preprocess")
        workflow.add_edge("preprocess", "infer")
        workflow.add_edge("infer", "interpret")
        workflow.add_edge("interpret", END)

        return workflow.compile()

    def _preprocess_node(self, state: AnalysisGraphState) -> Dict[str, Any]:
        return {"frame": self.preprocessor.preprocess(state["raw_image"])}

    async def _infer_node(self, state: AnalysisGraphState) -> Dict[str, Any]:
        return {"reply": await self.client.analyze(state["frame"])}

    def _interpret_node(self, state: AnalysisGraphState) -> Dict[str, Any]:
        return {"verdict": interpret_reply(state["reply"])}

    async def run(self, raw_image: RawImage) -> AnalysisVerdict:
        """
        Run one analysis.

        Args:
            raw_image: Captured or uploaded image

        Returns:
            The interpreted verdict

        Raises:
            DecodeError: If the image cannot be decoded
            ServiceError: If the inference call fails
        """
        self.metrics.analyses_started += 1

        initial: AnalysisGraphState = {
            "raw_image": raw_image,
            "frame": None,
            "reply": None,
            "verdict": None,
        }

        try:
            result = await self._graph.ainvoke(initial)
        except DecodeError:
            self.metrics.decode_errors += 1
            raise
        except ServiceError:
            self.metrics.service_errors += 1
            raise

        verdict = result["verdict"]
        self.metrics.record_verdict(verdict.status)
        return verdict
