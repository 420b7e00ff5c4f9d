"""
Pipeline Module
===============

LangGraph-based analysis pipeline.

    - graph.py: preprocess → infer → interpret workflow
    - metrics.py: counters for observability
"""

from ball_inspector.pipeline.graph import AnalysisPipeline
from ball_inspector.pipeline.metrics import PipelineMetrics

__all__ = [
    "AnalysisPipeline",
    "PipelineMetrics",
]
