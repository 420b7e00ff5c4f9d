"""
Pipeline Metrics
================

Counters for the /metrics endpoint. Observability only: nothing here
influences a verdict.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from ball_inspector.models.verdict import VerdictStatus


@dataclass
class PipelineMetrics:
    """Running counts for analyses handled by one pipeline."""

    analyses_started: int = 0
    decode_errors: int = 0
    service_errors: int = 0
    definitive_verdicts: int = 0
    verdicts: Dict[str, int] = field(
        default_factory=lambda: {status.value: 0 for status in VerdictStatus}
    )

    def record_verdict(self, status: VerdictStatus) -> None:
        self.verdicts[status.value] += 1
        if status.is_definitive:
            self.definitive_verdicts += 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "analyses_started": self.analyses_started,
            "decode_errors": self.decode_errors,
            "service_errors": self.service_errors,
            "definitive_verdicts": self.definitive_verdicts,
            "verdicts": dict(self.verdicts),
        }
