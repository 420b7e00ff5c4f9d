"""
Response Interpreter
====================

Turns the vision service's free-text reply into an AnalysisVerdict.

Parsing Policy:
    - `STATUS:` followed by PASS | FAIL | NO_BALL, case-insensitive
    - `REASON:` followed by the rest of that line, case-insensitive
    - The two searches are independent: each marker may appear anywhere
      in the reply, in any order
    - Both found -> lowercase status token + trimmed reason
    - Either missing -> QUALITY_ERROR with a fixed fallback message

Malformed upstream output never raises and is never reported as a
definitive pass or fail.
"""

import logging
import re
from typing import Optional

from ball_inspector.models.verdict import AnalysisVerdict, VerdictStatus


logger = logging.getLogger(__name__)


FALLBACK_MESSAGE = "Unable to determine ball quality."

_STATUS_PATTERN = re.compile(r"STATUS:\s*(PASS|FAIL|NO_BALL)", re.IGNORECASE)
_REASON_PATTERN = re.compile(r"REASON:\s*(.+)", re.IGNORECASE)


def interpret_reply(reply: Optional[str]) -> AnalysisVerdict:
    """
    Extract a verdict from raw reply text.

    Args:
        reply: Reply text from the inference service

    Returns:
        AnalysisVerdict; QUALITY_ERROR when either marker is missing
    """
    text = reply or ""
    status_match = _STATUS_PATTERN.search(text)
    reason_match = _REASON_PATTERN.search(text)

    if status_match is None or reason_match is None:
        logger.warning(f"Unexpected response format: {text!r}")
        return AnalysisVerdict.quality_error(FALLBACK_MESSAGE)

    reason = reason_match.group(1).strip()
    if not reason:
        logger.warning(f"Empty REASON in response: {text!r}")
        return AnalysisVerdict.quality_error(FALLBACK_MESSAGE)

    verdict = AnalysisVerdict(
        status=VerdictStatus(status_match.group(1).lower()),
        message=reason,
    )
    logger.info(f"Parsed verdict: status={verdict.status.value}, reason={verdict.message!r}")
    return verdict
