"""
Analysis Request Model
======================

Pairs the fixed rubric prompt with one EncodedFrame.

Outbound Contract (OpenAI-compatible chat completions):
    {
        "model": "gpt-4o-mini",
        "max_tokens": 300,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "<rubric prompt>"},
                    {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,..."}}
                ]
            }
        ]
    }
"""

from dataclasses import dataclass
from typing import Any, Dict

from ball_inspector.models.image import EncodedFrame


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """
    Immutable prompt + image pair for one inference call.

    Attributes:
        prompt: Natural-language grading instruction
        frame: The image to grade
    """

    prompt: str
    frame: EncodedFrame

    def to_payload(self, model: str, max_tokens: int) -> Dict[str, Any]:
        """Render as a chat-completions request body."""
        return {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": self.frame.data_url},
                        },
                    ],
                }
            ],
        }
