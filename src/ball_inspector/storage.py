"""
Image Store
===========

Pass-through persistence for submitted frames.

No read-back, versioning or collision handling: a second save with the
same filename overwrites the first.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class ImageStore:
    """
    Writes base64 payloads under a directory.

    Attributes:
        directory: Target directory (created on first save)
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def save(self, image_b64: str, filename: str) -> Path:
        """
        Decode and write one payload.

        Args:
            image_b64: Base64 payload (no data URL prefix)
            filename: Target file name within the directory

        Returns:
            Path of the written file

        Raises:
            ValueError: If the payload is not valid base64
            OSError: If the file cannot be written
        """
        try:
            data = base64.b64decode(image_b64, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e

        path = self.directory / Path(filename).name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Image saved: {path}")
        return path
