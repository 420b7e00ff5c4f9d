"""
Imaging Module
==============

Image decoding and preprocessing.

Components:
    - decode_image / decode_data_url: bytes or data URL -> RawImage
    - ImagePreprocessor: RawImage -> bounded EncodedFrame
    - DecodeError: raised for undecodable input
"""

from ball_inspector.imaging.decoder import (
    DecodeError,
    decode_data_url,
    decode_image,
    decode_to_bgr,
)
from ball_inspector.imaging.preprocessor import (
    ImagePreprocessor,
    compute_target_size,
    encode_jpeg,
)

__all__ = [
    "DecodeError",
    "decode_data_url",
    "decode_image",
    "decode_to_bgr",
    "ImagePreprocessor",
    "compute_target_size",
    "encode_jpeg",
]
