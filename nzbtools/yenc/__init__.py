"""
yEnc encoding for nzbtools.

This module provides:
- Line decoding with '=' escape handling
- The mirror encoder used when posting
- Helpers for yEnc header/trailer lines and dot framing
"""

from nzbtools.yenc.codec import (
    decode_line,
    encode_line,
    encode_lines,
    is_metadata_line,
    undot,
)

__all__ = [
    "decode_line",
    "encode_line",
    "encode_lines",
    "is_metadata_line",
    "undot",
]
