"""
Domain models for nzbtools.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from nzbtools.models.nntp import (
    CheckReport,
    MissingArticle,
    NNTPResponse,
    ServerStatus,
    SessionState,
)
from nzbtools.models.nzb import Meta, Nzb, NzbFile, Segment
from nzbtools.models.ranges import ByteRange, Piece

__all__ = [
    # Manifest
    "Meta",
    "Nzb",
    "NzbFile",
    "Segment",
    # Ranges
    "ByteRange",
    "Piece",
    # NNTP
    "SessionState",
    "NNTPResponse",
    "MissingArticle",
    "CheckReport",
    "ServerStatus",
]
