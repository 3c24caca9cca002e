"""
NNTP session and reporting models.
"""

from dataclasses import dataclass
from enum import StrEnum


class SessionState(StrEnum):
    """Lifecycle of an NNTP session."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass(frozen=True, kw_only=True)
class NNTPResponse:
    """
    Result of one command.

    Attributes:
        code: Numeric status code.
        line: Full status line.
        lines: Payload lines for multi-line responses, None otherwise.
    """

    code: int
    line: str
    lines: tuple[str, ...] | None = None

    @property
    def is_success(self) -> bool:
        """Check for a 2xx status."""
        return 200 <= self.code < 300


@dataclass(frozen=True, kw_only=True)
class MissingArticle:
    """A segment the server reported as unavailable."""

    message_id: str
    response: str


@dataclass(frozen=True, kw_only=True)
class CheckReport:
    """Availability of one file's segments on a server."""

    file_name: str
    checked: int
    missing: tuple[MissingArticle, ...] = ()
    elapsed: float = 0.0

    @property
    def is_complete(self) -> bool:
        """Check if every segment is available."""
        return len(self.missing) == 0


@dataclass(frozen=True, kw_only=True)
class ServerStatus:
    """Outcome of validating one configured server."""

    name: str
    ok: bool
    detail: str
