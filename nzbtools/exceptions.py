"""
nzbtools exception hierarchy.

All exceptions inherit from NzbToolsError for easy catching.
"""

from typing import Any


class NzbToolsError(Exception):
    """Base exception for all nzbtools errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class NNTPError(NzbToolsError):
    """NNTP session or protocol failure."""


class NNTPConnectionError(NNTPError):
    """Transport could not be opened or was lost."""

    def __init__(self, message: str, *, host: str | None = None, port: int | None = None) -> None:
        super().__init__(message, host=host, port=port)
        self.host = host
        self.port = port


class UnexpectedGreetingError(NNTPError):
    """Server greeting was malformed or not a ready code."""

    def __init__(self, message: str, *, line: str) -> None:
        super().__init__(message, line=line)
        self.line = line


class NNTPTimeoutError(NNTPError):
    """A read exceeded the inactivity deadline."""

    def __init__(self, message: str, *, timeout: float) -> None:
        super().__init__(message, timeout=timeout)
        self.timeout = timeout


class NNTPProtocolError(NNTPError):
    """Unparseable or unexpected status for a command."""

    def __init__(self, message: str, *, code: int | None = None, line: str | None = None) -> None:
        super().__init__(message, code=code, line=line)
        self.code = code
        self.line = line


class ArticleNotFoundError(NNTPProtocolError):
    """Server has no article with the requested message id."""

    def __init__(
        self, message: str, *, message_id: str, code: int = 430, line: str | None = None
    ) -> None:
        super().__init__(message, code=code, line=line)
        self.context["message_id"] = message_id
        self.message_id = message_id


class SessionStateError(NNTPError):
    """Operation called in a session state that does not allow it."""


class AuthenticationError(NNTPError):
    """Authentication failed."""


class AuthRejectedError(AuthenticationError):
    """Server rejected the supplied credentials."""


class AuthProtocolError(AuthenticationError):
    """Server answered the authentication handshake with an unexpected status."""


class PostError(NNTPError):
    """Article submission failed."""

    def __init__(self, message: str, *, line: str) -> None:
        super().__init__(message, line=line)
        self.line = line


class PostRejectedError(PostError):
    """Server refused to start an article submission."""


class PostFailedError(PostError):
    """Server did not store the submitted article."""


class YencError(NzbToolsError):
    """yEnc decoding failed."""


class MalformedEscapeError(YencError):
    """Escape marker is the last character of a line."""

    def __init__(self, message: str = "Unterminated escape in yEnc line", *, position: int) -> None:
        super().__init__(message, position=position)
        self.position = position


class RangeOutOfBoundsError(NzbToolsError):
    """Requested byte range is invalid for the file size."""

    def __init__(self, message: str, *, start: int, end: int, size: int) -> None:
        super().__init__(message, start=start, end=end, size=size)
        self.start = start
        self.end = end
        self.size = size


class ManifestError(NzbToolsError):
    """NZB manifest could not be loaded or parsed."""


class FileNotInManifestError(ManifestError):
    """Requested file name is not part of the manifest."""

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message, name=name)
        self.name = name


class InvalidPatternError(NzbToolsError):
    """File selection pattern could not be compiled."""


class ConfigError(NzbToolsError):
    """Server configuration could not be loaded."""


class ServerNotFoundError(ConfigError):
    """Named server is not present in the configuration."""

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message, name=name)
        self.name = name


class IndexServerError(NzbToolsError):
    """HTTP index server could not be started."""

    def __init__(self, message: str, *, address: str) -> None:
        super().__init__(message, address=address)
        self.address = address
