"""
Async NNTP session.

Provides one connection's command/response exchange: greeting, AUTHINFO
handshake, single- and multi-line article requests, and POST. Commands are
strictly sequential; every read is bounded by the configured inactivity
timeout.
"""

import asyncio
import contextlib
import ssl
from collections.abc import AsyncIterator
from enum import IntEnum
from typing import Self

import structlog

from nzbtools.config import NzbConfig
from nzbtools.exceptions import (
    AuthProtocolError,
    AuthRejectedError,
    NNTPConnectionError,
    NNTPProtocolError,
    NNTPTimeoutError,
    PostFailedError,
    PostRejectedError,
    SessionStateError,
    UnexpectedGreetingError,
)
from nzbtools.models.nntp import NNTPResponse, SessionState

logger = structlog.get_logger(__name__)

END_MARKER = "."
ENCODING = "latin-1"

PAYLOAD_METHODS = frozenset({"ARTICLE", "BODY", "HEAD"})
_SENSITIVE_COMMANDS = ("AUTHINFO PASS",)

# Failures after which the reply stream can no longer be trusted
_STREAM_ERRORS = (NNTPTimeoutError, NNTPConnectionError, NNTPProtocolError)


class NNTPCode(IntEnum):
    """NNTP status codes used by the session."""

    READY_POSTING_ALLOWED = 200
    READY_NO_POSTING = 201
    CLOSING = 205
    ARTICLE_STATUS = 223
    ARTICLE_POSTED = 240
    AUTH_ACCEPTED = 281
    SEND_ARTICLE = 340
    PASSWORD_REQUIRED = 381
    NO_SUCH_ARTICLE_NUMBER = 423
    NO_SUCH_ARTICLE = 430
    AUTH_REJECTED = 481


GREETING_CODES = frozenset({NNTPCode.READY_POSTING_ALLOWED, NNTPCode.READY_NO_POSTING})


def sanitize_command(command: str) -> str:
    """
    Mask secrets in a command before logging.

    Args:
        command: Raw command line.

    Returns:
        The command with any password argument replaced by "***".
    """
    for prefix in _SENSITIVE_COMMANDS:
        if command.upper().startswith(prefix):
            return f"{command[: len(prefix)]} ***"
    return command


def parse_status(line: str) -> int | None:
    """Parse the leading integer status code, None if there is none."""
    head = line.split(" ", 1)[0].strip()
    if not head.isdigit():
        return None
    return int(head)


def dot_stuff(line: str) -> str:
    """Double a leading end-marker on an outgoing payload line."""
    if line.startswith(END_MARKER):
        return END_MARKER + line
    return line


def dot_unstuff(line: str) -> str:
    """Remove the extra leading end-marker from an incoming payload line."""
    if line.startswith(END_MARKER + END_MARKER):
        return line[1:]
    return line


def extract_message_id(article: str) -> str:
    """
    Find the Message-ID header value in an article.

    Only the header block (up to the first empty line) is searched and the
    header name is matched case-insensitively.

    Returns:
        The header value, or an empty string if there is none.
    """
    for raw in article.split("\n"):
        line = raw.rstrip("\r")
        if not line:
            break
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "message-id":
            return value.strip()
    return ""


class NNTPSession:
    """
    A single NNTP connection.

    State machine:
        DISCONNECTED -> CONNECTED (greeting accepted)
        CONNECTED -> AUTHENTICATED (optional, AUTHINFO accepted)
        any -> CLOSED (close(), terminal)
        CONNECTED/AUTHENTICATED -> CLOSED (timeout, lost connection or
            malformed reply; the reply stream is out of step)

    request() and post() are only valid while CONNECTED or AUTHENTICATED.
    The session must not be shared between concurrently running tasks.

    Example:
        ```python
        async with await NNTPSession.open("news.example.com", 563, use_ssl=True) as session:
            await session.authenticate("user", "secret")
            response = await session.request("BODY", "<part1@example>")
        ```
    """

    def __init__(self, config: NzbConfig | None = None) -> None:
        """
        Args:
            config: Client configuration. Uses defaults if not provided.
        """
        self._config = config or NzbConfig()
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._state = SessionState.DISCONNECTED
        self._host = ""
        self._port = 0

    @classmethod
    async def open(
        cls,
        host: str,
        port: int,
        *,
        use_ssl: bool = False,
        config: NzbConfig | None = None,
    ) -> Self:
        """Create a session and connect it."""
        session = cls(config)
        await session.connect(host, port, use_ssl=use_ssl)
        return session

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if commands may be sent."""
        return self._state in (SessionState.CONNECTED, SessionState.AUTHENTICATED)

    async def connect(self, host: str, port: int, *, use_ssl: bool = False) -> None:
        """
        Open the transport and read the greeting.

        Args:
            host: Server hostname, also used for TLS certificate verification.
            port: Server port.
            use_ssl: Wrap the connection in TLS.

        Raises:
            NNTPConnectionError: If the transport cannot be opened.
            UnexpectedGreetingError: If the greeting is not a ready code.
            NNTPTimeoutError: If no greeting arrives in time.
        """
        self._require_state(SessionState.DISCONNECTED, operation="connect")
        self._host = host
        self._port = port

        ssl_context = ssl.create_default_context() if use_ssl else None
        logger.debug("Connecting", host=host, port=port, ssl=use_ssl)
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(
                    host,
                    port,
                    ssl=ssl_context,
                    server_hostname=host if use_ssl else None,
                ),
                timeout=self._config.connect_timeout,
            )
        except TimeoutError as e:
            msg = f"Connection to {host}:{port} timed out"
            raise NNTPConnectionError(msg, host=host, port=port) from e
        except OSError as e:
            msg = f"Connect {host}:{port} failed: {e}"
            raise NNTPConnectionError(msg, host=host, port=port) from e

        try:
            line = await self._read_line()
        except Exception:
            await self._release()
            raise

        if parse_status(line) not in GREETING_CODES:
            await self._release()
            msg = f"Unexpected greeting: {line}"
            raise UnexpectedGreetingError(msg, line=line)

        self._state = SessionState.CONNECTED
        logger.info("Connected", host=host, port=port, greeting=line)

    async def authenticate(self, username: str, password: str) -> None:
        """
        Run the AUTHINFO USER/PASS handshake.

        A no-op when username is empty. Servers that accept the user name
        alone complete without a password being sent.

        Raises:
            AuthRejectedError: If the password is not accepted.
            AuthProtocolError: If the server answers USER with another status.
            NNTPTimeoutError: If the server does not answer in time.
        """
        if not username:
            return
        self._require_state(
            SessionState.CONNECTED, SessionState.AUTHENTICATED, operation="authenticate"
        )

        async with self._abort_on_stream_error():
            line = await self._command(f"AUTHINFO USER {username}")
            code = parse_status(line)
            if code == NNTPCode.PASSWORD_REQUIRED:
                line = await self._command(f"AUTHINFO PASS {password}")

        if code == NNTPCode.PASSWORD_REQUIRED:
            if parse_status(line) != NNTPCode.AUTH_ACCEPTED:
                msg = f"Auth failed: {line}"
                raise AuthRejectedError(msg, line=line)
        elif code != NNTPCode.AUTH_ACCEPTED:
            msg = f"Auth unexpected response: {line}"
            raise AuthProtocolError(msg, line=line)

        self._state = SessionState.AUTHENTICATED
        logger.info("Authenticated", host=self._host)

    async def request(self, method: str, article_id: str) -> NNTPResponse:
        """
        Send an article command and read its response.

        Args:
            method: Command verb, e.g. STAT, HEAD, BODY or ARTICLE.
            article_id: Message id (or article number) argument.

        Returns:
            NNTPResponse; lines holds the payload for successful
            ARTICLE/BODY/HEAD requests and is None otherwise.

        Raises:
            NNTPProtocolError: If the status line or payload is malformed.
            NNTPTimeoutError: If the server does not answer in time.

        Both errors leave the session CLOSED.
        """
        self._require_state(SessionState.CONNECTED, SessionState.AUTHENTICATED, operation="request")

        lines = None
        async with self._abort_on_stream_error():
            line = await self._command(f"{method} {article_id}")
            code = parse_status(line)
            if code is None:
                msg = f"Unparseable status line: {line}"
                raise NNTPProtocolError(msg, line=line)
            if 200 <= code < 300 and method.upper() in PAYLOAD_METHODS:
                lines = tuple(await self._read_payload())

        return NNTPResponse(code=code, line=line, lines=lines)

    async def post(self, article: str) -> str:
        """
        Submit an article.

        Args:
            article: Headers, an empty line, then the body. LF or CRLF line
                endings are accepted.

        Returns:
            The article's Message-ID header value, or "" if it has none.

        Raises:
            PostRejectedError: If the server refuses to accept a post.
            PostFailedError: If the server does not store the article.
        """
        self._require_state(SessionState.CONNECTED, SessionState.AUTHENTICATED, operation="post")

        async with self._abort_on_stream_error():
            line = await self._command("POST")
        if parse_status(line) != NNTPCode.SEND_ARTICLE:
            msg = f"Server refused to accept post: {line}"
            raise PostRejectedError(msg, line=line)

        async with self._abort_on_stream_error():
            for raw in article.split("\n"):
                await self._write_line(dot_stuff(raw.rstrip("\r")))
            await self._write_line(END_MARKER)
            await self._drain()
            line = await self._read_line()

        if parse_status(line) != NNTPCode.ARTICLE_POSTED:
            msg = f"Post failed: {line}"
            raise PostFailedError(msg, line=line)

        message_id = extract_message_id(article)
        logger.info("Article posted", message_id=message_id)
        return message_id

    async def close(self) -> None:
        """Send QUIT (best effort) and release the transport. Idempotent."""
        if self._state == SessionState.CLOSED:
            return
        if self._writer is not None and self.is_open:
            with contextlib.suppress(OSError, RuntimeError):
                await self._write_line("QUIT")
                await self._drain()
        await self._release()
        self._state = SessionState.CLOSED
        logger.debug("Session closed", host=self._host)

    async def _release(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return
        writer.close()
        with contextlib.suppress(OSError, asyncio.CancelledError):
            await writer.wait_closed()

    def _require_state(self, *allowed: SessionState, operation: str) -> None:
        if self._state not in allowed:
            msg = f"Cannot {operation} while session is {self._state}"
            raise SessionStateError(msg, state=str(self._state))

    @contextlib.asynccontextmanager
    async def _abort_on_stream_error(self) -> AsyncIterator[None]:
        """Close the session when an exchange breaks off mid-reply."""
        try:
            yield
        except _STREAM_ERRORS as e:
            await self._release()
            self._state = SessionState.CLOSED
            logger.warning("Session aborted", host=self._host, port=self._port, error=str(e))
            raise

    async def _command(self, command: str) -> str:
        logger.debug("Sending command", command=sanitize_command(command))
        await self._write_line(command)
        await self._drain()
        line = await self._read_line()
        logger.debug("Received status", line=line)
        return line

    async def _write_line(self, line: str) -> None:
        if self._writer is None:
            msg = "Not connected"
            raise SessionStateError(msg, state=str(self._state))
        self._writer.write(line.encode(ENCODING) + b"\r\n")

    async def _drain(self) -> None:
        if self._writer is None:
            return
        try:
            await self._writer.drain()
        except OSError as e:
            msg = f"Write to {self._host}:{self._port} failed: {e}"
            raise NNTPConnectionError(msg, host=self._host, port=self._port) from e

    async def _read_line(self) -> str:
        if self._reader is None:
            msg = "Not connected"
            raise SessionStateError(msg, state=str(self._state))
        timeout = self._config.read_timeout
        try:
            raw = await asyncio.wait_for(self._reader.readline(), timeout=timeout)
        except TimeoutError as e:
            msg = f"No response from {self._host}:{self._port} within {timeout}s"
            raise NNTPTimeoutError(msg, timeout=timeout) from e
        except ValueError as e:
            msg = "Response line exceeds the stream buffer limit"
            raise NNTPProtocolError(msg) from e
        except OSError as e:
            msg = f"Read from {self._host}:{self._port} failed: {e}"
            raise NNTPConnectionError(msg, host=self._host, port=self._port) from e

        if not raw.endswith(b"\n"):
            msg = f"Connection closed by {self._host}:{self._port}"
            raise NNTPConnectionError(msg, host=self._host, port=self._port)
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(ENCODING)

    async def _read_payload(self) -> list[str]:
        lines: list[str] = []
        while True:
            try:
                line = await self._read_line()
            except NNTPConnectionError as e:
                msg = "Connection closed before end of payload"
                raise NNTPProtocolError(msg) from e
            if line == END_MARKER:
                return lines
            lines.append(dot_unstuff(line))
