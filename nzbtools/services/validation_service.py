"""
Server configuration validation.

Checks configured servers for completeness and, optionally, that a
connection and login actually succeed.
"""

from collections.abc import Iterable

import structlog

from nzbtools.config import NzbConfig, ServerConfig
from nzbtools.exceptions import NNTPError
from nzbtools.models.nntp import ServerStatus
from nzbtools.nntp.session import NNTPSession

logger = structlog.get_logger(__name__)


async def validate_servers(
    servers: Iterable[ServerConfig],
    *,
    check: bool = False,
    config: NzbConfig | None = None,
) -> list[ServerStatus]:
    """
    Validate each server in turn.

    Args:
        servers: Server entries to validate.
        check: Also connect and authenticate to each server.
        config: Client configuration for connection timeouts.

    Returns:
        One ServerStatus per server, in input order.
    """
    return [await validate_server(server, check=check, config=config) for server in servers]


async def validate_server(
    server: ServerConfig,
    *,
    check: bool = False,
    config: NzbConfig | None = None,
) -> ServerStatus:
    """Validate a single server entry."""
    if not server.is_complete:
        return ServerStatus(name=server.name, ok=False, detail="invalid (missing hostname/port)")
    if not check:
        detail = f"ok (host={server.hostname}:{server.port} ssl={str(server.ssl).lower()})"
        return ServerStatus(name=server.name, ok=True, detail=detail)

    session = NNTPSession(config)
    try:
        try:
            await session.connect(server.hostname, server.port, use_ssl=server.ssl)
        except NNTPError as e:
            logger.warning("Server connect failed", server=server.name, error=str(e))
            return ServerStatus(name=server.name, ok=False, detail=f"connect failed: {e}")
        try:
            await session.authenticate(server.username, server.password)
        except NNTPError as e:
            logger.warning("Server auth failed", server=server.name, error=str(e))
            return ServerStatus(name=server.name, ok=False, detail=f"auth failed: {e}")
    finally:
        await session.close()

    return ServerStatus(name=server.name, ok=True, detail="ok")
