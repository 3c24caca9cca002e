"""
nzbtools.

An async Python client for fetching exact byte ranges of files posted to
Usenet, described by NZB manifests and carried as yEnc text.

Example:
    ```python
    from nzbtools import ByteRange, NzbClient, ServerConfig, load_nzb

    nzb = await load_nzb("release.nzb")
    file = nzb.get_file("movie.mkv")
    server = ServerConfig(hostname="news.example.com", port=563, ssl=True,
                          username="user", password="secret")

    async with NzbClient(server) as client:
        # First kilobyte only
        with open("head.bin", "wb") as f:
            await client.fetch_range(file, ByteRange(0, 1023), f)

        # Segment availability
        report = await client.check_file(file)
        print(report.missing)
    ```
"""

from nzbtools.client import NzbClient
from nzbtools.config import NzbConfig, ServerConfig, ServersConfig, load_servers_config
from nzbtools.exceptions import (
    ArticleNotFoundError,
    AuthenticationError,
    AuthProtocolError,
    AuthRejectedError,
    ConfigError,
    FileNotInManifestError,
    IndexServerError,
    InvalidPatternError,
    MalformedEscapeError,
    ManifestError,
    NNTPConnectionError,
    NNTPError,
    NNTPProtocolError,
    NNTPTimeoutError,
    NzbToolsError,
    PostError,
    PostFailedError,
    PostRejectedError,
    RangeOutOfBoundsError,
    ServerNotFoundError,
    SessionStateError,
    UnexpectedGreetingError,
    YencError,
)
from nzbtools.manifest import load_nzb, parse_nzb, render_nzb
from nzbtools.models import ByteRange, CheckReport, Nzb, NzbFile, Segment

__version__ = "0.1.0"

__all__ = [
    # Main client
    "NzbClient",
    "NzbConfig",
    "ServerConfig",
    "ServersConfig",
    "load_servers_config",
    # Manifest
    "load_nzb",
    "parse_nzb",
    "render_nzb",
    # Models
    "ByteRange",
    "CheckReport",
    "Nzb",
    "NzbFile",
    "Segment",
    # Exceptions
    "NzbToolsError",
    "NNTPError",
    "NNTPConnectionError",
    "UnexpectedGreetingError",
    "NNTPTimeoutError",
    "NNTPProtocolError",
    "ArticleNotFoundError",
    "SessionStateError",
    "AuthenticationError",
    "AuthRejectedError",
    "AuthProtocolError",
    "PostError",
    "PostRejectedError",
    "PostFailedError",
    "YencError",
    "MalformedEscapeError",
    "RangeOutOfBoundsError",
    "ManifestError",
    "FileNotInManifestError",
    "InvalidPatternError",
    "ConfigError",
    "ServerNotFoundError",
    "IndexServerError",
]
