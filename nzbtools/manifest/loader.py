"""
NZB manifest loading.

Sources are local paths or http(s) URLs; a .gz suffix means the document
is gzip-compressed.
"""

import gzip
from pathlib import Path

import httpx
import structlog

from nzbtools.config import NzbConfig
from nzbtools.exceptions import ManifestError
from nzbtools.manifest.parser import parse_nzb
from nzbtools.models.nzb import Nzb

logger = structlog.get_logger(__name__)


def is_url(source: str) -> bool:
    """Check if a source names an HTTP(S) resource."""
    return source.startswith(("http://", "https://"))


async def load_nzb(
    source: str | Path,
    *,
    config: NzbConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Nzb:
    """
    Load and parse an NZB from a path or URL.

    Args:
        source: Local path or http(s) URL.
        config: Client configuration for the HTTP timeout.
        transport: Optional httpx transport for testing.

    Returns:
        Parsed Nzb.

    Raises:
        ManifestError: If the source cannot be read or parsed.
    """
    source = str(source)
    config = config or NzbConfig()

    if is_url(source):
        raw = await _fetch_url(source, config.http_timeout, transport)
    else:
        try:
            raw = Path(source).read_bytes()
        except OSError as e:
            msg = f"Cannot read NZB {source}"
            raise ManifestError(msg, error=str(e)) from e

    if source.lower().endswith(".gz"):
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError) as e:
            msg = f"Cannot decompress NZB {source}"
            raise ManifestError(msg, error=str(e)) from e

    nzb = parse_nzb(raw)
    logger.debug("NZB loaded", source=source, files=len(nzb.files))
    return nzb


async def _fetch_url(
    url: str, timeout: float, transport: httpx.AsyncBaseTransport | None
) -> bytes:
    async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            msg = f"Cannot fetch NZB {url}"
            raise ManifestError(msg, error=str(e)) from e

    if response.status_code >= 400:
        msg = f"Cannot fetch NZB {url}: http status {response.status_code}"
        raise ManifestError(msg, status=response.status_code)
    return response.content
