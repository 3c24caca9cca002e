"""
HTTP index of the files in an NZB manifest.

Routes:
    /              HTML list of files with their sizes
    /nzb           the whole manifest
    /nzb?name=X    a manifest holding only file X, 404 if there is none
"""

import dataclasses
import html
from functools import partial
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, quote, urlsplit

import structlog

from nzbtools.exceptions import IndexServerError
from nzbtools.manifest.writer import render_nzb
from nzbtools.models.nzb import Nzb

logger = structlog.get_logger(__name__)

DEFAULT_ADDRESS = ":8000"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"
NZB_CONTENT_TYPE = "application/xml; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def parse_address(address: str) -> tuple[str, int]:
    """
    Split a listen address into host and port.

    Args:
        address: "host:port" or ":port" (all interfaces).

    Raises:
        IndexServerError: If the port is missing or out of range.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit() or int(port) > 65535:
        msg = f"Invalid listen address: {address}"
        raise IndexServerError(msg, address=address)
    return host.strip("[]"), int(port)


def render_index(nzb: Nzb) -> str:
    """Render the HTML file list."""
    items = "".join(
        f"<li><b>{html.escape(f.name)}</b> ({f.size} bytes) - "
        f'<a href="/nzb?name={quote(f.name, safe="")}">nzb</a></li>'
        for f in nzb.files
    )
    return (
        "<html><head><title>NZB Index</title></head><body>"
        f"<h1>NZB Index</h1><ul>{items}</ul></body></html>"
    )


def nzb_document(nzb: Nzb, name: str = "") -> str | None:
    """
    Render the manifest, or a single-file manifest for one name.

    Returns:
        The NZB XML, or None if no file has that name.
    """
    if not name:
        return render_nzb(nzb)
    file = nzb.get_file(name)
    if file is None:
        return None
    return render_nzb(dataclasses.replace(nzb, files=(file,)))


class IndexRequestHandler(BaseHTTPRequestHandler):
    """Answers GET requests from one loaded manifest."""

    def __init__(self, *args: Any, nzb: Nzb, **kwargs: Any) -> None:
        self.nzb = nzb
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:
        url = urlsplit(self.path)
        if url.path != "/nzb":
            self._send(HTTPStatus.OK, HTML_CONTENT_TYPE, render_index(self.nzb))
            return

        name = parse_qs(url.query).get("name", [""])[0]
        document = nzb_document(self.nzb, name)
        if document is None:
            self._send(HTTPStatus.NOT_FOUND, TEXT_CONTENT_TYPE, "file not found\n")
            return
        self._send(HTTPStatus.OK, NZB_CONTENT_TYPE, document)

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("HTTP request", client=self.client_address[0], request=format % args)

    def _send(self, status: HTTPStatus, content_type: str, text: str) -> None:
        body = text.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def create_index_server(nzb: Nzb, address: str = DEFAULT_ADDRESS) -> ThreadingHTTPServer:
    """
    Bind an HTTP server for the manifest. The caller runs serve_forever().

    Raises:
        IndexServerError: If the address is invalid or cannot be bound.
    """
    host, port = parse_address(address)
    handler = partial(IndexRequestHandler, nzb=nzb)
    try:
        server = ThreadingHTTPServer((host, port), handler)
    except OSError as e:
        msg = f"Cannot listen on {address}: {e}"
        raise IndexServerError(msg, address=address) from e
    logger.info("Index server bound", host=host, port=server.server_address[1], files=len(nzb.files))
    return server
