"""Command line interface for nzbtools."""

import asyncio
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import structlog
import typer

from nzbtools.client import NzbClient
from nzbtools.config import NzbConfig, ServerConfig, load_servers_config, resolve_server
from nzbtools.exceptions import (
    ConfigError,
    FileNotInManifestError,
    NzbToolsError,
    RangeOutOfBoundsError,
    ServerNotFoundError,
)
from nzbtools.manifest import combine as combine_nzbs
from nzbtools.manifest import extract_files, load_nzb, render_nzb
from nzbtools.models.nzb import Nzb, NzbFile
from nzbtools.models.ranges import ByteRange
from nzbtools.nntp.commands import CHECK_METHODS
from nzbtools.services.index_server import DEFAULT_ADDRESS, create_index_server
from nzbtools.services.range_planner import plan_pieces
from nzbtools.services.validation_service import validate_servers

logger = structlog.get_logger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Fetch byte ranges of Usenet files described by NZB manifests.",
)

ServerOption = Annotated[str, typer.Option("--server", help="Server name from the config file")]
ConfigOption = Annotated[Path | None, typer.Option("--config", help="Path to a JSON or .env config file")]
HostOption = Annotated[str, typer.Option("--hostname", help="NNTP server hostname")]
PortOption = Annotated[int, typer.Option("--port", min=0, help="NNTP server port")]
UserOption = Annotated[str, typer.Option("--username", help="NNTP username")]
PasswordOption = Annotated[str, typer.Option("--password", help="NNTP password")]
SslOption = Annotated[bool, typer.Option("--ssl", help="Use TLS")]


def configure_logging(verbose: bool) -> None:
    """Send structured logs to stderr, at DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn library errors into an `error: ...` line and exit code 1."""
    try:
        yield
    except NzbToolsError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e


def select_file(nzb: Nzb, name: str) -> NzbFile:
    file = nzb.get_file(name)
    if file is None:
        msg = f"file {name} not found"
        raise FileNotInManifestError(msg, name=name)
    return file


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Fetch byte ranges of Usenet files described by NZB manifests."""
    configure_logging(verbose)


@app.command()
def get(
    source: str = typer.Argument(..., metavar="INPUT", help="NZB path or http(s) URL"),
    filename: str = typer.Argument(..., help="File name inside the NZB"),
    server: ServerOption = "",
    config: ConfigOption = None,
    hostname: HostOption = "",
    port: PortOption = 0,
    username: UserOption = "",
    password: PasswordOption = "",
    ssl: SslOption = False,
    start: int = typer.Option(0, "--start", help="First byte of the range"),
    end: int | None = typer.Option(None, "--end", help="Last byte of the range (inclusive)"),
    out: Path | None = typer.Option(None, "-o", "--out", help="Write to PATH instead of stdout"),
) -> None:
    """Write a byte range of one file to stdout or a file."""
    with reported_errors():
        resolved = resolve_server(
            server=server,
            config_path=config,
            hostname=hostname,
            port=port,
            username=username,
            password=password,
            use_ssl=ssl,
        )
        asyncio.run(_get(source, filename, resolved, start, end, out))


async def _get(
    source: str,
    filename: str,
    server: ServerConfig,
    start: int,
    end: int | None,
    out: Path | None,
) -> None:
    file = select_file(await load_nzb(source), filename)
    byte_range = ByteRange(start, file.size - 1 if end is None else end)
    # Reject a bad range before connecting
    if byte_range.end >= file.size:
        msg = f"Invalid range {byte_range.start}-{byte_range.end} for file size {file.size}"
        raise RangeOutOfBoundsError(
            msg, start=byte_range.start, end=byte_range.end, size=file.size
        )
    plan_pieces(file.segments, byte_range)

    async with NzbClient(server) as client:
        if out is None or str(out) == "-":
            stdout = typer.get_binary_stream("stdout")
            await client.fetch_range(file, byte_range, stdout)
            stdout.flush()
        else:
            await client.download_to_file(file, out, byte_range)


@app.command()
def check(
    source: str = typer.Argument(..., metavar="INPUT", help="NZB path or http(s) URL"),
    filename: str = typer.Argument("", help="Only check this file"),
    server: ServerOption = "",
    config: ConfigOption = None,
    hostname: HostOption = "",
    port: PortOption = 0,
    username: UserOption = "",
    password: PasswordOption = "",
    ssl: SslOption = False,
    method: str = typer.Option("STAT", "--method", help="STAT, HEAD, BODY or ARTICLE"),
) -> None:
    """Report segments missing from the server."""
    method = method.upper()
    if method not in CHECK_METHODS:
        msg = f"must be one of {', '.join(CHECK_METHODS)}"
        raise typer.BadParameter(msg, param_hint="--method")

    with reported_errors():
        resolved = resolve_server(
            server=server,
            config_path=config,
            hostname=hostname,
            port=port,
            username=username,
            password=password,
            use_ssl=ssl,
        )
        asyncio.run(_check(source, filename, resolved, method))


async def _check(source: str, filename: str, server: ServerConfig, method: str) -> None:
    nzb = await load_nzb(source)
    files = [select_file(nzb, filename)] if filename else list(nzb.files)

    async with NzbClient(server) as client:
        for file in files:
            typer.echo(f"Checking {file.name}")
            report = await client.check_file(file, method)
            for missing in report.missing:
                typer.echo(
                    f"Article {missing.message_id} of file {file.name} is missing "
                    f"(response: {missing.response})"
                )
            typer.echo(f"Checked {file.name} in {report.elapsed:.3f}s")


@app.command()
def validate(
    config: ConfigOption = None,
    check: bool = typer.Option(False, "--check", help="Connect and authenticate to each server"),
    server: str = typer.Option("", "--server", help="Only validate this server"),
) -> None:
    """Validate configured servers."""
    with reported_errors():
        servers_config = load_servers_config(config)
        servers = servers_config.servers
        if server:
            entry = servers_config.server(server)
            if entry is None:
                msg = f"server {server} not found in config"
                raise ServerNotFoundError(msg, name=server)
            servers = (entry,)
        if not servers:
            msg = "no servers configured"
            raise ConfigError(msg)

        statuses = asyncio.run(validate_servers(servers, check=check, config=NzbConfig()))

    for status in statuses:
        typer.echo(f"Server {status.name}: {status.detail}")
    if not all(status.ok for status in statuses):
        typer.echo("error: some checks failed", err=True)
        raise typer.Exit(code=1)


@app.command()
def extract(
    source: str = typer.Argument(..., metavar="INPUT", help="NZB path or http(s) URL"),
    pattern: str = typer.Argument(..., help="Glob (or regex with --regex) matched against file names"),
    regex: bool = typer.Option(False, "--regex", help="Treat PATTERN as a regular expression"),
) -> None:
    """Print an NZB holding only the matching files."""
    with reported_errors():
        nzb = asyncio.run(load_nzb(source))
        typer.echo(render_nzb(extract_files(nzb, pattern, regex=regex)), nl=False)


@app.command()
def combine(
    target: str = typer.Argument(..., help="NZB whose head is kept"),
    sources: list[str] = typer.Argument(..., help="NZBs whose files are appended"),
) -> None:
    """Print an NZB with the files of all inputs."""
    with reported_errors():
        combined = asyncio.run(_load_all([target, *sources]))
        typer.echo(render_nzb(combine_nzbs(combined[0], *combined[1:])), nl=False)


async def _load_all(sources: list[str]) -> list[Nzb]:
    return [await load_nzb(source) for source in sources]


@app.command()
def serve(
    source: str = typer.Argument(..., metavar="INPUT", help="NZB path or http(s) URL"),
    address: str = typer.Option(DEFAULT_ADDRESS, "--address", help="Address to bind, e.g. :8000"),
) -> None:
    """Serve an HTML index of the files and per-file NZBs over HTTP."""
    with reported_errors():
        nzb = asyncio.run(load_nzb(source))
        server = create_index_server(nzb, address)

    typer.echo(f"Serving on {address}", err=True)
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Index server stopped", address=address)


if __name__ == "__main__":
    app()
