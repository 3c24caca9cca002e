"""
nzbtools configuration.

Client tuning lives in NzbConfig; NNTP server credentials are loaded from
JSON or .env files into ServersConfig.
"""

import json
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import structlog

from nzbtools.exceptions import ConfigError, ServerNotFoundError

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "NZB_CONFIG"

_ENV_KEY_RE = re.compile(r"^NNTP_(?:([0-9]+)_)?([A-Z0-9_]+)$")
_TRUE_VALUES = frozenset({"1", "t", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "f", "false", "no", "off"})


@dataclass(frozen=True, kw_only=True)
class NzbConfig:
    """
    Attributes:
        read_timeout: Inactivity deadline for every NNTP read, in seconds.
        connect_timeout: Timeout for opening the NNTP transport, in seconds.
        http_timeout: Timeout for fetching remote NZB manifests, in seconds.
    """

    read_timeout: float = 10.0
    connect_timeout: float = 10.0
    http_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.read_timeout <= 0:
            msg = "read_timeout must be positive"
            raise ValueError(msg)
        if self.connect_timeout <= 0:
            msg = "connect_timeout must be positive"
            raise ValueError(msg)
        if self.http_timeout <= 0:
            msg = "http_timeout must be positive"
            raise ValueError(msg)


@dataclass(frozen=True, kw_only=True)
class ServerConfig:
    """Connection information for one NNTP server."""

    name: str = ""
    hostname: str = ""
    port: int = 0
    ssl: bool = False
    username: str = ""
    password: str = field(default="", repr=False)
    connections: int = 0

    @property
    def is_complete(self) -> bool:
        """Check if hostname and port are both set."""
        return bool(self.hostname) and self.port > 0


@dataclass(frozen=True, kw_only=True)
class ServersConfig:
    """Top-level configuration file contents."""

    default: str = ""
    servers: tuple[ServerConfig, ...] = ()

    def server(self, name: str = "") -> ServerConfig | None:
        """
        Look up a server by name.

        An empty name selects the configured default server.
        """
        if not name and self.default:
            name = self.default
        return next((s for s in self.servers if s.name == name), None)


def default_config_paths() -> list[Path]:
    """Candidate locations checked when no explicit path is given."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return [
        Path("nzb.json"),
        Path("nzb.config.json"),
        Path(config_home) / "nzb" / "config.json",
        Path("/etc/nzb/config.json"),
    ]


def find_config_path(path: str | Path | None = None) -> Path:
    """
    Resolve which configuration file to load.

    Args:
        path: Explicit path. Takes precedence over NZB_CONFIG and defaults.

    Raises:
        ConfigError: If no path is given and no default location exists.
    """
    if path:
        return Path(path)
    if env := os.environ.get(CONFIG_ENV_VAR):
        return Path(env)
    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
    msg = "No config path provided and none found in default locations"
    raise ConfigError(msg)


def load_servers_config(path: str | Path | None = None) -> ServersConfig:
    """
    Load server configuration from a JSON or .env file.

    Args:
        path: Config file path. See find_config_path for the lookup order.

    Returns:
        Parsed ServersConfig.

    Raises:
        ConfigError: If the file cannot be found, read or parsed.
    """
    config_path = find_config_path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot open config {config_path}"
        raise ConfigError(msg, error=str(e)) from e

    logger.debug("Loading server config", path=str(config_path))
    if config_path.suffix.lower() == ".env":
        return config_from_env_map(parse_env_text(text))

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Cannot parse config {config_path}"
        raise ConfigError(msg, error=str(e)) from e
    if not isinstance(data, dict):
        msg = f"Config {config_path} must contain a JSON object"
        raise ConfigError(msg)
    return config_from_dict(data)


def config_from_dict(data: dict[str, Any]) -> ServersConfig:
    """Build a ServersConfig from decoded JSON."""
    servers = tuple(
        ServerConfig(
            name=str(s.get("name", "")),
            hostname=str(s.get("hostname", "")),
            port=int(s.get("port", 0) or 0),
            ssl=bool(s.get("ssl", False)),
            username=str(s.get("username", "")),
            password=str(s.get("password", "")),
            connections=int(s.get("connections", 0) or 0),
        )
        for s in data.get("servers") or []
    )
    return ServersConfig(default=str(data.get("default", "")), servers=servers)


def parse_env_text(text: str) -> dict[str, str]:
    """Read KEY=VALUE lines, skipping blanks and # comments."""
    values: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        values[key.strip()] = value.strip().strip('"')
    return values


def config_from_env_map(values: dict[str, str]) -> ServersConfig:
    """
    Turn a flat env map into a ServersConfig.

    Supports NNTP_HOSTNAME, NNTP_PORT, ... for a single server, or
    NNTP_0_HOSTNAME, NNTP_1_HOSTNAME, ... for indexed servers. Indexed
    servers are read from 0 upwards until the first missing index.
    """
    indexed: dict[int, dict[str, str]] = {}
    base: dict[str, str] = {}

    for key, value in values.items():
        match = _ENV_KEY_RE.match(key)
        if match is None:
            continue
        index, name = match.groups()
        if index is None:
            base[name] = value
        else:
            indexed.setdefault(int(index), {})[name] = value

    servers: list[ServerConfig] = []
    i = 0
    while i in indexed:
        fields = indexed[i]
        servers.append(_server_from_fields(fields, fields.get("NAME") or f"server-{i}"))
        i += 1

    if not servers and base:
        servers.append(_server_from_fields(base, base.get("NAME") or "default"))

    return ServersConfig(servers=tuple(servers))


def _server_from_fields(fields: dict[str, str], name: str) -> ServerConfig:
    return ServerConfig(
        name=name,
        hostname=fields.get("HOSTNAME", ""),
        port=_parse_int(fields.get("PORT")),
        ssl=_parse_bool(fields.get("SSL")),
        username=fields.get("USERNAME", ""),
        password=fields.get("PASSWORD", ""),
        connections=_parse_int(fields.get("CONNECTIONS")),
    )


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer config value", value=value)
        return 0


def _parse_bool(value: str | None) -> bool:
    if not value:
        return False
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered not in _FALSE_VALUES:
        logger.warning("Ignoring non-boolean config value", value=value)
    return False


def resolve_server(
    *,
    server: str = "",
    config_path: str | Path | None = None,
    hostname: str = "",
    port: int = 0,
    username: str = "",
    password: str = "",
    use_ssl: bool = False,
) -> ServerConfig:
    """
    Merge explicit connection values over a named config entry.

    Explicit values win; the config entry only fills the gaps. SSL is enabled
    if either side asks for it. Without a server name no config is read.

    Raises:
        ServerNotFoundError: If the named server is not configured.
        ConfigError: If the config file cannot be loaded.
    """
    explicit = ServerConfig(
        name=server,
        hostname=hostname,
        port=port,
        ssl=use_ssl,
        username=username,
        password=password,
    )
    if not server:
        return explicit

    configured = load_servers_config(config_path).server(server)
    if configured is None:
        msg = f"Server {server} not found in config"
        raise ServerNotFoundError(msg, name=server)

    return replace(
        configured,
        hostname=hostname or configured.hostname,
        port=port or configured.port,
        username=username or configured.username,
        password=password or configured.password,
        ssl=use_ssl or configured.ssl,
    )
