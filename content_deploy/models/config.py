"""Configuration data models"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Optional, Any, Mapping, Tuple

from ..api.exceptions import ConfigError
from ..constants import (
    REQUIRED_KEYS,
    KEY_UPLOAD_PATH,
    KEY_INSTALL_PREFIX,
    KEY_PACKAGE_BASE_PATH,
    KEY_EXPLODE_ROOT,
    KEY_DEFAULT_AUTHOR_PORT,
    KEY_DEFAULT_PUBLISH_PORT,
    KEY_BUILD_USER,
    KEY_MAX_PACKAGE_SIZE,
    KEY_HTTP_TIMEOUT,
    KEY_REFERENCE_ROOT,
    KEY_SUCCESS_TOKEN,
    KEY_SERVERS,
    SERVER_KEY_PATTERN,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_REFERENCE_ROOT,
    DEFAULT_SUCCESS_TOKEN,
)

# (environment token, pool, role)
ServerKey = Tuple[str, str, str]


def strip_quotes(value: str) -> str:
    """Remove one pair of surrounding single or double quotes"""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_port(value: str, key: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid port '{value}' in config key '{key}'")
    if not 0 < port < 65536:
        raise ConfigError(f"Port {port} out of range in config key '{key}'")
    return port


@dataclass(frozen=True)
class ServerEntry:
    """A single `host[:port]` entry of a server list"""

    host: str
    port: Optional[int] = None

    @classmethod
    def parse(cls, raw: str, key: str) -> 'ServerEntry':
        """Parse a `host[:port]` string

        Args:
            raw: Server entry text
            key: Config key the entry came from (for error messages)

        Returns:
            ServerEntry
        """
        host, _, port = raw.strip().partition(':')
        host = host.strip()
        if not host:
            raise ConfigError(f"Server entry '{raw}' in config key '{key}' has no host")
        port = port.strip()
        return cls(host=host, port=_parse_port(port, key) if port else None)


def parse_server_list(value: Any, key: str) -> List[ServerEntry]:
    """Parse a comma separated (or YAML list) server list, dropping empty entries"""
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = str(value).split(',')

    return [ServerEntry.parse(item, key) for item in items if item.strip()]


@dataclass(frozen=True)
class Credentials:
    """Basic auth credentials for the package manager"""

    username: str
    password: str

    @classmethod
    def parse(cls, raw: str) -> 'Credentials':
        """Parse a `username:password` string"""
        username, _, password = strip_quotes(raw).partition(':')
        username = strip_quotes(username)
        password = strip_quotes(password)

        if not username:
            raise ConfigError(f"Invalid {KEY_BUILD_USER} value (username missing)")
        if not password:
            raise ConfigError(f"Invalid {KEY_BUILD_USER} value (password missing)")

        return cls(username=username, password=password)

    def as_auth(self) -> Tuple[str, str]:
        return self.username, self.password

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class DeployConfig:
    """Immutable deployment configuration"""

    upload_path: str
    install_prefix: str
    package_base_path: str
    explode_root: Path
    default_author_port: int
    default_publish_port: int
    credentials: Credentials
    max_package_size: Optional[int] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    reference_root: Path = Path(DEFAULT_REFERENCE_ROOT)
    success_token: str = DEFAULT_SUCCESS_TOKEN
    build_allowed: Mapping[str, str] = field(default_factory=dict)
    env_tokens: Mapping[str, str] = field(default_factory=dict)
    server_table: Mapping[ServerKey, Tuple[ServerEntry, ...]] = field(default_factory=dict)
    server_sources: Mapping[ServerKey, Tuple[str, ...]] = field(default_factory=dict)
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> 'DeployConfig':
        """Create and validate a configuration from a key-value mapping

        Args:
            data: Flat key-value pairs, optionally with a nested `servers` table
            source: Where the data was loaded from (for error messages)

        Returns:
            DeployConfig

        Raises:
            ConfigError: If a required key is missing or a value is invalid
        """
        data = dict(data or {})
        servers = data.pop(KEY_SERVERS, None)
        props = {
            str(key).strip(): strip_quotes(_scalar_to_str(value))
            for key, value in data.items()
            if value is not None
        }
        where = source or "configuration"

        for key in REQUIRED_KEYS:
            if not props.get(key):
                raise ConfigError(f"Required config key '{key}' missing in {where}")

        max_size = None
        raw_max = props.get(KEY_MAX_PACKAGE_SIZE)
        if raw_max:
            digits = re.sub(r'[^0-9]', '', raw_max)
            if not digits:
                raise ConfigError(f"Invalid {KEY_MAX_PACKAGE_SIZE} value '{raw_max}' in {where}")
            max_size = int(digits)

        timeout = DEFAULT_HTTP_TIMEOUT
        if props.get(KEY_HTTP_TIMEOUT):
            try:
                timeout = float(props[KEY_HTTP_TIMEOUT])
            except ValueError:
                raise ConfigError(
                    f"Invalid {KEY_HTTP_TIMEOUT} value '{props[KEY_HTTP_TIMEOUT]}' in {where}"
                )
            if timeout <= 0:
                raise ConfigError(f"{KEY_HTTP_TIMEOUT} must be positive in {where}")

        build_allowed = {}
        env_tokens = {}
        # an all-lowercase key wins over other spellings of the same key
        for key, value in props.items():
            key_lc = key.lower()
            if key_lc.endswith("_build_allowed"):
                environment = key_lc[:-len("_build_allowed")]
                if key == key_lc:
                    build_allowed[environment] = value
                else:
                    build_allowed.setdefault(environment, value)
            elif key_lc.endswith("_env_token"):
                env_tokens[key_lc[:-len("_env_token")]] = value.lower()

        table, sources = _build_server_table(props, servers)

        return cls(
            upload_path=props[KEY_UPLOAD_PATH],
            install_prefix=props[KEY_INSTALL_PREFIX].rstrip('/'),
            package_base_path=props[KEY_PACKAGE_BASE_PATH].rstrip('/'),
            explode_root=Path(props[KEY_EXPLODE_ROOT]),
            default_author_port=_parse_port(props[KEY_DEFAULT_AUTHOR_PORT], KEY_DEFAULT_AUTHOR_PORT),
            default_publish_port=_parse_port(props[KEY_DEFAULT_PUBLISH_PORT], KEY_DEFAULT_PUBLISH_PORT),
            credentials=Credentials.parse(props[KEY_BUILD_USER]),
            max_package_size=max_size,
            http_timeout=timeout,
            reference_root=Path(props.get(KEY_REFERENCE_ROOT) or DEFAULT_REFERENCE_ROOT),
            success_token=props.get(KEY_SUCCESS_TOKEN) or DEFAULT_SUCCESS_TOKEN,
            build_allowed=MappingProxyType(build_allowed),
            env_tokens=MappingProxyType(env_tokens),
            server_table=MappingProxyType(table),
            server_sources=MappingProxyType(sources),
            source=source,
        )


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _build_server_table(props: Dict[str, str],
                        servers: Optional[Dict[str, Any]]):
    """Build the (env token, pool, role) -> server list table

    Flat keys like `dev_kstl_aem_authors` are read first, in file order.
    A nested `servers` mapping (YAML configs) is appended after them.
    Several keys resolving to the same slot are concatenated.
    """
    table: Dict[ServerKey, List[ServerEntry]] = {}
    sources: Dict[ServerKey, List[str]] = {}

    def add(slot: ServerKey, value: Any, key: str) -> None:
        table.setdefault(slot, []).extend(parse_server_list(value, key))
        sources.setdefault(slot, []).append(key)

    for key, value in props.items():
        match = SERVER_KEY_PATTERN.match(key.lower())
        if match:
            add((match.group('env'), match.group('pool'), match.group('role')), value, key)

    if servers is not None:
        if not isinstance(servers, dict):
            raise ConfigError(f"'{KEY_SERVERS}' must be a mapping of environment to pools")
        for env, pools in servers.items():
            if not isinstance(pools, dict):
                raise ConfigError(f"'{KEY_SERVERS}.{env}' must be a mapping of pool to roles")
            for pool, roles in pools.items():
                if not isinstance(roles, dict):
                    raise ConfigError(f"'{KEY_SERVERS}.{env}.{pool}' must be a mapping of role to servers")
                for role, value in roles.items():
                    role_lc = str(role).lower()
                    if role_lc not in ("author", "publish"):
                        raise ConfigError(
                            f"Unknown role '{role}' in '{KEY_SERVERS}.{env}.{pool}'"
                        )
                    add((str(env).lower(), str(pool).lower(), role_lc), value,
                        f"{KEY_SERVERS}.{env}.{pool}.{role}")

    return (
        {slot: tuple(entries) for slot, entries in table.items()},
        {slot: tuple(keys) for slot, keys in sources.items()},
    )
