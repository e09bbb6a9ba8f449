"""Configuration management for Remote System Monitor."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

import yaml

SLACK_HOOK_ENV = "SLACK_HOOK_URL"
LOAD_INTERVALS = (1, 5, 15)
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class ConfigError(ValueError):
    """Raised when a configuration file cannot be turned into a Config."""


def _require(data: dict[str, Any], key: str, kind: type | tuple, where: str) -> Any:
    if key not in data:
        raise ConfigError(f"{where}: missing required field '{key}'")
    value = data[key]
    # bool is a subclass of int, never accept it for numeric fields
    if isinstance(value, bool) and kind is not bool:
        raise ConfigError(f"{where}: field '{key}' has invalid value {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"{where}: field '{key}' has invalid value {value!r}")
    return value


def _string_list(data: dict[str, Any], key: str, where: str) -> tuple[str, ...]:
    if key not in data:
        raise ConfigError(f"{where}: missing required field '{key}'")
    values = data[key]
    if not isinstance(values, list) or not values or not all(isinstance(v, str) for v in values):
        raise ConfigError(f"{where}: field '{key}' must be a non-empty list of strings")
    return tuple(values)


def _flag(data: dict[str, Any], key: str, default: bool, where: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: field '{key}' must be true or false, got {value!r}")
    return value


def _positive_number(data: dict[str, Any], key: str, default: float, where: str) -> Any:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{where}: field '{key}' must be a positive number, got {value!r}")
    return value


def _optional_string(data: dict[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{where}: field '{key}' must be a string")
    return value


@dataclass(frozen=True)
class CheckSpec(ABC):
    """Base class for a single configured check."""

    kind: ClassVar[str] = ""
    allowed_fields: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    @abstractmethod
    def parse(cls, data: dict[str, Any], where: str) -> "CheckSpec":
        """Build the check from its YAML entry, raising ConfigError on bad fields."""


@dataclass(frozen=True)
class PingCheck(CheckSpec):
    """HTTP GET every path below the server's base URL."""

    kind: ClassVar[str] = "ping"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"url", "base_url"})

    url: tuple[str, ...]
    base_url: str | None = None

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "PingCheck":
        base_url = _optional_string(data, "base_url", where)
        return cls(url=_string_list(data, "url", where), base_url=base_url)


@dataclass(frozen=True)
class TemperatureCheck(CheckSpec):
    """Read a 1-wire style sensor file."""

    kind: ClassVar[str] = "temperature"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"sensor"})

    sensor: str

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "TemperatureCheck":
        return cls(sensor=_require(data, "sensor", str, where))


@dataclass(frozen=True)
class LoadCheck(CheckSpec):
    """Compare the load average of one interval against the threshold."""

    kind: ClassVar[str] = "load"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"interval"})

    interval: int

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "LoadCheck":
        interval = _require(data, "interval", int, where)
        if interval not in LOAD_INTERVALS:
            raise ConfigError(f"{where}: interval must be one of 1, 5 or 15, got {interval}")
        return cls(interval=interval)


@dataclass(frozen=True)
class FolderCountCheck(CheckSpec):
    """Count the direct subfolders of each path."""

    kind: ClassVar[str] = "folder_count"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"path", "max_folders"})

    path: tuple[str, ...]
    max_folders: int = 100

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "FolderCountCheck":
        max_folders = data.get("max_folders", 100)
        if isinstance(max_folders, bool) or not isinstance(max_folders, int):
            raise ConfigError(f"{where}: field 'max_folders' must be an integer")
        if not -(2**31) <= max_folders < 2**31:
            raise ConfigError(f"{where}: field 'max_folders' is out of range")
        return cls(path=_string_list(data, "path", where), max_folders=max_folders)


@dataclass(frozen=True)
class CustomCommandCheck(CheckSpec):
    """Run a command and surface its output verbatim."""

    kind: ClassVar[str] = "custom_command"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"command"})

    command: str

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "CustomCommandCheck":
        return cls(command=_require(data, "command", str, where))


@dataclass(frozen=True)
class StaleDirectoriesCheck(CheckSpec):
    """List directories whose content has not changed for `cutoff` days."""

    kind: ClassVar[str] = "stale_directories"
    allowed_fields: ClassVar[frozenset[str]] = frozenset({"loc", "cutoff"})

    loc: str
    cutoff: int

    @classmethod
    def parse(cls, data: dict[str, Any], where: str) -> "StaleDirectoriesCheck":
        cutoff = _require(data, "cutoff", int, where)
        if not 0 <= cutoff <= 65535:
            raise ConfigError(f"{where}: cutoff must be between 0 and 65535, got {cutoff}")
        return cls(loc=_require(data, "loc", str, where), cutoff=cutoff)


CHECK_KINDS: dict[str, type[CheckSpec]] = {
    cls.kind: cls
    for cls in (
        PingCheck,
        TemperatureCheck,
        LoadCheck,
        FolderCountCheck,
        CustomCommandCheck,
        StaleDirectoriesCheck,
    )
}


def parse_check(server_name: str, check_name: str, data: Any) -> CheckSpec:
    """Turn one YAML check entry into its CheckSpec.

    The entry must name its variant in a ``kind`` field. Unknown kinds and
    fields that do not belong to the kind are rejected.
    """
    where = f"server '{server_name}', check '{check_name}'"
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a mapping")
    if "kind" not in data:
        raise ConfigError(f"{where}: missing required field 'kind'")

    kind = data["kind"]
    spec_cls = CHECK_KINDS.get(kind) if isinstance(kind, str) else None
    if spec_cls is None:
        known = ", ".join(sorted(CHECK_KINDS))
        raise ConfigError(f"{where}: unknown check kind {kind!r} (expected one of: {known})")

    unexpected = set(data) - {"kind"} - spec_cls.allowed_fields
    if unexpected:
        raise ConfigError(
            f"{where}: unexpected field(s) for kind '{kind}': {', '.join(sorted(unexpected))}"
        )
    return spec_cls.parse(data, where)


def check_to_dict(spec: CheckSpec) -> dict[str, Any]:
    """Serialize a CheckSpec back to its YAML shape."""
    data: dict[str, Any] = {"kind": spec.kind}
    for name in sorted(spec.allowed_fields):
        value = getattr(spec, name)
        if value is None:
            continue
        data[name] = list(value) if isinstance(value, tuple) else value
    return data


@dataclass
class ServerConfig:
    """Configuration for a single monitored server."""

    name: str
    host: str
    user: str = ""
    port: int = 22
    private_key: str | None = None
    password: str | None = None
    timeout: float = 10
    local: bool = False  # If true, run commands on this machine
    enabled: bool = True
    checks: dict[str, CheckSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"Server entry must be a mapping, got {data!r}")
        name = _require(data, "name", str, "server")
        where = f"server '{name}'"
        local = _flag(data, "local", False, where)

        host = data.get("host", "localhost" if local else None)
        if not isinstance(host, str):
            raise ConfigError(f"{where}: missing required field 'host'")
        user = data.get("user", "")
        if not isinstance(user, str):
            raise ConfigError(f"{where}: field 'user' must be a string")
        if not local and not user:
            raise ConfigError(f"{where}: missing required field 'user'")

        port = data.get("port", 22)
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ConfigError(f"{where}: port must be between 1 and 65535, got {port!r}")

        raw_checks = data.get("checks") or {}
        if not isinstance(raw_checks, dict):
            raise ConfigError(f"{where}: 'checks' must be a mapping of name to check")
        checks = {
            str(check_name): parse_check(name, str(check_name), check_data)
            for check_name, check_data in raw_checks.items()
        }

        return cls(
            name=name,
            host=host,
            user=user,
            port=port,
            private_key=_optional_string(data, "private_key", where),
            password=_optional_string(data, "password", where),
            timeout=_positive_number(data, "timeout", 10, where),
            local=local,
            enabled=_flag(data, "enabled", True, where),
            checks=checks,
        )

    def sorted_checks(self) -> list[tuple[str, CheckSpec]]:
        """Checks in lexicographic name order."""
        return sorted(self.checks.items(), key=lambda item: item[0])


@dataclass
class NotifierConfig:
    """Configuration for report notifiers."""

    slack: dict[str, Any] | None = None
    telegram: dict[str, Any] | None = None
    webhook: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotifierConfig":
        slack = data.get("slack")
        hook_url = os.environ.get(SLACK_HOOK_ENV)
        if hook_url:
            slack = {**(slack or {}), "webhook_url": hook_url}
        return cls(
            slack=slack,
            telegram=data.get("telegram"),
            webhook=data.get("webhook"),
        )

    def is_empty(self) -> bool:
        return not (self.slack or self.telegram or self.webhook)


@dataclass
class Config:
    """Main configuration for Remote System Monitor."""

    servers: list[ServerConfig] = field(default_factory=list)
    notifiers: NotifierConfig = field(default_factory=NotifierConfig)
    parallel_checks: bool = False
    max_workers: int = 4
    http_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {path}: {e}") from e

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        raw_servers = data.get("servers") or []
        if not isinstance(raw_servers, list):
            raise ConfigError("'servers' must be a list")

        servers = [ServerConfig.from_dict(s) for s in raw_servers]
        names = [s.name for s in servers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigError(f"Duplicate server name(s): {', '.join(duplicates)}")

        max_workers = data.get("max_workers", 4)
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {max_workers!r}")

        log_level = data.get("log_level", "INFO")
        if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return cls(
            servers=servers,
            notifiers=NotifierConfig.from_dict(data.get("notifiers") or {}),
            parallel_checks=_flag(data, "parallel_checks", False, "config"),
            max_workers=max_workers,
            http_timeout=_positive_number(data, "http_timeout", 10.0, "config"),
            log_level=log_level.upper(),
        )

    def get_enabled_servers(self) -> list[ServerConfig]:
        """Get list of enabled servers, in configuration order."""
        return [s for s in self.servers if s.enabled]

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self._to_dict()
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def _to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        servers = []
        for server in self.servers:
            server_data: dict[str, Any] = {"name": server.name, "host": server.host}
            if server.local:
                server_data["local"] = True
            else:
                server_data["port"] = server.port
                server_data["user"] = server.user
            if server.private_key:
                server_data["private_key"] = server.private_key
            if not server.enabled:
                server_data["enabled"] = False
            server_data["checks"] = {
                name: check_to_dict(spec) for name, spec in server.sorted_checks()
            }
            servers.append(server_data)

        notifiers = {
            key: value
            for key, value in (
                ("slack", self.notifiers.slack),
                ("telegram", self.notifiers.telegram),
                ("webhook", self.notifiers.webhook),
            )
            if value
        }

        return {
            "log_level": self.log_level,
            "parallel_checks": self.parallel_checks,
            "max_workers": self.max_workers,
            "http_timeout": self.http_timeout,
            "notifiers": notifiers,
            "servers": servers,
        }


def create_example_config() -> Config:
    """Create an example configuration for documentation."""
    return Config(
        servers=[
            ServerConfig(
                name="web-1",
                host="web-1.example.org",
                user="monitor",
                private_key="~/.ssh/id_ed25519",
                checks={
                    "cpu-load": LoadCheck(interval=5),
                    "endpoints": PingCheck(url=("/", "/health")),
                    "uploads": FolderCountCheck(path=("/srv/uploads",), max_folders=500),
                    "disk": CustomCommandCheck(command="df -h /"),
                },
            ),
            ServerConfig(
                name="pi-sensor",
                host="192.168.1.40",
                user="pi",
                private_key="~/.ssh/id_ed25519",
                checks={
                    "room-temperature": TemperatureCheck(
                        sensor="/sys/bus/w1/devices/28-*/w1_slave"
                    ),
                    "old-backups": StaleDirectoriesCheck(loc="/var/backups/nightly", cutoff=30),
                },
            ),
        ],
        notifiers=NotifierConfig(
            slack={"webhook_url": "https://hooks.slack.com/services/CHANGE/ME", "mention": "@all"},
        ),
    )
