"""Configuration loader for tomato-exporter."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from . import constants

DEFAULT_COLLECTORS = [
    "cpu",
    "load",
    "memory",
    "network",
    "time",
    "uname",
]


DEFAULT_COLLECTOR_TIMEOUT_SECONDS: float = 10.0


class ConfigError(ValueError):
    """Raised when the configuration cannot be used to start the exporter."""


@dataclass(slots=True)
class DeviceConfig:
    address: str = constants.DEFAULT_DEVICE_ADDRESS
    username: str = constants.DEFAULT_DEVICE_USERNAME
    password: Optional[str] = None
    http_id: str = ""  # Admin session token shown in the router's page source
    request_timeout_seconds: Optional[float] = 10.0


@dataclass(slots=True)
class ServerConfig:
    host: str = constants.DEFAULT_SERVER_HOST
    port: int = constants.DEFAULT_SERVER_PORT
    path: str = constants.DEFAULT_METRICS_PATH


@dataclass(slots=True)
class CollectorsConfig:
    enabled: List[str] = field(default_factory=lambda: list(DEFAULT_COLLECTORS))
    timeout_seconds: Optional[float] = DEFAULT_COLLECTOR_TIMEOUT_SECONDS


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class ExporterConfig:
    device: DeviceConfig
    server: ServerConfig
    collectors: CollectorsConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path

    @property
    def enabled_collectors(self) -> List[str]:
        return list(self.collectors.enabled)


def _parse_list(value: str, *, default: Iterable[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_seconds(value: float) -> Optional[float]:
    # Zero or negative disables the bound.
    return value if value > 0 else None


def _normalise_path(value: str) -> str:
    value = value.strip() or constants.DEFAULT_METRICS_PATH
    return value if value.startswith("/") else f"/{value}"


def load_config(path: Optional[Path] = None) -> ExporterConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser(interpolation=None)
    parser.read_dict(
        {
            "device": {
                "address": constants.DEFAULT_DEVICE_ADDRESS,
                "username": constants.DEFAULT_DEVICE_USERNAME,
                "http_id": "",
                "request_timeout_seconds": "10.0",
            },
            "server": {
                "host": constants.DEFAULT_SERVER_HOST,
                "port": str(constants.DEFAULT_SERVER_PORT),
                "path": constants.DEFAULT_METRICS_PATH,
            },
            "collectors": {
                "enabled": ",".join(DEFAULT_COLLECTORS),
                "timeout_seconds": str(DEFAULT_COLLECTOR_TIMEOUT_SECONDS),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        device = DeviceConfig(
            address=parser.get("device", "address"),
            username=parser.get("device", "username"),
            password=parser.get("device", "password", fallback=None),
            http_id=parser.get("device", "http_id"),
            request_timeout_seconds=_optional_seconds(
                parser.getfloat("device", "request_timeout_seconds", fallback=10.0)
            ),
        )

        server = ServerConfig(
            host=parser.get("server", "host"),
            port=parser.getint(
                "server", "port", fallback=constants.DEFAULT_SERVER_PORT
            ),
            path=_normalise_path(parser.get("server", "path")),
        )

        collectors = CollectorsConfig(
            enabled=_parse_list(
                parser.get(
                    "collectors",
                    "enabled",
                    fallback=",".join(DEFAULT_COLLECTORS),
                ),
                default=DEFAULT_COLLECTORS,
            ),
            timeout_seconds=_optional_seconds(
                parser.getfloat(
                    "collectors",
                    "timeout_seconds",
                    fallback=DEFAULT_COLLECTOR_TIMEOUT_SECONDS,
                )
            ),
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid value in {config_path}: {exc}") from exc

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return ExporterConfig(
        device=device,
        server=server,
        collectors=collectors,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def validate_config(config: ExporterConfig) -> None:
    """Reject configurations the exporter cannot start with."""

    if not config.device.address.strip():
        raise ConfigError("[device] address must be set")
    if not config.device.http_id:
        raise ConfigError(
            "[device] http_id must be set to the router's admin session token"
        )
    if not config.collectors.enabled:
        raise ConfigError("[collectors] enabled must name at least one collector")
