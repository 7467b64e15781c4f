"""Configuration module — frozen dataclass loaded from YAML, env vars and CLI args."""

import argparse
import logging
import os
from dataclasses import dataclass, fields

import yaml

from datadog_logs_sink.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http-intake.logs.datadoghq.com"


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (list, dict)):
        raise TypeError(f"expected a boolean, got {type(value).__name__}")
    return str(value).strip().lower() in ("true", "1", "yes")


def _as_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return str(value)


def _as_int(value) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)


def _as_float(value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class WriterConfig:
    host: str = DEFAULT_HOST
    port: int = 443
    api_key: str = ""
    use_ssl: bool = True
    max_batch_length: int = 50
    tags: str = ""
    hostname: str = ""
    service: str = ""
    request_timeout: float = 10.0
    proxy_url: str = ""
    proxy_port: int = 0


# env var name -> (field name, converter)
ENV_VARS = {
    "DD_URL": ("host", _as_str),
    "DD_PORT": ("port", _as_int),
    "DD_API_KEY": ("api_key", _as_str),
    "DD_USE_SSL": ("use_ssl", _parse_bool),
    "DD_MAX_BATCH_LENGTH": ("max_batch_length", _as_int),
    "DD_TAGS": ("tags", _as_str),
    "DD_HOSTNAME": ("hostname", _as_str),
    "DD_SERVICE": ("service", _as_str),
    "DD_REQUEST_TIMEOUT": ("request_timeout", _as_float),
    "DD_PROXY_URL": ("proxy_url", _as_str),
    "DD_PROXY_PORT": ("proxy_port", _as_int),
}

# field name -> converter, shared by the YAML loader
FIELD_CONVERTERS = {field_name: convert for field_name, convert in ENV_VARS.values()}


def validate_config(config: WriterConfig) -> WriterConfig:
    """Reject configurations the writer cannot operate with."""
    for name in ("host", "api_key", "tags", "hostname", "service", "proxy_url"):
        if not isinstance(getattr(config, name), str):
            raise ConfigurationError(
                f"{name} must be a string, got {type(getattr(config, name)).__name__}"
            )
    for name in ("port", "proxy_port"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if isinstance(config.request_timeout, bool) or not isinstance(
        config.request_timeout, (int, float)
    ):
        raise ConfigurationError(
            f"request_timeout must be a number, got {config.request_timeout!r}"
        )
    if not config.api_key:
        raise ConfigurationError("An API key is required")
    if not config.host:
        raise ConfigurationError("An intake host is required")
    if not 0 < config.port < 65536:
        raise ConfigurationError(f"Port must be in 1..65535, got {config.port}")
    if isinstance(config.max_batch_length, bool) or not isinstance(
        config.max_batch_length, int
    ):
        raise ConfigurationError(
            f"max_batch_length must be an integer, got {config.max_batch_length!r}"
        )
    if config.max_batch_length < 1:
        raise ConfigurationError(
            f"max_batch_length must be positive, got {config.max_batch_length}"
        )
    if config.request_timeout <= 0:
        raise ConfigurationError(
            f"request_timeout must be positive, got {config.request_timeout}"
        )
    if config.proxy_url and not 0 < config.proxy_port < 65536:
        raise ConfigurationError(
            f"proxy_port must be in 1..65535 when proxy_url is set, got {config.proxy_port}"
        )
    return config


def load_yaml_config(path: str | None) -> dict:
    """Load writer settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(WriterConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    settings = {}
    for key, value in data.items():
        if key not in known:
            continue
        try:
            settings[key] = FIELD_CONVERTERS[key](value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid value for {key} in {path}: {value!r} ({exc})"
            ) from exc
    logger.info("Loaded YAML config from %s", path)
    return settings


def build_arg_parser() -> argparse.ArgumentParser:
    """Flags shared by every command that builds a WriterConfig."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--url", dest="host", type=str, default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--api-key", type=str, default=None)
    parser.add_argument("--no-ssl", action="store_true", default=False)
    parser.add_argument("--max-batch-length", type=int, default=None)
    parser.add_argument("--tags", type=str, default=None)
    parser.add_argument("--hostname", type=str, default=None)
    parser.add_argument("--service", type=str, default=None)
    parser.add_argument("--request-timeout", type=float, default=None)
    parser.add_argument("--proxy-url", type=str, default=None)
    parser.add_argument("--proxy-port", type=int, default=None)
    return parser


def config_from_args(args: argparse.Namespace) -> WriterConfig:
    """Build and validate a WriterConfig: defaults <- YAML <- env vars <- CLI args."""
    kwargs: dict = {}

    yaml_path = args.config or os.environ.get("DD_CONFIG_FILE")
    kwargs.update(load_yaml_config(yaml_path))

    for env_name, (field_name, convert) in ENV_VARS.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            kwargs[field_name] = convert(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from exc

    for field_name in (
        "host", "port", "api_key", "max_batch_length", "tags", "hostname",
        "service", "request_timeout", "proxy_url", "proxy_port",
    ):
        value = getattr(args, field_name, None)
        if value is not None:
            kwargs[field_name] = value
    if getattr(args, "no_ssl", False):
        kwargs["use_ssl"] = False

    try:
        config = WriterConfig(**kwargs)
    except TypeError as exc:
        raise ConfigurationError(str(exc)) from exc
    return validate_config(config)


def load_config(argv: list[str] | None = None) -> WriterConfig:
    """Build WriterConfig from a YAML file, env vars and CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    """
    parser = argparse.ArgumentParser(
        description="Datadog logs sink writer", parents=[build_arg_parser()]
    )
    args, _ = parser.parse_known_args(argv)
    return config_from_args(args)
