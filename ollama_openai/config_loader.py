"""Configuration loading from YAML, .env files and the environment.

Precedence, lowest to highest: ``ProxyConfig`` defaults, the YAML file,
the ``.env`` file, then process environment variables.
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

from .core.exceptions import ConfigurationError

logger = logging.getLogger("ollama-openai")

DEFAULT_CONFIG_PATH = "configs/config.yaml"
CONFIG_PATH_ENV = "OLLAMA_OPENAI_CONFIG"

# Environment variable -> ProxyConfig field
ENV_OVERRIDES = {
    "HOST": "host",
    "PORT": "port",
    "API_KEY": "api_key",
    "OLLAMA_URL": "ollama_url",
    "OLLAMA_MODEL": "ollama_model",
    "OLLAMA_TIMEOUT": "request_timeout",
    "LOG_LEVEL": "log_level",
}

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable process-wide settings passed into the translators and client."""

    host: str = "0.0.0.0"
    port: int = 8080
    api_key: Optional[str] = None
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:latest"
    request_timeout: float = 300.0
    stream_queue_size: int = 100
    stream_stall_timeout: float = 30.0
    pin_completion_model: bool = False
    cors_allow_origins: tuple[str, ...] = field(default=("*",))
    log_level: str = "INFO"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)


def resolve_config_path(path: str) -> Path:
    """Resolve a config path relative to the working directory if needed."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path.cwd() / candidate


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(
    path: Optional[str] = None,
    env_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProxyConfig:
    """Build the proxy configuration.

    Args:
        path: YAML config file. Defaults to $OLLAMA_OPENAI_CONFIG, then
            configs/config.yaml when it exists. An explicit path that does
            not exist is an error.
        env_path: .env file to read. Defaults to ".env" in the working
            directory.
        environ: Environment mapping, ``os.environ`` by default.

    Returns:
        The resolved ProxyConfig.
    """
    environ = os.environ if environ is None else environ

    env_file = resolve_config_path(env_path or ".env")
    env_values = load_env_values(env_file)
    if env_values:
        logger.info(f"Loaded {len(env_values)} values from {env_file}")
    elif env_path:
        logger.warning("Env file %s not found or empty, using environment only", env_file)

    explicit = path or environ.get(CONFIG_PATH_ENV)
    data: dict[str, Any] = {}
    if explicit:
        config_path = resolve_config_path(explicit)
        if not config_path.exists():
            logger.error(f"Config file not found: {config_path}")
            raise ConfigurationError(f"Config file not found: {config_path}")
        data = _read_yaml(config_path, env_values, environ)
    else:
        default_path = resolve_config_path(DEFAULT_CONFIG_PATH)
        if default_path.exists():
            data = _read_yaml(default_path, env_values, environ)

    values = _flatten_yaml(data)

    # .env first, real environment wins
    for source in (env_values, environ):
        for env_name, field_name in ENV_OVERRIDES.items():
            raw = source.get(env_name)
            if raw is not None and raw != "":
                values[field_name] = raw

    return _build_config(values)


def _read_yaml(
    config_path: Path, env_values: Mapping[str, str], environ: Mapping[str, str]
) -> dict[str, Any]:
    logger.info(f"Loading configuration from {config_path}")
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    data = _substitute_env_vars(data, env_values, environ)
    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return section


def _flatten_yaml(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map the nested YAML layout onto ProxyConfig field names."""
    server = _section(data, "server")
    auth = _section(data, "auth")
    ollama = _section(data, "ollama")
    streaming = _section(data, "streaming")
    completions = _section(data, "completions")
    cors = _section(data, "cors")
    logging_cfg = _section(data, "logging")

    sections = {
        "host": server.get("host"),
        "port": server.get("port"),
        "api_key": auth.get("api_key"),
        "ollama_url": ollama.get("url"),
        "ollama_model": ollama.get("default_model"),
        "request_timeout": ollama.get("timeout"),
        "stream_queue_size": streaming.get("queue_size"),
        "stream_stall_timeout": streaming.get("stall_timeout"),
        "pin_completion_model": completions.get("pin_default_model"),
        "cors_allow_origins": cors.get("allow_origins"),
        "log_level": logging_cfg.get("level"),
    }
    return {key: value for key, value in sections.items() if value is not None}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _build_config(values: Mapping[str, Any]) -> ProxyConfig:
    config = ProxyConfig()
    converters = {
        "port": int,
        "stream_queue_size": int,
        "request_timeout": float,
        "stream_stall_timeout": float,
        "pin_completion_model": _parse_bool,
    }
    known = {f.name for f in fields(ProxyConfig)}
    updates: dict[str, Any] = {}
    for name, raw in values.items():
        if name not in known:
            continue
        if name == "cors_allow_origins":
            if isinstance(raw, str):
                raw = [item.strip() for item in raw.split(",") if item.strip()]
            updates[name] = tuple(str(item) for item in raw)
            continue
        convert = converters.get(name, str)
        try:
            updates[name] = convert(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from exc

    if updates.get("port") is not None and not 0 < updates["port"] < 65536:
        raise ConfigurationError(f"Invalid value for port: {updates['port']!r}")
    if updates.get("stream_queue_size") is not None and updates["stream_queue_size"] < 1:
        raise ConfigurationError("stream_queue_size must be at least 1")

    config = replace(config, **updates)
    if not config.api_key:
        config = replace(config, api_key=None)
    return config


def _substitute_env_vars(
    obj: Any,
    env_values: Optional[Mapping[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Any:
    """Recursively substitute ${VAR} and $VAR placeholders in config values.

    Unset variables keep their literal placeholder and log a warning.
    """
    env_values = env_values or {}
    environ = os.environ if environ is None else environ

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values, environ) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values, environ) for item in obj]
    if isinstance(obj, str):

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = environ.get(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj
