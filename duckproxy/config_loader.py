"""Configuration loading from YAML files with environment variable support."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

from .core.backend import BackendSettings, build_backend_settings

logger = logging.getLogger("duckproxy")

# Default path to the config file (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"

# Environment variable to override the config path
CONFIG_PATH_ENV = "DUCKPROXY_CONFIG"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8787
DEFAULT_MODELS = (
    "gpt-4o-mini",
    "claude-3-haiku-20240307",
    "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
    "mistralai/Mixtral-8x7B-Instruct-v0.1",
)

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    if Path(path).is_absolute():
        return Path(path)
    project_root = Path(__file__).parent.parent
    return project_root / path


def resolve_env_path(config_path: Path, env_path: str | None = None) -> Path:
    """Resolve the env file path for a config file."""
    if env_path:
        return resolve_config_path(env_path)
    stem = config_path.stem
    if stem.startswith("config_"):
        suffix = stem[len("config_"):]
        return config_path.with_name(f".env_{suffix}")
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(
    path: str | None = None,
    env_path: str | None = None,
    substitute_env: bool = True,
) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to DUCKPROXY_CONFIG,
              or configs/config_default.yaml in the project root.
        env_path: Optional .env path override for env substitution.
        substitute_env: Whether to substitute environment variables in the config.

    Returns:
        Parsed configuration dictionary.

    Raises:
        RuntimeError: The config file does not exist.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH

    config_path = resolve_config_path(path)

    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise RuntimeError(f"Config file not found: {config_path}")

    env_values: dict[str, str] = {}
    if substitute_env:
        env_file = resolve_env_path(config_path, env_path)
        if env_file.exists():
            logger.info(f"Loading environment variables from {env_file}")
            env_values = load_env_values(env_file)

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if substitute_env:
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def _substitute_env_vars(
    obj: Any, env_values: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute environment variables in configuration values.

    Supports ``${VAR_NAME}`` and ``$VAR_NAME``. Unset variables keep their
    literal placeholder and a warning is logged.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = os.getenv(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj


# =============================================================================
# Typed settings
# =============================================================================


def _get(mapping: Mapping[str, Any] | None, key: str, default: Any = None) -> Any:
    if not isinstance(mapping, Mapping):
        return default
    value = mapping.get(key)
    return default if value is None else value


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Expected an integer, got {value!r}; using {default}")
        return default


def _to_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    if value is None:
        return default
    return bool(value)


def _to_str_list(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
    else:
        return default
    return tuple(item for item in items if item) or default


@dataclass(frozen=True)
class ProxySettings:
    """Settings for one gateway instance.

    Attributes:
        host: Interface uvicorn binds to.
        port: Listening port.
        api_key: Operator secret; empty disables the bearer key check.
        cors_origins: Origins allowed by the CORS middleware.
        log_level: Level for the ``duckproxy`` logger.
        log_to_disk: Whether per-request log files are written.
        models: Model ids listed on ``/v1/models``.
        backend: Where and how to reach the chat backend.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_key: str = ""
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    log_to_disk: bool = False
    models: tuple[str, ...] = DEFAULT_MODELS
    backend: BackendSettings = field(default_factory=BackendSettings)


def load_settings(config: Mapping[str, Any] | None = None) -> ProxySettings:
    """Build :class:`ProxySettings` from a parsed config.

    ``DUCKPROXY_HOST``, ``DUCKPROXY_PORT``, ``DUCKPROXY_API_KEY`` and
    ``DUCKPROXY_LOG_LEVEL`` take priority over the file.
    """
    config = config or {}
    proxy_section = _get(config, "proxy_settings", {})
    server = _get(proxy_section, "server", {})
    logging_section = _get(proxy_section, "logging", {})

    host = os.getenv("DUCKPROXY_HOST") or str(_get(server, "host", DEFAULT_HOST))
    port = _to_int(os.getenv("DUCKPROXY_PORT") or _get(server, "port", DEFAULT_PORT), DEFAULT_PORT)

    api_key_env = os.getenv("DUCKPROXY_API_KEY")
    api_key = api_key_env if api_key_env is not None else str(_get(proxy_section, "api_key", ""))
    if api_key.startswith("$"):
        # An unresolved placeholder means no key was provided
        api_key = ""

    log_level = os.getenv("DUCKPROXY_LOG_LEVEL") or str(_get(logging_section, "level", "INFO"))

    return ProxySettings(
        host=host,
        port=port,
        api_key=api_key,
        cors_origins=_to_str_list(_get(server, "cors_origins"), ("*",)),
        log_level=log_level.upper(),
        log_to_disk=_to_bool(_get(logging_section, "log_to_disk"), False),
        models=_to_str_list(_get(config, "models"), DEFAULT_MODELS),
        backend=build_backend_settings(_get(config, "backend", {})),
    )
