"""
Configuration loader — builds the BootstrapConfig for a run.

Sources are layered, later ones winning:

    defaults  <  YAML file  <  environment variables  <  CLI overrides

The YAML file is optional. It is taken from ``--config``, then the
``DAB_CONFIG`` env var, then ``./bootstrap.yml`` if present.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dabootstrap.core.models.config import BootstrapConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "bootstrap.yml"
CONFIG_ENV_VAR = "DAB_CONFIG"

# Environment variable → config field
ENV_VARS: dict[str, str] = {
    "LOCAL_LICENSE_PATH": "local_license_path",
    "LICENSE_URL": "license_url",
    "EXPECTED_SHA256": "expected_sha256",
    "ALIAS_IP": "alias_ip",
    "ALIAS_PREFIX": "alias_prefix",
    "CUSTOM_INSTALLER_URL": "custom_installer_url",
    "NONINTERACTIVE": "noninteractive",
    "SKIP_FIREWALL": "skip_firewall",
    "IFACE": "iface",
}

_BOOL_FIELDS = {"noninteractive", "skip_firewall"}
_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off", ""}


class ConfigError(Exception):
    """Raised when bootstrap configuration is invalid or unreadable."""


def find_config_file(
    explicit: Path | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> Path | None:
    """Locate the YAML config file, if any.

    An explicit path is returned even if it does not exist, so the
    caller gets a clear error instead of silently running on defaults.
    """
    if explicit is not None:
        return explicit

    env = os.environ if environ is None else environ
    from_env = env.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)

    candidate = (cwd or Path.cwd()) / CONFIG_FILE
    if candidate.is_file():
        return candidate
    return None


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean flag (1/0, yes/no), got {raw!r}")


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading bootstrap config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "bootstrap" key or be flat
    if isinstance(data.get("bootstrap"), dict):
        data = data["bootstrap"]

    unknown = sorted(set(data) - set(BootstrapConfig.model_fields))
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")

    return dict(data)


def read_environment(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect config values from the process environment."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for var, field_name in ENV_VARS.items():
        if var not in env:
            continue
        raw = env[var]
        if field_name in _BOOL_FIELDS:
            values[field_name] = _parse_bool(var, raw)
        elif raw.strip():
            values[field_name] = raw
    return values


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> BootstrapConfig:
    """Load and validate the bootstrap configuration.

    Args:
        path: Explicit YAML file. If None, ``find_config_file`` decides.
        overrides: CLI values; ``None`` entries are ignored.
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If any source is invalid.
    """
    data: dict[str, Any] = {}

    config_file = find_config_file(path, environ=environ)
    if config_file is not None:
        data.update(read_config_file(config_file))

    data.update(read_environment(environ))

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = BootstrapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid bootstrap configuration: {e}") from e

    logger.info(
        "Loaded bootstrap config (file=%s, alias=%s, installer=%s)",
        config_file or "<none>",
        config.alias_cidr or "<none>",
        "yes" if config.custom_installer_url else "no",
    )
    return config
