"""
Config check use case — resolve the bootstrap configuration and report issues.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dabootstrap.core.config.loader import ConfigError, find_config_file, load_config
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.services.preflight import is_http_url, is_https


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: BootstrapConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "settings": self.config.summary() if self.config else {},
        }


def check_config(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigCheckResult:
    """Validate the bootstrap configuration the way ``run`` would see it.

    Errors are the conditions that make ``run`` fail before touching the
    host; warnings are the ones it would stop and ask about.
    """
    result = ConfigCheckResult()
    result.config_path = find_config_file(config_path, environ=environ)

    try:
        config = load_config(config_path, overrides=overrides, environ=environ)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    # Same preconditions the preflight step enforces
    if not config.has_license_source:
        result.errors.append("No license source: set LOCAL_LICENSE_PATH or LICENSE_URL.")

    if config.custom_installer_url and not is_http_url(config.custom_installer_url):
        result.errors.append("CUSTOM_INSTALLER_URL must start with http:// or https://")

    local = config.local_license_path
    if local and not os.path.isfile(local):
        if config.license_url:
            result.warnings.append(f"LOCAL_LICENSE_PATH {local} is not a file; LICENSE_URL will be used.")
        else:
            result.errors.append(f"Local license file not found: {local}")

    uses_remote_license = config.license_url and not (local and os.path.isfile(local))
    if uses_remote_license:
        if not is_https(config.license_url):
            result.warnings.append(f"LICENSE_URL is not HTTPS: {config.license_url}")
        if not config.expected_sha256:
            if config.noninteractive:
                result.errors.append(
                    "EXPECTED_SHA256 must be supplied in non-interactive mode for remote downloads."
                )
            else:
                result.warnings.append("No EXPECTED_SHA256: the downloaded license will not be verified.")

    if config.custom_installer_url and not is_https(config.custom_installer_url):
        if is_http_url(config.custom_installer_url):
            result.warnings.append("CUSTOM_INSTALLER_URL is not HTTPS.")

    if config.noninteractive and config.custom_installer_url:
        result.warnings.append("Non-interactive mode will run the custom installer without a confirmation.")

    if not config.alias_ip:
        result.warnings.append("No ALIAS_IP set: the alias step will be skipped.")

    result.valid = len(result.errors) == 0
    return result
