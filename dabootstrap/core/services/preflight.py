"""
Preflight — hard preconditions checked before the host is touched.
"""

from __future__ import annotations

import logging
import os

from dabootstrap.core.engine.executor import BootstrapError, RunContext

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http://", "https://")


def is_https(url: str) -> bool:
    return url.lower().startswith("https://")


def is_http_url(url: str) -> bool:
    return url.lower().startswith(_HTTP_SCHEMES)


def check_preconditions(run: RunContext) -> None:
    """Fail fast on the problems no later step can recover from.

    Raises:
        BootstrapError: Not root, no license source, or an installer
            URL that is not http(s).
    """
    config = run.config

    if run.dry_run or run.registry.mock_mode:
        run.info("Root check bypassed (dry-run/mock mode).")
    elif os.geteuid() != 0:
        raise BootstrapError("Script must be run as root (sudo).")

    if not config.has_license_source:
        raise BootstrapError(
            "No license source: set LOCAL_LICENSE_PATH or LICENSE_URL "
            "(or local_license_path / license_url in the config file)."
        )

    if config.custom_installer_url and not is_http_url(config.custom_installer_url):
        raise BootstrapError("CUSTOM_INSTALLER_URL must start with http:// or https://")

    for key, value in config.summary().items():
        run.info(f"{key}: {value}")
