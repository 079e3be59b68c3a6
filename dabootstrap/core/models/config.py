"""
Bootstrap configuration model.

Loaded by ``dabootstrap.core.config.loader`` from defaults, an optional
YAML file, environment variables and CLI overrides (in that order).
"""

from __future__ import annotations

import ipaddress

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_LICENSE_TARGET = "/usr/local/directadmin/conf/license.key"
DEFAULT_PANEL_CONFIG = "/usr/local/directadmin/conf/directadmin.conf"

DEFAULT_PACKAGES = [
    "curl",
    "wget",
    "iproute",
    "NetworkManager",
    "firewalld",
    "perl",
    "policycoreutils-python-utils",
]


class BootstrapConfig(BaseModel):
    """Every knob the bootstrap reads.

    Values left as ``None`` mean "not provided": the alias step is
    skipped without ``alias_ip``, the installer step without
    ``custom_installer_url``.
    """

    # License source
    local_license_path: str | None = None
    license_url: str | None = None
    expected_sha256: str | None = None

    # Network
    alias_ip: str | None = None
    alias_prefix: int = 32
    iface: str | None = None            # manual interface override
    probe_address: str = "8.8.8.8"

    # Installer
    custom_installer_url: str | None = None
    preview_lines: int = Field(default=60, ge=0)

    # Behaviour
    noninteractive: bool = False
    skip_firewall: bool = False

    # Host layout
    license_target: str = DEFAULT_LICENSE_TARGET
    license_owner: str = "diradmin:diradmin"
    panel_config: str = DEFAULT_PANEL_CONFIG
    service_name: str = "directadmin"

    firewall_ports: list[str] = Field(default_factory=lambda: ["2222/tcp"])
    firewall_services: list[str] = Field(default_factory=lambda: ["http", "https"])
    prerequisite_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))

    # Downloads
    download_retries: int = Field(default=3, ge=0)
    download_timeout: int = Field(default=120, gt=0)

    @field_validator(
        "local_license_path",
        "license_url",
        "expected_sha256",
        "alias_ip",
        "iface",
        "custom_installer_url",
        mode="before",
    )
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("expected_sha256")
    @classmethod
    def _normalize_sha256(cls, value: str | None) -> str | None:
        if value is None:
            return None
        digest = value.removeprefix("sha256:").lower()
        if len(digest) != 64 or any(c not in "0123456789abcdef" for c in digest):
            raise ValueError("expected_sha256 must be a 64-character hex SHA-256 digest")
        return digest

    @field_validator("alias_ip")
    @classmethod
    def _validate_alias_ip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            return str(ipaddress.ip_address(value))
        except ValueError as e:
            raise ValueError(f"alias_ip is not a valid IP address: {value}") from e

    @model_validator(mode="after")
    def _check_prefix(self) -> BootstrapConfig:
        max_prefix = 32
        if self.alias_ip and ipaddress.ip_address(self.alias_ip).version == 6:
            max_prefix = 128
        if not 0 <= self.alias_prefix <= max_prefix:
            raise ValueError(f"alias_prefix must be between 0 and {max_prefix}")
        return self

    @property
    def alias_cidr(self) -> str | None:
        """``ip/prefix`` of the alias, or None when no alias is configured."""
        if not self.alias_ip:
            return None
        return f"{self.alias_ip}/{self.alias_prefix}"

    @property
    def alias_family(self) -> str:
        """nmcli setting prefix for the alias: ``ipv4`` or ``ipv6``."""
        if self.alias_ip and ipaddress.ip_address(self.alias_ip).version == 6:
            return "ipv6"
        return "ipv4"

    @property
    def has_license_source(self) -> bool:
        return bool(self.local_license_path or self.license_url)

    def summary(self) -> dict[str, str]:
        """Operator-facing view of the run settings (checksum value hidden)."""
        return {
            "LOCAL_LICENSE_PATH": self.local_license_path or "<none>",
            "LICENSE_URL": self.license_url or "<none>",
            "EXPECTED_SHA256": "(provided)" if self.expected_sha256 else "(not provided)",
            "ALIAS": self.alias_cidr or "<none>",
            "IFACE": self.iface or "<auto>",
            "CUSTOM_INSTALLER_URL": self.custom_installer_url or "<none>",
            "NONINTERACTIVE": "1" if self.noninteractive else "0",
            "SKIP_FIREWALL": "1" if self.skip_firewall else "0",
        }
