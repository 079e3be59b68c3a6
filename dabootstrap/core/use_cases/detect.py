"""
Detect use case — find the primary interface and its connection profile.

Read-only: runs only the network probes, so it is safe to call on a
host that has already been provisioned (e.g. to print rollback hints).
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from dabootstrap.adapters.mock import simulated_host
from dabootstrap.adapters.registry import AdapterRegistry, default_registry
from dabootstrap.core.engine.executor import BootstrapError, HostFacts, RunContext, StepReport
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.services.network import detect_connection, detect_interface
from dabootstrap.core.services.summary import rollback_hints


@dataclass
class DetectResult:
    """Result of network detection."""

    facts: HostFacts = field(default_factory=HostFacts)
    rollback: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {
            "iface": self.facts.iface,
            "iface_source": self.facts.iface_source,
            "connection": self.facts.connection,
            "rollback": self.rollback,
        }
        if self.error:
            result["error"] = self.error
        return result


def run_detect(
    config: BootstrapConfig,
    *,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
) -> DetectResult:
    """Detect the interface and connection profile without changing anything."""
    result = DetectResult()

    if registry is None:
        registry = default_registry(mock_mode=mock_mode)
        if mock_mode:
            registry.set_mock_mode(True, simulated_host())

    run = RunContext(
        config=config,
        registry=registry,
        workdir=Path(tempfile.gettempdir()),
        dry_run=True,
        current=StepReport(key="detect", title="Detect network"),
    )

    try:
        iface, source = detect_interface(run)
    except BootstrapError as e:
        result.error = str(e)
        return result

    result.facts.iface = iface
    result.facts.iface_source = source
    result.facts.connection = detect_connection(run, iface)
    result.rollback = rollback_hints(config, result.facts)
    return result
