"""
Bootstrap use case — run the full provisioning sequence on this host.

This is the top-level orchestrator: it takes a resolved config, sets up
the adapter registry (real, dry-run or mock), runs the ordered step
list, writes the audit entry and returns a result the CLI can render.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dabootstrap.adapters.mock import simulated_host
from dabootstrap.adapters.registry import AdapterRegistry, default_registry
from dabootstrap.core.engine.executor import (
    BootstrapReport,
    HostFacts,
    Reporter,
    RunContext,
    Step,
    generate_run_id,
    run_steps,
)
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.persistence.audit import AuditEntry, AuditWriter
from dabootstrap.core.services import (
    firewall,
    installer,
    licensing,
    network,
    packages,
    panel,
    preflight,
    selinux,
    summary,
)

logger = logging.getLogger(__name__)


BOOTSTRAP_STEPS: list[Step] = [
    Step("preflight", "Checking preconditions", preflight.check_preconditions),
    Step("packages", "Installing prerequisites", packages.install_prerequisites),
    Step("selinux", "Checking SELinux mode", selinux.relax_selinux),
    Step("network", "Detecting primary network interface", network.detect_network),
    Step("alias", "Adding alias IP", network.add_alias),
    Step("firewall", "Configuring firewall", firewall.open_firewall),
    Step("license", "Preparing license.key", licensing.install_license),
    Step("installer", "Running custom installer", installer.run_custom_installer),
    Step("panel-config", "Updating directadmin.conf", panel.patch_panel_config),
    Step("service", "Restarting panel service", panel.restart_service),
    Step("summary", "Summary", summary.print_summary),
]


@dataclass
class BootstrapResult:
    """Result of a bootstrap run."""

    report: BootstrapReport | None = None
    config: BootstrapConfig | None = None
    facts: HostFacts = field(default_factory=HostFacts)
    mode: str = "live"
    rollback: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {
            "mode": self.mode,
            "status": self.report.status if self.report else "failed",
            "facts": self.facts.to_dict(),
            "rollback": self.rollback,
        }
        if self.error:
            result["error"] = self.error
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_bootstrap(
    config: BootstrapConfig,
    *,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    reporter: Reporter | None = None,
    confirm: Callable[[str], bool] | None = None,
    audit_path: Path | None = None,
    steps: list[Step] | None = None,
) -> BootstrapResult:
    """Provision this host according to ``config``.

    Args:
        config: Resolved configuration.
        dry_run: Run read-only probes, report everything else.
        mock_mode: Route every action to a simulated host.
        registry: Optional pre-configured adapter registry.
        reporter: Progress sink (default: logging only).
        confirm: Yes/no prompt used for interactive confirmations.
        audit_path: Append a summary line to this NDJSON ledger.
        steps: Override the step list (tests).

    Returns:
        BootstrapResult; ``error`` is set when a step failed hard.
    """
    mode = "mock" if mock_mode else "dry-run" if dry_run else "live"
    result = BootstrapResult(config=config, mode=mode)

    if registry is None:
        registry = default_registry(mock_mode=mock_mode)
        if mock_mode:
            registry.set_mock_mode(True, simulated_host(license_sha256=config.expected_sha256))

    workdir = Path(tempfile.mkdtemp(prefix="dabootstrap-"))
    run = RunContext(
        config=config,
        registry=registry,
        workdir=workdir,
        reporter=reporter or Reporter(),
        dry_run=dry_run,
    )
    if confirm is not None:
        run.confirm = confirm

    run_id = generate_run_id()
    logger.info("Starting bootstrap %s (%s)", run_id, mode)
    try:
        report = run_steps(steps if steps is not None else BOOTSTRAP_STEPS, run, run_id=run_id)
    finally:
        shutil.rmtree(workdir, ignore_errors=True)

    result.report = report
    result.facts = run.facts
    result.rollback = summary.rollback_hints(config, run.facts)
    result.error = report.error

    if audit_path is not None:
        AuditWriter(audit_path).write(
            AuditEntry(
                run_id=report.run_id,
                mode=mode,
                iface=run.facts.iface,
                connection=run.facts.connection,
                alias=config.alias_cidr,
                license_target=config.license_target if run.facts.license_installed else None,
                status=report.status,
                steps_total=report.total,
                steps_warned=report.warned,
                steps_skipped=report.skipped,
                duration_ms=report.duration_ms,
                errors=[report.error] if report.error else [],
                warnings=report.warnings,
            )
        )

    logger.info("Bootstrap %s finished: %s", run_id, report.status)
    return result
