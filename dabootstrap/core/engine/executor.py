"""
Engine executor — the sequential step runner.

A bootstrap is an ordered list of steps. Each step is a plain function
that receives the shared ``RunContext`` and issues host actions through
it. The runner executes steps in order, records a ``StepReport`` per
step, and stops at the first ``BootstrapError``.

Flow:
    steps → run each (actions → receipts) → collect reports → summarize

Command failures inside a step are warnings; only ``BootstrapError``
aborts the run.
"""

from __future__ import annotations

import logging
import shutil
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from dabootstrap.adapters.registry import AdapterRegistry
from dabootstrap.core.models.action import Action, Receipt
from dabootstrap.core.models.config import BootstrapConfig

logger = logging.getLogger(__name__)

StepStatus = Literal["ok", "warn", "skipped", "failed"]


class BootstrapError(Exception):
    """A hard failure: the bootstrap cannot continue."""


class Reporter:
    """Progress sink for a run.

    The default implementation only logs. The CLI swaps in one that
    prints to the terminal.
    """

    def step(self, index: int, total: int, title: str) -> None:
        logger.info("[%d/%d] %s", index, total, title)

    def info(self, message: str) -> None:
        logger.info(message)

    def warn(self, message: str) -> None:
        logger.warning(message)

    def block(self, title: str, text: str) -> None:
        logger.info("%s\n%s", title, text)


@dataclass
class HostFacts:
    """Values discovered during the run and threaded into later steps."""

    iface: str | None = None
    iface_source: str | None = None          # override, route, nmcli, link
    connection: str | None = None
    connection_created: bool = False
    alias_applied: bool = False
    license_installed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "iface": self.iface,
            "iface_source": self.iface_source,
            "connection": self.connection,
            "connection_created": self.connection_created,
            "alias_applied": self.alias_applied,
            "license_installed": self.license_installed,
        }


@dataclass
class StepReport:
    """Outcome of a single bootstrap step."""

    key: str
    title: str
    status: StepStatus = "ok"
    notes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    receipts: list[Receipt] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "status": self.status,
            "notes": self.notes,
            "warnings": self.warnings,
            "error": self.error,
            "duration_ms": self.duration_ms,
            "actions": [
                {
                    "id": r.action_id,
                    "status": r.status,
                    "return_code": r.return_code,
                    "error": r.error,
                }
                for r in self.receipts
            ],
        }


@dataclass
class BootstrapReport:
    """Result of running the step list."""

    run_id: str = ""
    steps: list[StepReport] = field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def warned(self) -> int:
        return sum(1 for s in self.steps if s.status == "warn")

    @property
    def skipped(self) -> int:
        return sum(1 for s in self.steps if s.status == "skipped")

    @property
    def warnings(self) -> list[str]:
        return [w for s in self.steps for w in s.warnings]

    @property
    def status(self) -> str:
        if self.error:
            return "failed"
        if self.warned:
            return "degraded"
        return "ok"

    def get(self, key: str) -> StepReport | None:
        for step in self.steps:
            if step.key == key:
                return step
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "error": self.error,
            "total": self.total,
            "warned": self.warned,
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass
class Step:
    """A named bootstrap step."""

    key: str
    title: str
    func: Callable[[RunContext], None]


def _default_confirm(question: str) -> bool:
    import click

    return click.confirm(question, default=False)


@dataclass
class RunContext:
    """Shared state for one bootstrap run.

    Steps issue every host action through ``run()`` / ``fs()`` so the
    action lands on the current step's report and honours dry-run and
    mock mode.
    """

    config: BootstrapConfig
    registry: AdapterRegistry
    workdir: Path
    reporter: Reporter = field(default_factory=Reporter)
    confirm: Callable[[str], bool] = _default_confirm
    dry_run: bool = False
    facts: HostFacts = field(default_factory=HostFacts)
    current: StepReport | None = None

    # ── Actions ─────────────────────────────────────────────────

    def _dispatch(self, action: Action) -> Receipt:
        receipt = self.registry.execute_action(action, dry_run=self.dry_run)
        if self.current is not None:
            self.current.receipts.append(receipt)
        logger.debug("%s → %s", action.id, receipt.status)
        return receipt

    def run(
        self,
        action_id: str,
        command: list[str],
        *,
        read_only: bool = False,
        timeout: int | None = 300,
        interactive: bool = False,
        warn: str | None = None,
    ) -> Receipt:
        """Run a host command.

        Args:
            action_id: Stable identifier (``step.what``).
            command: argv list.
            read_only: Probe that also runs in dry-run mode.
            timeout: Seconds, or None for no limit.
            interactive: Attach the command to the terminal.
            warn: If set and the command fails, record this warning.
        """
        action = Action(
            id=action_id,
            name=" ".join(command),
            adapter="shell",
            step=self.current.key if self.current else "",
            read_only=read_only,
            params={"command": command, "timeout": timeout, "interactive": interactive},
        )
        receipt = self._dispatch(action)
        if receipt.failed and warn:
            self.warn(f"{warn} ({receipt.error})")
        return receipt

    def fs(
        self,
        action_id: str,
        operation: str,
        path: str | Path,
        *,
        read_only: bool = False,
        warn: str | None = None,
        **params: Any,
    ) -> Receipt:
        """Perform a filesystem operation on the host."""
        action = Action(
            id=action_id,
            name=f"{operation} {path}",
            adapter="filesystem",
            step=self.current.key if self.current else "",
            read_only=read_only,
            params={"operation": operation, "path": str(path), **params},
        )
        receipt = self._dispatch(action)
        if receipt.failed and warn:
            self.warn(f"{warn} ({receipt.error})")
        return receipt

    def has_tool(self, binary: str) -> bool:
        """Whether a host tool is on PATH (always true against a mock host)."""
        if self.registry.mock_mode:
            return True
        return shutil.which(binary) is not None

    # ── Reporting ───────────────────────────────────────────────

    def info(self, message: str) -> None:
        if self.current is not None:
            self.current.notes.append(message)
        self.reporter.info(message)

    def warn(self, message: str) -> None:
        if self.current is not None:
            self.current.warnings.append(message)
            if self.current.status == "ok":
                self.current.status = "warn"
        self.reporter.warn(message)

    def skip(self, reason: str) -> None:
        """Mark the current step as skipped."""
        if self.current is not None:
            self.current.status = "skipped"
            self.current.notes.append(reason)
        self.reporter.info(reason)

    def block(self, title: str, text: str) -> None:
        self.reporter.block(title, text)

    def ask(self, question: str) -> bool:
        """Ask the operator to confirm. Non-interactive runs assume yes."""
        if self.config.noninteractive:
            logger.info("Auto-confirmed (non-interactive): %s", question)
            return True
        return bool(self.confirm(question))


def generate_run_id() -> str:
    """Generate a unique run identifier."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    short = uuid.uuid4().hex[:8]
    return f"boot-{ts}-{short}"


def run_steps(steps: list[Step], run: RunContext, run_id: str = "") -> BootstrapReport:
    """Execute steps in order, stopping at the first hard failure."""
    report = BootstrapReport(run_id=run_id or generate_run_id())
    start = time.monotonic()
    total = len(steps)

    for index, step in enumerate(steps, start=1):
        step_report = StepReport(key=step.key, title=step.title)
        run.current = step_report
        run.reporter.step(index, total, step.title)
        step_start = time.monotonic()

        try:
            step.func(run)
        except BootstrapError as e:
            step_report.status = "failed"
            step_report.error = str(e)
            report.error = str(e)
            logger.error("Step %s failed: %s", step.key, e)
        finally:
            step_report.duration_ms = int((time.monotonic() - step_start) * 1000)
            report.steps.append(step_report)
            run.current = None

        if report.error:
            break

    report.duration_ms = int((time.monotonic() - start) * 1000)
    return report
