"""
Adapter registry — routes bootstrap actions to the adapter that runs them.

Steps never call an adapter directly. ``RunContext`` hands every action
to ``execute_action`` here, which applies mock mode and dry-run before
anything touches the host.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from dabootstrap.adapters.base import Adapter, ExecutionContext
from dabootstrap.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Named adapters plus the mock/dry-run switches of a run.

    Mock mode sends every action to one stand-in adapter (the simulated
    host); without one, actions get a canned success. Dry-run lets
    ``read_only`` probes through and turns everything else into a
    skipped receipt.
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Switch mock mode; ``mock_adapter`` receives every action while on."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """``{name: {available, type}}`` for every registered adapter."""
        status: dict[str, dict[str, Any]] = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.is_available()
            except Exception as e:
                logger.debug("Availability check for %s raised: %s", name, e)
                available = False
            status[name] = {"name": name, "available": available, "type": type(adapter).__name__}
        return status

    def _target(self, action: Action) -> Adapter | Receipt:
        """The adapter for ``action``, or a receipt that answers it directly."""
        if self._mock_mode:
            if self._mock_adapter is not None:
                return self._mock_adapter
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.adapter}:{action.id} executed",
                metadata={"mock": True},
            )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )
        return adapter

    def execute_action(
        self,
        action: Action,
        cwd: str | None = None,
        dry_run: bool = False,
    ) -> Receipt:
        """Run ``action`` and return its receipt. Never raises."""
        target = self._target(action)
        if isinstance(target, Receipt):
            return target

        if dry_run and not action.read_only:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would execute {action.name or action.id}",
                metadata={"dry_run": True},
            )

        context = ExecutionContext(action=action, cwd=cwd, dry_run=dry_run, params=action.params)
        start = time.monotonic()

        try:
            valid, problem = target.validate(context)
        except Exception as e:
            valid, problem = False, f"validator raised {e}"
        if not valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {problem}",
            )

        try:
            receipt = target.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", target.name, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt


def default_registry(mock_mode: bool = False) -> AdapterRegistry:
    """Registry with the shell and filesystem adapters registered."""
    from dabootstrap.adapters.shell.command import ShellCommandAdapter
    from dabootstrap.adapters.shell.filesystem import FilesystemAdapter

    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    return registry
