"""
Adapter base — the contract every host binding implements.

An adapter turns an ``Action`` into a ``Receipt``. The shell adapter runs
commands, the filesystem adapter edits files, the mock adapter pretends
to be a host.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from dabootstrap.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """The action being executed plus how the registry was asked to run it."""

    action: Action
    cwd: str | None = None
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)


class Adapter(ABC):
    """Binding between bootstrap actions and one kind of host resource.

    ``execute`` must not raise: errors are returned as failed receipts
    so a step can decide whether they are fatal.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key; matches ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backing tool exists on this host."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before running: ``(ok, problem)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Perform the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
