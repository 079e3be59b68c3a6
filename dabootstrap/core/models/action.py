"""
Action and Receipt models — what a step asks for and what it gets back.

A step never calls ``subprocess`` or touches a file itself: it builds an
``Action`` (a command, a file operation) and the registry answers with a
``Receipt``. Failures come back as receipts, not exceptions.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One host operation requested by a bootstrap step.

    ``id`` is stable per call site (e.g. ``network.route-probe``) so
    tests and the simulated host can script the answer for it.
    """

    id: str
    name: str = ""                  # shown in dry-run output
    adapter: str                    # "shell" or "filesystem"
    step: str = ""                  # bootstrap step that issued it
    read_only: bool = False         # probes still run in dry-run mode
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of one action.

    Commands keep their exit code in ``return_code``; adapters put
    anything else worth keeping (stderr, the path touched) in
    ``metadata``.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    output: str = ""
    error: str | None = None
    return_code: int | None = None
    duration_ms: int = 0
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for an action that was deliberately not run; ``reason`` becomes the output."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
