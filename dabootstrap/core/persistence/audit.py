"""
Run ledger — one NDJSON line per bootstrap run.

Enabled with ``--audit-log PATH`` or ``DAB_AUDIT_LOG``. The file is only
ever appended to, so it doubles as a history of what was done to the
host and when.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

AUDIT_ENV_VAR = "DAB_AUDIT_LOG"


class AuditEntry(BaseModel):
    """Summary of one run as stored in the ledger."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    run_id: str = ""
    mode: str = "live"              # live | dry-run | mock

    iface: str | None = None
    connection: str | None = None
    alias: str | None = None        # ip/prefix
    license_target: str | None = None   # set only when a license was installed

    status: str = ""                # ok | degraded | failed
    steps_total: int = 0
    steps_warned: int = 0
    steps_skipped: int = 0
    duration_ms: int = 0

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class AuditWriter:
    """Appends ``AuditEntry`` lines to ``path`` and reads them back."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append ``entry``. A ledger that cannot be written is logged, not fatal."""
        record = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as ledger:
                ledger.write(record + "\n")
        except OSError as e:
            logger.error("Cannot append to audit ledger %s: %s", self._path, e)
            return
        logger.debug("Ledger: %s %s", entry.run_id, entry.status)

    def read_all(self) -> list[AuditEntry]:
        """Every readable entry, oldest first; corrupt lines are skipped."""
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Cannot read audit ledger %s: %s", self._path, e)
            return []

        entries: list[AuditEntry] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entries.append(AuditEntry.model_validate_json(line))
            except ValidationError as e:
                logger.warning("Ledger line %d unreadable: %s", number, e.errors()[0]["msg"])
        return entries
