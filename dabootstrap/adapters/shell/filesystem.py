"""
Filesystem adapter — file operations the bootstrap performs on the host.

Provides a receipt-returning interface for file changes so they can
be dry-run, mocked and reported like any other command.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import shutil
from pathlib import Path

from dabootstrap.adapters.base import Adapter, ExecutionContext
from dabootstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)

_VALID_OPS = {
    "exists", "read", "write", "mkdir", "copy", "move", "chmod", "chown", "set_line", "sha256",
}


class FilesystemAdapter(Adapter):
    """Reads and edits the files a bootstrap run touches on the host.

    Action params:
        operation (str): One of the operations in ``_VALID_OPS``.
        path (str): Target path.
        source (str): Source path for 'copy' and 'move'.
        content (str): Content to write (for 'write').
        mode (int): Permission bits (for 'chmod').
        owner (str): ``user:group`` (for 'chown').
        pattern (str), line (str): Regex and replacement line (for 'set_line').
        only_replace (bool): 'set_line' leaves the file alone when nothing
            matches instead of appending.

    'sha256' returns the hex digest of ``path`` as the receipt output.
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in _VALID_OPS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_VALID_OPS))}"

        if not params.get("path"):
            return False, "Missing required param: 'path'"

        required = {
            "write": ("content",),
            "copy": ("source",),
            "move": ("source",),
            "chmod": ("mode",),
            "chown": ("owner",),
            "set_line": ("pattern", "line"),
        }.get(operation, ())
        for key in required:
            if key not in params:
                return False, f"Missing required param: '{key}' for {operation} operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        target = Path(context.action.params["path"])

        try:
            handler = getattr(self, f"_{operation}")
            return handler(context, target)
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    def _ok(self, ctx: ExecutionContext, output: str, **metadata: object) -> Receipt:
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=output,
            metadata=metadata,
        )

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        exists = target.exists()
        return self._ok(
            ctx,
            str(exists),
            exists=exists,
            is_file=target.is_file() if exists else False,
            path=str(target),
        )

    def _read(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not target.is_file():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"File not found: {target}",
            )
        content = target.read_text(encoding="utf-8", errors="replace")
        return self._ok(ctx, content, path=str(target), size=len(content))

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content = ctx.action.params["content"]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return self._ok(ctx, f"Written {len(content)} bytes to {target}", path=str(target))

    def _mkdir(self, ctx: ExecutionContext, target: Path) -> Receipt:
        target.mkdir(parents=True, exist_ok=True)
        return self._ok(ctx, f"Directory ready: {target}", path=str(target))

    def _copy(self, ctx: ExecutionContext, target: Path) -> Receipt:
        source = Path(ctx.action.params["source"])
        shutil.copyfile(source, target)
        return self._ok(ctx, f"Copied {source} → {target}", source=str(source), path=str(target))

    def _move(self, ctx: ExecutionContext, target: Path) -> Receipt:
        source = Path(ctx.action.params["source"])
        target.parent.mkdir(parents=True, exist_ok=True)
        # os.replace is atomic on one filesystem; shutil.move handles /tmp on another mount
        try:
            os.replace(source, target)
        except OSError:
            shutil.move(str(source), str(target))
        return self._ok(ctx, f"Moved {source} → {target}", source=str(source), path=str(target))

    def _chmod(self, ctx: ExecutionContext, target: Path) -> Receipt:
        mode = int(ctx.action.params["mode"])
        os.chmod(target, mode)
        return self._ok(ctx, f"Mode {mode:o} set on {target}", path=str(target), mode=mode)

    def _chown(self, ctx: ExecutionContext, target: Path) -> Receipt:
        owner = ctx.action.params["owner"]
        user, _, group = owner.partition(":")
        try:
            shutil.chown(target, user=user or None, group=group or None)
        except LookupError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Unknown user/group {owner}: {e}",
                metadata={"path": str(target), "owner": owner},
            )
        return self._ok(ctx, f"Owner {owner} set on {target}", path=str(target), owner=owner)

    def _set_line(self, ctx: ExecutionContext, target: Path) -> Receipt:
        """Replace every line matching ``pattern`` with ``line``, or append it."""
        pattern = re.compile(ctx.action.params["pattern"], re.MULTILINE)
        line = ctx.action.params["line"]
        text = target.read_text(encoding="utf-8")

        if pattern.search(text):
            updated = pattern.sub(lambda _m: line, text)
            how = "replaced"
        elif ctx.action.params.get("only_replace"):
            updated = text
            how = "unchanged"
        else:
            updated = text if not text or text.endswith("\n") else text + "\n"
            updated += line + "\n"
            how = "appended"

        if updated != text:
            target.write_text(updated, encoding="utf-8")
        return self._ok(ctx, how, path=str(target), line=line, changed=updated != text)

    def _sha256(self, ctx: ExecutionContext, target: Path) -> Receipt:
        h = hashlib.sha256()
        with open(target, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
        return self._ok(ctx, h.hexdigest(), path=str(target))
