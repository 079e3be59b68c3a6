"""
Shell command adapter — run host tools and capture their output.

This is the only place where ``subprocess.run`` is called. Commands
are argv lists; nothing is passed through a shell.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from dabootstrap.adapters.base import Adapter, ExecutionContext
from dabootstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Trim captured streams kept on receipts
_MAX_CAPTURE = 64_000


class ShellCommandAdapter(Adapter):
    """Execute host commands and capture output.

    Action params:
        command (list[str]): argv to execute.
        timeout (int): Timeout in seconds (default: 300, None = no limit).
        input (str): Optional data piped to stdin.
        interactive (bool): Inherit the terminal instead of capturing
            output (used for the vendor installer).
        env (dict): Extra environment variables.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.action.params.get("command")
        if not command or not isinstance(command, list):
            return False, "Missing required param: 'command' (argv list)"

        binary = command[0]
        if os.path.isabs(binary):
            if not os.access(binary, os.X_OK):
                return False, f"Command not found: {binary}"
        elif shutil.which(binary) is None:
            return False, f"Command not found: {binary}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        command: list[str] = [str(part) for part in params["command"]]
        timeout = params.get("timeout", 300)
        interactive = params.get("interactive", False)

        env = None
        if params.get("env"):
            env = os.environ.copy()
            env.update({k: str(v) for k, v in params["env"].items()})

        display = " ".join(command)
        logger.debug("Executing: %s", display)
        start = time.monotonic()

        try:
            if interactive:
                result = subprocess.run(
                    command,
                    cwd=context.cwd,
                    env=env,
                    timeout=timeout,
                )
                stdout, stderr = "", ""
            else:
                result = subprocess.run(
                    command,
                    cwd=context.cwd,
                    env=env,
                    input=params.get("input"),
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
                stdout = (result.stdout or "")[-_MAX_CAPTURE:].strip()
                stderr = (result.stderr or "")[-_MAX_CAPTURE:].strip()

            elapsed_ms = int((time.monotonic() - start) * 1000)

            if result.returncode == 0:
                return Receipt.success(
                    adapter=self.name,
                    action_id=context.action.id,
                    output=stdout,
                    duration_ms=elapsed_ms,
                    return_code=0,
                    metadata={"command": display, "stderr": stderr},
                )
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=stderr or f"Command exited with code {result.returncode}",
                duration_ms=elapsed_ms,
                return_code=result.returncode,
                metadata={"command": display, "stdout": stdout},
            )

        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": display, "timeout": timeout},
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": display},
            )
