"""
Downloads — fetch a URL to a local file with curl, or wget as fallback.
"""

from __future__ import annotations

from pathlib import Path

from dabootstrap.core.engine.executor import RunContext
from dabootstrap.core.models.action import Receipt


def download_command(
    url: str,
    dest: str | Path,
    *,
    use_curl: bool = True,
    retries: int = 3,
    timeout: int = 120,
) -> list[str]:
    """argv that downloads ``url`` to ``dest``."""
    if use_curl:
        return [
            "curl", "-fsSL",
            "--retry", str(retries),
            "--max-time", str(timeout),
            url,
            "-o", str(dest),
        ]
    return ["wget", "-q", f"--tries={retries + 1}", f"--timeout={timeout}", "-O", str(dest), url]


def download_file(run: RunContext, action_id: str, url: str, dest: str | Path) -> Receipt:
    """Download ``url`` to ``dest`` through the shell adapter.

    The caller decides whether a failed receipt is fatal.
    """
    config = run.config
    command = download_command(
        url,
        dest,
        use_curl=run.has_tool("curl"),
        retries=config.download_retries,
        timeout=config.download_timeout,
    )
    # curl may retry, each attempt bounded by --max-time
    budget = config.download_timeout * (config.download_retries + 1) + 30
    return run.run(action_id, command, timeout=budget)
