"""
Custom installer — download a partner installer, show it, run it.

The script is never piped straight into a shell: it is saved to the
run's private workdir, its first lines are shown to the operator, and
it only runs after an explicit confirmation.
"""

from __future__ import annotations

import time

from dabootstrap.core.engine.executor import BootstrapError, RunContext
from dabootstrap.core.services.download import download_file
from dabootstrap.core.services.preflight import is_http_url, is_https

INSTALLER_MODE = 0o700


def preview(text: str, lines: int) -> str:
    """First ``lines`` lines of ``text``."""
    return "\n".join(text.splitlines()[:lines])


def run_custom_installer(run: RunContext) -> None:
    config = run.config
    url = config.custom_installer_url
    if not url:
        run.skip("No CUSTOM_INSTALLER_URL set - skipping installer run.")
        return

    run.info(f"Custom installer URL set: {url}")
    if not is_http_url(url):
        raise BootstrapError("CUSTOM_INSTALLER_URL must start with http:// or https://")

    if not is_https(url):
        run.warn("CUSTOM_INSTALLER_URL is not HTTPS.")
        if not run.ask("Continue to download and run installer from a non-HTTPS URL?"):
            raise BootstrapError("Cancelled by user.")

    script = run.workdir / f"da_installer_{int(time.time())}.sh"
    run.info(f"Downloading installer to {script} (preview first)")
    receipt = download_file(run, "installer.download", url, script)
    if receipt.skipped:
        run.info("[dry-run] Installer would be downloaded, previewed and run after confirmation.")
        return
    if receipt.failed:
        raise BootstrapError(f"Failed to download installer from {url}")

    run.fs("installer.chmod", "chmod", script, mode=INSTALLER_MODE, warn=f"Could not chmod {script}")

    content = run.fs("installer.read", "read", script, read_only=True)
    if content.ok:
        run.block(
            f"---- installer preview (first {config.preview_lines} lines) ----",
            preview(content.output, config.preview_lines) + "\n---- end preview ----",
        )
    else:
        run.warn(f"Could not read installer for preview ({content.error})")

    if not run.ask("Run the downloaded installer script now?"):
        raise BootstrapError("User cancelled running installer.")

    run.info("Running installer (may be interactive) ...")
    run.run(
        "installer.run",
        ["/bin/bash", str(script)],
        timeout=None,
        interactive=True,
        warn="Installer exited with non-zero status - check logs",
    )
