"""
License — obtain license.key and install it for the panel.

A local file always wins. Otherwise the license is downloaded, checked
against EXPECTED_SHA256 when one is given, and only then moved over the
target. Without a checksum the operator has to confirm; in
non-interactive mode a checksum is mandatory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dabootstrap.core.engine.executor import BootstrapError, RunContext
from dabootstrap.core.services.download import download_file
from dabootstrap.core.services.preflight import is_https

logger = logging.getLogger(__name__)

LICENSE_MODE = 0o600


def _stage_local(run: RunContext, source: str, staged: Path) -> bool:
    run.info(f"Using local license file: {source}")
    receipt = run.fs("license.copy-local", "copy", staged, source=source)
    if receipt.failed:
        raise BootstrapError(f"Cannot copy local license {source}: {receipt.error}")
    return not receipt.skipped


def _stage_remote(run: RunContext, url: str, staged: Path) -> bool:
    config = run.config
    run.info(f"No local license provided. Will attempt to download from LICENSE_URL: {url}")

    if not is_https(url):
        run.warn(f"LICENSE_URL is not HTTPS: {url}")
        if not run.ask("Continue to download license from non-HTTPS URL?"):
            raise BootstrapError("Cancelled by user.")

    if not config.expected_sha256 and config.noninteractive:
        raise BootstrapError(
            "EXPECTED_SHA256 must be supplied in non-interactive mode for remote downloads."
        )

    run.info(f"Downloading license from: {url}")
    receipt = download_file(run, "license.download", url, staged)
    if receipt.skipped:
        return False
    if receipt.failed:
        staged.unlink(missing_ok=True)
        raise BootstrapError(f"Failed to download license from {url}")

    if config.expected_sha256:
        run.info("Verifying license SHA256...")
        digest = run.fs("license.sha256", "sha256", staged, read_only=True)
        actual = digest.output.strip().lower() if digest.ok else "<unreadable>"
        if actual != config.expected_sha256:
            staged.unlink(missing_ok=True)
            raise BootstrapError(
                "SHA256 mismatch for downloaded license "
                f"(expected {config.expected_sha256}, got {actual})"
            )
        run.info("SHA256 OK.")
    else:
        run.warn("No EXPECTED_SHA256 provided. You should verify the license file manually.")
        if not run.ask("Preview license and continue to install it?"):
            staged.unlink(missing_ok=True)
            raise BootstrapError("Aborted by user")

    return True


def install_license(run: RunContext) -> None:
    """Stage the license in the run's private workdir, then install it."""
    config = run.config
    target = Path(config.license_target)
    staged = run.workdir / "license.key"

    local = config.local_license_path
    if local and Path(local).is_file():
        staged_ok = _stage_local(run, local, staged)
    elif config.license_url:
        if local:
            run.warn(f"LOCAL_LICENSE_PATH {local} is not a file; falling back to LICENSE_URL.")
        staged_ok = _stage_remote(run, config.license_url, staged)
    else:
        raise BootstrapError(f"Local license file not found: {local}")

    if not staged_ok:
        run.info(f"[dry-run] License would be installed to {target}")
        return

    run.info(f"Installing license to {target}")
    receipt = run.fs("license.install", "move", target, source=str(staged))
    if receipt.failed:
        raise BootstrapError(f"Cannot install license to {target}: {receipt.error}")

    run.fs("license.chmod", "chmod", target, mode=LICENSE_MODE, warn=f"Could not chmod {target}")
    run.fs(
        "license.chown",
        "chown",
        target,
        owner=config.license_owner,
        warn=f"Could not chown {config.license_owner} (user/group may not exist)",
    )
    run.facts.license_installed = True
