"""
Prerequisite packages — make sure the host tools the bootstrap calls exist.
"""

from __future__ import annotations

from dabootstrap.core.engine.executor import RunContext


def install_prerequisites(run: RunContext) -> None:
    """Refresh the dnf cache and install the prerequisite packages.

    Best-effort: a host without dnf, or with a broken mirror, still
    continues with whatever tools it already has.
    """
    packages = run.config.prerequisite_packages
    if not packages:
        run.skip("No prerequisite packages configured.")
        return

    if not run.has_tool("dnf"):
        run.warn("dnf not found — skipping prerequisite install.")
        return

    run.info(f"Installing prerequisites: {', '.join(packages)}")
    run.run(
        "packages.makecache",
        ["dnf", "-y", "makecache"],
        timeout=900,
        warn="dnf makecache failed",
    )
    run.run(
        "packages.install",
        ["dnf", "-y", "install", *packages],
        timeout=1800,
        warn="dnf install failed",
    )
