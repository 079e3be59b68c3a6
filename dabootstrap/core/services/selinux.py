"""
SELinux — drop an enforcing host to permissive for the install.

The change is made both at runtime (``setenforce 0``) and in
``/etc/selinux/config`` so it survives the reboot an installer may
trigger. Nothing is disabled outright.
"""

from __future__ import annotations

from dabootstrap.core.engine.executor import RunContext

SELINUX_CONFIG = "/etc/selinux/config"


def relax_selinux(run: RunContext, config_path: str = SELINUX_CONFIG) -> None:
    if not run.has_tool("getenforce"):
        run.skip("getenforce not available — SELinux not managed on this host.")
        return

    receipt = run.run("selinux.getenforce", ["getenforce"], read_only=True, timeout=30)
    mode = receipt.output.strip() if receipt.ok else ""
    run.info(f"SELinux mode: {mode or 'unknown'}")

    if mode != "Enforcing":
        return

    run.info("Temporarily setting SELinux to permissive to avoid install-time denials.")
    run.run("selinux.setenforce", ["setenforce", "0"], timeout=30, warn="setenforce 0 failed")
    run.fs(
        "selinux.config",
        "set_line",
        config_path,
        pattern=r"^SELINUX=enforcing\b.*$",
        line="SELINUX=permissive",
        only_replace=True,
        warn=f"Could not update {config_path}",
    )
