"""
Panel — directadmin.conf patching and service restart.
"""

from __future__ import annotations

import time

from dabootstrap.core.engine.executor import RunContext

ETHERNET_DEV_PATTERN = r"^ethernet_dev=.*$"
RESTART_SETTLE_SECONDS = 2


def patch_panel_config(run: RunContext) -> None:
    """Point ``ethernet_dev`` in directadmin.conf at the detected interface."""
    conf = run.config.panel_config
    iface = run.facts.iface

    exists = run.fs("panel.conf-exists", "exists", conf, read_only=True)
    if not exists.metadata.get("is_file"):
        run.skip(f"{conf} not present yet - installer likely hasn't created it. Skipping for now.")
        return

    run.info(f"Updating {conf}: ethernet_dev -> {iface}")
    receipt = run.fs(
        "panel.conf-ethernet-dev",
        "set_line",
        conf,
        pattern=ETHERNET_DEV_PATTERN,
        line=f"ethernet_dev={iface}",
        warn=f"Could not update {conf}",
    )
    if receipt.ok:
        run.info(f"ethernet_dev {receipt.output}")


def unit_installed(list_output: str, service: str) -> bool:
    """Whether ``systemctl list-unit-files`` output has a line starting with ``service``."""
    return any(line.startswith(service) for line in list_output.splitlines())


def restart_service(run: RunContext, settle: float = RESTART_SETTLE_SECONDS) -> None:
    service = run.config.service_name

    units = run.run(
        "service.list-units",
        ["systemctl", "list-unit-files", "--no-pager", "--no-legend"],
        read_only=True,
        timeout=60,
    )
    if not units.ok or not unit_installed(units.output, service):
        run.skip(f"{service} service not found - installer may not have created it yet.")
        return

    run.info(f"Restarting {service}")
    restart = run.run(
        "service.restart",
        ["systemctl", "restart", service],
        timeout=300,
        warn=f"systemctl restart {service} failed",
    )
    if restart.skipped:
        return

    if not run.registry.mock_mode:
        time.sleep(settle)
    status = run.run(
        "service.status",
        ["systemctl", "status", service, "--no-pager", "-l"],
        read_only=True,
        timeout=60,
    )
    # systemctl status exits non-zero for inactive units but still prints
    text = status.output or status.metadata.get("stdout", "")
    if text:
        run.block(f"---- systemctl status {service} ----", text)
    if not status.ok:
        run.warn(f"{service} is not active after restart (exit {status.return_code})")
