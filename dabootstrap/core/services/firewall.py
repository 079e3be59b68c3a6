"""
Firewall — open the panel ports in firewalld.
"""

from __future__ import annotations

from dabootstrap.core.engine.executor import RunContext


def firewall_commands(ports: list[str], services: list[str]) -> list[tuple[str, list[str]]]:
    """The ``(action_id, argv)`` pairs that open ``ports`` and ``services``."""
    commands: list[tuple[str, list[str]]] = []
    for port in ports:
        commands.append((f"firewall.port-{port}", ["firewall-cmd", "--permanent", f"--add-port={port}"]))
    for service in services:
        commands.append(
            (f"firewall.service-{service}", ["firewall-cmd", "--permanent", f"--add-service={service}"])
        )
    return commands


def open_firewall(run: RunContext) -> None:
    """Ensure firewalld runs and the panel ports are open permanently."""
    config = run.config
    if config.skip_firewall:
        run.skip("SKIP_FIREWALL set - skipping firewall changes")
        return

    opened = ", ".join([*config.firewall_ports, *config.firewall_services])
    run.info(f"Ensuring firewalld is running and opening: {opened}")

    run.run(
        "firewall.enable",
        ["systemctl", "enable", "--now", "firewalld"],
        timeout=120,
        warn="Could not enable firewalld",
    )
    for action_id, command in firewall_commands(config.firewall_ports, config.firewall_services):
        run.run(action_id, command, timeout=60, warn=f"{' '.join(command[1:])} failed")
    run.run("firewall.reload", ["firewall-cmd", "--reload"], timeout=120, warn="firewall-cmd --reload failed")
