"""
Summary — final host report and rollback hints.

Rollback is advisory: the bootstrap prints the commands that undo the
alias, it never runs them.
"""

from __future__ import annotations

import stat
from pathlib import Path

from dabootstrap.core.engine.executor import HostFacts, RunContext
from dabootstrap.core.models.config import BootstrapConfig


def rollback_hints(config: BootstrapConfig, facts: HostFacts) -> list[str]:
    """Shell commands that remove the alias again (reverse order of setup).

    Returns an empty list when no alias was configured.
    """
    cidr = config.alias_cidr
    if not cidr:
        return []

    hints: list[str] = []
    if facts.connection:
        hints += [
            "# remove persistent alias:",
            f'nmcli connection modify "{facts.connection}" -{config.alias_family}.addresses "{cidr}" || true',
            f'nmcli connection up "{facts.connection}" || true',
        ]
        if facts.connection_created:
            hints.append(f'nmcli connection delete "{facts.connection}" || true')
    hints += [
        "# remove temporary alias immediately:",
        f"ip addr del {cidr} dev {facts.iface or '<iface>'} || true",
    ]
    return hints


def describe_file(path: Path) -> str:
    """``ls -l`` style one-liner for the installed license."""
    try:
        st = path.stat()
    except OSError as e:
        return f"{path}: {e.strerror or e}"
    owner = f"{st.st_uid}:{st.st_gid}"
    try:
        import grp
        import pwd

        owner = f"{pwd.getpwuid(st.st_uid).pw_name}:{grp.getgrgid(st.st_gid).gr_name}"
    except (ImportError, KeyError):
        pass
    return f"{stat.filemode(st.st_mode)} {owner} {st.st_size} {path}"


def print_summary(run: RunContext) -> None:
    config = run.config
    facts = run.facts

    run.info(f"Network iface: {facts.iface}")
    if config.alias_cidr and facts.iface:
        run.info(f"Alias IP configured: {config.alias_cidr}")
        shown = run.run(
            "summary.addr-show",
            ["ip", "addr", "show", "dev", facts.iface],
            read_only=True,
            timeout=30,
        )
        for line in shown.output.splitlines():
            if config.alias_ip and config.alias_ip in line:
                run.info(f"  {line.strip()}")

    run.info(f"License installed at: {config.license_target}")
    if facts.license_installed and not run.registry.mock_mode:
        run.info(f"  {describe_file(Path(config.license_target))}")
    run.info(f"If {config.service_name} isn't running, check installer logs and /var/log/directadmin/*")

    hints = rollback_hints(config, facts)
    if hints:
        run.block("Rollback hints:", "\n".join(f"  {h}" for h in hints))
