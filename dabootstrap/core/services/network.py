"""
Network — primary interface detection and the IP alias.

Detection order for the interface:
    1. explicit override (``IFACE`` / ``--iface``)
    2. ``ip route get <probe>`` → the device used for outbound traffic
    3. ``nmcli device status`` → first connected device
    4. ``ip -o link show`` → first non-loopback link

The NetworkManager connection profile bound to that interface is then
looked up (active profiles first) so the alias can be made persistent.
"""

from __future__ import annotations

import logging

from dabootstrap.core.engine.executor import BootstrapError, RunContext

logger = logging.getLogger(__name__)

LOOPBACK = "lo"


# ── Parsers (pure) ──────────────────────────────────────────────


def split_terse(line: str) -> list[str]:
    """Split one line of ``nmcli -t`` output into fields.

    nmcli escapes ``:`` and ``\\`` inside values with a backslash.
    """
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def parse_route_device(output: str) -> str | None:
    """Return the device named after ``dev`` in ``ip route get`` output."""
    tokens = output.split()
    for i, token in enumerate(tokens[:-1]):
        if token == "dev":
            return tokens[i + 1]
    return None


def parse_connected_device(output: str) -> str | None:
    """First device whose state is exactly ``connected`` (DEVICE,STATE terse)."""
    for line in output.splitlines():
        fields = split_terse(line.strip())
        if len(fields) >= 2 and fields[1] == "connected":
            return fields[0]
    return None


def parse_link_names(output: str) -> list[str]:
    """Interface names from ``ip -o link show``, without the loopback."""
    names: list[str] = []
    for line in output.splitlines():
        parts = line.split(": ")
        if len(parts) < 2:
            continue
        name = parts[1].strip().split("@", 1)[0]
        if name and name != LOOPBACK:
            names.append(name)
    return names


def find_connection(output: str, iface: str) -> str | None:
    """First profile NAME bound to ``iface`` in NAME,DEVICE terse output."""
    for line in output.splitlines():
        if not line.strip():
            continue
        fields = split_terse(line)
        if len(fields) >= 2 and fields[1] == iface:
            return fields[0]
    return None


# ── Probes ──────────────────────────────────────────────────────


def detect_interface(run: RunContext) -> tuple[str, str]:
    """Find the primary interface.

    Returns:
        ``(iface, source)`` where source is override, route, nmcli or link.

    Raises:
        BootstrapError: If no method finds an interface.
    """
    if run.config.iface:
        return run.config.iface, "override"

    probe = run.config.probe_address
    receipt = run.run("network.route-probe", ["ip", "route", "get", probe], read_only=True, timeout=30)
    if receipt.ok:
        iface = parse_route_device(receipt.output)
        if iface:
            return iface, "route"
    logger.debug("No route to %s, falling back to nmcli", probe)

    if run.has_tool("nmcli"):
        receipt = run.run(
            "network.device-status",
            ["nmcli", "-t", "-f", "DEVICE,STATE", "device", "status"],
            read_only=True,
            timeout=30,
        )
        if receipt.ok:
            iface = parse_connected_device(receipt.output)
            if iface:
                return iface, "nmcli"

    receipt = run.run("network.link-list", ["ip", "-o", "link", "show"], read_only=True, timeout=30)
    if receipt.ok:
        names = parse_link_names(receipt.output)
        if names:
            return names[0], "link"

    raise BootstrapError("Cannot auto-detect network interface; set IFACE manually and rerun.")


def detect_connection(run: RunContext, iface: str) -> str | None:
    """NetworkManager profile bound to ``iface``: active first, then any."""
    if not run.has_tool("nmcli"):
        return None

    for action_id, extra in (
        ("network.active-connections", ["--active"]),
        ("network.all-connections", []),
    ):
        receipt = run.run(
            action_id,
            ["nmcli", "-t", "-f", "NAME,DEVICE", "connection", "show", *extra],
            read_only=True,
            timeout=30,
        )
        if receipt.ok:
            conn = find_connection(receipt.output, iface)
            if conn:
                return conn
    return None


# ── Steps ───────────────────────────────────────────────────────


def detect_network(run: RunContext) -> None:
    iface, source = detect_interface(run)
    run.facts.iface = iface
    run.facts.iface_source = source
    run.info(f"Chosen interface: {iface} (via {source})")

    run.facts.connection = detect_connection(run, iface)
    run.info(f"NetworkManager connection: {run.facts.connection or '<none>'}")


def add_alias(run: RunContext) -> None:
    """Attach the alias IP now (``ip addr``) and persistently (nmcli profile).

    Every command here is best-effort: an alias that already exists
    makes ``ip addr add`` fail, which is not a reason to stop.
    """
    cidr = run.config.alias_cidr
    if not cidr:
        run.skip("No ALIAS_IP set — skipping alias.")
        return

    iface = run.facts.iface
    if not iface:
        raise BootstrapError("No interface detected")
    family = run.config.alias_family
    run.info(f"Adding alias IP {cidr} to {iface} (temporary then persistent).")

    receipt = run.run(
        "alias.ip-add",
        ["ip", "addr", "add", cidr, "dev", iface],
        timeout=30,
        warn="ip addr add may have failed / already exists",
    )
    run.facts.alias_applied = receipt.ok

    conn = run.facts.connection
    if conn:
        run.info(f"Appending IP to NM connection {conn}")
        run.run(
            "alias.nm-modify",
            ["nmcli", "connection", "modify", conn, f"+{family}.addresses", cidr],
            timeout=60,
            warn="nmcli modify returned non-zero",
        )
        # keep the default route on the primary address
        run.run(
            "alias.nm-never-default",
            ["nmcli", "connection", "modify", conn, f"{family}.never-default", "yes"],
            timeout=60,
            warn="nmcli never-default returned non-zero",
        )
        run.run(
            "alias.nm-up",
            ["nmcli", "connection", "up", conn],
            timeout=120,
            warn=f"nmcli connection up {conn} failed",
        )
        return

    conn = f"alias-{run.config.alias_ip}"
    run.info(f"No existing NM connection found for {iface} - creating one: {conn}")
    run.run(
        "alias.nm-add",
        [
            "nmcli", "connection", "add",
            "type", "ethernet",
            "ifname", iface,
            "con-name", conn,
            f"{family}.addresses", cidr,
            f"{family}.method", "manual",
        ],
        timeout=60,
        warn="nmcli connection add failed",
    )
    run.run(
        "alias.nm-up",
        ["nmcli", "connection", "up", conn],
        timeout=120,
        warn=f"nmcli connection up {conn} failed",
    )
    run.facts.connection = conn
    run.facts.connection_created = True
