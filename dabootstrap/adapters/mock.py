"""
Scripted stand-in for a host.

``--mock`` runs and the test suite route every action here instead of
the shell and filesystem adapters. Answers are keyed by action ID; an
action nobody scripted succeeds with ``default_output``.
"""

from __future__ import annotations

from dabootstrap.adapters.base import Adapter, ExecutionContext
from dabootstrap.core.models.action import Receipt


class MockAdapter(Adapter):
    """Answers actions from a script and remembers what it was asked."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._script: dict[str, Receipt] = {}
        self._seen: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available

    # ── Scripting ──

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._script[action_id] = receipt

    def set_output(self, action_id: str, output: str) -> None:
        """Make ``action_id`` exit 0 with ``output`` on stdout."""
        self.set_response(
            action_id,
            Receipt.success(self._name, action_id, output, return_code=0),
        )

    def set_failure(self, action_id: str, error: str = "Mock failure", return_code: int = 1) -> None:
        self.set_response(
            action_id,
            Receipt.failure(self._name, action_id, error, return_code=return_code),
        )

    def reset(self) -> None:
        """Forget both the script and the recorded calls."""
        self._script.clear()
        self._seen.clear()

    # ── Inspection ──

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._seen

    @property
    def call_count(self) -> int:
        return len(self._seen)

    @property
    def action_ids(self) -> list[str]:
        return [seen.action.id for seen in self._seen]

    def commands(self) -> list[list[str]]:
        """argv of each shell action, oldest first."""
        return [list(seen.action.params["command"]) for seen in self._seen if "command" in seen.action.params]

    def params_for(self, action_id: str) -> dict:
        """Params of the most recent ``action_id`` call; ``KeyError`` if it never ran."""
        matches = [seen.action.params for seen in self._seen if seen.action.id == action_id]
        if not matches:
            raise KeyError(action_id)
        return matches[-1]

    # ── Adapter ──

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._seen.append(context)
        action_id = context.action.id
        scripted = self._script.get(action_id)
        if scripted is not None:
            return scripted.model_copy()
        return Receipt.success(
            self._name,
            action_id,
            self._default_output,
            return_code=0,
            metadata={"mock": True},
        )


def simulated_host(
    iface: str = "eth0",
    connection: str = "System eth0",
    selinux: str = "Permissive",
    service: str = "directadmin",
    license_sha256: str | None = None,
) -> MockAdapter:
    """A mock adapter scripted to look like a freshly provisioned EL host.

    Used by ``--mock`` runs so detection and the later steps have
    realistic probe output to work with.
    """
    mock = MockAdapter(adapter_name="simulated-host")
    mock.set_output(
        "network.route-probe",
        f"8.8.8.8 via 10.0.0.1 dev {iface} src 10.0.0.5 uid 0\n    cache",
    )
    mock.set_output("network.device-status", f"{iface}:connected\nlo:connected (externally)")
    mock.set_output("network.link-list", f"1: lo: <LOOPBACK,UP>\n2: {iface}: <BROADCAST,UP>")
    mock.set_output("network.active-connections", f"{connection}:{iface}")
    mock.set_output("network.all-connections", f"{connection}:{iface}")
    mock.set_output("selinux.getenforce", selinux)
    mock.set_response(
        "panel.conf-exists",
        Receipt.success(
            adapter=mock.name,
            action_id="panel.conf-exists",
            output="True",
            metadata={"exists": True, "is_file": True},
        ),
    )
    mock.set_output("panel.conf-ethernet-dev", "replaced")
    mock.set_output("service.list-units", f"{service}.service                 enabled         enabled")
    mock.set_output("service.status", f"● {service}.service - DirectAdmin\n   Active: active (running)")
    if license_sha256:
        mock.set_output("license.sha256", license_sha256)
    return mock
