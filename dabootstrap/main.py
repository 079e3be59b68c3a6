"""
dabootstrap — CLI entrypoint.

Usage:
    python -m dabootstrap.main --help
    python -m dabootstrap.main run --license-path /root/license.key --alias-ip 203.0.113.10
    python -m dabootstrap.main run --dry-run
    python -m dabootstrap.main detect
    python -m dabootstrap.main config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

import click

from dabootstrap import __version__
from dabootstrap.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="dabootstrap")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to bootstrap.yml (default: $DAB_CONFIG or ./bootstrap.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """DirectAdmin partner host bootstrap."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("DAB_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("DAB_LOG_FILE"),
        log_file_level=os.environ.get("DAB_LOG_FILE_LEVEL"),
    )


def _load_config(ctx: click.Context, overrides: dict[str, Any] | None = None, as_json: bool = False):
    """Resolve the config or exit with the loader's message."""
    from dabootstrap.core.config.loader import ConfigError, load_config

    try:
        return load_config(ctx.obj.get("config_path"), overrides=overrides)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"status": "failed", "error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _confirm(question: str) -> bool:
    return click.confirm(question, default=False, err=True)


@cli.command()
@click.option("--license-path", default=None, help="Local license.key to install.")
@click.option("--license-url", default=None, help="Download license.key from this URL.")
@click.option("--sha256", "expected_sha256", default=None, help="Expected SHA-256 of the downloaded license.")
@click.option("--alias-ip", default=None, help="Secondary IP to attach to the primary interface.")
@click.option("--alias-prefix", default=None, type=int, help="Prefix length of the alias (default: 32).")
@click.option("--installer-url", default=None, help="Partner installer to download, preview and run.")
@click.option("--iface", default=None, help="Primary interface (default: auto-detect).")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Non-interactive: assume yes for confirmations.")
@click.option("--skip-firewall", is_flag=True, help="Leave firewalld untouched.")
@click.option("--dry-run", is_flag=True, help="Probe the host but change nothing.")
@click.option("--mock", is_flag=True, help="Run against a simulated host (no real execution).")
@click.option("--audit-log", type=click.Path(dir_okay=False), default=None,
              help="Append a run record to this NDJSON file (default: $DAB_AUDIT_LOG).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    license_path: str | None,
    license_url: str | None,
    expected_sha256: str | None,
    alias_ip: str | None,
    alias_prefix: int | None,
    installer_url: str | None,
    iface: str | None,
    assume_yes: bool,
    skip_firewall: bool,
    dry_run: bool,
    mock: bool,
    audit_log: str | None,
    as_json: bool,
) -> None:
    """Provision this host: network alias, firewall, license, installer, service.

    Examples:

        dabootstrap run --license-path /root/license.key

        dabootstrap run --license-url https://partner.example/license.key --sha256 <hex> -y

        dabootstrap run --dry-run
    """
    from dabootstrap.core.persistence.audit import AUDIT_ENV_VAR
    from dabootstrap.core.use_cases.bootstrap import run_bootstrap
    from dabootstrap.ui.cli.reporter import ClickReporter

    config = _load_config(
        ctx,
        overrides={
            "local_license_path": license_path,
            "license_url": license_url,
            "expected_sha256": expected_sha256,
            "alias_ip": alias_ip,
            "alias_prefix": alias_prefix,
            "custom_installer_url": installer_url,
            "iface": iface,
            "noninteractive": True if assume_yes else None,
            "skip_firewall": True if skip_firewall else None,
        },
        as_json=as_json,
    )

    audit_path = audit_log or os.environ.get(AUDIT_ENV_VAR)
    quiet = ctx.obj.get("quiet", False)

    if not as_json:
        mode_label = "[mock] " if mock else "[dry-run] " if dry_run else ""
        click.secho(f"===== {mode_label}DirectAdmin partner setup bootstrap =====", bold=True)

    result = run_bootstrap(
        config,
        dry_run=dry_run,
        mock_mode=mock,
        reporter=ClickReporter(quiet=quiet, silent=as_json),
        confirm=_confirm,
        audit_path=Path(audit_path) if audit_path else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    report = result.report
    assert report is not None

    click.echo()
    if result.error:
        click.secho(f"❌ {result.error}", fg="red", bold=True)
        sys.exit(1)

    status_color = {"ok": "green", "degraded": "yellow"}.get(report.status, "white")
    click.secho("===== FINISHED =====", fg=status_color, bold=True)
    if report.warned:
        click.secho(f"   {report.warned} step(s) finished with warnings:", fg="yellow")
        for warning in report.warnings:
            click.echo(f"     • {warning}")
    click.echo()


@cli.command()
@click.option("--iface", default=None, help="Skip auto-detection and use this interface.")
@click.option("--mock", is_flag=True, help="Detect against a simulated host.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, iface: str | None, mock: bool, as_json: bool) -> None:
    """Show the primary interface and its NetworkManager connection."""
    from dabootstrap.core.use_cases.detect import run_detect

    config = _load_config(ctx, overrides={"iface": iface}, as_json=as_json)
    result = run_detect(config, mock_mode=mock)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho("\n🔍 Network", fg="cyan", bold=True)
    click.echo(f"   Interface:  {result.facts.iface} (via {result.facts.iface_source})")
    click.echo(f"   Connection: {result.facts.connection or '<none>'}")
    click.echo()


@cli.command()
@click.option("--alias-ip", default=None, help="Alias to remove (default: configured ALIAS_IP).")
@click.option("--alias-prefix", default=None, type=int, help="Prefix length of the alias.")
@click.option("--iface", default=None, help="Interface carrying the alias (default: auto-detect).")
@click.option("--mock", is_flag=True, help="Detect against a simulated host.")
@click.pass_context
def rollback(
    ctx: click.Context,
    alias_ip: str | None,
    alias_prefix: int | None,
    iface: str | None,
    mock: bool,
) -> None:
    """Print the commands that remove the alias IP again."""
    from dabootstrap.core.use_cases.detect import run_detect

    config = _load_config(
        ctx,
        overrides={"alias_ip": alias_ip, "alias_prefix": alias_prefix, "iface": iface},
    )
    if not config.alias_cidr:
        click.secho("❌ No alias configured: pass --alias-ip or set ALIAS_IP.", fg="red")
        sys.exit(1)

    result = run_detect(config, mock_mode=mock)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho("Rollback hints:", bold=True)
    for hint in result.rollback:
        click.echo(f"  {hint}")


# ── Register sub-command groups from dabootstrap/ui/cli/ ──────────

from dabootstrap.ui.cli.config import config  # noqa: E402

cli.add_command(config)


if __name__ == "__main__":
    cli()
