"""
CLI commands for bootstrap configuration.

Thin wrappers over ``dabootstrap.core.use_cases.config_check``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def config() -> None:
    """Bootstrap configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate the resolved configuration (file + environment)."""
    from dabootstrap.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.config is not None:
        click.secho("⚙️  Resolved settings:", fg="cyan", bold=True)
        if result.config_path:
            click.echo(f"   File: {result.config_path}")
        for key, value in result.config.summary().items():
            click.echo(f"   {key:<22} {value}")
        click.echo()

    if result.valid:
        click.secho("✅ Configuration is valid", fg="green", bold=True)
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()
