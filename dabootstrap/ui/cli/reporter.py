"""
Terminal reporter — live progress for ``dabootstrap run``.
"""

from __future__ import annotations

import logging

import click

from dabootstrap.core.engine.executor import Reporter

logger = logging.getLogger(__name__)


class ClickReporter(Reporter):
    """Prints step progress with click.

    ``quiet`` drops informational lines (warnings still show);
    ``silent`` prints nothing, for ``--json`` output.
    """

    def __init__(self, quiet: bool = False, silent: bool = False):
        self.quiet = quiet
        self.silent = silent

    def step(self, index: int, total: int, title: str) -> None:
        if self.silent:
            logger.debug("[%d/%d] %s", index, total, title)
            return
        click.secho(f"\n[{index}/{total}] {title}", fg="cyan", bold=True)

    def info(self, message: str) -> None:
        if self.silent or self.quiet:
            logger.debug(message)
            return
        click.echo(f"   {message}")

    def warn(self, message: str) -> None:
        if self.silent:
            logger.debug(message)
            return
        click.secho(f"   ⚠️  {message}", fg="yellow")

    def block(self, title: str, text: str) -> None:
        if self.silent:
            logger.debug("%s\n%s", title, text)
            return
        click.echo()
        click.secho(title, bold=True)
        click.echo(text)
