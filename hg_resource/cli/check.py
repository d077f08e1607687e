"""Check command: read a request on stdin, print new versions on stdout.

stdout carries only the JSON response; diagnostics and logs go to stderr.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from hg_resource.config.settings import load_settings
from hg_resource.domain.errors import HgResourceError
from hg_resource.engine.check import run_check
from hg_resource.protocol.request import read_check_request
from hg_resource.protocol.response import write_versions
from hg_resource.security.redaction import redact_text

err_console = Console(stderr=True)

_PACKAGE_LOGGER = "hg_resource"


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="YAML settings file. Defaults to $HG_RESOURCE_CONFIG, then built-in defaults.",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Log every external command to stderr.",
)
def check(config_path: Path | None, verbose: bool) -> None:
    """Report versions of a Mercurial repository newer than the one given on stdin."""
    environ = dict(os.environ)
    try:
        settings = load_settings(config_path, environ=environ)
        _configure_logging("debug" if verbose else settings.log_level)
        request = read_check_request(sys.stdin, default_branch=settings.default_branch)
        versions = run_check(request, settings=settings, environ=environ)
    except HgResourceError as err:
        _print_error(str(err))
        raise SystemExit(1)

    write_versions(sys.stdout, versions)


def _print_error(message: str) -> None:
    text = redact_text(message).strip() or "unknown error"
    err_console.print(f"[bold red]error:[/bold red] {escape(text)}", soft_wrap=True, highlight=False)


def _configure_logging(level: str) -> None:
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.handlers = [handler]
    logger.setLevel(level.upper())
