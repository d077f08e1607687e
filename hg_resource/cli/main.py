"""CLI entry point for hg-resource."""

import click

from hg_resource.cli.check import check


@click.group()
@click.version_option(package_name="hg-resource")
def cli() -> None:
    """Mercurial resource for CI pipelines: discover new commits."""


cli.add_command(check)
