"""arthub CLI entry point - assembles all command groups."""
import click

from . import __version__
from .offline_cmd import offline


@click.group()
@click.version_option(version=__version__)
def cli():
    """Point Art Hub: offline sales capture and sync."""
    pass


cli.add_command(offline)


if __name__ == "__main__":
    cli()
