"""
crudgen CLI Commands

CRUD generator CLI for Express + PostgreSQL projects.
"""

import click

from crudgen.config import Config
from crudgen.logging import setup_logging
from crudgen.cli.commands.create_command import create
from crudgen.cli.commands.remove_command import remove


def _version_callback(ctx, param, value):
    """Display version and exit."""
    if value:
        from crudgen import __version__
        click.echo(f'crud-gen v{__version__}')
        ctx.exit()


@click.group()
@click.option('--version', '-V', is_flag=True, callback=_version_callback, expose_value=False,
              is_eager=True, help='Show version and exit')
@click.option('--verbose', '-v', is_flag=True, default=False, help='Enable debug logging')
def cli(verbose):
    """
    crud-gen - CRUD generator CLI tool

    Scaffolds route, controller and query files for a model and keeps
    src/db/db.js and src/routes/index.js in sync.
    """
    Config.load_from_env()
    logger = setup_logging("DEBUG" if verbose else (Config.LOG_LEVEL or "WARNING"))
    logger.debug(f"Configuration: {Config.to_dict()}")


# Register all commands
cli.add_command(create)
cli.add_command(remove)


if __name__ == '__main__':
    cli()
