import click
import logging

from apcups_exporter import __version__
from apcups_exporter.utils.logging import setup_logging
from .serve import serve_cli
from .status import status_cli


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enables verbose mode.')
@click.option('--quiet', '-q', is_flag=True, help='Enables quiet mode.')
@click.version_option(__version__, prog_name='apcups-exporter')
@click.pass_context
def app(ctx, verbose, quiet):
    """
    Prometheus exporter for apcupsd.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    if verbose:
        setup_logging(force=True, level=logging.DEBUG)
    elif quiet:
        setup_logging(force=True, level=logging.ERROR)
    else:
        setup_logging(force=True)

# Add subcommands
app.add_command(serve_cli, name='serve')
app.add_command(status_cli, name='status')

if __name__ == '__main__':
    app()
