import click
import uvicorn

from apcups_exporter.config import parse_address
from apcups_exporter.utils.timeparse import parse_time
from .utils import console, settings_with_address


def _interval(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_time(value) if not value.isdigit() else int(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command(name='serve')
@click.option('--listen-address', help='The address to listen on for HTTP requests, e.g. :8080')
@click.option('--ups-address', help='The address of the apcupsd daemon to query: hostname:port')
@click.option('--interval', callback=_interval, help='Polling interval, e.g. 10 or 10s.')
@click.option('--timeout', type=float, help='Seconds to wait for the daemon on each poll.')
def serve_cli(listen_address, ups_address, interval, timeout):
    """Run the exporter and serve /metrics."""
    from apcups_exporter.app import create_app

    overrides = {"POLL_INTERVAL": interval, "TIMEOUT": timeout}
    if listen_address:
        try:
            host, port = parse_address(listen_address, default_port=8080)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--listen-address") from e
        overrides.update(LISTEN_HOST="0.0.0.0" if listen_address.startswith(":") else host, LISTEN_PORT=port)
    settings = settings_with_address(ups_address, **overrides)
    if settings.POLL_INTERVAL < 1:
        raise click.BadParameter("must be at least one second", param_hint="--interval")

    console.print(f"[bold blue]apcups-exporter[/bold blue] polling {settings.ups_address} every {settings.POLL_INTERVAL}s")
    uvicorn.run(
        create_app(settings),
        host=settings.LISTEN_HOST,
        port=settings.LISTEN_PORT,
        log_config=None,
    )
