import json
from datetime import timedelta

import click
from rich.table import Table

from apcups_exporter.nis.client import NISClient
from apcups_exporter.nis.models import map_snapshot
from .utils import console, handle_async_command, settings_with_address


def _format(value) -> str:
    if value is None:
        return "[dim]n/a[/dim]"
    if isinstance(value, timedelta):
        return f"{value.total_seconds():g}s"
    return str(value)


@click.command(name='status')
@click.option('--ups-address', help='The address of the apcupsd daemon to query: hostname:port')
@click.option('--timeout', type=float, help='Seconds to wait for the daemon.')
@click.option('--raw', is_flag=True, help='Print the raw status record instead of the parsed snapshot.')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of a table.')
@handle_async_command
async def status_cli(ups_address, timeout, raw, as_json):
    """Query the daemon once and print its status."""
    settings = settings_with_address(ups_address, TIMEOUT=timeout)
    client = NISClient(host=settings.UPS_HOST, port=settings.UPS_PORT, timeout=settings.TIMEOUT)
    record = await client.fetch_status()

    if raw:
        if as_json:
            console.print_json(json.dumps(record))
            return
        for key, value in record.items():
            console.print(f"[cyan]{key:<9}[/cyan]: {value}")
        return

    snapshot = map_snapshot(
        record,
        strict=settings.STRICT_MEASUREMENTS,
        required=settings.REQUIRED_FIELDS,
    )
    if as_json:
        console.print_json(snapshot.model_dump_json())
        return

    table = Table(title=f"UPS {snapshot.ups_name or '?'} on {snapshot.hostname or settings.ups_address}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    state = snapshot.state.value if snapshot.state else f"{snapshot.status} (unknown)"
    table.add_row("status", state)
    table.add_row("status code", _format(snapshot.status_code))
    for name, value in snapshot:
        if name in ("status", "state", "hostname", "ups_name"):
            continue
        table.add_row(name, _format(value))
    console.print(table)
