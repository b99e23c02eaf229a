import asyncio
import functools
import sys

import click
from rich.console import Console

from apcups_exporter.config import Settings, parse_address, settings
from apcups_exporter.nis.errors import NISError

console = Console()


def handle_async_command(async_func):
    """Decorator to handle async CLI commands."""
    @functools.wraps(async_func)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(async_func(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(1)
        except NISError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
    return wrapper


def settings_with_address(ups_address: str | None, **overrides) -> Settings:
    """Return the global settings with CLI overrides applied."""
    update = {key: value for key, value in overrides.items() if value is not None}
    if ups_address:
        try:
            host, port = parse_address(ups_address)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--ups-address") from e
        update.update(UPS_HOST=host, UPS_PORT=port)
    return settings.model_copy(update=update)
