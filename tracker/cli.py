"""
Command-line interface for the Shipment Tracker.
Provides commands for serving the tracking endpoint and running one-off lookups.
"""

import asyncio
from pathlib import Path

import click
import orjson
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tracker import __version__
from tracker.exceptions import ConfigurationError, OrderNotFoundError

console = Console()


def _mask(value: str) -> str:
    if not value:
        return "[dim]Not set[/dim]"
    if len(value) <= 4:
        return "****"
    return f"{value[:2]}****{value[-2:]}"


@click.group()
@click.version_option(version=__version__, prog_name="Shipment Tracker")
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx, config_path):
    """Shipment Tracker - YunExpress + GLS tracking service"""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST)")
@click.option("--port", type=int, default=None, help="Port (default: PORT)")
@click.pass_context
def serve(ctx, host, port):
    """Run the tracking HTTP server."""
    from tracker.config import init_config
    from tracker.server import run_server

    config = init_config(ctx.obj.get("config_path"))

    console.print(Panel.fit(
        f"[bold blue]Shipment Tracker v{__version__}[/bold blue]\n"
        "Press Ctrl+C to stop",
        title="Starting Server"
    ))

    try:
        run_server(config, host=host, port=port)
    except ConfigurationError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        raise SystemExit(1)


@cli.command()
@click.argument("number")
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON response")
@click.pass_context
def track(ctx, number, as_json):
    """Look up an order number or tracking number."""
    from tracker.config import init_config
    from tracker.logging_config import setup_logging
    from tracker.tracking import TrackingService

    config = init_config(ctx.obj.get("config_path"))
    setup_logging(config, console=False)
    service = TrackingService(config)

    try:
        result = asyncio.run(service.track(number))
    except OrderNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[red]✗ Tracking failed: {e}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(orjson.dumps(result.to_response(), option=orjson.OPT_INDENT_2).decode())
        return

    console.print(Panel.fit(
        f"Order: [bold]{result.order_number or '-'}[/bold]\n"
        f"Tracking: [bold]{result.tracking_number or '-'}[/bold]\n"
        f"GLS: [bold]{result.gls_tracking or '-'}[/bold]"
        + (f"\nStatus: [yellow]{result.status}[/yellow]" if result.status else ""),
        title="Shipment"
    ))

    if not result.events:
        console.print("[yellow]No tracking events yet[/yellow]")
        return

    table = Table(title="Events")
    table.add_column("Time", style="cyan")
    table.add_column("Courier", style="magenta")
    table.add_column("Status")
    table.add_column("Location", style="green")

    for event in result.events:
        table.add_row(event.timestamp, str(event.courier), event.status, event.location)

    console.print(table)


@cli.command()
@click.pass_context
def status(ctx):
    """Show effective configuration."""
    from tracker.config import TrackerConfig

    config = TrackerConfig.from_env(ctx.obj.get("config_path"))

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("YunExpress API URL", config.yunexpress_api_url)
    table.add_row("YunExpress API Key", _mask(config.yunexpress_api_key))
    table.add_row("YunExpress Customer Code", config.yunexpress_customer_code or "[dim]Not set[/dim]")
    table.add_row("GLS Mode", "authenticated" if config.gls_auth_enabled else "public")
    table.add_row("GLS API URL", config.gls_auth_api_url if config.gls_auth_enabled else config.gls_api_url)
    table.add_row("Shopify Domain", config.shopify_domain or "[dim]Not set[/dim]")
    table.add_row("Shopify Token", _mask(config.shopify_access_token))
    table.add_row("Listen", f"{config.host}:{config.port}")
    table.add_row("Log File", config.log_file or "[dim]console only[/dim]")

    console.print(table)

    for problem in config.validate():
        color = "yellow" if problem.startswith("Warning") else "red"
        console.print(f"[{color}]• {problem}[/{color}]")


@cli.command()
@click.argument("config_path", type=click.Path())
def init(config_path):
    """Initialize configuration file."""
    config_path = Path(config_path)

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    template = '''# Shipment Tracker Configuration

# YunExpress (primary carrier)
YUNEXPRESS_API_KEY=your-api-key-here
YUNEXPRESS_CUSTOMER_CODE=your-customer-code

# GLS Poland (last-mile carrier)
# Leave GLS_API_KEY empty to use the public parcel lookup
GLS_API_KEY=

# Shopify storefront
SHOPIFY_DOMAIN=your-shop.myshopify.com
SHOPIFY_ACCESS_TOKEN=
SHOPIFY_API_VERSION=2024-01

# Server
HOST=0.0.0.0
PORT=8000

# Logging
LOG_LEVEL=INFO
LOG_FILE=
'''

    config_path.write_text(template, encoding='utf-8')
    console.print(f"[green]✓ Configuration file created: {config_path}[/green]")
    console.print("\nEdit this file with your settings, then run:")
    console.print(f"  tracker-cli --config {config_path} serve")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
