"""
Command-line interface for page-capture.

Commands:
- shot: Capture one page to a PNG file
- serve: Run the HTTP API locally
- config: Show the effective configuration
"""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .api import CaptureService
from .capture.result import FailureKind
from .config import Settings
from .errors import InvalidRequest

console = Console()


@click.group()
def main():
    """Page Capture - Screenshots of pages and page regions."""
    pass


@main.command()
@click.argument('url')
@click.option('-o', '--output', type=click.Path(path_type=Path), default=Path('capture.png'),
              show_default=True, help='Output PNG path')
@click.option('--mode', type=click.Choice(['full', 'region']), default='region', show_default=True,
              help='full: whole document; region: first matching selector')
@click.option('-w', '--width', default='1200', help='Viewport width (clamped to 320-2400)')
@click.option('-h', '--height', default='900', help='Viewport height (clamped to 320-4000)')
@click.option('-s', '--selector', 'selectors', multiple=True,
              help='Region candidate, repeatable; replaces the configured list')
@click.option('--endpoint', help='DevTools endpoint of a remote browser (ws:// or http://)')
@click.option('--settle', type=float, help='Settle interval in seconds before capture')
def shot(url: str, output: Path, mode: str, width: str, height: str, selectors: tuple[str, ...],
         endpoint: str | None, settle: float | None):
    """Capture URL to a PNG file."""
    overrides = {'cache_ttl': 0}
    if selectors:
        overrides['selectors'] = selectors
    if endpoint:
        overrides['browser_endpoint'] = endpoint
    if settle is not None:
        overrides['settle_seconds'] = settle
    settings = Settings.from_env().with_overrides(**overrides)

    service = CaptureService(settings)
    params = {'url': url, 'mode': mode, 'w': width, 'h': height}

    try:
        request = service.resolve(params)
    except InvalidRequest as e:
        raise click.BadParameter(e.detail, param_hint='--mode')

    console.print(f"[bold]Capturing:[/] {request.url}")
    console.print(f"  Mode: [cyan]{request.mode.value}[/]  Viewport: [cyan]{request.width}x{request.height}[/]")

    result = asyncio.run(service.capture(request))

    if not result.ok:
        color = 'yellow' if result.failure.kind is FailureKind.RATE_LIMITED else 'red'
        console.print(f"[{color}]✗ {result.failure.kind.value}:[/] {result.failure.detail}")
        console.print(f"  Attempts: {result.attempts}")
        raise SystemExit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.image)

    if result.soft_failure:
        console.print("[yellow]⚠ No region selector matched, saved full page instead[/]")
    elif result.selector:
        console.print(f"  ✓ Region: [cyan]{result.selector}[/]")
    console.print(f"  ✓ Saved {output} ({len(result.image):,} bytes, {result.attempts} attempt(s))")


@main.command()
@click.option('--host', default='127.0.0.1', show_default=True)
@click.option('--port', type=int, default=8000, show_default=True)
def serve(host: str, port: int):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from .web import create_app

    settings = Settings.from_env()
    console.print(f"[bold]Serving[/] on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port)


@main.command('config')
def show_config():
    """Show the effective configuration from the environment."""
    settings = Settings.from_env()

    table = Table(title="Page Capture Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("default_url", settings.default_url)
    table.add_row("token", "set" if settings.token else "[dim]not set[/]")
    table.add_row("browser_endpoint", settings.browser_endpoint or "[dim]local chromium[/]")
    table.add_row("chromium_path", settings.chromium_path or "[dim]pyppeteer default[/]")
    table.add_row("selectors", ", ".join(settings.selectors))
    table.add_row("selector_timeout", f"{settings.selector_timeout}s")
    table.add_row("settle_seconds", f"{settings.settle_seconds}s")
    table.add_row("navigation_timeout", f"{settings.navigation_timeout}s")
    table.add_row("cache_ttl", f"{settings.cache_ttl}s" if settings.cache_enabled else "[dim]disabled[/]")

    console.print(table)


if __name__ == '__main__':
    main()
