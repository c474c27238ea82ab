"""
CLI entry point for the MCP memory server.

Provides command-line interface for starting the server.
"""

import logging

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from memory_server.config import get_server_settings


cli = typer.Typer(
    name="memory-server",
    help="MCP Memory Server",
    add_completion=False,
)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure colorful logging using rich library.

    Args:
        verbose: Enable INFO level logging
        debug: Enable DEBUG level logging
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    console = Console(color_system="auto")
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=debug,
        markup=False,
    )
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[handler],
        force=True,
    )

    # Route uvicorn output through the same handler
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False


@cli.command()
def run(
    host: str = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode"),
) -> None:
    """Start the MCP memory server (single process)."""
    settings = get_server_settings()

    setup_logging(verbose, debug or settings.debug)

    final_host = host or settings.host
    final_port = port or settings.http_port
    final_reload = reload or settings.reload

    typer.echo(f"MCP Memory Server is running on port {final_port}")
    typer.echo(f"MCP endpoint: http://{final_host}:{final_port}{settings.endpoint_path}")

    # One worker only: the message index lives in process memory
    uvicorn.run(
        "memory_server.app:app",
        host=final_host,
        port=final_port,
        workers=1,
        reload=final_reload,
        log_level="debug" if debug else "info" if verbose else "warning",
    )


@cli.command()
def version() -> None:
    """Show server version."""
    from memory_server import __version__

    typer.echo(f"memory-server version {__version__}")


@cli.command()
def config() -> None:
    """Show current configuration."""
    settings = get_server_settings()

    from memory_core.config import get_core_settings
    core_settings = get_core_settings()

    typer.echo("Current Configuration:")
    typer.echo("-" * 40)
    typer.echo(f"Host: {settings.host}")
    typer.echo(f"Port: {settings.http_port}")
    typer.echo(f"Debug: {settings.debug}")
    typer.echo(f"Server Name: {settings.server_name}")
    typer.echo(f"MCP Endpoint: {settings.endpoint_path}")
    typer.echo(f"JSON Response: {settings.json_response}")
    typer.echo(f"Stateless HTTP: {settings.stateless_http}")
    typer.echo("-" * 40)
    typer.echo("Storage Settings (from memory_core):")
    typer.echo(f"  Backend: {core_settings.backend}")
    typer.echo(f"  Folder: {core_settings.folder}")
    typer.echo(f"  Snapshot: {core_settings.storage_path}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
