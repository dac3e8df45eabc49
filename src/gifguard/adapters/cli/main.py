"""Main CLI application entry point."""

import sys
from typing import Optional

import typer
from rich.console import Console

from .commands import (
    config_command,
    info_command,
    simulate_command,
)

app = typer.Typer(
    name="gifguard",
    help="gifguard - Retry and circuit breaker layer for GIF API calls",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


@app.command(name="info")
def info(
    config: Optional[str] = typer.Option(
        None,
        "--config", "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output with technical details",
    ),
):
    """
    Show effective retry defaults and circuit breaker settings.
    """
    info_command(config_path=config, verbose=verbose, console=console)


@app.command(name="config")
def config(
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    path: Optional[str] = typer.Option(
        None,
        "--path",
        help="Configuration file path",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output with technical details",
    ),
):
    """
    Manage gifguard configuration.

    Without options, lists configuration files and environment overrides.
    """
    config_command(init=init, path=path, show=show, verbose=verbose, console=console)


@app.command(name="simulate")
def simulate(
    breaker: str = typer.Option(
        "gif_search",
        "--breaker", "-b",
        help="Circuit breaker guarding the simulated dependency",
    ),
    failures: int = typer.Option(
        2,
        "--failures", "-f",
        min=0,
        help="Number of leading invocations that fail",
    ),
    calls: int = typer.Option(
        3,
        "--calls", "-n",
        min=1,
        help="Number of guarded calls to issue",
    ),
    error_kind: str = typer.Option(
        "network_error",
        "--error-kind", "-k",
        help="Error kind raised by failing invocations (e.g. network_error, validation_error)",
    ),
    max_attempts: Optional[int] = typer.Option(
        None,
        "--max-attempts",
        min=1,
        help="Override retry.max_attempts",
    ),
    base_delay: Optional[float] = typer.Option(
        None,
        "--base-delay",
        min=0.0,
        help="Override retry.base_delay (seconds)",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config", "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output with technical details",
    ),
):
    """
    Run a fake flaky dependency through retry and a circuit breaker.

    Useful for checking how a configuration behaves before deploying it:
    each retry, rejection and state change is printed.
    """
    simulate_command(
        breaker_name=breaker,
        failures=failures,
        calls=calls,
        error_kind=error_kind,
        max_attempts=max_attempts,
        base_delay=base_delay,
        config_path=config,
        verbose=verbose,
        console=console,
    )


def main():
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
