"""CLI command implementations."""

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ... import __version__
from ...domain.exceptions import ClassifiedError, ErrorKind
from ...infrastructure.config.config_loader import ConfigLoader
from ...infrastructure.di.container import DIContainer
from ...infrastructure.presentation.error_presenter import ErrorPresenter
from ...infrastructure.resilience import (
    CircuitBreakerError,
    api_errors,
    retry_with_backoff,
)


def _fail(error: Exception, verbose: bool, console: Console) -> None:
    console.print()
    console.print(ErrorPresenter.present(error, verbose=verbose), style="red", markup=False)
    raise typer.Exit(code=1)


def info_command(config_path: Optional[str], verbose: bool, console: Console):
    """
    Execute info command.

    Args:
        config_path: Config file path
        verbose: Show technical details on error
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]gifguard System Information[/bold]",
        border_style="blue"
    ))

    try:
        container = DIContainer.create(config_path)
    except Exception as e:
        _fail(e, verbose, console)

    console.print("\n[bold]Version:[/bold]")
    console.print(f"  gifguard: {__version__}")

    retry = container.config.retry
    console.print("\n[bold]Retry Defaults:[/bold]")
    console.print(f"  Max attempts: {retry.max_attempts}")
    console.print(f"  Base delay: {retry.base_delay}s")
    console.print(f"  Max delay: {retry.max_delay if retry.max_delay is not None else 'uncapped'}")
    console.print(f"  Backoff factor: {retry.backoff_factor}")
    console.print(f"  Jitter: {retry.jitter}s")

    table = Table(title="Circuit Breakers")
    table.add_column("Name", style="cyan")
    table.add_column("Failure threshold", justify="right")
    table.add_column("Recovery timeout", justify="right")
    table.add_column("State")
    states = container.breakers.states()
    for name, settings in container.config.circuit_breakers.items():
        table.add_row(
            name,
            str(settings.failure_threshold),
            f"{settings.recovery_timeout}s",
            states[name].value,
        )
    console.print()
    console.print(table)

    console.print("\n[bold]Configuration:[/bold]")
    config_info = ConfigLoader.get_config_info()
    if config_info["existing_configs"]:
        console.print("  Active configs:")
        for cfg in config_info["existing_configs"]:
            console.print(f"    - {cfg}")
    else:
        console.print("  Using default configuration")


def config_command(
    init: bool,
    path: Optional[str],
    show: bool,
    verbose: bool,
    console: Console,
):
    """
    Execute config command.

    Args:
        init: Create default config
        path: Config file path
        show: Show current config
        verbose: Show technical details on error
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]gifguard Configuration[/bold]",
        border_style="blue"
    ))

    if init:
        try:
            config_path = ConfigLoader.create_default_config(path)
        except Exception as e:
            _fail(e, verbose, console)
        console.print(f"\n[green]Configuration file created: {config_path}[/green]")

    elif show:
        try:
            config = ConfigLoader.load(path)
        except Exception as e:
            _fail(e, verbose, console)
        console.print("\n[bold]Current Configuration:[/bold]")
        console.print(config.to_yaml(), markup=False)

    else:
        config_info = ConfigLoader.get_config_info()

        console.print("\n[bold]Configuration Files:[/bold]")
        if config_info["existing_configs"]:
            for cfg in config_info["existing_configs"]:
                console.print(f"  [green]{cfg}[/green]")
        else:
            console.print("  No configuration files found")

        console.print("\n[bold]Environment Overrides:[/bold]")
        if config_info["env_overrides"]:
            for env_var in config_info["env_overrides"]:
                console.print(f"  {env_var}")
        else:
            console.print("  None")

        console.print("\n[bold]Default Locations:[/bold]")
        for default_path in config_info["default_paths"]:
            console.print(f"  {default_path}")


async def _simulate(
    container: DIContainer,
    breaker_name: str,
    failures: int,
    calls: int,
    kind: ErrorKind,
    max_attempts: Optional[int],
    base_delay: Optional[float],
    console: Console,
) -> List[str]:
    """Issue guarded calls against a fake dependency that fails ``failures`` times."""
    breaker = container.breaker(breaker_name)
    invocations = 0

    async def flaky_dependency() -> str:
        nonlocal invocations
        invocations += 1
        if invocations <= failures:
            raise ClassifiedError(f"simulated {kind.value} #{invocations}", kind=kind)
        return f"ok after {invocations} invocation(s)"

    def on_retry(attempt: int, error: Exception) -> None:
        console.print(f"    [yellow]retry[/yellow] after attempt {attempt}: {error}")

    overrides = {"on_retry": on_retry}
    if max_attempts is not None:
        overrides["max_attempts"] = max_attempts
    if base_delay is not None:
        overrides["base_delay"] = base_delay
    options = container.retry_options_for(api_errors, **overrides)

    outcomes = []
    for call in range(1, calls + 1):
        console.print(f"  call {call}:")
        try:
            result = await breaker.execute(lambda: retry_with_backoff(flaky_dependency, options))
        except CircuitBreakerError as e:
            outcomes.append("rejected")
            console.print(f"    [magenta]rejected[/magenta]: {e}")
        except ClassifiedError as e:
            outcomes.append("failed")
            console.print(f"    [red]failed[/red]: {e}")
        else:
            outcomes.append("succeeded")
            console.print(f"    [green]succeeded[/green]: {result}")
        console.print(f"    breaker state: {breaker.state.value}")

    console.print(f"\n[bold]Dependency invoked {invocations} time(s)[/bold]")
    console.print(
        "  " + ", ".join(
            f"{label}: {outcomes.count(label)}" for label in ("succeeded", "failed", "rejected")
        )
    )
    return outcomes


def simulate_command(
    breaker_name: str,
    failures: int,
    calls: int,
    error_kind: str,
    max_attempts: Optional[int],
    base_delay: Optional[float],
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """
    Execute simulate command.

    Args:
        breaker_name: Registry breaker guarding the fake dependency
        failures: Number of leading invocations that fail
        calls: Number of guarded calls to issue
        error_kind: Wire value of the error kind raised on failure
        max_attempts: Override of retry.max_attempts
        base_delay: Override of retry.base_delay
        config_path: Config file path
        verbose: Show technical details on error
        console: Rich console
    """
    console.print(Panel.fit(
        f"[bold]Simulating '{breaker_name}'[/bold]",
        border_style="blue"
    ))

    try:
        kind = ErrorKind.from_value(error_kind) or ErrorKind(f"{error_kind}_error")
        container = DIContainer.create(config_path)
        asyncio.run(_simulate(
            container=container,
            breaker_name=breaker_name,
            failures=failures,
            calls=calls,
            kind=kind,
            max_attempts=max_attempts,
            base_delay=base_delay,
            console=console,
        ))
    except Exception as e:
        _fail(e, verbose, console)
