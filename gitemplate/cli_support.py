"""Shared output and error helpers for the gitemplate CLI."""
from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from gitemplate.core.results import CommandResult, ResultKind


def exit_code_for(result: CommandResult) -> int:
    """Map a failed result to a process exit status (1-255)."""
    return min(max(result.code, 1), 255)


def format_result_failure(result: CommandResult) -> str:
    """Describe a failed CommandResult for the user."""
    output = (result.output or "").strip()
    if result.kind is ResultKind.PRECONDITION:
        return f"Precondition failed: {output}"
    if output:
        return f"Command failed (code {result.code}): {output}"
    return f"Command failed (code {result.code})"


def handle_result_failure(result: CommandResult, console: Console) -> None:
    """Report a failed pipeline result and exit with its code.

    Raises:
        typer.Exit: Always
    """
    print_error(console, format_result_failure(result))
    raise typer.Exit(exit_code_for(result))


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle internal CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def handle_fatal_exception(e: BaseException, console: Console, verbose: bool = False) -> None:
    """Report an unexpected exception and exit 1."""
    console.print(f"[red]Fatal exception:[/red] {escape(repr(e))}", highlight=False)
    if verbose:
        console.print_exception()
    raise typer.Exit(1)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting."""
    console.print(f"[red]{prefix}[/red] {escape(message)}", highlight=False)


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {message}")
