"""Output formatting utilities"""

from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich import box

from ...api.exceptions import SafePublishError
from ...constants import EMOJI_ARROW, EMOJI_ERROR, EMOJI_SUCCESS, EMOJI_WARNING, MSG_DRY_RUN_SUCCESS, MSG_PUBLISH_SUCCESS
from ...models import CommandResult, DiffReport, IntegrityReport, PipelineResult

console = Console()
err_console = Console(stderr=True)


def format_pipeline_result(result: PipelineResult) -> None:
    """Format and display the outcome of a publish run"""
    for warning in result.warnings:
        print_warning(warning)

    if result.success:
        template = MSG_DRY_RUN_SUCCESS if result.dry_run else MSG_PUBLISH_SUCCESS
        steps = f" {EMOJI_ARROW} ".join(state.value for state in result.history)
        lines = [
            f"[green]{escape(template.format(name=result.package_name, version=result.package_version))}[/green]",
            "",
            f"[bold]Files:[/bold] {len(result.integrity.expected_files) if result.integrity else 0}",
            f"[bold]Steps:[/bold] {steps}",
        ]
        if result.duration is not None:
            lines.append(f"[bold]Duration:[/bold] {result.duration:.1f}s")

        panel = Panel(
            "\n".join(lines),
            title="Publish Result",
            border_style="green"
        )
        console.print(panel)
        return

    if result.integrity is not None and result.integrity.checked and not result.integrity.is_clean:
        format_violations(result.integrity)

    # Build tool output is printed verbatim
    for command in result.commands:
        if not command.success:
            print_command_output(command)

    if result.diff_report is not None and not result.diff_report.is_empty:
        format_diff_report(result.diff_report)

    lines = [
        f"[red]{EMOJI_ERROR} {escape(result.failed_step or 'unknown')} step failed:[/red] "
        f"{escape(str(result.error))}"
    ]
    if isinstance(result.error, SafePublishError) and result.error.error_code:
        lines.append(f"[dim]Error code: {result.error.error_code}[/dim]")
    if result.uploaded:
        lines.append("")
        lines.append(
            f"[yellow]{EMOJI_WARNING} {escape(result.package_name)} {escape(result.package_version)} "
            f"has already been uploaded[/yellow]"
        )

    panel = Panel(
        "\n".join(lines),
        title="Publish Error",
        border_style="red"
    )
    err_console.print(panel)


def format_violations(report: IntegrityReport) -> None:
    """Display integrity violations as a table"""
    table = Table(title="Integrity Violations", box=box.SIMPLE)
    table.add_column("Path", style="cyan")
    table.add_column("Problem", style="red")
    table.add_column("Status", style="dim")

    for violation in report.violations:
        table.add_row(escape(violation.path), violation.kind.value, violation.detail)

    err_console.print(table)


def format_diff_report(report: DiffReport) -> None:
    """Display a post-publish diff report followed by content diffs"""
    table = Table(title="Published Package Differences", box=box.SIMPLE)
    table.add_column("Path", style="cyan")
    table.add_column("Difference", style="red")

    for entry in report:
        table.add_row(escape(entry.path), entry.kind.value)

    err_console.print(table)

    for entry in report:
        if entry.diff:
            err_console.print(Syntax(entry.diff, "diff", theme="monokai", line_numbers=False))


def print_command_output(command: CommandResult) -> None:
    """Print captured output of a build tool invocation"""
    err_console.print(f"[dim]$ {escape(command.command_line)} (exit {command.returncode})[/dim]")
    if command.output:
        click.echo(command.output, err=True)


def print_error(message: str, error: Optional[Exception] = None) -> None:
    """Print error message"""
    if error:
        err_console.print(f"[red]Error:[/red] {escape(message)}: {escape(str(error))}")
    else:
        err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print warning message"""
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print info message"""
    console.print(f"[blue]Info:[/blue] {escape(message)}")


def print_success(message: str) -> None:
    """Print success message"""
    console.print(f"[green]{EMOJI_SUCCESS}[/green] {escape(message)}")
