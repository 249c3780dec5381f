"""
Rich console utilities for dual-mode CLI output.

Provides readable terminal output for humans and structured JSON for
automation. All output functions adapt to the global output_mode setting.

This module provides:
- OutputMode: Class to manage output format (text/json)
- Context manager: spinner()
- Output functions: success(), error(), warning(), info()
- Display functions: print_analysis_result(), print_lint_findings(),
  print_eval_table()

Human Mode (--format text):
    - Rich spinners and colored tables
    - ANSI colors and Unicode symbols

Agent Mode (--format json):
    - Structured JSON output to stdout
    - No ANSI codes or spinners

Examples:
    >>> from brand_visibility.utils.console import output_mode, spinner, success
    >>> output_mode.format = "text"
    >>> with spinner("Analyzing response..."):
    ...     result = analyze_response(...)
    >>> success("Analysis complete")
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        quiet: If True, suppress non-essential output
        _json_buffer: Internal buffer for JSON output in agent mode

    Examples:
        >>> mode = OutputMode()
        >>> mode.is_human()
        True
        >>> mode.format = "json"
        >>> mode.is_agent()
        True
    """

    def __init__(self, format_type: str = "text", quiet: bool = False):
        """
        Initialize output mode.

        Args:
            format_type: Output format - "text" for human, "json" for agent
            quiet: If True, suppress non-essential output

        Raises:
            ValueError: If format_type is not "text" or "json"
        """
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        """Return True if format is "text"."""
        return self.format == "text"

    def is_agent(self) -> bool:
        """Return True if format is "json"."""
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """
        Add key-value pair to JSON buffer.

        Used in agent mode to accumulate structured data before final output
        via flush_json().

        Args:
            key: JSON key
            value: JSON-serializable value
        """
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear buffer.

        Only outputs in agent mode. In human mode, this is a no-op.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

# Global Rich console instances for human mode
console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


@contextmanager
def spinner(message: str):
    """
    Context manager for showing a spinner during operations.

    Displays a Rich spinner with message in human mode, silent otherwise.

    Args:
        message: Status message to display
    """
    if output_mode.is_human():
        with console.status(f"[bold blue]{message}", spinner="dots") as status:
            yield status
    else:
        yield None


def success(message: str) -> None:
    """
    Print a success message.

    Human mode: Green checkmark with message
    Agent mode: Buffer to JSON
    """
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {message}")
    elif output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    """
    Print an error message.

    Human mode: Red X with message to stderr
    Agent mode: Buffer to JSON
    """
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}", style="red")
    elif output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def warning(message: str) -> None:
    """
    Print a warning message.

    Human mode: Yellow warning symbol with message
    Agent mode: Appended to the "warnings" list in the JSON buffer
    """
    if output_mode.is_human():
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")
    elif output_mode.is_agent():
        warnings = output_mode._json_buffer.setdefault("warnings", [])
        warnings.append(message)


def info(message: str) -> None:
    """
    Print an info message.

    Human mode: Blue info symbol with message
    Agent mode: Silent
    """
    if output_mode.is_human() and not output_mode.quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def print_analysis_result(result: dict[str, Any]) -> None:
    """
    Print one analysis result.

    Human mode: headline fields plus a competitor table
    Agent mode: Buffer the full result dict under "result"

    Args:
        result: Output of AnalysisResult.to_dict()
    """
    if output_mode.is_agent():
        output_mode.add_json("result", result)
        return

    if output_mode.quiet:
        return

    metadata = result.get("metadata", {})
    present = result.get("org_brand_present")
    present_symbol = "[green]✓[/green]" if present else "[red]✗[/red]"
    position = result.get("org_brand_position")

    console.print(f"Org brand present: {present_symbol}")
    console.print(
        f"Org brand position: {position if position is not None else '-'}"
    )
    console.print(f"Visibility score: [bold]{result.get('score')}[/bold]")
    console.print(
        f"Method: {metadata.get('method')}  "
        f"Confidence: {metadata.get('confidence', 0.0):.2f}"
    )
    if metadata.get("fallback_used"):
        console.print(
            f"[yellow]Fallback used:[/yellow] {metadata.get('fallback_reason')}"
        )

    competitors = result.get("competitors", [])
    if not competitors:
        console.print("[dim]No competitors mentioned[/dim]")
        return

    table = Table(title="Competitors", box=box.ROUNDED)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Occurrences", justify="right")
    table.add_column("First offset", justify="right")
    table.add_column("In catalog", justify="center")

    for competitor in competitors:
        in_catalog = (
            "[green]✓[/green]"
            if competitor.get("in_catalog")
            else "[yellow]new[/yellow]"
        )
        first_offset = competitor.get("first_offset")
        table.add_row(
            competitor.get("name", ""),
            str(competitor.get("occurrences", 0)),
            str(first_offset) if first_offset is not None else "-",
            in_catalog,
        )

    console.print(table)


def print_lint_findings(findings: list[dict[str, Any]]) -> None:
    """
    Print catalog lint findings (collisions and near-duplicates).

    Args:
        findings: List of dicts with keys kind, first, second, detail
    """
    if output_mode.is_agent():
        output_mode.add_json("catalog_findings", findings)
        return

    if output_mode.quiet or not findings:
        return

    table = Table(title="Catalog Findings", box=box.ROUNDED)
    table.add_column("Kind", style="magenta")
    table.add_column("Entry", style="cyan")
    table.add_column("Conflicts with", style="cyan")
    table.add_column("Detail")

    for finding in findings:
        table.add_row(
            finding.get("kind", ""),
            finding.get("first", ""),
            finding.get("second", ""),
            finding.get("detail", ""),
        )

    console.print(table)


def print_eval_table(results: list[dict[str, Any]]) -> None:
    """
    Print per-case evaluation results.

    Expected dict keys: description, overall_passed, and a "metrics" list of
    dicts with name, value, passed.

    Args:
        results: List of evaluation result dictionaries
    """
    if output_mode.is_agent():
        output_mode.add_json("results", results)
        return

    if output_mode.quiet:
        return

    table = Table(title="Evaluation Results", box=box.ROUNDED)
    table.add_column("Test case", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Failed metrics")

    for result in results:
        status = (
            "[green]✓ PASS[/green]"
            if result.get("overall_passed")
            else "[red]✗ FAIL[/red]"
        )
        failed = [
            f"{m['name']}={m['value']:.2f}"
            for m in result.get("metrics", [])
            if not m.get("passed")
        ]
        table.add_row(result.get("description", ""), status, ", ".join(failed) or "-")

    console.print(table)
