"""Rich console utilities for flatten-bom.

This module provides a shared Rich Console instance and helper functions
for CLI output, optimized for GitHub Actions and CI environments, plus an
audit trail of the changes a run makes to the BOM.
"""

import contextvars
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from .exceptions import FileProcessingError

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"
IS_GITLAB_CI = os.getenv("GITLAB_CI") == "true"
IS_CI = os.getenv("CI") == "true" or IS_GITHUB_ACTIONS or IS_GITLAB_CI

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "highlight": "magenta",
    }
)

# Shared console instance
# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def print_banner(version: str = "unknown") -> None:
    """Print the flatten-bom banner."""
    banner = Text()
    banner.append("flatten-bom", style="bold blue")
    version_display = f"v{version}" if version and version[0:1].isdigit() else version
    banner.append(f" {version_display}", style="magenta")
    banner.append(" - keep only what you pull\n", style="cyan")
    console.print(banner)


def print_step_header(step_num: int, title: str) -> None:
    """
    Print a styled step header.

    In GitHub Actions, uses ::group:: for collapsible sections.
    In other environments, uses Rich styling.
    """
    step_title = f"STEP {step_num}: {title}"

    if IS_GITHUB_ACTIONS:
        print(f"::group::{step_title}")
        console.print(f"[bold blue]{step_title}[/bold blue]")
    else:
        console.print()
        console.rule(f"[bold blue]{step_title}[/bold blue]", style="blue")


def print_step_end(step_num: int, success: bool = True) -> None:
    """Print step completion status and close the GitHub Actions group."""
    if success:
        console.print(f"[success]✓ Step {step_num} completed successfully[/success]")
    else:
        console.print(f"[error]✗ Step {step_num} failed[/error]")

    if IS_GITHUB_ACTIONS:
        print("::endgroup::")
    else:
        console.print()


@contextmanager
def gha_group(title: str) -> Generator[None, None, None]:
    """
    Context manager for GitHub Actions collapsible groups.

    Usage:
        with gha_group("Details"):
            print("This is collapsible in GHA")
    """
    if IS_GITHUB_ACTIONS:
        print(f"::group::{title}")
    try:
        yield
    finally:
        if IS_GITHUB_ACTIONS:
            print("::endgroup::")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """Emit an error that appears in the GitHub Actions job summary."""
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::error title={title}::{message}")
        else:
            print(f"::error::{message}")
    else:
        if title:
            console.print(f"[error]Error ({title}):[/error] {escape(message)}")
        else:
            console.print(f"[error]Error:[/error] {escape(message)}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_findings_table(findings: Sequence[Any], policy: str) -> None:
    """Print consistency findings that did not fail the run."""
    if not findings:
        return
    table = Table(title=f"Consistency findings ({policy})", show_header=True, header_style="bold")
    table.add_column("Rule", style="yellow")
    table.add_column("Detail")
    for finding in findings:
        table.add_row(finding.rule, Text(finding.detail))
    console.print(table)


def print_final_success(message: str = "All steps completed successfully!") -> None:
    """Print final success message."""
    console.print()
    if IS_GITHUB_ACTIONS:
        console.print(f"[bold green]✓ SUCCESS![/bold green] {escape(message)}")
    else:
        console.rule("[bold green]SUCCESS[/bold green]", style="green")
        console.print(f"[bold green]{escape(message)}[/bold green]", justify="center")
    console.print()


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="BOM Flattening Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
        console.print(f"[bold red]{escape(message)}[/bold red]", justify="center")
    console.print()


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class AuditEntry:
    """A single audit trail entry recording a BOM modification."""

    timestamp: str
    category: str  # TRANSFORMATION, REDUCTION, FIX, OUTPUT
    operation: str  # rewritten, excluded, dropped, written
    subject: str  # coordinates or path
    new_value: Optional[str] = None
    old_value: Optional[str] = None

    def format_for_file(self) -> str:
        """Format entry for the audit trail file."""
        parts = [f"[{self.timestamp}]", self.category, self.subject, self.operation.upper()]
        if self.old_value and self.new_value:
            parts.append(f'"{self.old_value}" -> "{self.new_value}"')
        elif self.new_value:
            parts.append(f'"{self.new_value}"')
        return " ".join(parts)


CATEGORIES = ("TRANSFORMATION", "REDUCTION", "FIX", "OUTPUT")


@dataclass
class AuditTrail:
    """
    Audit trail of the modifications a run makes to a BOM.

    Categories of changes tracked:
    - TRANSFORMATION: versions rewritten and exclusions added by transformations
    - REDUCTION: entries dropped from the reduced BOM
    - FIX: exclusions added to the source pom.xml
    - OUTPUT: generated files written
    """

    entries: List[AuditEntry] = field(default_factory=list)
    start_time: str = field(default_factory=_timestamp)

    def _add_entry(
        self,
        category: str,
        operation: str,
        subject: str,
        new_value: Optional[str] = None,
        old_value: Optional[str] = None,
    ) -> None:
        self.entries.append(AuditEntry(_timestamp(), category, operation, subject, new_value, old_value))

    def record_version_rewrite(self, subject: str, old_version: str, new_version: str) -> None:
        self._add_entry("TRANSFORMATION", "rewritten", subject, new_version, old_version)

    def record_exclusion_added(self, subject: str, exclusion: str) -> None:
        self._add_entry("TRANSFORMATION", "excluded", subject, exclusion)

    def record_dropped(self, subject: str, reason: str) -> None:
        self._add_entry("REDUCTION", "dropped", subject, reason)

    def record_fix(self, subject: str, exclusion: str) -> None:
        self._add_entry("FIX", "excluded", subject, exclusion)

    def record_file_written(self, path: str) -> None:
        self._add_entry("OUTPUT", "written", path)

    def has_changes(self) -> bool:
        return len(self.entries) > 0

    def get_entries_by_category(self, category: str) -> List[AuditEntry]:
        return [e for e in self.entries if e.category == category]

    def get_summary_counts(self) -> Dict[str, int]:
        """Get counts by category."""
        counts = {category.lower(): len(self.get_entries_by_category(category)) for category in CATEGORIES}
        counts["total"] = len(self.entries)
        return counts

    def format_lines(self) -> List[str]:
        lines = ["# BOM Audit Trail", f"# Started: {self.start_time}", ""]
        for category in CATEGORIES:
            category_entries = self.get_entries_by_category(category)
            if category_entries:
                lines.append(f"## {category.title()}")
                lines.append("")
                lines.extend(entry.format_for_file() for entry in category_entries)
                lines.append("")
        return lines

    def write_audit_file(self, path: str, encoding: str = "utf-8") -> None:
        """
        Write the audit trail to a file.

        Raises:
            FileProcessingError: If the file cannot be written
        """
        try:
            with open(path, "w", encoding=encoding) as f:
                f.write("\n".join(self.format_lines()))
        except OSError as e:
            raise FileProcessingError(f"Could not write audit trail to {path}: {e}") from e

    def print_summary(self, title: str = "BOM Modifications") -> None:
        """Print a clean summary to stdout."""
        if not self.has_changes():
            console.print("[dim]No BOM modifications recorded.[/dim]")
            return

        console.print()
        console.rule(f"[bold]{title}[/bold]", style="blue")

        counts = self.get_summary_counts()
        print_summary_table(
            "Summary",
            [
                ("Transformations applied", counts["transformation"]),
                ("Entries dropped", counts["reduction"]),
                ("Exclusions fixed", counts["fix"]),
                ("Files written", counts["output"]),
            ],
        )

        with gha_group("Audit Trail"):
            for line in self.format_lines():
                console.print(line, highlight=False, markup=False)


# Each thread/async context has its own audit trail
_current_trail: contextvars.ContextVar[Optional[AuditTrail]] = contextvars.ContextVar("audit_trail", default=None)


def get_audit_trail() -> AuditTrail:
    """Get the current audit trail, creating one if needed."""
    trail = _current_trail.get()
    if trail is None:
        trail = AuditTrail()
        _current_trail.set(trail)
    return trail


def reset_audit_trail() -> AuditTrail:
    """Reset the audit trail for a new run."""
    trail = AuditTrail()
    _current_trail.set(trail)
    return trail
