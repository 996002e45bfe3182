"""
Rendering functions for gitcsemver output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Dict, Any, Optional

console = Console()


def render_table(headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(val) for val in row])

    console.print(table)


def render_info(simple: Dict[str, Any], diagnostics: List[str], possible_versions: List[str]) -> None:
    """
    Render a SimpleRepositoryInfo dictionary as a table.

    Args:
        simple: SimpleRepositoryInfo.to_dict()
        diagnostics: Error lines of the evaluation
        possible_versions: Versions that may be released on the commit
    """
    table = Table(
        title="Repository Version",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    if simple.get('is_valid_release'):
        status = "[green]release[/green]"
    elif simple.get('is_valid_ci_build'):
        status = "[blue]ci build[/blue]"
    else:
        status = "[red]no valid version[/red]"

    table.add_row("Status", status)
    table.add_row("SemVer", str(simple.get('safe_sem_version') or ''))
    table.add_row("NuGet V2", str(simple.get('safe_nuget_version') or ''))
    table.add_row("Major.Minor.Patch", str(simple.get('major_minor_patch')))
    if simple.get('pre_release_name'):
        table.add_row(
            "Pre release",
            f"{simple['pre_release_name']} {simple.get('pre_release_number', 0)}.{simple.get('pre_release_fix', 0)}"
        )
    table.add_row("File version", str(simple.get('file_version') or ''))
    table.add_row("Ordered version", str(simple.get('ordered_version', 0)))
    if simple.get('original_tag_text'):
        table.add_row("Tag", simple['original_tag_text'])
    table.add_row("Commit", str(simple.get('commit_sha') or ''))
    table.add_row("Commit date (UTC)", str(simple.get('commit_date_utc') or ''))

    console.print(table)

    if possible_versions:
        console.print(f"[dim]Possible versions:[/dim] {', '.join(possible_versions)}")
    for line in diagnostics:
        console.print(f"[red]{line}[/red]")


def render_versions_table(versions: List[Dict[str, Any]]) -> None:
    """
    Render existing versions as a table.

    Args:
        versions: TagCommit dictionaries, lowest version first
    """
    rows = [[v['version'], v['tag'], v['commit_sha'][:12], v['content_sha'][:12]] for v in versions]
    render_table(["Version", "Tag", "Commit", "Content"], rows, title="Existing Versions")
