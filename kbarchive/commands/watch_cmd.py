"""Watch command - re-lint the archive whenever notes change."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import ArchiveConfig
from ..watcher import run_watch_loop
from .lint import collect_results, count_levels, exit_code_for


def format_status(counts: dict[str, int], changed: list[Path], content_path: Path) -> str:
    """One-line status after a re-lint."""
    names = []
    for path in changed[:3]:
        try:
            names.append(path.relative_to(content_path).as_posix())
        except ValueError:
            names.append(path.name)
    if len(changed) > 3:
        names.append(f"+{len(changed) - 3} more")
    return (
        f"{', '.join(names) or 'initial lint'} -> "
        f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info(s)"
    )


def run_watch(content_path: Path, *, config: ArchiveConfig | None = None, fail_on: str | None = None) -> int:
    """
    Watch the content directory and re-run lint on every change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    fail_on = fail_on or (config.fail_on if config is not None else "error")

    def relint(changed: list[Path]) -> None:
        _, results = collect_results(content_path, config)
        counts = count_levels(results)
        timestamp = datetime.now().strftime("%H:%M:%S")
        style = "bold red" if exit_code_for(counts, fail_on) else "green"
        console.print(f"[dim]{timestamp}[/dim] [{style}]{format_status(counts, changed, content_path)}[/{style}]")

        for r in results:
            if r.level == "error" or (fail_on == "warning" and r.level == "warning"):
                console.print(f"  {r}", style="red" if r.level == "error" else "yellow", highlight=False)

    console.print(f"[bold]Watching[/bold] {content_path}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    relint([])
    run_watch_loop(content_path, relint)

    console.print()
    console.print("[bold]Stopped.[/bold]")
    return 0
