"""Lint command implementation."""

import json
from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..archive.loader import Archive
from ..archive.rules import RULE_EXPLANATIONS, LintResult, LintRules, get_rule_ids
from ..config import ArchiveConfig
from . import load_for_command

LEVEL_ORDER = {"error": 0, "warning": 1, "info": 2}


def collect_results(
    content_path: Path,
    config: ArchiveConfig | None = None,
    rule_filter: list[str] | None = None,
) -> tuple[Archive, list[LintResult]]:
    """Load the archive and run lint rules, sorted errors first."""
    archive, graph = load_for_command(content_path, config)
    rules = LintRules(archive, graph, config)
    results = rules.run_all(allowed_rules=rule_filter or None)

    results.sort(key=lambda r: (LEVEL_ORDER.get(r.level, 99), str(r.file), r.line or 0))
    return archive, results


def count_levels(results: list[LintResult]) -> dict[str, int]:
    counts = {"error": 0, "warning": 0, "info": 0}
    for r in results:
        counts[r.level] = counts.get(r.level, 0) + 1
    return counts


def exit_code_for(counts: dict[str, int], fail_on: str) -> int:
    """1 if findings at or above fail_on exist, else 0."""
    if fail_on == "warning":
        return 1 if counts["error"] > 0 or counts["warning"] > 0 else 0
    return 1 if counts["error"] > 0 else 0


def run_lint(
    content_path: Path,
    config: ArchiveConfig | None = None,
    fail_on: str | None = None,
    output_json: bool = False,
    rule_filter: list[str] | None = None,
) -> int:
    """Run lint checks on the archive.

    Args:
        content_path: Path to archive content directory
        config: Project configuration (rule levels, ignores, required fields)
        fail_on: "error" or "warning"; defaults to the configured level
        output_json: Output results as JSON instead of human-readable
        rule_filter: Only run these rule ids

    Returns:
        Exit code (0 = success, 1 = failures found)
    """
    console = Console(stderr=True)
    fail_on = fail_on or (config.fail_on if config is not None else "error")

    unknown = sorted(set(rule_filter or []) - set(get_rule_ids()))
    if unknown:
        console.print(f"Unknown rule(s): {', '.join(unknown)}", style="bold red")
        console.print(f"Available: {', '.join(get_rule_ids())}", style="dim")
        return 1

    console.print(f"Loading archive from {content_path}...", style="dim")
    archive, results = collect_results(content_path, config, rule_filter)
    counts = count_levels(results)

    if output_json:
        _output_json(results, counts, archive)
    else:
        _print_human_output(console, results, counts, archive)

    return exit_code_for(counts, fail_on)


def _result_to_dict(result: LintResult, root: Path) -> dict:
    """Convert LintResult to JSON-serializable dict."""
    try:
        file = result.file.relative_to(root).as_posix()
    except ValueError:
        file = str(result.file)
    return {
        "level": result.level,
        "rule": result.rule,
        "file": file,
        "message": result.message,
        "line": result.line,
    }


def _output_json(results: list[LintResult], counts: dict[str, int], archive: Archive) -> None:
    output = {
        "errors": [_result_to_dict(r, archive.path) for r in results if r.level == "error"],
        "warnings": [_result_to_dict(r, archive.path) for r in results if r.level == "warning"],
        "info": [_result_to_dict(r, archive.path) for r in results if r.level == "info"],
        "summary": {
            "notes": len(archive.notes),
            "drafts": len(archive.notes) - len(archive.published_notes),
            "assets": len(archive.assets),
            "links": sum(len(n.links) for n in archive.notes),
            "errors": counts["error"],
            "warnings": counts["warning"],
            "info": counts["info"],
        },
    }

    print(json.dumps(output, indent=2, default=str))


def _print_human_output(
    console: Console,
    results: list[LintResult],
    counts: dict[str, int],
    archive: Archive,
) -> None:
    """Print results grouped by file, then a summary table."""
    current_file = None
    for result in results:
        if result.file != current_file:
            current_file = result.file
            try:
                header = result.file.relative_to(archive.path).as_posix()
            except ValueError:
                header = str(result.file)
            console.print()
            console.print(header, style="bold")

        if result.level == "error":
            style = "bold red"
            prefix = "ERROR"
        elif result.level == "warning":
            style = "yellow"
            prefix = "WARN"
        else:
            style = "dim"
            prefix = "INFO"

        line = f"{result.line:>4}" if result.line else "   -"
        console.print(f"  {line}  {prefix}: [{result.rule}] {result.message}", style=style, highlight=False)

    console.print()

    table = Table(title="Archive Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("Notes", str(len(archive.notes)))
    table.add_row("Drafts", str(len(archive.notes) - len(archive.published_notes)))
    table.add_row("Assets", str(len(archive.assets)))
    table.add_row("Wiki-links", str(sum(len(n.links) for n in archive.notes)))

    by_rule = Counter(r.rule for r in results)
    for rule_id, count in sorted(by_rule.items()):
        table.add_row(f"  {rule_id}", str(count))

    console.print(table)

    console.print()
    if counts["error"] > 0:
        console.print(f"❌ {counts['error']} error(s)", style="bold red")
    if counts["warning"] > 0:
        console.print(f"⚠️  {counts['warning']} warning(s)", style="yellow")
    if counts["info"] > 0:
        console.print(f"ℹ️  {counts['info']} info(s)", style="dim")

    if counts["error"] == 0 and counts["warning"] == 0:
        console.print("✅ No errors or warnings", style="bold green")


def run_explain(rule_id: str) -> int:
    """Explain a specific lint rule.

    Returns:
        Exit code (0 = success, 1 = rule not found)
    """
    console = Console()

    rule_id = rule_id.lower().strip()

    if rule_id not in RULE_EXPLANATIONS:
        console.print(f"Unknown rule: {rule_id}", style="bold red")
        console.print()
        console.print("Known rules:", style="bold")
        for rid in sorted(get_rule_ids()):
            console.print(f"  - {rid}")
        return 1

    from rich.markdown import Markdown

    console.print(Markdown(f"# {rule_id}\n" + RULE_EXPLANATIONS[rule_id]))
    return 0
