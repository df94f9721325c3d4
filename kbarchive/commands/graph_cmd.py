"""Graph commands - inspect the note link structure."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..archive.graph import INDEX_SLUG, LinkGraph
from ..config import ArchiveConfig
from . import load_for_command


def run_graph(
    content_path: Path,
    *,
    config: ArchiveConfig | None = None,
    fmt: str = "rich",
    out: Path | None = None,
    top: int = 25,
) -> int:
    """Output a link graph summary (or the full graph as DOT)."""
    console = Console(stderr=True)

    archive, graph = load_for_command(content_path, config)
    payload = _summarize_graph(graph, top=top)

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(payload, console=rich_console)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote graph output to {out}", style="green")
        else:
            _print_rich(payload, console=Console())
        return 0

    text: str
    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    elif fmt == "dot":
        text = graph.to_dot()
    else:
        text = _to_markdown(payload)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote graph output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0


def run_backlinks(
    content_path: Path,
    note_name: str,
    *,
    config: ArchiveConfig | None = None,
    output_json: bool = False,
) -> int:
    """List the notes linking to a note.

    Returns:
        Exit code (0 = success, 1 = note not found)
    """
    console = Console(stderr=True)

    archive, graph = load_for_command(content_path, config)
    note = archive.get(note_name)
    if note is None:
        console.print(f"Note not found: {note_name}", style="bold red")
        return 1

    sources = sorted(graph.backlinks(note.slug))

    if output_json:
        rows = [{"slug": s, "title": graph.nodes[s].title, "path": graph.nodes[s].rel_path} for s in sources]
        print(json.dumps({"note": note.slug, "backlinks": rows}, indent=2))
        return 0

    out = Console()
    out.print(f"Backlinks to [bold cyan]{note.title}[/bold cyan] ({note.rel_path})")
    if not sources:
        out.print("  No backlinks", style="dim")
        return 0

    for slug in sources:
        src = graph.nodes[slug]
        lines = sorted({link.line for link in src.links if archive.resolve(link, src).note is note})
        where = ", ".join(str(n) for n in lines)
        out.print(f"  {src.rel_path}:{where}  {src.title}", highlight=False)
    return 0


def _summarize_graph(g: LinkGraph, *, top: int) -> dict:
    nodes = sorted(g.nodes)

    def top_list(kind: str):
        rows = []
        for n in nodes:
            rows.append(
                {
                    "name": n,
                    "in_degree": len(g.backlinks(n)),
                    "out_degree": len(g.outgoing(n)),
                }
            )
        key = "in_degree" if kind == "in" else "out_degree"
        rows.sort(key=lambda r: (-r[key], r["name"]))
        return rows[: max(0, top)]

    return {
        "title": "Note link graph",
        "node_count": len(nodes),
        "edge_count": g.edge_count,
        "dangling_links": len(g.dangling),
        "orphans": g.orphans(),
        "unreachable_from_index": g.unreachable(INDEX_SLUG),
        "top_in_degree": top_list("in"),
        "top_out_degree": top_list("out"),
    }


def _print_rich(payload: dict, *, console: Console) -> None:
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(
        f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}  "
        f"Dangling links: {payload['dangling_links']}"
    )
    console.print()

    def render_table(title: str, rows: list[dict]) -> None:
        t = Table(title=title, show_header=True, header_style="bold")
        t.add_column("Node", style="cyan", no_wrap=True)
        t.add_column("In", justify="right")
        t.add_column("Out", justify="right")
        for r in rows:
            t.add_row(str(r["name"]), str(r["in_degree"]), str(r["out_degree"]))
        console.print(t)
        console.print()

    render_table("Top in-degree", payload["top_in_degree"])
    render_table("Top out-degree", payload["top_out_degree"])

    if payload["orphans"]:
        console.print(f"[bold]Orphans[/bold] ({len(payload['orphans'])})")
        for name in payload["orphans"]:
            console.print(f"  - {name}")
        console.print()
    if payload["unreachable_from_index"]:
        console.print(f"[bold]Unreachable from index[/bold] ({len(payload['unreachable_from_index'])})")
        for name in payload["unreachable_from_index"]:
            console.print(f"  - {name}")


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    lines.append(f"- Dangling links: {payload['dangling_links']}")
    lines.append("")

    def table(title: str, rows: list[dict]) -> None:
        lines.append(f"### {title}")
        lines.append("")
        lines.append("| Node | In-degree | Out-degree |")
        lines.append("|---|---:|---:|")
        for r in rows:
            lines.append(f"| `{r['name']}` | {r['in_degree']} | {r['out_degree']} |")
        lines.append("")

    table("Top in-degree", payload["top_in_degree"])
    table("Top out-degree", payload["top_out_degree"])

    if payload["orphans"]:
        lines.append("### Orphans")
        lines.append("")
        lines.extend(f"- `{name}`" for name in payload["orphans"])
        lines.append("")

    return "\n".join(lines)
