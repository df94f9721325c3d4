"""Note commands - tag inventory and scaffolding new notes."""

from __future__ import annotations

import json
import re
from collections import defaultdict
from datetime import date
from pathlib import Path

import frontmatter
from rich.console import Console
from rich.table import Table

from ..archive.parser import normalize_tags
from ..config import ArchiveConfig
from . import load_for_command


def slugify_title(title: str) -> str:
    """Turn a note title into a filename stem."""
    slug = re.sub(r"[^\w]+", "-", title.strip().lower())
    return slug.strip("-_") or "untitled"


def run_tags(content_path: Path, *, config: ArchiveConfig | None = None, output_json: bool = False) -> int:
    """List tags with the notes that use them."""
    archive, _ = load_for_command(content_path, config)

    by_tag: dict[str, list[str]] = defaultdict(list)
    for note in archive.notes:
        for tag in note.tags:
            by_tag[tag].append(note.slug)

    ordered = sorted(by_tag.items(), key=lambda kv: (-len(kv[1]), kv[0]))

    if output_json:
        print(json.dumps({tag: sorted(slugs) for tag, slugs in ordered}, indent=2))
        return 0

    console = Console()
    if not ordered:
        console.print("[dim]No tags found.[/dim]")
        return 0

    table = Table(title="Tags")
    table.add_column("Tag", style="cyan")
    table.add_column("Notes", justify="right")
    table.add_column("Examples", style="dim")
    for tag, slugs in ordered:
        examples = ", ".join(sorted(slugs)[:3])
        if len(slugs) > 3:
            examples += ", ..."
        table.add_row(tag, str(len(slugs)), examples)
    console.print(table)
    return 0


def render_note(title: str, tags: list[str] | None = None, draft: bool = False, today: date | None = None) -> str:
    """Render the text of a new note with its front-matter."""
    post = frontmatter.Post(f"# {title}\n", title=title)
    post["date"] = (today or date.today()).isoformat()
    post["tags"] = normalize_tags(tags or [])
    if draft:
        post["draft"] = True
    return frontmatter.dumps(post) + "\n"


def run_new(
    content_path: Path,
    title: str,
    *,
    folder: str | None = None,
    tags: list[str] | None = None,
    draft: bool = False,
) -> int:
    """Create a new note under the content directory.

    Returns:
        Exit code (0 = created, 1 = refused)
    """
    console = Console(stderr=True)

    if not title.strip():
        console.print("Title must not be empty", style="bold red")
        return 1

    root = content_path.resolve()
    target_dir = (root / folder).resolve() if folder else root
    if target_dir != root and root not in target_dir.parents:
        console.print(f"Folder '{folder}' is outside the content directory", style="bold red")
        return 1

    path = target_dir / f"{slugify_title(title)}.md"
    if path.exists():
        console.print(f"Note already exists: {path.relative_to(root).as_posix()}", style="bold red")
        return 1

    target_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(render_note(title.strip(), tags, draft), encoding="utf-8")
    console.print(f"Created {path.relative_to(root).as_posix()}", style="green")
    return 0
