"""CLI entrypoint for kbarchive."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import ArchiveConfig, load_config
from .errors import KbArchiveError


def _auto_detect_content(start: Path) -> Path | None:
    """Find a ./content folder by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if p.is_dir() and p.name.lower() == "content":
            return p
        candidate = p / "content"
        if candidate.is_dir():
            return candidate
    return None


def _configure_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _use_content(config: ArchiveConfig, content: Path) -> None:
    """Point the config at an explicit content directory."""
    try:
        config.content = content.relative_to(config.root.resolve()).as_posix()
    except ValueError:
        config.content = str(content)


@click.group()
@click.version_option(__version__, prog_name="kbarchive")
@click.option(
    "--content",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the notes content directory (defaults to config, then auto-detected ./content)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, content: Path | None, verbose: bool) -> None:
    """kbarchive - Lint and publish a Markdown knowledge archive.

    Checks front-matter and wiki-links, inspects the link graph, and drives
    the static-site generator's build and serve modes.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(Path.cwd())
    except KbArchiveError as e:
        raise click.ClickException(str(e)) from e

    if content is not None:
        _use_content(config, content.resolve())
    elif config.source is None:
        detected = _auto_detect_content(Path.cwd())
        if detected is None:
            raise click.ClickException(
                "Content directory not found. Pass --content /path/to/content, add kbarchive.toml, "
                "or run from inside the repo."
            )
        config.root = detected.parent
        config.content = detected.name

    if not config.content_path.is_dir():
        raise click.BadParameter(f"Directory '{config.content_path}' does not exist.", param_hint="--content / -c")

    ctx.obj["config"] = config
    ctx.obj["content"] = config.content_path


def _run(fn, *args, **kwargs) -> None:
    """Call a run_* function, mapping kbarchive errors to CLI errors, and exit with its code."""
    try:
        exit_code = fn(*args, **kwargs)
    except KbArchiveError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default=None,
    help="Exit with error if this level or higher found (default: config fail_on)",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.option(
    "--rule",
    "rules",
    multiple=True,
    metavar="RULE_ID",
    help="Only run this rule (repeatable)",
)
@click.option(
    "--explain",
    "explain_rule",
    type=str,
    default=None,
    metavar="RULE_ID",
    help="Explain a specific rule and exit (e.g., --explain broken-link)",
)
@click.pass_context
def lint(
    ctx: click.Context,
    fail_on: str | None,
    output_json: bool,
    rules: tuple[str, ...],
    explain_rule: str | None,
) -> None:
    """Check notes for broken links and invalid front-matter.

    Use --explain RULE_ID to see detailed documentation for a rule.
    """
    from .commands.lint import run_explain, run_lint

    if explain_rule:
        _run(run_explain, explain_rule)

    _run(
        run_lint,
        ctx.obj["content"],
        ctx.obj["config"],
        fail_on=fail_on,
        output_json=output_json,
        rule_filter=list(rules) or None,
    )


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "md", "json", "dot"]),
    default="rich",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many nodes to show in top lists")
@click.pass_context
def graph(ctx: click.Context, fmt: str, out: Path | None, top: int) -> None:
    """Inspect the note link graph."""
    from .commands.graph_cmd import run_graph

    _run(run_graph, ctx.obj["content"], config=ctx.obj["config"], fmt=fmt, out=out, top=top)


@cli.command()
@click.argument("note")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def backlinks(ctx: click.Context, note: str, output_json: bool) -> None:
    """List notes linking to NOTE (name, path, or alias).

    Examples:

        kbarchive backlinks notes/k8s-daemonset-race
    """
    from .commands.graph_cmd import run_backlinks

    _run(run_backlinks, ctx.obj["content"], note, config=ctx.obj["config"], output_json=output_json)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tags(ctx: click.Context, output_json: bool) -> None:
    """List front-matter tags and how many notes use them."""
    from .commands.notes_cmd import run_tags

    _run(run_tags, ctx.obj["content"], config=ctx.obj["config"], output_json=output_json)


@cli.command()
@click.argument("title")
@click.option("--dir", "folder", type=str, default=None, help="Folder under the content directory")
@click.option("--tag", "tag_list", multiple=True, help="Tag to add (repeatable)")
@click.option("--draft", is_flag=True, help="Mark the note as a draft")
@click.pass_context
def new(ctx: click.Context, title: str, folder: str | None, tag_list: tuple[str, ...], draft: bool) -> None:
    """Create a new note with front-matter.

    Examples:

        kbarchive new "Git credential helpers" --dir notes --tag git
    """
    from .commands.notes_cmd import run_new

    _run(run_new, ctx.obj["content"], title, folder=folder, tags=list(tag_list), draft=draft)


@cli.command()
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default=None,
    help="Highlight findings at this level or higher (default: config fail_on)",
)
@click.pass_context
def watch(ctx: click.Context, fail_on: str | None) -> None:
    """Re-lint the archive whenever a note changes.

    Runs until interrupted with Ctrl+C.
    """
    from .commands.watch_cmd import run_watch

    _run(run_watch, ctx.obj["content"], config=ctx.obj["config"], fail_on=fail_on)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.option(
    "--check/--no-check",
    default=True,
    show_default=True,
    help="Lint before building and abort on failures",
)
@click.option("--clean", is_flag=True, help="Remove the output directory first")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def build(ctx: click.Context, check: bool, clean: bool, extra_args: tuple[str, ...]) -> None:
    """Build the static site once with the configured generator.

    Arguments after the options are passed to the generator unchanged.

    Examples:

        kbarchive build

        kbarchive build --no-check -- --concurrency 4
    """
    from .commands.site_cmd import run_build

    _run(run_build, ctx.obj["config"], check=check, clean=clean, extra_args=extra_args)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.option("--port", type=int, default=None, help="Port for the dev server (default: config port)")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def serve(ctx: click.Context, port: int | None, extra_args: tuple[str, ...]) -> None:
    """Run the generator's local dev server with live reload."""
    from .commands.site_cmd import run_serve

    _run(run_serve, ctx.obj["config"], port=port, extra_args=extra_args)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
