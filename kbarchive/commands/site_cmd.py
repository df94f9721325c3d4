"""Build and serve commands - drive the external static-site generator."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console

from ..config import ArchiveConfig
from ..site import Runner, build_command, clean_output, run_generator
from .lint import run_lint


def run_build(
    config: ArchiveConfig,
    *,
    check: bool = True,
    clean: bool = False,
    extra_args: Sequence[str] = (),
    runner: Runner | None = None,
) -> int:
    """One-shot build of the static site.

    With check enabled the archive is linted first and the generator is
    not invoked if lint fails at the configured level.
    """
    console = Console(stderr=True)

    if check:
        code = run_lint(config.content_path, config)
        if code != 0:
            console.print("✗ Lint failed; not building. Use --no-check to build anyway.", style="bold red")
            return code

    if clean and clean_output(config):
        console.print(f"Cleaned {config.generator.output}/", style="dim")

    console.print(f"$ {' '.join(build_command(config, extra_args=extra_args))}", style="dim", highlight=False)
    kwargs = {"runner": runner} if runner is not None else {}
    code = run_generator(config, extra_args=extra_args, **kwargs)
    if code == 0:
        console.print(f"✓ Site built into {config.generator.output}/", style="bold green")
    else:
        console.print(f"✗ Generator failed with exit code {code}", style="bold red")
    return code


def run_serve(
    config: ArchiveConfig,
    *,
    port: int | None = None,
    extra_args: Sequence[str] = (),
    runner: Runner | None = None,
) -> int:
    """Run the generator's local development server (live reload is the generator's)."""
    console = Console(stderr=True)

    argv = build_command(config, serve=True, port=port, extra_args=extra_args)
    console.print(f"$ {' '.join(argv)}", style="dim", highlight=False)
    console.print(f"Serving on http://localhost:{port or config.generator.port} (Ctrl+C to stop)", style="bold")

    kwargs = {"runner": runner} if runner is not None else {}
    code = run_generator(config, serve=True, port=port, extra_args=extra_args, **kwargs)
    # 130 is a normal Ctrl+C stop
    return 0 if code == 130 else code
