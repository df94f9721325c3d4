"""
Invocation of the external static-site generator.

The generator (Quartz by default) does the actual Markdown to HTML work;
this module only expands the configured command line and runs it as a
child process in the project root.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from .config import ArchiveConfig
from .errors import GeneratorError

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


def _expand(args: Sequence[str], values: dict[str, str]) -> list[str]:
    expanded = []
    for arg in args:
        try:
            expanded.append(arg.format(**values))
        except (KeyError, IndexError, ValueError) as e:
            raise GeneratorError(f"Cannot expand generator argument '{arg}': {e}") from e
    return expanded


def build_command(
    config: ArchiveConfig,
    *,
    serve: bool = False,
    port: int | None = None,
    extra_args: Sequence[str] = (),
) -> list[str]:
    """Expand the configured generator command.

    Placeholders: {content}, {output}, {port}. Paths are given relative to
    the project root, which is where the generator runs.
    """
    gen = config.generator
    values = {
        "content": config.content,
        "output": gen.output,
        "port": str(port if port is not None else gen.port),
    }
    argv = _expand(gen.command, values)
    if serve:
        argv.extend(_expand(gen.serve_args, values))
    argv.extend(extra_args)
    return argv


def run_generator(
    config: ArchiveConfig,
    *,
    serve: bool = False,
    port: int | None = None,
    extra_args: Sequence[str] = (),
    runner: Runner = subprocess.run,
) -> int:
    """Run the generator and return its exit code.

    Output is not captured; the generator's own progress and error
    reporting go straight to the terminal.

    Raises:
        GeneratorError: If the generator executable cannot be found
    """
    argv = build_command(config, serve=serve, port=port, extra_args=extra_args)

    if shutil.which(argv[0]) is None:
        raise GeneratorError(
            f"Generator executable '{argv[0]}' not found on PATH. "
            "Install it or set [generator].command in kbarchive.toml."
        )

    logger.info("Running %s in %s", " ".join(argv), config.root)
    try:
        result = runner(argv, cwd=str(config.root), check=False)
    except KeyboardInterrupt:
        # Ctrl+C is the normal way to stop the dev server
        logger.info("Generator interrupted")
        return 130

    if result.returncode != 0:
        logger.warning("Generator exited with code %d", result.returncode)
    return result.returncode


def clean_output(config: ArchiveConfig) -> bool:
    """Remove the generator output directory.

    Returns True if something was removed.

    Raises:
        GeneratorError: If the output directory lies outside the project root
    """
    output = config.output_path
    root = config.root.resolve()
    if output == root or root not in output.parents:
        raise GeneratorError(f"Refusing to clean '{output}': not inside project root '{root}'")
    if not output.exists():
        return False
    shutil.rmtree(output)
    logger.info("Removed %s", output)
    return True
