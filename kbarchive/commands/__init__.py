"""CLI command implementations.

Each run_* function returns a process exit code.
"""

from pathlib import Path

from ..archive.graph import LinkGraph
from ..archive.loader import Archive, load_archive
from ..config import ArchiveConfig


def load_for_command(content_path: Path, config: ArchiveConfig | None = None) -> tuple[Archive, LinkGraph]:
    """Load the archive and its link graph with the configured ignore patterns."""
    ignore = config.ignore if config is not None else ()
    archive = load_archive(content_path, ignore=ignore)
    return archive, LinkGraph.from_archive(archive)
