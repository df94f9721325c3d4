"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from kbarchive.archive.graph import LinkGraph
from kbarchive.archive.loader import Archive, load_archive
from kbarchive.config import ArchiveConfig


@pytest.fixture
def fixture_archive_path() -> Path:
    """Path to the minimal fixture archive."""
    return Path(__file__).parent / "fixtures" / "minimal_archive"


@pytest.fixture
def fixture_archive(fixture_archive_path: Path) -> Archive:
    """Load the minimal fixture archive."""
    return load_archive(fixture_archive_path, ignore=["private"])


@pytest.fixture
def fixture_graph(fixture_archive: Archive) -> LinkGraph:
    """Build link graph from fixture archive."""
    return LinkGraph.from_archive(fixture_archive)


@pytest.fixture
def fixture_config(fixture_archive_path: Path) -> ArchiveConfig:
    """Config rooted at the fixture archive's parent."""
    return ArchiveConfig(root=fixture_archive_path.parent, content=fixture_archive_path.name)

