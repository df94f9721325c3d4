"""Archive loading and parsing utilities."""

from .graph import LinkGraph
from .loader import Archive, Resolution, load_archive, load_note
from .parser import extract_headings, extract_links, extract_section, split_frontmatter

__all__ = [
    "load_archive",
    "load_note",
    "Archive",
    "Resolution",
    "extract_links",
    "extract_headings",
    "extract_section",
    "split_frontmatter",
    "LinkGraph",
]
