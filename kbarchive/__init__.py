"""kbarchive - lint and publish a Markdown knowledge archive."""

__version__ = "0.1.0"
