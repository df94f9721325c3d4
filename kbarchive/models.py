"""Data models for archive notes."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

Level = Literal["error", "warning", "info"]


@dataclass(frozen=True)
class WikiLink:
    """A single [[target#section|label]] reference inside a note body."""

    target: str  # path-ish target, "" for same-note anchors
    section: str | None = None  # heading text or ^block-id
    label: str | None = None
    line: int = 0  # 1-based line in the file
    embed: bool = False  # ![[...]]

    @property
    def raw(self) -> str:
        text = self.target
        if self.section:
            text += f"#{self.section}"
        if self.label:
            text += f"|{self.label}"
        return f"{'!' if self.embed else ''}[[{text}]]"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    anchor: str
    line: int


@dataclass
class LoadError:
    """A file that could not be read at all."""

    path: Path
    message: str


@dataclass
class Note:
    """A Markdown note with its front-matter metadata."""

    path: Path
    rel_path: str  # POSIX path relative to the content root
    name: str  # filename without extension
    slug: str
    content: str  # raw markdown after frontmatter
    frontmatter: dict  # parsed YAML
    frontmatter_error: str | None = None
    body_offset: int = 0  # lines occupied by the frontmatter block
    links: list[WikiLink] = field(default_factory=list)
    headings: list[Heading] = field(default_factory=list)
    block_ids: set[str] = field(default_factory=set)

    @property
    def title(self) -> str:
        """Front-matter title, else the first H1 header, else the filename."""
        title = self.frontmatter.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        for heading in self.headings:
            if heading.level == 1:
                return heading.text
        return self.name

    @property
    def tags(self) -> list[str]:
        from .archive.parser import normalize_tags

        return normalize_tags(self.frontmatter.get("tags", self.frontmatter.get("tag")))

    @property
    def aliases(self) -> list[str]:
        from .archive.parser import normalize_aliases

        return normalize_aliases(self.frontmatter.get("aliases", self.frontmatter.get("alias")))

    @property
    def is_draft(self) -> bool:
        draft = self.frontmatter.get("draft", False)
        if isinstance(draft, str):
            return draft.strip().lower() in {"true", "yes", "1"}
        return bool(draft)

    @property
    def folder(self) -> str:
        """Slug of the containing folder ("" at the content root)."""
        return self.slug.rpartition("/")[0]

    def anchors(self) -> set[str]:
        return {h.anchor for h in self.headings}
