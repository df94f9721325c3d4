"""Lint rules for archive validation."""

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..models import Level, LoadError, Note, WikiLink
from .parser import normalize_tags, slugify_heading, slugify_path

if TYPE_CHECKING:
    from ..config import ArchiveConfig
    from .graph import LinkGraph
    from .loader import Archive


@dataclass
class LintResult:
    """A single lint finding."""

    level: Level
    rule: str
    file: Path
    message: str
    line: int | None = None

    def __str__(self) -> str:
        loc = f"{self.file.name}"
        if self.line:
            loc += f":{self.line}"
        return f"{self.level.upper()}: [{self.rule}] {loc} - {self.message}"


DEFAULT_LEVELS: dict[str, Level] = {
    "frontmatter-error": "error",
    "duplicate-slug": "error",
    "missing-title": "warning",
    "missing-field": "warning",
    "invalid-tags": "warning",
    "broken-link": "warning",
    "broken-anchor": "warning",
    "ambiguous-link": "warning",
    "draft-link": "warning",
    "alias-collision": "warning",
    "empty-note": "info",
    "orphan-note": "info",
}

RULE_EXPLANATIONS = {
    "frontmatter-error": """
The front-matter block does not parse as a YAML mapping.

The generator reports this note as a build failure, or silently drops its
metadata. Fix the YAML between the leading `---` lines: unbalanced quotes
and tabs used for indentation are the usual causes.
""",
    "duplicate-slug": """
Two files map to the same note slug.

Slugs are case-insensitive and treat spaces as `-`, so `Git Auth.md` and
`git-auth.md` in one folder publish to the same URL. Rename one of them.
""",
    "missing-title": """
The note has no `title` in its front-matter.

The generator falls back to the filename, which is usually a slug rather
than a readable title.
""",
    "missing-field": """
A front-matter field listed under `required_fields` in the config is absent.
""",
    "invalid-tags": """
A tag is not a plain string, is empty, or contains whitespace.

Tags become URL segments on the published site; `tags: [ci observability]`
should be `tags: [ci, observability]`.
""",
    "broken-link": """
A `[[wiki-link]]` does not resolve to any note or asset.

Targets resolve by path (`[[notes/other-note]]`), relative path
(`[[../other-note]]`), bare note name, or front-matter alias. Links inside
code blocks are ignored.
""",
    "broken-anchor": """
A `[[note#Section]]` or `[[note#^block]]` link names a heading or block id
that does not exist in the target note.
""",
    "ambiguous-link": """
A bare `[[name]]` link matches several notes in different folders.

The generator picks the one with the shortest path. Write the full path to
make the choice explicit.
""",
    "draft-link": """
A published note links to a note marked `draft: true`.

Drafts are left out of the site, so the link renders as broken.
""",
    "alias-collision": """
An alias equals another note's name or alias, so links using it resolve
unpredictably.
""",
    "empty-note": """
The note body has no text. Published, it renders as an empty page.
""",
    "orphan-note": """
The note neither links to nor is linked from any other note.

It is still published, but only reachable through search or the explorer.
""",
}


def get_rule_ids() -> list[str]:
    return list(DEFAULT_LEVELS)


class LintRules:
    """Collection of lint rules for archive validation."""

    def __init__(self, archive: "Archive", graph: "LinkGraph", config: "ArchiveConfig | None" = None):
        self.archive = archive
        self.graph = graph
        self.config = config

    def _result(self, rule: str, note: Note | LoadError, message: str, line: int | None = None) -> LintResult:
        level = DEFAULT_LEVELS[rule]
        if self.config is not None:
            level = self.config.severity.get(rule, level)
        return LintResult(level=level, rule=rule, file=note.path, message=message, line=line)

    def run_all(self, allowed_rules: Iterable[str] | None = None) -> list[LintResult]:
        """Run all lint checks and return findings."""
        checks = {
            "frontmatter-error": self.check_frontmatter,
            "duplicate-slug": self.check_duplicate_slugs,
            "missing-title": self.check_missing_title,
            "missing-field": self.check_required_fields,
            "invalid-tags": self.check_tags,
            "broken-link": self.check_broken_links,
            "broken-anchor": self.check_broken_anchors,
            "ambiguous-link": self.check_ambiguous_links,
            "draft-link": self.check_draft_links,
            "alias-collision": self.check_alias_collisions,
            "empty-note": self.check_empty_notes,
            "orphan-note": self.check_orphans,
        }

        allowed = set(allowed_rules) if allowed_rules is not None else set(checks)
        if self.config is not None:
            allowed -= set(self.config.disabled_rules)

        results = []
        for rule_id, check in checks.items():
            if rule_id in allowed:
                results.extend(check())
        return results

    def check_frontmatter(self) -> list[LintResult]:
        """Check that every file reads and its front-matter parses as a mapping."""
        results = [
            self._result("frontmatter-error", note, note.frontmatter_error, line=1)
            for note in self.archive.notes
            if note.frontmatter_error
        ]
        # Unreadable files never become notes
        for error in self.archive.errors:
            results.append(self._result("frontmatter-error", error, f"Unreadable file: {error.message}"))
        return results

    def check_duplicate_slugs(self) -> list[LintResult]:
        """Check for files that collide on the same slug."""
        results = []
        for slug, notes in sorted(self.archive.duplicate_slugs().items()):
            paths = ", ".join(n.rel_path for n in notes)
            for note in notes:
                results.append(self._result("duplicate-slug", note, f"Slug '{slug}' is shared by {paths}"))
        return results

    def check_missing_title(self) -> list[LintResult]:
        """Check that notes carry a front-matter title."""
        results = []
        for note in self.archive.notes:
            if note.frontmatter_error:
                continue  # already reported
            title = note.frontmatter.get("title")
            if not isinstance(title, str) or not title.strip():
                results.append(self._result("missing-title", note, "Note missing 'title' in frontmatter"))
        return results

    def check_required_fields(self) -> list[LintResult]:
        """Check configured required front-matter fields (title has its own rule)."""
        if self.config is None:
            return []
        fields = [f for f in self.config.required_fields if f != "title"]
        results = []
        for note in self.archive.notes:
            if note.frontmatter_error:
                continue
            for name in fields:
                if note.frontmatter.get(name) in (None, "", []):
                    results.append(self._result("missing-field", note, f"Note missing '{name}' in frontmatter"))
        return results

    def check_tags(self) -> list[LintResult]:
        """Check that tags are non-empty strings without whitespace."""
        results = []
        for note in self.archive.notes:
            raw = note.frontmatter.get("tags", note.frontmatter.get("tag"))
            if raw is None:
                continue
            if not isinstance(raw, (str, list, tuple)):
                results.append(self._result("invalid-tags", note, f"Tags must be a list or string, got {type(raw).__name__}"))
                continue
            if isinstance(raw, (list, tuple)):
                for tag in raw:
                    if not isinstance(tag, str):
                        results.append(self._result("invalid-tags", note, f"Tag {tag!r} is not a string"))
                    elif not tag.strip():
                        results.append(self._result("invalid-tags", note, "Empty tag"))
            for tag in normalize_tags(raw):
                if any(ch.isspace() for ch in tag):
                    results.append(self._result("invalid-tags", note, f"Tag '{tag}' contains whitespace"))
        return results

    def _links(self) -> Iterable[tuple[Note, WikiLink]]:
        for note in self.archive.notes:
            for link in note.links:
                yield note, link

    def check_broken_links(self) -> list[LintResult]:
        """Check for wiki-links that don't resolve to existing notes or assets."""
        results = []
        for note, link in self._links():
            if not link.target:
                continue  # same-note anchors are checked by broken-anchor
            if not self.archive.resolve(link, note).resolved:
                kind = "embed" if link.embed else "link"
                results.append(
                    self._result(
                        "broken-link",
                        note,
                        f"Broken {kind} to '{link.target}' - note not found",
                        line=link.line,
                    )
                )
        return results

    def check_broken_anchors(self) -> list[LintResult]:
        """Check that #section and #^block references exist in the target note."""
        results = []
        for note, link in self._links():
            if not link.section:
                continue
            target = self.archive.resolve(link, note).note
            if target is None:
                continue
            # Nested headings ([[note#A#B]]) point at the last one
            section = link.section.split("#")[-1].strip()
            if section.startswith("^"):
                if section[1:].lower() not in target.block_ids:
                    results.append(
                        self._result(
                            "broken-anchor",
                            note,
                            f"Block '{section}' not found in '{target.rel_path}'",
                            line=link.line,
                        )
                    )
            elif slugify_heading(section) not in target.anchors():
                results.append(
                    self._result(
                        "broken-anchor",
                        note,
                        f"Heading '{section}' not found in '{target.rel_path}'",
                        line=link.line,
                    )
                )
        return results

    def check_ambiguous_links(self) -> list[LintResult]:
        """Check for bare-name links that match several notes."""
        results = []
        for note, link in self._links():
            if not link.target:
                continue
            resolution = self.archive.resolve(link, note)
            if resolution.ambiguous and resolution.note is not None:
                others = ", ".join(n.rel_path for n in resolution.candidates[1:])
                results.append(
                    self._result(
                        "ambiguous-link",
                        note,
                        f"'{link.target}' resolves to '{resolution.note.rel_path}' but also matches {others}",
                        line=link.line,
                    )
                )
        return results

    def check_draft_links(self) -> list[LintResult]:
        """Check for published notes linking to drafts."""
        results = []
        for note, link in self._links():
            if note.is_draft:
                continue
            target = self.archive.resolve(link, note).note
            if target is not None and target.is_draft and target is not note:
                results.append(
                    self._result(
                        "draft-link",
                        note,
                        f"Links to draft '{target.rel_path}' which will not be published",
                        line=link.line,
                    )
                )
        return results

    def check_alias_collisions(self) -> list[LintResult]:
        """Check for aliases shadowing other notes' names or aliases."""
        results = []
        owners: dict[str, set[str]] = defaultdict(set)
        for note in self.archive.notes:
            for alias in note.aliases:
                owners[slugify_path(alias)].add(note.slug)

        for note in self.archive.notes:
            for alias in note.aliases:
                key = slugify_path(alias)
                named = [n for n in self.archive.notes_named(alias) if n.slug != note.slug]
                if named:
                    results.append(
                        self._result(
                            "alias-collision",
                            note,
                            f"Alias '{alias}' is also the name of '{named[0].rel_path}'",
                        )
                    )
                elif len(owners[key]) > 1:
                    others = sorted(owners[key] - {note.slug})
                    results.append(
                        self._result(
                            "alias-collision",
                            note,
                            f"Alias '{alias}' is also used by {', '.join(others)}",
                        )
                    )
        return results

    def check_empty_notes(self) -> list[LintResult]:
        """Check for notes without body text."""
        return [
            self._result("empty-note", note, "Note body is empty")
            for note in self.archive.notes
            if not note.content.strip()
        ]

    def check_orphans(self) -> list[LintResult]:
        """Check for notes disconnected from the link graph."""
        results = []
        for slug in self.graph.orphans():
            note = self.graph.nodes[slug]
            results.append(self._result("orphan-note", note, "Note has no inbound or outbound links"))
        return results
