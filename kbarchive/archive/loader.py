"""Archive loading and link resolution."""

import fnmatch
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..models import LoadError, Note, WikiLink
from .parser import (
    extract_block_ids,
    extract_headings,
    extract_links,
    slugify_path,
    split_frontmatter,
)

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of resolving one wiki-link."""

    note: Note | None = None
    asset: str | None = None
    candidates: list[Note] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.note is not None or self.asset is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass
class Archive:
    """Container for all loaded notes and assets."""

    path: Path
    notes: list[Note] = field(default_factory=list)
    assets: list[str] = field(default_factory=list)  # POSIX paths relative to root
    errors: list[LoadError] = field(default_factory=list)

    # Lookup tables built after loading
    _by_slug: dict[str, list[Note]] = field(default_factory=dict)
    _by_name: dict[str, list[Note]] = field(default_factory=dict)
    _aliases: dict[str, list[Note]] = field(default_factory=dict)
    _assets: dict[str, str] = field(default_factory=dict)  # lowercase path -> path
    _asset_names: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self):
        self._build_lookups()

    def _build_lookups(self):
        """Build slug, name, alias, and asset lookups."""
        by_slug = defaultdict(list)
        by_name = defaultdict(list)
        aliases = defaultdict(list)
        for note in self.notes:
            by_slug[note.slug].append(note)
            by_name[slugify_path(note.name)].append(note)
            for alias in note.aliases:
                aliases[slugify_path(alias)].append(note)

        asset_names = defaultdict(list)
        assets = {}
        for asset in self.assets:
            assets[asset.lower()] = asset
            asset_names[PurePosixPath(asset).name.lower()].append(asset)

        self._by_slug = dict(by_slug)
        self._by_name = {k: _shortest_first(v) for k, v in by_name.items()}
        self._aliases = {k: _shortest_first(v) for k, v in aliases.items()}
        self._assets = assets
        self._asset_names = dict(asset_names)

    @property
    def published_notes(self) -> list[Note]:
        """Notes the generator will publish (drafts excluded)."""
        return [n for n in self.notes if not n.is_draft]

    def duplicate_slugs(self) -> dict[str, list[Note]]:
        """Slugs claimed by more than one file."""
        return {slug: notes for slug, notes in self._by_slug.items() if len(notes) > 1}

    def get(self, name: str) -> Note | None:
        """Get note by slug, name, or alias."""
        key = slugify_path(name)
        for table in (self._by_slug, self._by_name, self._aliases):
            if key in table:
                return table[key][0]
        return None

    def notes_named(self, name: str) -> list[Note]:
        return list(self._by_name.get(slugify_path(name), []))

    def resolve(self, link: WikiLink, source: Note) -> Resolution:
        """Resolve a wiki-link target as seen from `source`.

        Resolution order: same-note anchor, relative path, full path,
        bare name (shortest path wins), alias, asset.
        """
        target = link.target.strip().replace("\\", "/")
        if not target:
            return Resolution(note=source, candidates=[source])

        suffix = PurePosixPath(target).suffix.lower()
        if suffix and suffix != ".md":
            asset = self._resolve_asset(target, source)
            if asset:
                return Resolution(asset=asset)
            # Names like "v1.2 release" carry a dot but still refer to notes

        if target.startswith("./") or target.startswith("../"):
            slug = _join_relative(_rel_folder(source), target)
            notes = self._by_slug.get(slug, []) if slug is not None else []
            return Resolution(note=notes[0] if notes else None, candidates=list(notes))

        key = slugify_path(target)
        if "/" in key:
            notes = self._by_slug.get(key, [])
            return Resolution(note=notes[0] if notes else None, candidates=list(notes))

        for table in (self._by_name, self._aliases):
            notes = table.get(key)
            if notes:
                return Resolution(note=notes[0], candidates=list(notes))

        return Resolution()

    def _resolve_asset(self, target: str, source: Note) -> str | None:
        if target.startswith("./") or target.startswith("../"):
            joined = _join_relative(_rel_folder(source), target, keep_suffix=True)
            if joined is None:
                return None
            return self._assets.get(joined.lower())

        key = target.lstrip("/").lower()
        if key in self._assets:
            return self._assets[key]
        if "/" not in key:
            matches = self._asset_names.get(key)
            if matches:
                return sorted(matches, key=lambda a: (a.count("/"), a))[0]
        return None


def _rel_folder(note: Note) -> str:
    parent = PurePosixPath(note.rel_path).parent.as_posix()
    return "" if parent == "." else parent


def _shortest_first(notes: list[Note]) -> list[Note]:
    return sorted(notes, key=lambda n: (n.slug.count("/"), n.slug))


def _join_relative(folder: str, target: str, keep_suffix: bool = False) -> str | None:
    """Join a ./ or ../ target onto a folder slug; None if it escapes the root."""
    parts = [p for p in folder.split("/") if p]
    for piece in target.split("/"):
        if piece in ("", "."):
            continue
        if piece == "..":
            if not parts:
                return None
            parts.pop()
        else:
            parts.append(piece)
    joined = "/".join(parts)
    return joined if keep_suffix else slugify_path(joined)


def load_note(path: Path, root: Path) -> Note:
    """Load a single markdown file and parse its frontmatter."""
    text = path.read_text(encoding="utf-8")
    metadata, body, offset, error = split_frontmatter(text)

    rel_path = path.relative_to(root).as_posix()
    if error:
        logger.debug("Front-matter error in %s: %s", rel_path, error)

    return Note(
        path=path,
        rel_path=rel_path,
        name=path.stem,
        slug=slugify_path(rel_path),
        content=body,
        frontmatter=metadata,
        frontmatter_error=error,
        body_offset=offset,
        links=extract_links(body, offset),
        headings=extract_headings(body, offset),
        block_ids=extract_block_ids(body),
    )


def is_ignored(rel_path: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Check a relative POSIX path against ignore globs.

    A pattern matches the whole path, or any leading folder of it.
    """
    parts = rel_path.split("/")
    for pattern in patterns:
        pattern = pattern.strip("/")
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        for i in range(1, len(parts)):
            if fnmatch.fnmatch("/".join(parts[:i]), pattern):
                return True
    return False


def load_archive(root: Path, ignore: tuple[str, ...] | list[str] = ()) -> Archive:
    """Load all markdown notes and assets under the content root.

    Args:
        root: Path to the archive content directory
        ignore: Glob patterns (relative to root) to skip

    Returns:
        Archive with lookups built
    """
    archive = Archive(path=root)

    for file in sorted(root.rglob("*")):
        if not file.is_file():
            continue

        rel = file.relative_to(root)
        # Skip hidden files and directories
        if any(part.startswith(".") for part in rel.parts):
            continue
        if is_ignored(rel.as_posix(), ignore):
            continue

        if file.suffix.lower() != ".md":
            archive.assets.append(rel.as_posix())
            continue

        try:
            archive.notes.append(load_note(file, root))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to load %s: %s", rel.as_posix(), e)
            archive.errors.append(LoadError(path=file, message=str(e)))

    archive._build_lookups()
    logger.debug("Loaded %d notes and %d assets from %s", len(archive.notes), len(archive.assets), root)

    return archive
