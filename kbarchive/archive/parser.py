"""Markdown parsing utilities for front-matter, wiki-links, and headings."""

import re

import frontmatter
import yaml

from ..models import Heading, WikiLink

# Leading YAML block delimited by --- lines
FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)

# Match [[target]], [[target|label]], [[target#section]], ![[embed]], [[#section]]
WIKILINK_PATTERN = re.compile(r"(!?)\[\[([^\[\]\n]+?)\]\]")

HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$")
FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")
CLOSING_FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})[ \t]*$")
INLINE_CODE_PATTERN = re.compile(r"(`+)(.+?)\1")
BLOCK_ID_PATTERN = re.compile(r"(?:^|\s)\^([A-Za-z0-9-]+)[ \t]*$")


def split_frontmatter(text: str) -> tuple[dict, str, int, str | None]:
    """Split a raw note into metadata and body.

    Returns:
        (metadata, body, body_offset, error) where body_offset is the number
        of file lines taken by the front-matter block and error is a message
        when the block does not parse as a mapping.
    """
    text = text.replace("\r\n", "\n")
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text, 0, None

    body = text[match.end():]
    offset = text.count("\n", 0, match.end())

    handler = frontmatter.YAMLHandler()
    try:
        fm_text, _ = handler.split(text)
        metadata = handler.load(fm_text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        # SafeLoader raises ValueError for date-like values such as 2024-13-45
        message = str(e).splitlines()[0] if str(e) else type(e).__name__
        return {}, body, offset, f"Invalid YAML front-matter: {message}"

    if metadata is None:
        return {}, body, offset, None
    if not isinstance(metadata, dict):
        return {}, body, offset, "Front-matter is not a key/value mapping"

    return metadata, body, offset, None


def mask_code(body: str) -> list[str]:
    """Return body lines with fenced blocks blanked and inline code spans padded out.

    Line count and column positions are preserved so callers can report
    file locations.
    """
    lines = body.split("\n")
    masked = []
    fence: str | None = None

    for line in lines:
        if fence is not None:
            fence_match = CLOSING_FENCE_PATTERN.match(line)
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                fence = None
            masked.append("")
            continue
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            fence = fence_match.group(1)
            masked.append("")
            continue
        masked.append(INLINE_CODE_PATTERN.sub(lambda m: " " * len(m.group(0)), line))

    return masked


def _parse_link(inner: str) -> tuple[str, str | None, str | None]:
    # Tables escape the label pipe as \|
    inner = inner.replace("\\|", "|")
    ref, sep, label = inner.partition("|")
    target, hash_sep, section = ref.partition("#")
    return (
        target.strip(),
        section.strip() or None if hash_sep else None,
        label.strip() or None if sep else None,
    )


def extract_links(body: str, line_offset: int = 0) -> list[WikiLink]:
    """Extract all wiki-links from a note body, skipping code.

    Args:
        body: Markdown body (after front-matter)
        line_offset: Number of file lines preceding the body

    Returns:
        Links in document order, with 1-based file line numbers
    """
    links = []
    for i, line in enumerate(mask_code(body), start=1):
        for match in WIKILINK_PATTERN.finditer(line):
            target, section, label = _parse_link(match.group(2))
            if not target and not section:
                continue
            links.append(
                WikiLink(
                    target=target,
                    section=section,
                    label=label,
                    line=i + line_offset,
                    embed=bool(match.group(1)),
                )
            )
    return links


def extract_link_targets(body: str) -> list[str]:
    """Extract wiki-link targets from content.

    Returns normalized (slugified) link targets, deduplicated.
    """
    seen = set()
    result = []
    for link in extract_links(body):
        if not link.target:
            continue
        normalized = slugify_path(link.target)
        if normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


def extract_headings(body: str, line_offset: int = 0) -> list[Heading]:
    """Extract ATX headings outside of code blocks."""
    headings = []
    for i, line in enumerate(mask_code(body), start=1):
        match = HEADING_PATTERN.match(line)
        if match:
            text = match.group(2).strip()
            headings.append(
                Heading(
                    level=len(match.group(1)),
                    text=text,
                    anchor=slugify_heading(text),
                    line=i + line_offset,
                )
            )
    return headings


def extract_block_ids(body: str) -> set[str]:
    """Extract ^block-id markers (referenced as [[note#^block-id]])."""
    ids = set()
    for line in mask_code(body):
        match = BLOCK_ID_PATTERN.search(line)
        if match:
            ids.add(match.group(1).lower())
    return ids


def extract_section(content: str, header: str) -> str | None:
    """Extract content between ## header and next ## or EOF.

    Args:
        content: Markdown content
        header: Section header text (without ##)

    Returns:
        Section content or None if not found
    """
    pattern = rf"^## {re.escape(header)}\s*\n(.*?)(?=^## |\Z)"
    match = re.search(pattern, content, re.MULTILINE | re.DOTALL)
    return match.group(1).strip() if match else None


def slugify_heading(text: str) -> str:
    """Turn heading text into its URL anchor.

    Lowercases, drops punctuation (keeping letters, digits, '-' and '_'),
    and turns each space into '-'.
    """
    cleaned = re.sub(r"[^\w\- ]", "", text.strip().lower())
    return cleaned.replace(" ", "-")


def slugify_path(path: str) -> str:
    """Turn a note path or link target into its lookup key."""
    slug = path.strip().replace("\\", "/")
    while slug.startswith("./"):
        slug = slug[2:]
    slug = slug.lstrip("/")
    if slug.lower().endswith(".md"):
        slug = slug[:-3]
    return slug.lower().replace(" ", "-")


def _split_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def normalize_tags(value) -> list[str]:
    """Normalize a front-matter tags value to a list of tag strings.

    Accepts a list or a comma separated string; strips a leading '#'.
    Non-string entries are kept as their string form so lint can flag them.
    """
    tags = []
    for tag in _split_list(value):
        text = str(tag).strip()
        if text.startswith("#"):
            text = text[1:]
        if text:
            tags.append(text)
    return tags


def normalize_aliases(value) -> list[str]:
    """Normalize a front-matter aliases value to a list of strings."""
    return [str(alias).strip() for alias in _split_list(value) if str(alias).strip()]
