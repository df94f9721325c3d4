"""Link graph construction and analysis."""

from collections import defaultdict
from dataclasses import dataclass, field

from ..models import Note, WikiLink
from .loader import Archive

INDEX_SLUG = "index"


@dataclass
class LinkGraph:
    """Directed graph of resolved note-to-note wiki-links."""

    nodes: dict[str, Note] = field(default_factory=dict)  # slug -> Note
    edges: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set)
    )  # note -> linked notes
    reverse_edges: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set)
    )  # note -> notes linking to it
    dangling: list[tuple[str, WikiLink]] = field(default_factory=list)

    @classmethod
    def from_archive(cls, archive: Archive) -> "LinkGraph":
        """Build graph from all notes in the archive."""
        graph = cls()

        for note in archive.notes:
            graph.nodes.setdefault(note.slug, note)

        for note in archive.notes:
            for link in note.links:
                resolution = archive.resolve(link, note)
                if not resolution.resolved:
                    graph.dangling.append((note.slug, link))
                    continue
                target = resolution.note
                if target is None or target.slug == note.slug:
                    continue  # assets and self-anchors are not edges
                graph.edges[note.slug].add(target.slug)
                graph.reverse_edges[target.slug].add(note.slug)

        return graph

    def outgoing(self, slug: str) -> set[str]:
        return set(self.edges.get(slug, set()))

    def backlinks(self, slug: str) -> set[str]:
        return set(self.reverse_edges.get(slug, set()))

    def orphans(self) -> list[str]:
        """Notes with neither inbound nor outbound links."""
        return sorted(
            slug
            for slug in self.nodes
            if slug != INDEX_SLUG and not self.edges.get(slug) and not self.reverse_edges.get(slug)
        )

    def reachable(self, start: str) -> set[str]:
        """All notes reachable from start, including start."""
        visited = set()
        stack = [start]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for dst in self.edges.get(current, set()):
                if dst not in visited:
                    stack.append(dst)

        return visited

    def unreachable(self, start: str = INDEX_SLUG) -> list[str]:
        """Notes that cannot be reached by following links from start.

        Returns an empty list when the start note does not exist.
        """
        if start not in self.nodes:
            return []
        seen = self.reachable(start)
        return sorted(slug for slug in self.nodes if slug not in seen)

    def most_linked(self, top: int = 25) -> list[tuple[str, int]]:
        """Notes ranked by number of distinct backlinks."""
        ranked = [(slug, len(self.reverse_edges.get(slug, set()))) for slug in self.nodes]
        ranked = [r for r in ranked if r[1] > 0]
        ranked.sort(key=lambda r: (-r[1], r[0]))
        return ranked[:top]

    @property
    def edge_count(self) -> int:
        return sum(len(dsts) for dsts in self.edges.values())

    def to_dot(self) -> str:
        """Export as Graphviz DOT."""
        lines = ["digraph archive {", "  rankdir=LR;", '  node [shape="box", style="rounded"];']
        for slug in sorted(self.nodes):
            note = self.nodes[slug]
            label = note.title.replace('"', '\\"')
            attrs = [f'label="{label}"']
            if note.is_draft:
                attrs.append('style="rounded,dashed"')
            lines.append(f'  "{slug}" [{", ".join(attrs)}];')
        for src in sorted(self.edges):
            for dst in sorted(self.edges[src]):
                lines.append(f'  "{src}" -> "{dst}";')
        lines.append("}")
        return "\n".join(lines) + "\n"
