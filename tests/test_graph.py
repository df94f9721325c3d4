from pathlib import Path

from kbarchive.archive.graph import LinkGraph
from kbarchive.archive.loader import load_archive


def test_edges_and_backlinks(fixture_graph: LinkGraph):
    assert fixture_graph.outgoing("index") == {
        "notes/k8s-daemonset-race",
        "notes/git-auth",
        "notes/ci-observability",
        "archive/readme",
    }
    assert fixture_graph.backlinks("notes/k8s-daemonset-race") == {
        "index",
        "notes/git-auth",
        "notes/ci-observability",
    }
    assert fixture_graph.edge_count == 10


def test_assets_and_self_links_are_not_edges(tmp_path: Path):
    root = tmp_path / "content"
    root.mkdir()
    (root / "pic.png").write_bytes(b"png")
    (root / "a.md").write_text("## Top\n\n[[#Top]] [[a]] ![[pic.png]]\n", encoding="utf-8")

    graph = LinkGraph.from_archive(load_archive(root))

    assert graph.edge_count == 0
    assert graph.dangling == []


def test_dangling_links(fixture_graph: LinkGraph):
    assert [(src, link.target) for src, link in fixture_graph.dangling] == [
        ("notes/k8s-daemonset-race", "non-existent-note"),
    ]


def test_orphans_and_unreachable(fixture_graph: LinkGraph):
    expected = ["broken-frontmatter", "empty", "notes/readme", "untitled"]

    assert fixture_graph.orphans() == expected
    assert fixture_graph.unreachable("index") == expected
    assert fixture_graph.unreachable("no-such-start") == []


def test_most_linked(fixture_graph: LinkGraph):
    ranked = fixture_graph.most_linked(top=2)

    assert ranked[0] == ("notes/k8s-daemonset-race", 3)
    # Ties are broken alphabetically
    assert ranked[1] == ("notes/ci-observability", 2)


def test_to_dot_marks_drafts(fixture_graph: LinkGraph):
    dot = fixture_graph.to_dot()

    assert dot.startswith("digraph archive {")
    assert '"index" -> "notes/git-auth";' in dot
    assert '"drafts/registry-mirror" [label="Registry mirror", style="rounded,dashed"];' in dot
