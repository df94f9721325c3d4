"""Golden tests for all lint rules."""

from pathlib import Path

from kbarchive.archive.graph import LinkGraph
from kbarchive.archive.loader import Archive, load_archive
from kbarchive.archive.rules import RULE_EXPLANATIONS, LintRules, get_rule_ids
from kbarchive.config import ArchiveConfig


def _rules_for(root: Path, config: ArchiveConfig | None = None) -> LintRules:
    archive = load_archive(root)
    return LintRules(archive, LinkGraph.from_archive(archive), config)


def _write(path: Path, *lines: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_frontmatter_error(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_frontmatter()

    assert len(results) == 1
    assert results[0].file.name == "broken-frontmatter.md"
    assert results[0].level == "error"
    assert results[0].line == 1


def test_missing_title(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_missing_title()

    # broken-frontmatter.md is reported by frontmatter-error instead
    assert [r.file.name for r in results] == ["untitled.md"]
    assert all(r.level == "warning" for r in results)


def test_invalid_tags(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_tags()

    assert len(results) == 1
    assert results[0].file.name == "git-auth.md"
    assert "credential helpers" in results[0].message


def test_broken_link(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_broken_links()

    assert len(results) == 1
    assert results[0].file.name == "k8s-daemonset-race.md"
    assert "non-existent-note" in results[0].message
    assert results[0].line == 18
    assert results[0].level == "warning"


def test_links_in_code_are_not_reported(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).run_all()

    messages = " ".join(r.message for r in results)
    assert "inside-code" not in messages
    assert "also-code" not in messages


def test_broken_anchor(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_broken_anchors()

    assert len(results) == 1
    assert "No Such Heading" in results[0].message
    assert results[0].line == 19


def test_broken_block_reference(tmp_path: Path):
    root = tmp_path / "content"
    _write(root / "a.md", "---", "title: A", "---", "", "See [[b#^missing]] and [[b#^present]].")
    _write(root / "b.md", "---", "title: B", "---", "", "Fact. ^present")

    results = _rules_for(root).check_broken_anchors()

    assert len(results) == 1
    assert "^missing" in results[0].message


def test_same_note_anchor(tmp_path: Path):
    root = tmp_path / "content"
    _write(root / "a.md", "---", "title: A", "---", "", "## Setup", "", "Jump to [[#Setup]] or [[#Teardown]].")

    rules = _rules_for(root)

    assert rules.check_broken_links() == []
    anchors = rules.check_broken_anchors()
    assert len(anchors) == 1
    assert "Teardown" in anchors[0].message


def test_ambiguous_link(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_ambiguous_links()

    assert len(results) == 1
    assert results[0].file.name == "index.md"
    assert "notes/readme.md" in results[0].message


def test_draft_link(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_draft_links()

    assert len(results) == 1
    assert results[0].file.name == "k8s-daemonset-race.md"
    assert "drafts/registry-mirror.md" in results[0].message


def test_empty_note(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_empty_notes()

    assert [r.file.name for r in results] == ["empty.md"]
    assert results[0].level == "info"


def test_orphan_note(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).check_orphans()

    names = sorted(str(r.file.relative_to(fixture_archive.path).as_posix()) for r in results)
    assert names == ["broken-frontmatter.md", "empty.md", "notes/readme.md", "untitled.md"]


def test_duplicate_slug(tmp_path: Path):
    root = tmp_path / "content"
    _write(root / "notes" / "Git Auth.md", "---", "title: One", "---")
    _write(root / "notes" / "git-auth.md", "---", "title: Two", "---")

    results = _rules_for(root).check_duplicate_slugs()

    assert len(results) == 2
    assert all(r.level == "error" for r in results)


def test_alias_collision(tmp_path: Path):
    root = tmp_path / "content"
    _write(root / "proxy.md", "---", "title: Proxy", "---", "", "Text.")
    _write(root / "wrapper.md", "---", "title: Wrapper", "aliases: [proxy, shim]", "---", "", "Text.")
    _write(root / "runner.md", "---", "title: Runner", "aliases: shim", "---", "", "Text.")

    results = _rules_for(root).check_alias_collisions()
    messages = sorted(r.message for r in results)

    assert any("'proxy' is also the name of 'proxy.md'" in m for m in messages)
    assert sum("'shim'" in m for m in messages) == 2


def test_required_fields_from_config(tmp_path: Path):
    root = tmp_path / "content"
    _write(root / "a.md", "---", "title: A", "---", "", "Text.")
    _write(root / "b.md", "---", "title: B", "date: 2024-01-02", "---", "", "Text.")

    config = ArchiveConfig(root=tmp_path, required_fields=["title", "date"])
    results = _rules_for(root, config).check_required_fields()

    assert [r.file.name for r in results] == ["a.md"]
    assert "'date'" in results[0].message


def test_broken_link_allows_existing_asset(tmp_path: Path):
    root = tmp_path / "content"
    (root / "attachments").mkdir(parents=True)
    (root / "attachments" / "flow.svg").write_text("<svg></svg>\n", encoding="utf-8")
    _write(root / "note.md", "---", "title: Flow", "---", "", "![[attachments/flow.svg]]", "![[flow.svg]]")

    assert _rules_for(root).check_broken_links() == []


def test_run_all_rules(fixture_archive: Archive, fixture_graph: LinkGraph):
    results = LintRules(fixture_archive, fixture_graph).run_all()

    rule_names = {r.rule for r in results}
    assert rule_names == {
        "frontmatter-error",
        "missing-title",
        "invalid-tags",
        "broken-link",
        "broken-anchor",
        "ambiguous-link",
        "draft-link",
        "empty-note",
        "orphan-note",
    }

    errors = [r for r in results if r.level == "error"]
    assert len(errors) == 1


def test_run_all_respects_filter_and_config(fixture_archive: Archive, fixture_graph: LinkGraph, tmp_path: Path):
    config = ArchiveConfig(
        root=tmp_path,
        disabled_rules=["orphan-note"],
        severity={"broken-link": "error"},
    )
    results = LintRules(fixture_archive, fixture_graph, config).run_all(allowed_rules=["broken-link", "orphan-note"])

    assert [r.rule for r in results] == ["broken-link"]
    assert results[0].level == "error"


def test_every_rule_is_explained():
    assert set(get_rule_ids()) == set(RULE_EXPLANATIONS)


def test_unreadable_file_follows_rule_filter_and_config(tmp_path: Path):
    root = tmp_path / "content"
    root.mkdir()
    (root / "bad.md").write_bytes(b"\xff\xfe\x00bad")
    _write(root / "a.md", "---", "title: A", "---", "", "See [[missing]].")

    results = _rules_for(root).check_frontmatter()
    assert len(results) == 1
    assert results[0].file.name == "bad.md"
    assert results[0].message.startswith("Unreadable file:")
    assert results[0].level == "error"

    only_links = _rules_for(root).run_all(allowed_rules=["broken-link"])
    assert [r.rule for r in only_links] == ["broken-link"]

    disabled = ArchiveConfig(root=tmp_path, disabled_rules=["frontmatter-error"])
    assert all(r.rule != "frontmatter-error" for r in _rules_for(root, disabled).run_all())

    relaxed = ArchiveConfig(root=tmp_path, severity={"frontmatter-error": "warning"})
    assert [r.level for r in _rules_for(root, relaxed).check_frontmatter()] == ["warning"]
