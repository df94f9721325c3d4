from pathlib import Path

from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from kbarchive.commands.watch_cmd import format_status
from kbarchive.watcher import ArchiveEventHandler


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _handler(root: Path, clock: FakeClock, batches: list) -> ArchiveEventHandler:
    return ArchiveEventHandler(root, on_change=batches.append, clock=clock)


def test_changes_are_debounced(tmp_path: Path):
    clock = FakeClock()
    batches: list[list[Path]] = []
    handler = _handler(tmp_path, clock, batches)

    handler.on_modified(FileModifiedEvent(str(tmp_path / "b.md")))
    clock.now += 0.5
    handler.on_created(FileCreatedEvent(str(tmp_path / "a.md")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "b.md")))

    clock.now += 0.5
    assert handler.flush_pending() == []
    assert batches == []

    clock.now += 1.0
    assert handler.flush_pending() == [tmp_path / "a.md", tmp_path / "b.md"]
    assert batches == [[tmp_path / "a.md", tmp_path / "b.md"]]
    assert handler.pending == {}
    assert handler.flush_pending() == []


def test_irrelevant_paths_are_ignored(tmp_path: Path):
    clock = FakeClock()
    batches: list[list[Path]] = []
    handler = _handler(tmp_path, clock, batches)

    handler.on_modified(FileModifiedEvent(str(tmp_path / "images" / "diagram.png")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / ".obsidian" / "workspace.md")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / ".hidden.md")))
    handler.on_modified(DirModifiedEvent(str(tmp_path / "notes")))

    assert handler.pending == {}


def test_move_reports_both_paths(tmp_path: Path):
    clock = FakeClock()
    batches: list[list[Path]] = []
    handler = _handler(tmp_path, clock, batches)

    handler.on_moved(FileMovedEvent(str(tmp_path / "old.md"), str(tmp_path / "notes" / "new.md")))
    clock.now += 2

    assert handler.flush_pending() == [tmp_path / "notes" / "new.md", tmp_path / "old.md"]


def test_format_status(tmp_path: Path):
    counts = {"error": 1, "warning": 2, "info": 0}

    assert format_status(counts, [], tmp_path) == "initial lint -> 1 error(s), 2 warning(s), 0 info(s)"

    changed = [tmp_path / f"n{i}.md" for i in range(5)]
    assert format_status(counts, changed, tmp_path).startswith("n0.md, n1.md, n2.md, +2 more -> ")


def test_change_arriving_during_flush_is_kept(tmp_path: Path):
    clock = FakeClock()
    batches: list[list[Path]] = []

    def on_change(changed: list[Path]) -> None:
        batches.append(changed)
        handler.on_modified(FileModifiedEvent(str(tmp_path / "late.md")))

    handler = ArchiveEventHandler(tmp_path, on_change=on_change, clock=clock)
    handler.on_modified(FileModifiedEvent(str(tmp_path / "first.md")))
    clock.now += 2

    assert handler.flush_pending() == [tmp_path / "first.md"]
    assert list(handler.pending) == [str(tmp_path / "late.md")]

    clock.now += 2
    assert handler.flush_pending() == [tmp_path / "late.md"]
    assert batches == [[tmp_path / "first.md"], [tmp_path / "late.md"]]
