"""
Tests for the update operation: visits, aging and persistence.
"""

from pathlib import Path

import pytest

from zjump.errors import InvalidPath, StoreUnreadable
from zjump.models import Record
from zjump.store import RecordStore
from zjump.tracker import (
    AGING_FACTOR,
    MAX_TOTAL_RANK,
    age,
    forget,
    import_legacy,
    merge,
    record_visit,
    remove_path,
    total_rank,
    update,
    visit,
)


# =============================================================================
# Pure stages
# =============================================================================


class TestVisit:
    def test_new_path_is_appended_with_rank_one(self):
        records = visit([Record("/a", 3.0, 10)], "/b", 99)
        assert records == [Record("/a", 3.0, 10), Record("/b", 1.0, 99)]

    def test_existing_path_is_bumped_in_place(self):
        records = visit([Record("/a", 3.0, 10), Record("/b", 1.0, 5)], "/a", 99)
        assert records == [Record("/a", 4.0, 99), Record("/b", 1.0, 5)]

    def test_input_is_not_mutated(self):
        original = [Record("/a", 3.0, 10)]
        visit(original, "/a", 99)
        assert original == [Record("/a", 3.0, 10)]

    def test_repeated_visits_increase_rank_and_time(self):
        records: list[Record] = []
        for i, now in enumerate((100, 200, 300), start=1):
            records = visit(records, "/p", now)
            assert records == [Record("/p", float(i), now)]


class TestAging:
    def test_total_rank(self):
        assert total_rank([Record("/a", 2.5, 0), Record("/b", 1.5, 0)]) == 4.0

    def test_age_scales_and_prunes(self):
        kept, dropped = age([Record("/big", 100.0, 1), Record("/small", 1.005, 2)])
        assert kept == [Record("/big", 100.0 * AGING_FACTOR, 1)]
        assert dropped == ["/small"]

    def test_no_aging_at_threshold(self):
        records = [Record("/a", MAX_TOTAL_RANK - 1, 0)]
        updated, result = update(records, "/a", 10)
        assert result.total == MAX_TOTAL_RANK
        assert not result.aged
        assert updated == [Record("/a", float(MAX_TOTAL_RANK), 10)]

    def test_aging_above_threshold(self):
        records = [
            Record("/heavy", 8990.0, 1),
            Record("/light", 1.005, 2),
            Record("/mid", 10.0, 3),
        ]
        updated, result = update(records, "/mid", 50)

        assert result.aged
        assert result.total == pytest.approx(9002.005)
        assert result.dropped == ["/light"]
        by_path = {r.path: r for r in updated}
        assert set(by_path) == {"/heavy", "/mid"}
        assert by_path["/heavy"].rank == pytest.approx(8990.0 * 0.99)
        assert by_path["/mid"].rank == pytest.approx(11.0 * 0.99)
        assert by_path["/mid"].time == 50
        assert result.rank == pytest.approx(11.0 * 0.99)

    def test_new_path_can_be_pruned_immediately(self):
        updated, result = update([Record("/heavy", 9000.0, 1)], "/new", 5)
        assert result.aged
        assert [r.path for r in updated] == ["/heavy"]
        assert result.rank == 0.0


class TestForgetAndMerge:
    def test_forget(self):
        kept, removed = forget([Record("/a", 1.0, 0), Record("/b", 1.0, 0)], "/a")
        assert kept == [Record("/b", 1.0, 0)]
        assert removed

    def test_forget_missing(self):
        kept, removed = forget([Record("/a", 1.0, 0)], "/zzz")
        assert kept == [Record("/a", 1.0, 0)]
        assert not removed

    def test_merge_sums_ranks_and_keeps_newest_time(self):
        merged = merge(
            [Record("/a", 2.0, 100), Record("/b", 1.0, 1)],
            [Record("/a", 3.0, 50), Record("/c", 4.0, 9)],
        )
        assert merged == [Record("/a", 5.0, 100), Record("/b", 1.0, 1), Record("/c", 4.0, 9)]


# =============================================================================
# record_visit (filesystem)
# =============================================================================


class TestRecordVisit:
    def test_first_visit_creates_record(self, cfg, make_dir):
        proj = make_dir("proj")
        result = record_visit(cfg, proj, now=1000)
        assert result.recorded
        assert RecordStore(cfg.data_file).load() == [Record(str(proj), 1.0, 1000)]

    def test_revisits_accumulate(self, cfg, make_dir):
        proj = make_dir("proj")
        for now in (1000, 2000, 3000):
            record_visit(cfg, proj, now=now)
        assert RecordStore(cfg.data_file).load() == [Record(str(proj), 3.0, 3000)]

    def test_trailing_separator_is_stripped(self, cfg, make_dir):
        proj = make_dir("proj")
        record_visit(cfg, f"{proj}/", now=1)
        record_visit(cfg, str(proj), now=2)
        assert RecordStore(cfg.data_file).load() == [Record(str(proj), 2.0, 2)]

    def test_symlinks_resolved_by_default(self, cfg, make_dir, tmp_path: Path):
        real = make_dir("real")
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        record_visit(cfg, link, now=1)
        assert [r.path for r in RecordStore(cfg.data_file).load()] == [str(real)]

    def test_symlinks_kept_when_disabled(self, cfg, make_dir, tmp_path: Path):
        real = make_dir("real")
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        cfg.resolve_symlinks = False
        record_visit(cfg, link, now=1)
        assert [r.path for r in RecordStore(cfg.data_file).load()] == [str(link)]

    def test_home_is_not_recorded(self, cfg):
        cfg.home.mkdir(exist_ok=True)
        result = record_visit(cfg, cfg.home, now=1)
        assert not result.recorded
        assert not cfg.data_file.exists()

    def test_excluded_dir_leaves_store_unchanged(self, cfg, make_dir):
        keep = make_dir("keep")
        skip = make_dir("skip")
        record_visit(cfg, keep, now=1)
        before = cfg.data_file.read_bytes()

        cfg.exclude_dirs = frozenset({str(skip)})
        result = record_visit(cfg, skip, now=2)

        assert not result.recorded
        assert cfg.data_file.read_bytes() == before
        assert RecordStore(cfg.data_file).load() == [Record(str(keep), 1.0, 1)]

    def test_symlinked_home_is_not_recorded(self, cfg, make_dir, tmp_path: Path):
        real_home = make_dir("real-home")
        link = tmp_path / "home-link"
        link.symlink_to(real_home, target_is_directory=True)
        cfg.home = link
        result = record_visit(cfg, link, now=1)
        assert not result.recorded
        assert result.path == str(real_home)
        assert not cfg.data_file.exists()

    def test_symlinked_exclude_dir(self, cfg, make_dir, tmp_path: Path):
        real = make_dir("real-skip")
        link = tmp_path / "skip-link"
        link.symlink_to(real, target_is_directory=True)
        cfg.exclude_dirs = frozenset({str(link)})
        assert not record_visit(cfg, real, now=1).recorded

    def test_missing_path_raises_and_leaves_store(self, cfg, make_dir, tmp_path: Path):
        record_visit(cfg, make_dir("proj"), now=1)
        before = cfg.data_file.read_bytes()
        with pytest.raises(InvalidPath):
            record_visit(cfg, tmp_path / "gone", now=2)
        assert cfg.data_file.read_bytes() == before

    def test_unreadable_store_is_never_overwritten(self, cfg, make_dir):
        cfg.data_file.parent.mkdir(parents=True)
        cfg.data_file.write_text("this is not,a store\n")
        with pytest.raises(StoreUnreadable):
            record_visit(cfg, make_dir("proj"), now=1)
        assert cfg.data_file.read_text() == "this is not,a store\n"

    def test_aging_is_persisted(self, cfg, make_dir):
        proj = make_dir("proj")
        RecordStore(cfg.data_file).save([
            Record("/heavy", 9000.0, 1),
            Record("/light", 1.0, 1),
        ])
        result = record_visit(cfg, proj, now=10)
        assert result.aged
        stored = RecordStore(cfg.data_file).load()
        assert [r.path for r in stored] == ["/heavy"]
        assert stored[0].rank == pytest.approx(8910.0)


class TestRemoveAndImport:
    def test_remove_existing(self, cfg, make_dir):
        proj = make_dir("proj")
        record_visit(cfg, proj, now=1)
        assert remove_path(cfg, str(proj))
        assert RecordStore(cfg.data_file).load() == []

    def test_remove_deleted_directory(self, cfg, make_dir):
        proj = make_dir("proj")
        record_visit(cfg, proj, now=1)
        proj.rmdir()
        assert remove_path(cfg, str(proj))

    def test_remove_unknown(self, cfg, make_dir):
        assert not remove_path(cfg, str(make_dir("other")))

    def test_import_legacy_merges(self, cfg, tmp_path: Path):
        RecordStore(cfg.data_file).save([Record("/a", 2.0, 100)])
        legacy = tmp_path / ".z"
        legacy.write_text("/a|3|200\n/b|1.5|50\nbroken line\n")

        imported, skipped = import_legacy(cfg, legacy)

        assert (imported, skipped) == (2, 1)
        assert RecordStore(cfg.data_file).load() == [Record("/a", 5.0, 200), Record("/b", 1.5, 50)]
