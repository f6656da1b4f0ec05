"""Tests for selection snapshots and the background SelectionSink."""

import json

import pytest

from careline.errors import PersistenceFailure, SeedError
from careline.models.people import Selection
from careline.services.persistence import SelectionSink, read_snapshot, write_snapshot
from careline.services.registry import Registry


class TestSnapshotFile:
    def test_write_then_read(self, tmp_path):
        path = tmp_path / "selections.json"
        write_snapshot(path, {2: 11, 1: 10})

        assert read_snapshot(path) == [
            Selection(patient_id=1, doctor_id=10),
            Selection(patient_id=2, doctor_id=11),
        ]

    def test_file_layout(self, tmp_path):
        path = tmp_path / "selections.json"
        write_snapshot(path, {1: 10})

        assert json.loads(path.read_text()) == [{"patient_id": 1, "doctor_id": 10}]

    def test_overwrites_wholesale(self, tmp_path):
        path = tmp_path / "selections.json"
        write_snapshot(path, {1: 10, 2: 11})
        write_snapshot(path, {1: 11})

        assert read_snapshot(path) == [Selection(patient_id=1, doctor_id=11)]
        # No temp files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["selections.json"]

    def test_missing_file_reads_empty(self, tmp_path):
        assert read_snapshot(tmp_path / "nope.json") == []

    def test_corrupt_file_reads_empty(self, tmp_path, caplog):
        path = tmp_path / "selections.json"
        path.write_text("{not json")

        assert read_snapshot(path) == []
        assert "unreadable" in caplog.text

    def test_write_failure_raises_persistence_failure(self, tmp_path):
        with pytest.raises(PersistenceFailure):
            write_snapshot(tmp_path / "missing" / "selections.json", {1: 10})


class TestSelectionSink:
    async def test_writes_submitted_snapshot(self, tmp_path):
        path = tmp_path / "selections.json"
        sink = SelectionSink(path)
        sink.start()

        sink.submit({1: 10})
        await sink.close()

        assert read_snapshot(path) == [Selection(patient_id=1, doctor_id=10)]

    async def test_pending_snapshots_collapse_to_latest(self, tmp_path):
        path = tmp_path / "selections.json"
        sink = SelectionSink(path)

        sink.submit({1: 10})
        sink.submit({1: 11})
        sink.submit({1: 11, 2: 10})
        sink.start()
        await sink.close()

        assert sink.writes == 1
        assert read_snapshot(path) == [
            Selection(patient_id=1, doctor_id=11),
            Selection(patient_id=2, doctor_id=10),
        ]

    async def test_close_without_start_flushes(self, tmp_path):
        path = tmp_path / "selections.json"
        sink = SelectionSink(path)

        sink.submit({2: 10})
        await sink.close()

        assert read_snapshot(path) == [Selection(patient_id=2, doctor_id=10)]

    async def test_close_with_nothing_pending(self, tmp_path):
        sink = SelectionSink(tmp_path / "selections.json")
        sink.start()
        await sink.close()

        assert sink.writes == 0
        assert not (tmp_path / "selections.json").exists()

    async def test_write_failure_is_logged_not_raised(self, tmp_path, caplog):
        sink = SelectionSink(tmp_path / "missing" / "selections.json")
        sink.start()

        sink.submit({1: 10})
        await sink.close()

        assert sink.writes == 0
        assert "not persisted" in caplog.text


class TestRegistryRoundTrip:
    async def test_selections_survive_restart(self, seed_file, selections_path):
        first = Registry.from_files(seed_file, selections_path)
        first.start()
        first.relations.select(1, 10)
        first.relations.select(2, 11)
        await first.close()

        second = Registry.from_files(seed_file, selections_path)

        assert second.relations.snapshot() == {1: 10, 2: 11}
        assert second.relations.doctor_for(1) == 10

    def test_missing_seed_is_fatal(self, tmp_path, selections_path):
        with pytest.raises(SeedError):
            Registry.from_files(tmp_path / "absent.json", selections_path)
