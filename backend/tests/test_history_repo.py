"""Tests for the JSON-file transfer history."""

from __future__ import annotations

import json

from app.repositories.history_repo import HistoryRepository


class TestHistoryRepository:
    def test_add_assigns_id_and_timestamp(self, history_repo):
        record = history_repo.add({"amount": "1", "recipient": "addr_test1qx", "status": "success"})

        assert record["id"].startswith(str(record["timestamp"]))
        assert record["amount"] == "1"
        assert history_repo.list_entries() == [record]

    def test_newest_first(self, history_repo):
        history_repo.add({"amount": "1"})
        history_repo.add({"amount": "2"})
        assert [e["amount"] for e in history_repo.list_entries()] == ["2", "1"]

    def test_caps_entries(self, tmp_path):
        repo = HistoryRepository(tmp_path / "h.json", max_entries=3)
        for i in range(5):
            repo.add({"amount": str(i)})
        assert [e["amount"] for e in repo.list_entries()] == ["4", "3", "2"]

    def test_limit(self, history_repo):
        for i in range(4):
            history_repo.add({"amount": str(i)})
        assert len(history_repo.list_entries(limit=2)) == 2

    def test_clear(self, history_repo):
        history_repo.add({"amount": "1"})
        history_repo.clear()
        assert history_repo.list_entries() == []

    def test_missing_file(self, tmp_path):
        assert HistoryRepository(tmp_path / "nested" / "h.json").list_entries() == []

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "h.json"
        path.write_text("{not json", encoding="utf-8")
        repo = HistoryRepository(path)

        assert repo.list_entries() == []
        repo.add({"amount": "1"})
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 1

    def test_default_path_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "env.json"))
        assert HistoryRepository().path == tmp_path / "env.json"
