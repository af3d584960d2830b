import json
import os
import random

import pytest

from ppgen.store import (
    FilePatternStore,
    MemoryPatternStore,
    PartialHashRow,
    PatternStore,
    PatternStoreError,
)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryPatternStore()
    return FilePatternStore(tmp_path / "passwords.json")


def _rows(user_id, patterns):
    return [PartialHashRow(user_id, pattern, f"hash-{user_id}-{pattern}") for pattern in patterns]


class TestPatternStore:
    def test_insert_and_lookup(self, store):
        assert store.insert_many(_rows("alice", [21, 7, 12])) == 3
        assert store.get_hash("alice", 21) == "hash-alice-21"
        assert store.get_hash("alice", 22) is None
        assert store.get_hash("bob", 21) is None
        assert store.patterns("alice") == [7, 12, 21]

    def test_delete_user(self, store):
        store.insert_many(_rows("alice", [1, 2]) + _rows("bob", [3]))
        assert store.delete_user("alice") == 2
        assert store.delete_user("alice") == 0
        assert store.patterns("alice") == []
        assert store.patterns("bob") == [3]

    def test_same_pattern_replaces_hash(self, store):
        store.insert_many(_rows("alice", [5]))
        store.insert_many([PartialHashRow("alice", 5, "newer")])
        assert store.get_hash("alice", 5) == "newer"
        assert len(store.rows()) == 1

    def test_random_pattern(self, store):
        assert store.random_pattern("alice") is None
        store.insert_many(_rows("alice", [3, 5, 9]))
        rng = random.Random(3)
        seen = {store.random_pattern("alice", rng) for _ in range(100)}
        assert seen == {3, 5, 9}


class TestFilePatternStore:
    def test_file_layout(self, tmp_path):
        path = tmp_path / "nested" / "passwords.json"
        store = FilePatternStore(path)
        store.insert_many(_rows("7", [21]))

        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload == {
            "version": 1,
            "rows": [{"user_id": "7", "pattern": 21, "password_hash": "hash-7-21"}],
        }

    def test_reopen_and_backup(self, tmp_path):
        path = tmp_path / "passwords.json"
        FilePatternStore(path).insert_many(_rows("alice", [1]))
        FilePatternStore(path).insert_many(_rows("alice", [2]))

        assert FilePatternStore(path).patterns("alice") == [1, 2]
        backup = json.loads((tmp_path / "passwords.json.bak").read_text(encoding="utf-8"))
        assert [row["pattern"] for row in backup["rows"]] == [1]

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "passwords.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PatternStoreError, match="corrupted"):
            FilePatternStore(path).patterns("alice")

    def test_unsupported_version(self, tmp_path):
        path = tmp_path / "passwords.json"
        path.write_text(json.dumps({"version": 99, "rows": []}), encoding="utf-8")
        with pytest.raises(PatternStoreError, match="version"):
            FilePatternStore(path).get_hash("alice", 1)

    def test_bad_rows(self, tmp_path):
        path = tmp_path / "passwords.json"
        path.write_text(json.dumps({"version": 1, "rows": [{"user_id": "a"}]}), encoding="utf-8")
        with pytest.raises(PatternStoreError):
            FilePatternStore(path).patterns("a")

    @pytest.mark.skipif(os.name == "nt", reason="XDG paths are POSIX only")
    def test_default_path_follows_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        store = FilePatternStore()
        assert store.path == tmp_path / "ppgen" / "partial_passwords.json"
        assert not store.exists()


def test_incomplete_store_cannot_be_created():
    class ReadOnlyStore(PatternStore):
        def _load(self):
            return {}

    with pytest.raises(TypeError):
        ReadOnlyStore()
    with pytest.raises(TypeError):
        PatternStore()
