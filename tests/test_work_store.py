"""Tests for the ephemeral work store backends."""

import json

import pytest

from handoff.work_store import InMemoryWorkStore, JsonFileWorkStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryWorkStore()
    return JsonFileWorkStore(tmp_path / "anon" / "work.json")


class TestWorkStore:

    def test_empty_store_has_no_snapshot(self, store):
        assert store.get() is None

    def test_records_messages_and_files(self, store):
        store.record_message({"id": "1", "role": "user", "content": "a login card"})
        store.write_file("/App.jsx", "export default () => null")
        store.record_message({"id": "2", "role": "assistant", "content": "done"})

        snapshot = store.get()
        assert [m["id"] for m in snapshot.messages] == ["1", "2"]
        assert snapshot.file_system_data == {"/App.jsx": "export default () => null"}
        assert snapshot.has_work

    def test_file_only_work_is_not_adoptable(self, store):
        store.write_file("/App.jsx", "x")
        assert store.get().has_work is False

    def test_clear_removes_snapshot(self, store):
        store.record_message({"id": "1", "content": "hi"})
        store.clear()
        assert store.get() is None

    def test_clear_on_empty_store(self, store):
        store.clear()
        assert store.get() is None

    def test_rewriting_a_file_keeps_the_latest_content(self, store):
        store.record_message({"id": "9"})
        store.write_file("a", "first")
        store.write_file("a", "b")
        assert store.get().file_system_data == {"a": "b"}
        assert store.get().messages == [{"id": "9"}]


class TestJsonFileWorkStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "work.json"
        JsonFileWorkStore(path).record_message({"id": "1", "content": "hi"})

        assert JsonFileWorkStore(path).get().messages == [{"id": "1", "content": "hi"}]

    def test_writes_client_field_names(self, tmp_path):
        path = tmp_path / "work.json"
        JsonFileWorkStore(path).write_file("x.tsx", "...")

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "messages": [],
            "fileSystemData": {"x.tsx": "..."},
        }

    @pytest.mark.parametrize("content", ["{not json", '{"messages": "nope"}', "[1, 2]"])
    def test_unreadable_file_reads_as_no_work(self, tmp_path, content):
        path = tmp_path / "work.json"
        path.write_text(content, encoding="utf-8")

        assert JsonFileWorkStore(path).get() is None

    def test_clear_deletes_file(self, tmp_path):
        path = tmp_path / "work.json"
        store = JsonFileWorkStore(path)
        store.record_message({"id": "1"})
        store.clear()

        assert not path.exists()
