"""Tests for the persistence backends."""

from __future__ import annotations

import pytest
import yaml

from ticket_desk.backends import (
    MemoryBackend,
    SQLiteBackend,
    YAMLFileBackend,
    get_backend,
)
from ticket_desk.errors import CorruptStateError, InitializationError, TicketDeskError
from ticket_desk.store import TicketStore


@pytest.fixture(params=["memory", "sqlite", "yaml"])
def any_backend(request, tmp_path):
    if request.param == "memory":
        return MemoryBackend()
    if request.param == "sqlite":
        return SQLiteBackend(tmp_path / "prefs.db")
    return YAMLFileBackend(tmp_path / "prefs.yaml")


class TestBackendContract:
    @pytest.mark.asyncio
    async def test_absent_key(self, any_backend):
        await any_backend.open()
        assert await any_backend.get_string_list("tickets") is None
        await any_backend.close()

    @pytest.mark.asyncio
    async def test_set_replaces_value(self, any_backend):
        await any_backend.open()
        await any_backend.set_string_list("tickets", ["a", "b"])
        await any_backend.set_string_list("tickets", ["c"])
        assert await any_backend.get_string_list("tickets") == ["c"]
        await any_backend.close()

    @pytest.mark.asyncio
    async def test_keys_do_not_overlap(self, any_backend):
        await any_backend.open()
        await any_backend.set_string_list("one", ["1"])
        await any_backend.set_string_list("two", ["2"])
        assert await any_backend.get_string_list("one") == ["1"]
        assert await any_backend.get_string_list("two") == ["2"]
        await any_backend.close()


class TestSQLiteBackend:
    @pytest.mark.asyncio
    async def test_requires_open(self, tmp_path):
        backend = SQLiteBackend(tmp_path / "prefs.db")
        with pytest.raises(InitializationError):
            await backend.get_string_list("tickets")

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path):
        backend = SQLiteBackend(tmp_path / "nested" / "prefs.db")
        await backend.open()
        await backend.set_string_list("tickets", ["ü"])
        assert await backend.get_string_list("tickets") == ["ü"]
        await backend.close()
        assert (tmp_path / "nested" / "prefs.db").exists()


class TestYAMLFileBackend:
    @pytest.mark.asyncio
    async def test_file_layout(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        backend = YAMLFileBackend(path)
        await backend.open()
        await backend.set_string_list("tickets", ['{"issue": "x"}'])

        with open(path) as f:
            assert yaml.safe_load(f) == {"tickets": ['{"issue": "x"}']}
        assert list(tmp_path.glob("*.tmp")) == []

    @pytest.mark.asyncio
    async def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("tickets: [unclosed\n")
        backend = YAMLFileBackend(path)
        with pytest.raises(CorruptStateError):
            await backend.get_string_list("tickets")

    @pytest.mark.asyncio
    async def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_bytes(b"tickets:\n- '\xff\xfe'\n")
        backend = YAMLFileBackend(path)
        with pytest.raises(CorruptStateError):
            await backend.get_string_list("tickets")

    @pytest.mark.asyncio
    async def test_non_utf8_file_through_store(self, tmp_path):
        path = tmp_path / "tickets.db"
        path.write_bytes(b"SQLite format 3\x00\xff\xfe\x00")
        store = TicketStore(YAMLFileBackend(path))
        await store.initialize()
        with pytest.raises(TicketDeskError):
            await store.load_all()

    @pytest.mark.asyncio
    async def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("- a\n- b\n")
        backend = YAMLFileBackend(path)
        with pytest.raises(CorruptStateError):
            await backend.get_string_list("tickets")

    @pytest.mark.asyncio
    async def test_empty_file(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("")
        assert await YAMLFileBackend(path).get_string_list("tickets") is None


class TestRegistry:
    def test_get_backend(self, tmp_path):
        assert isinstance(get_backend("memory"), MemoryBackend)
        backend = get_backend("yaml", path=tmp_path / "x.yaml")
        assert isinstance(backend, YAMLFileBackend)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            get_backend("redis")
