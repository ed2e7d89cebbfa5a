"""Tests for workspace configuration."""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from ticket_desk.backends import SQLiteBackend, YAMLFileBackend
from ticket_desk.config import (
    TicketDeskConfig,
    build_store,
    load_config,
    write_default_config,
)


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path)
        assert config.backend == "sqlite"
        assert config.path == "./tickets.db"
        assert config.key == "tickets"

    def test_reads_file(self, tmp_path):
        (tmp_path / "td.yaml").write_text(
            yaml.safe_dump({"backend": "yaml", "path": "data/tickets.yaml", "key": "support"})
        )
        config = load_config(tmp_path)
        assert config.backend == "yaml"
        assert config.path == "data/tickets.yaml"
        assert config.key == "support"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "td.yaml").write_text(yaml.safe_dump({"backend": "yaml"}))
        monkeypatch.setenv("TICKET_DESK_BACKEND", "memory")
        monkeypatch.setenv("TICKET_DESK_KEY", "other")
        config = load_config(tmp_path)
        assert config.backend == "memory"
        assert config.key == "other"

    def test_path_default_follows_backend(self, tmp_path):
        (tmp_path / "td.yaml").write_text(yaml.safe_dump({"backend": "yaml"}))
        assert load_config(tmp_path).path == "./tickets.yaml"
        assert TicketDeskConfig(backend="sqlite").path == "./tickets.db"
        assert TicketDeskConfig(backend="yaml", path="custom.yaml").path == "custom.yaml"

    def test_non_mapping_file_rejected(self, tmp_path):
        (tmp_path / "td.yaml").write_text("- sqlite\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(tmp_path)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            TicketDeskConfig(backend="redis")

    def test_empty_key_rejected(self):
        with pytest.raises(ValidationError):
            TicketDeskConfig(key="  ")


class TestBuildStore:
    def test_relative_path_resolved_against_workspace(self, tmp_path):
        store = build_store(TicketDeskConfig(backend="yaml", path="t.yaml"), tmp_path)
        assert isinstance(store.backend, YAMLFileBackend)
        assert store.backend.path == tmp_path / "t.yaml"

    def test_sqlite_and_key(self, tmp_path):
        store = build_store(TicketDeskConfig(key="support"), tmp_path)
        assert isinstance(store.backend, SQLiteBackend)
        assert store.key == "support"
        assert not store.initialized

    def test_write_default_config(self, tmp_path):
        path = write_default_config(tmp_path)
        assert load_config(tmp_path) == TicketDeskConfig()
        path.write_text(yaml.safe_dump({"backend": "yaml"}))
        write_default_config(tmp_path)
        assert load_config(tmp_path).backend == "yaml"
