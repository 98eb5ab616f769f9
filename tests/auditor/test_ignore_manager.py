# tests/auditor/test_ignore_manager.py
import json
import logging

import pytest

from auditor.managers.audit_ignore_manager import AuditIgnoreManager, is_ignored


def test_lists_persist_between_instances(tmp_path):
    """Saved ignore lists are loaded again by a new manager for the same project."""
    manager = AuditIgnoreManager("shop", tmp_path)
    assert manager.update_ignore_list("type", "mouse-only-click, static-aria-state")
    assert manager.update_ignore_list("file", "vendor/")

    reloaded = AuditIgnoreManager("shop", tmp_path)
    assert reloaded.ignored_types == {"mouse-only-click", "static-aria-state"}
    assert reloaded.ignored_files == {"vendor/"}
    with open(tmp_path / "shop" / "typeignore.json") as f:
        assert json.load(f) == ["mouse-only-click", "static-aria-state"]


def test_reset_clears_before_adding(tmp_path):
    manager = AuditIgnoreManager("shop", tmp_path)
    manager.update_ignore_list("type", "a,b")
    manager.update_ignore_list("type", "c", reset=True)
    assert manager.ignored_types == {"c"}


def test_nothing_to_change_returns_false(tmp_path):
    manager = AuditIgnoreManager("shop", tmp_path)
    assert not manager.update_ignore_list("file", " , ")
    assert not (tmp_path / "shop" / "fileignore.json").exists()


def test_unknown_list_kind_raises(tmp_path):
    with pytest.raises(ValueError):
        AuditIgnoreManager("shop", tmp_path).update_ignore_list("severity", "error")


def test_corrupt_file_falls_back_to_empty(tmp_path, caplog):
    project_dir = tmp_path / "shop"
    project_dir.mkdir()
    (project_dir / "typeignore.json").write_text("{not json")

    with caplog.at_level(logging.WARNING, logger="auditor.managers.audit_ignore_manager"):
        manager = AuditIgnoreManager("shop", tmp_path)
    assert manager.ignored_types == set()
    assert "Could not read ignore file" in caplog.text


def test_set_ignored_types_replaces(tmp_path):
    manager = AuditIgnoreManager("shop", tmp_path)
    manager.update_ignore_list("type", "a")
    manager.set_ignored_types(["b"])
    assert AuditIgnoreManager("shop", tmp_path).ignored_types == {"b"}


def test_is_ignored_matches_type_or_file_fragment():
    assert is_ignored("mouse-only-click", "src/app.js", {"mouse-only-click"}, set())
    assert is_ignored("invalid-role", "vendor/lib.js", set(), {"vendor/"})
    assert not is_ignored("invalid-role", "src/app.js", {"mouse-only-click"}, {"vendor/"})
