"""Tests for atomic JSON persistence."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from dataentry.persistence import save_json


def _read(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def test_save_writes_json_object(tmp_path):
    path = str(tmp_path / "data.json")
    data = {"format": "%05d", "max_length": 42}
    save_json(path, data)
    assert _read(path) == data


def test_save_replaces_previous_content(tmp_path):
    path = str(tmp_path / "atomic.json")
    save_json(path, {"v": 1})
    save_json(path, {"v": 2})
    assert _read(path) == {"v": 2}

    # No leftover .tmp files
    tmp_files = [f for f in os.listdir(tmp_path) if f.endswith(".tmp")]
    assert tmp_files == []


def test_failed_write_keeps_old_file(tmp_path):
    path = str(tmp_path / "config.json")
    save_json(path, {"v": 1})
    with patch("dataentry.persistence.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            save_json(path, {"v": 2})
    assert _read(path) == {"v": 1}
    assert [f for f in os.listdir(tmp_path) if f.endswith(".tmp")] == []


def test_save_creates_parent_dirs(tmp_path):
    path = str(tmp_path / "a" / "b" / "config.json")
    save_json(path, {"cursor": "|"})
    assert _read(path) == {"cursor": "|"}


def test_save_keeps_non_ascii(tmp_path):
    path = tmp_path / "u.json"
    save_json(str(path), {"cursor": "▏"})
    assert "▏" in path.read_text(encoding="utf-8")
