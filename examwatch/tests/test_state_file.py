from __future__ import annotations

import json
import logging

import pytest

from examwatch.domain import StateEntry, StateSaveError
from examwatch.state_file import load_state, save_state


def test_load_state_missing_file_returns_empty(tmp_path) -> None:
    assert load_state(str(tmp_path / "nope.json")) == {}


def test_load_state_empty_file_returns_empty(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("")
    assert load_state(str(path)) == {}


def test_load_state_malformed_file_warns_and_returns_empty(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="examwatch.state_file"):
        assert load_state(str(path)) == {}
    assert "starting fresh" in caplog.text


def test_load_state_wrong_shape_warns_and_returns_empty(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="examwatch.state_file"):
        assert load_state(str(path)) == {}
    assert "starting fresh" in caplog.text


def test_load_state_skips_broken_entries(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "A": {"bookable": True, "lastSeen": "2026-01-10T08:00:00.000Z"},
                "B": "garbage",
                "C": {"bookable": False},
            }
        ),
        encoding="utf-8",
    )

    assert load_state(str(path)) == {"A": StateEntry(bookable=True, last_seen="2026-01-10T08:00:00.000Z")}


def test_save_state_creates_folder_and_writes_readable_json(tmp_path) -> None:
    path = tmp_path / "nested" / "dir" / "state.json"
    state = {
        "A": StateEntry(bookable=True, last_seen="2026-01-10T08:00:00.000Z"),
        "M|2026/03/01|L": StateEntry(bookable=False, last_seen="2026-01-10T08:00:00.000Z"),
    }

    save_state(str(path), state)

    text = path.read_text(encoding="utf-8")
    assert '\n  "A": {' in text
    assert json.loads(text) == {
        "A": {"bookable": True, "lastSeen": "2026-01-10T08:00:00.000Z"},
        "M|2026/03/01|L": {"bookable": False, "lastSeen": "2026-01-10T08:00:00.000Z"},
    }
    assert load_state(str(path)) == state


def test_save_state_overwrites_previous_content(tmp_path) -> None:
    path = tmp_path / "state.json"
    save_state(str(path), {"OLD": StateEntry(bookable=True, last_seen="x")})
    save_state(str(path), {"NEW": StateEntry(bookable=False, last_seen="y")})

    assert load_state(str(path)) == {"NEW": StateEntry(bookable=False, last_seen="y")}


def test_save_state_wraps_os_errors(tmp_path) -> None:
    # A directory where the file should be makes os.replace() fail.
    path = tmp_path / "state.json"
    path.mkdir()

    with pytest.raises(StateSaveError):
        save_state(str(path), {})
    assert list(tmp_path.glob("*.tmp")) == []


def test_save_state_leaves_no_temp_files(tmp_path) -> None:
    path = tmp_path / "state.json"
    save_state(str(path), {"A": StateEntry(bookable=True, last_seen="x")})
    save_state(str(path), {"A": StateEntry(bookable=False, last_seen="y")})

    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]
