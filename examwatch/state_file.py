from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any

from examwatch.domain import StateEntry, StateLoadError, StateSaveError, StateSnapshot

logger = logging.getLogger(__name__)


def _parse_state(raw: Any) -> StateSnapshot:
    if not isinstance(raw, dict):
        raise StateLoadError(f"expected a JSON object, got {type(raw).__name__}")

    state: StateSnapshot = {}
    for key, item in raw.items():
        try:
            state[str(key)] = StateEntry(bookable=item["bookable"] is True, last_seen=str(item["lastSeen"]))
        except (KeyError, TypeError):
            logger.warning("Skipping malformed state entry %r", key)
            continue
    return state


def _read_state(path: str) -> StateSnapshot:
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StateLoadError(str(e)) from e

    if not text.strip():
        return {}

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateLoadError(str(e)) from e
    return _parse_state(raw)


def load_state(path: str) -> StateSnapshot:
    if not os.path.exists(path):
        return {}

    try:
        return _read_state(path)
    except StateLoadError as e:
        # Corrupted state shouldn't brick the watcher; start fresh.
        logger.warning("Could not read state file %s, starting fresh: %s", path, e)
        return {}


def save_state(path: str, state: StateSnapshot) -> None:
    data = {key: entry.to_dict() for key, entry in state.items()}

    folder = os.path.dirname(os.path.abspath(path))
    tmp_name = None
    try:
        if folder and not os.path.exists(folder):
            os.makedirs(folder, exist_ok=True)
        # Atomic write
        with tempfile.NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp") as tf:
            tmp_name = tf.name
            json.dump(data, tf, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise StateSaveError(f"Could not write state file {path}: {e}") from e
