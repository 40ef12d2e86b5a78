from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

from platformdirs import user_data_dir

from .constants import APP_ID, VENDOR
from .history import HistoryEntry
from .preferences import Preferences


# -----------------------------
# Utilities
# -----------------------------
def now_ts() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def safe_json_load(path: Path, default):
    try:
        if not path.exists():
            return default
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return default


def safe_json_save(path: Path, obj) -> None:
    """Replace ``path`` with the JSON document ``obj``. Raises on I/O failure."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp, path)


# -----------------------------
# Persistence
# -----------------------------
class Storage:
    """JSON documents and the event log in the per-user data folder."""

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else Path(user_data_dir(APP_ID, VENDOR))
        self.history_path = self.data_dir / "history.json"
        self.preferences_path = self.data_dir / "preferences.json"
        self.log_path = self.data_dir / "clipstack.log"

    def log(self, msg: str) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8", errors="ignore") as f:
                f.write(f"{now_ts()}  {msg}\n")
        except Exception:
            pass

    # ----- history -----
    def load_history(self) -> list[HistoryEntry]:
        raw = safe_json_load(self.history_path, [])
        if not isinstance(raw, list):
            self.log(f"history file is not a list, ignoring: {self.history_path}")
            return []
        out = []
        for item in raw:
            entry = HistoryEntry.from_dict(item)
            if entry is not None:
                out.append(entry)
        dropped = len(raw) - len(out)
        if dropped:
            self.log(f"dropped {dropped} invalid history record(s)")
        return out

    def save_history(self, entries) -> bool:
        try:
            safe_json_save(self.history_path, [e.to_dict() for e in entries])
            return True
        except Exception as e:
            self.log(f"saving history failed: {e!r}")
            return False

    # ----- preferences -----
    def load_preferences(self) -> Preferences:
        return Preferences.from_dict(safe_json_load(self.preferences_path, {}))

    def save_preferences(self, prefs: Preferences) -> bool:
        try:
            safe_json_save(self.preferences_path, prefs.to_dict())
            return True
        except Exception as e:
            self.log(f"saving preferences failed: {e!r}")
            return False
