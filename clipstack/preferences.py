from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from .constants import (
    DEFAULT_HOTKEY,
    DEFAULT_MAX_HISTORY,
    MAX_AUTO_CLEAR_HOURS,
    MAX_HISTORY,
    MIN_HISTORY,
)


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


_FALSE_WORDS = {"", "false", "0", "no", "off"}
_TRUE_WORDS = {"true", "1", "yes", "on"}


def _as_bool(value, default: bool) -> bool:
    # Hand-edited files may hold "false" instead of false.
    if value is None:
        return default
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _FALSE_WORDS:
            return False
        if word in _TRUE_WORDS:
            return True
    return bool(value)


# -----------------------------
# Preferences
# -----------------------------
@dataclass
class Preferences:
    max_history_items: int = DEFAULT_MAX_HISTORY
    launch_at_startup: bool = False
    show_notifications: bool = True

    # Global hotkey in `keyboard` syntax, e.g. "ctrl+shift+v"
    hotkey: str = DEFAULT_HOTKEY

    # Hours after which entries are swept. 0 = never.
    auto_clear_interval: int = 0
    exclude_passwords: bool = True

    @staticmethod
    def from_dict(d: dict) -> "Preferences":
        """Build a record from stored data, defaulting missing or bad fields and clamping ranges."""
        if not isinstance(d, dict):
            d = {}
        p = Preferences()
        p.max_history_items = _as_int(d.get("max_history_items"), DEFAULT_MAX_HISTORY)
        p.launch_at_startup = _as_bool(d.get("launch_at_startup"), False)
        p.show_notifications = _as_bool(d.get("show_notifications"), True)
        p.hotkey = str(d.get("hotkey") or "").strip() or DEFAULT_HOTKEY
        p.auto_clear_interval = _as_int(d.get("auto_clear_interval"), 0)
        p.exclude_passwords = _as_bool(d.get("exclude_passwords"), True)

        p.max_history_items = max(MIN_HISTORY, min(MAX_HISTORY, p.max_history_items))
        p.auto_clear_interval = max(0, min(MAX_AUTO_CLEAR_HOURS, p.auto_clear_interval))
        return p

    def to_dict(self) -> dict:
        return asdict(self)


class PreferencesModel:
    """Owns the live preferences record.

    The history store and poller read ``current`` on every operation, so a
    successful ``apply`` takes effect on the next insert or tick.
    """

    def __init__(self, storage=None, current: Preferences | None = None):
        self.storage = storage
        if current is None:
            current = storage.load_preferences() if storage is not None else Preferences()
        self.current = current

    def apply(self, new: Preferences) -> set[str]:
        """Clamp, store and persist ``new``. Returns the names of fields that changed."""
        record = Preferences.from_dict(new.to_dict())
        changed = {
            f.name
            for f in fields(Preferences)
            if getattr(record, f.name) != getattr(self.current, f.name)
        }
        self.current = record
        if self.storage is not None:
            self.storage.save_preferences(record)
        return changed
