from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass
from datetime import date, datetime

from .constants import IMAGE, PREVIEW_LIMIT, TEXT

KINDS = (TEXT, IMAGE)

# Date search terms, e.g. "3/14/2025" or "03-14-2025"
_DATE_TERMS = (
    re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"),
)


# -----------------------------
# Helpers
# -----------------------------
def new_entry_id() -> str:
    return f"{int(time.time() * 1000)}{secrets.token_hex(5)}"


def format_file_size(n: int) -> str:
    """
    Human-readable size with 1024-based units:
      0      -> "0 Bytes"
      1536   -> "1.5 KB"
      2097152 -> "2 MB"
    """
    if n <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    value = float(n)
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    num = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{num} {units[i]}"


def estimate_image_size(content: str) -> int:
    # base64 carries 3 bytes per 4 characters
    return int(len(content) * 3 / 4 + 0.5)


def make_preview(kind: str, content: str) -> str:
    if kind == IMAGE:
        return f"Image ({format_file_size(estimate_image_size(content))})"
    if len(content) > PREVIEW_LIMIT:
        return content[: PREVIEW_LIMIT - 3] + "..."
    return content


# -----------------------------
# Entry
# -----------------------------
@dataclass(frozen=True)
class HistoryEntry:
    id: str
    kind: str
    content: str
    created_at: datetime
    preview: str
    size_bytes: int | None = None

    @staticmethod
    def create(kind: str, content: str, created_at: datetime | None = None) -> "HistoryEntry":
        if kind not in KINDS:
            raise ValueError(f"unknown entry kind: {kind!r}")
        return HistoryEntry(
            id=new_entry_id(),
            kind=kind,
            content=content,
            created_at=created_at or datetime.now(),
            preview=make_preview(kind, content),
            size_bytes=estimate_image_size(content) if kind == IMAGE else None,
        )

    @property
    def display_timestamp(self) -> str:
        return self.created_at.strftime("%Y-%m-%d %H:%M:%S")

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "type": self.kind,
            "content": self.content,
            "timestamp": self.created_at.isoformat(timespec="microseconds"),
            "preview": self.preview,
        }
        if self.size_bytes is not None:
            d["size"] = self.size_bytes
        return d

    @staticmethod
    def from_dict(d) -> "HistoryEntry | None":
        """Rebuild a stored entry. Returns None for anything malformed.

        The preview and size are derived again from the content rather than
        trusted from the file.
        """
        if not isinstance(d, dict):
            return None
        entry_id = d.get("id")
        kind = d.get("type")
        content = d.get("content")
        stamp = d.get("timestamp")
        if not isinstance(entry_id, str) or not entry_id:
            return None
        if kind not in KINDS or not isinstance(content, str) or not content:
            return None
        try:
            created_at = datetime.fromisoformat(str(stamp))
        except (TypeError, ValueError):
            return None
        if created_at.tzinfo is not None:
            # Stored times are naive local; an offset stamp is moved onto that clock.
            created_at = created_at.astimezone().replace(tzinfo=None)
        return HistoryEntry(
            id=entry_id,
            kind=kind,
            content=content,
            created_at=created_at,
            preview=make_preview(kind, content),
            size_bytes=estimate_image_size(content) if kind == IMAGE else None,
        )


def _matches_date_term(entry: HistoryEntry, term: str) -> bool:
    for pattern in _DATE_TERMS:
        m = pattern.match(term)
        if not m:
            continue
        month, day, year = (int(x) for x in m.groups())
        try:
            wanted = date(year, month, day)
        except ValueError:
            return False
        return entry.created_at.date() == wanted
    return False


def entry_matches(entry: HistoryEntry, term: str) -> bool:
    q = term.strip().lower()
    if not q:
        return True
    if q in entry.preview.lower():
        return True
    if entry.kind == TEXT and q in entry.content.lower():
        return True
    if q in entry.display_timestamp.lower():
        return True
    if q in entry.kind:
        return True
    return _matches_date_term(entry, q)


# -----------------------------
# Store
# -----------------------------
class HistoryStore:
    """Newest-first, capacity-bounded clipboard history.

    Capacity is read from ``prefs.current.max_history_items`` on each insert.
    Every change is saved through ``storage`` and then pushed to subscribers
    as the full ordered list.
    """

    def __init__(self, prefs, storage, entries=None, clock=datetime.now):
        self.prefs = prefs
        self.storage = storage
        self.clock = clock
        self._listeners = []

        # Enforce the invariants on whatever was loaded: unique content, bounded size.
        items: list[HistoryEntry] = []
        seen = set()
        for e in entries or []:
            key = (e.kind, e.content)
            if key in seen:
                continue
            seen.add(key)
            items.append(e)
        self._items = items[: self._capacity()]

    def _capacity(self) -> int:
        return self.prefs.current.max_history_items

    # ----- observers -----
    def subscribe(self, listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _commit(self) -> None:
        self.storage.save_history(self._items)
        snapshot = self.list()
        for fn in list(self._listeners):
            try:
                fn(snapshot)
            except Exception as e:
                self.storage.log(f"history listener failed: {e!r}")

    # ----- reads -----
    def list(self) -> list[HistoryEntry]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, index: int) -> HistoryEntry | None:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def search(self, term: str) -> list[HistoryEntry]:
        return [e for e in self._items if entry_matches(e, term or "")]

    # ----- mutations -----
    def insert(self, kind: str, content: str) -> str:
        entry = HistoryEntry.create(kind, content, created_at=self.clock())
        items = [e for e in self._items if not (e.kind == kind and e.content == content)]
        items.insert(0, entry)
        self._items = items[: self._capacity()]
        self._commit()
        return entry.id

    def delete_at(self, index: int) -> bool:
        if not isinstance(index, int) or not 0 <= index < len(self._items):
            return False
        del self._items[index]
        self._commit()
        return True

    def clear(self) -> None:
        self._items = []
        self._commit()

    def resize_capacity(self, new_max: int) -> None:
        if len(self._items) > new_max:
            self._items = self._items[: max(0, new_max)]
            self._commit()

    def prune_older_than(self, cutoff: datetime) -> int:
        """Drop every entry created at or before ``cutoff``. Returns how many went."""
        kept = [e for e in self._items if e.created_at > cutoff]
        removed = len(self._items) - len(kept)
        if removed:
            self._items = kept
            self._commit()
        return removed
