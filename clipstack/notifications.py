from __future__ import annotations


class Notifier:
    """Fans out user-facing notices unless the user turned them off."""

    def __init__(self, prefs, storage=None):
        self.prefs = prefs
        self.storage = storage
        self._listeners = []

    def subscribe(self, listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def notify(self, title: str, body: str) -> bool:
        if not self.prefs.current.show_notifications:
            return False
        for fn in list(self._listeners):
            try:
                fn(title, body)
            except Exception as e:
                if self.storage is not None:
                    self.storage.log(f"notification listener failed: {e!r}")
        return True
