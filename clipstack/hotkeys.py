from __future__ import annotations

import keyboard


class GlobalHotkey:
    """One global hotkey bound to a callback on the Tk event loop.

    The ``keyboard`` hook fires on its own thread, so the callback is handed
    to the UI thread with ``scheduler.after(0, ...)``.
    """

    def __init__(self, scheduler, callback, storage=None):
        self.scheduler = scheduler
        self.callback = callback
        self.storage = storage
        self.combo = ""
        self._handle = None

    def _fire(self):
        try:
            self.scheduler.after(0, self.callback)
        except Exception:
            pass

    def register(self, combo: str) -> bool:
        self.unregister()
        combo = (combo or "").strip()
        if not combo:
            return False
        try:
            self._handle = keyboard.add_hotkey(combo, self._fire)
        except Exception as e:
            # Do not hard fail; the window can still be used without the hotkey
            self._log(f"registering hotkey {combo!r} failed: {e!r}")
            self._handle = None
            return False
        self.combo = combo
        return True

    def unregister(self) -> None:
        if self._handle is None:
            return
        try:
            keyboard.remove_hotkey(self._handle)
        except Exception as e:
            self._log(f"removing hotkey {self.combo!r} failed: {e!r}")
        self._handle = None
        self.combo = ""

    @property
    def active(self) -> bool:
        return self._handle is not None

    def _log(self, msg: str) -> None:
        if self.storage is not None:
            self.storage.log(msg)
