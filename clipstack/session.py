from __future__ import annotations

from .classifier import ContentClassifier
from .constants import APP_NAME
from .history import HistoryStore
from .notifications import Notifier
from .poller import ClipboardPoller
from .preferences import Preferences, PreferencesModel
from .startup import set_launch_at_startup


class ClipSession:
    """Process-lifetime state: preferences, history and the clipboard engine.

    Built from what ``storage`` has on disk; ``shutdown`` stops the timers and
    flushes both documents.
    """

    def __init__(self, scheduler, clipboard, storage, hotkey=None, set_startup=set_launch_at_startup):
        self.storage = storage
        self.prefs = PreferencesModel(storage)
        self.store = HistoryStore(self.prefs, storage, entries=storage.load_history())
        self.notifier = Notifier(self.prefs, storage)
        self.classifier = ContentClassifier(self.prefs)
        self.poller = ClipboardPoller(
            scheduler, clipboard, self.classifier, self.store, self.prefs, storage,
            notifier=self.notifier,
        )
        self.hotkey = hotkey
        self._set_startup = set_startup

    def start(self) -> None:
        if self.hotkey is not None:
            self.hotkey.register(self.prefs.current.hotkey)
        self.poller.start()

    def save_preferences(self, new: Preferences) -> set[str]:
        """Apply a preferences record and react only to the fields that changed."""
        changed = self.prefs.apply(new)
        current = self.prefs.current

        if "hotkey" in changed and self.hotkey is not None:
            self.hotkey.register(current.hotkey)
        if "max_history_items" in changed:
            self.store.resize_capacity(current.max_history_items)
        if "auto_clear_interval" in changed:
            self.poller.restart_sweep()
        if "launch_at_startup" in changed:
            self._set_startup(current.launch_at_startup, self.storage)

        self.notifier.notify(APP_NAME, "Preferences saved.")
        return changed

    def shutdown(self) -> None:
        self.poller.stop()
        if self.hotkey is not None:
            self.hotkey.unregister()
        self.storage.save_history(self.store.list())
        self.storage.save_preferences(self.prefs.current)
