from __future__ import annotations

from datetime import datetime, timedelta

from .classifier import LOOKS_LIKE_PASSWORD, Accept, Snapshot, decode_image
from .constants import APP_NAME, IMAGE, POLL_MS, SWEEP_MS, TEXT

IDLE = "idle"
POLLING = "polling"


class ClipboardPoller:
    """Timer-driven clipboard watcher.

    ``scheduler`` is anything with Tk's ``after(ms, fn)`` / ``after_cancel(job)``,
    normally the root window. Everything runs on that one event loop.

    Change detection compares each snapshot with the last one processed, so a
    copy of A, then B, then A again inside one poll period is seen as no change.
    """

    def __init__(self, scheduler, clipboard, classifier, store, prefs, storage,
                 notifier=None, clock=datetime.now):
        self.scheduler = scheduler
        self.clipboard = clipboard
        self.classifier = classifier
        self.store = store
        self.prefs = prefs
        self.storage = storage
        self.notifier = notifier
        self.clock = clock

        self.state = IDLE
        self._poll_job = None
        self._sweep_job = None

        # Identity of the last snapshot acted on (accepted or rejected as a password)
        self._last_marker = None
        # Password value we already warned about; cleared by the next accepted copy
        self._notified_secret = None

        self._last_error = ""

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def start(self) -> None:
        if self.state == POLLING:
            return
        self.state = POLLING
        self._tick()
        self.restart_sweep()

    def stop(self) -> None:
        self.state = IDLE
        self._cancel("_poll_job")
        self._cancel("_sweep_job")

    def restart_sweep(self) -> None:
        self._cancel("_sweep_job")
        if self.state == POLLING:
            self._sweep_job = self.scheduler.after(SWEEP_MS, self._sweep_tick)

    def _cancel(self, attr: str) -> None:
        job = getattr(self, attr)
        setattr(self, attr, None)
        if job is None:
            return
        try:
            self.scheduler.after_cancel(job)
        except Exception as e:
            self._log_error(f"cancelling timer failed: {e!r}")

    def _tick(self) -> None:
        self._poll_job = None
        if self.state != POLLING:
            return
        try:
            self.poll_once()
        except Exception as e:
            self._log_error(f"clipboard poll failed: {e!r}")
        else:
            self._last_error = ""
        if self.state == POLLING:
            self._poll_job = self.scheduler.after(POLL_MS, self._tick)

    def _sweep_tick(self) -> None:
        self._sweep_job = None
        if self.state != POLLING:
            return
        try:
            self.sweep_once()
        except Exception as e:
            self._log_error(f"auto-clear sweep failed: {e!r}")
        if self.state == POLLING:
            self._sweep_job = self.scheduler.after(SWEEP_MS, self._sweep_tick)

    # -----------------------------
    # Clipboard polling
    # -----------------------------
    def _read_snapshot(self) -> Snapshot | None:
        # Image wins over any text representation of the same copy.
        try:
            png = self.clipboard.read_image()
        except Exception as e:
            self._log_error(f"reading clipboard image failed: {e!r}")
            png = None
        if png:
            return Snapshot(IMAGE, png)

        text = self.clipboard.read_text()
        if text is None:
            return None
        return Snapshot(TEXT, text)

    def poll_once(self):
        """Run one poll. Returns the classification, or None when nothing new was seen."""
        snap = self._read_snapshot()
        if snap is None or snap.identity == self._last_marker:
            return None

        outcome = self.classifier.classify(snap)
        if isinstance(outcome, Accept):
            self.store.insert(outcome.kind, outcome.content)
            self._last_marker = snap.identity
            self._notified_secret = None
        elif outcome.reason == LOOKS_LIKE_PASSWORD:
            self._last_marker = snap.identity
            if self._notified_secret != snap.raw:
                self._notified_secret = snap.raw
                if self.notifier is not None:
                    self.notifier.notify(APP_NAME, "Skipped a copied value that looks like a password.")
        return outcome

    # -----------------------------
    # Auto-clear
    # -----------------------------
    def sweep_once(self) -> int:
        hours = self.prefs.current.auto_clear_interval
        if hours <= 0:
            return 0
        removed = self.store.prune_older_than(self.clock() - timedelta(hours=hours))
        if removed:
            self.storage.log(f"auto-clear removed {removed} entr{'y' if removed == 1 else 'ies'}")
        return removed

    # -----------------------------
    # Copy back
    # -----------------------------
    def copy_entry(self, entry) -> bool:
        """Put ``entry`` back on the OS clipboard. Returns True on success."""
        try:
            if entry.kind == IMAGE:
                ok = bool(self.clipboard.write_image(decode_image(entry.content)))
            else:
                ok = bool(self.clipboard.write_text(entry.content))
        except Exception as e:
            self.storage.log(f"copy to clipboard failed: {e!r}")
            return False
        if not ok:
            self.storage.log(f"copy to clipboard not supported for {entry.kind} on this platform")
        return ok

    def _log_error(self, msg: str) -> None:
        # A broken clipboard fails every tick; log each distinct error once.
        if msg == self._last_error:
            return
        self._last_error = msg
        self.storage.log(msg)
