from datetime import datetime, timedelta

import pytest

from clipstack.classifier import ContentClassifier
from clipstack.history import HistoryStore
from clipstack.notifications import Notifier
from clipstack.poller import ClipboardPoller
from clipstack.preferences import Preferences, PreferencesModel
from clipstack.storage import Storage


class FakeScheduler:
    """Tk-style after/after_cancel driven by a manual millisecond clock."""

    def __init__(self):
        self.now_ms = 0
        self._jobs = {}
        self._next_id = 0

    def after(self, ms, fn):
        self._next_id += 1
        self._jobs[self._next_id] = (self.now_ms + ms, fn)
        return self._next_id

    def after_cancel(self, job):
        self._jobs.pop(job, None)

    @property
    def pending(self):
        return len(self._jobs)

    def advance(self, ms):
        target = self.now_ms + ms
        while True:
            due = [(t, j) for j, (t, _) in self._jobs.items() if t <= target]
            if not due:
                break
            t, j = min(due)
            self.now_ms = t
            _, fn = self._jobs.pop(j)
            fn()
        self.now_ms = target


class FakeClipboard:
    def __init__(self):
        self.image = None
        self.text = None
        self.fail_text = False
        self.writes = []

    def read_image(self):
        return self.image

    def read_text(self):
        if self.fail_text:
            raise RuntimeError("clipboard busy")
        return self.text

    def write_text(self, text_value):
        self.writes.append(("text", text_value))
        return True

    def write_image(self, png):
        self.writes.append(("image", png))
        return True


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2025, 3, 14, 9, 30, 0, 123456)

    def __call__(self):
        return self.now

    def advance(self, **kw):
        self.now = self.now + timedelta(**kw)


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path / "data")


@pytest.fixture
def prefs(storage):
    return PreferencesModel(storage, current=Preferences())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(prefs, storage, clock):
    return HistoryStore(prefs, storage, clock=clock)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def notifier(prefs, storage):
    return Notifier(prefs, storage)


@pytest.fixture
def poller(scheduler, clipboard, store, prefs, storage, notifier, clock):
    return ClipboardPoller(
        scheduler, clipboard, ContentClassifier(prefs), store, prefs, storage,
        notifier=notifier, clock=clock,
    )
