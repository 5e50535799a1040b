import pytest

from services.app_service import AppService
from storage.db import Database

START_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now_ms: int = START_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class FakeScheduler:
    """Stands in for Tk's after/after_cancel."""

    def __init__(self):
        self.jobs = {}
        self.delays = []
        self._next = 0

    def schedule(self, delay_ms, fn):
        self._next += 1
        self.jobs[self._next] = fn
        self.delays.append(delay_ms)
        return self._next

    def cancel(self, job):
        self.jobs.pop(job, None)

    def fire(self):
        pending = list(self.jobs.values())
        self.jobs.clear()
        for fn in pending:
            fn()


class FakeNotifier:
    def __init__(self):
        self.played = 0

    def play(self):
        self.played += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db():
    d = Database(db_path=":memory:")
    d.init_schema()
    yield d
    d.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def app(db, clock, notifier):
    return AppService(db, notifier=notifier, clock=clock)


@pytest.fixture
def task(app):
    return app.add_task("Write report", estimate=4)


@pytest.fixture
def scheduler(app):
    s = FakeScheduler()
    app.timer.set_scheduler(s.schedule, s.cancel)
    return s
