from dataclasses import asdict

from domain.models import MODE_WORK, STATUS_PENDING, SessionLog, Settings, Task, TimerState, UiState
from services.app_service import AppService
from storage.repos import (
    KEY_SESSIONS,
    KEY_SETTINGS,
    KEY_TASKS,
    KEY_TIMER,
    AppStateRepo,
    JsonStore,
    SessionRepo,
    SettingsRepo,
    TaskRepo,
    TimerRepo,
    UiRepo,
)


def make_store(db):
    return JsonStore(AppStateRepo(db))


class TestJsonStore:
    def test_missing_key_returns_default(self, db):
        store = make_store(db)
        assert store.load("absent", {"a": 1}) == {"a": 1}

    def test_default_is_not_shared(self, db):
        store = make_store(db)
        default = []
        got = store.load("absent", default)
        got.append(1)
        assert default == []

    def test_roundtrip(self, db):
        store = make_store(db)
        store.save("k", {"x": [1, 2, 3], "y": None})
        assert store.load("k", None) == {"x": [1, 2, 3], "y": None}

    def test_corrupt_value_falls_back(self, db):
        AppStateRepo(db).set("k", "{not json")
        assert make_store(db).load("k", "fallback") == "fallback"

    def test_unserialisable_save_is_swallowed(self, db):
        store = make_store(db)
        store.save("k", {"x": 1})
        store.save("k", {"x": object()})
        assert store.load("k", None) == {"x": 1}

    def test_closed_database_is_swallowed(self, db):
        store = make_store(db)
        db.close()
        store.save("k", 1)
        assert store.load("k", 42) == 42


class TestSlices:
    def test_corrupt_slice_does_not_affect_others(self, db):
        store = make_store(db)
        SettingsRepo(store).save(Settings(work_minutes=40))
        AppStateRepo(db).set(KEY_TASKS, "[[[")

        assert TaskRepo(store).list() == []
        assert SettingsRepo(store).get().work_minutes == 40

    def test_malformed_records_are_skipped(self, db):
        store = make_store(db)
        good = asdict(Task(id="a", title="ok"))
        store.save(KEY_TASKS, [good, {"title": "no id"}, "junk"])
        assert [t.id for t in TaskRepo(store).list()] == ["a"]

    def test_unknown_fields_are_dropped(self, db):
        store = make_store(db)
        store.save(KEY_SETTINGS, {"work_minutes": 30, "theme": "neon"})
        assert SettingsRepo(store).get() == Settings(work_minutes=30)

    def test_wrong_shape_falls_back_to_defaults(self, db):
        store = make_store(db)
        store.save(KEY_TIMER, [1, 2, 3])
        assert TimerRepo(store).get() == TimerState()
        assert UiRepo(store).get() == UiState()

    def test_wrong_typed_fields_use_field_defaults(self, db):
        store = make_store(db)
        store.save(KEY_TIMER, {"is_running": "yes", "end_time": "soon", "cycle_count": None, "mode": "nap"})
        assert TimerRepo(store).get() == TimerState()

        store.save(KEY_SETTINGS, {"work_minutes": "40", "sound": 0, "long_break_every": True})
        assert SettingsRepo(store).get() == Settings()

    def test_wrong_typed_task_fields(self, db):
        store = make_store(db)
        record = dict(asdict(Task(id="a", title="ok")), estimate=None, completed_sessions=None, status=7)
        store.save(KEY_TASKS, [record, {"id": "b", "title": None}])

        (task,) = TaskRepo(store).list()
        assert (task.id, task.estimate, task.completed_sessions, task.status) == ("a", 1, 0, STATUS_PENDING)

    def test_session_with_bad_times_is_skipped(self, db):
        store = make_store(db)
        good = asdict(SessionLog(id="1", task_id=None, type="work", start=0, end=1))
        store.save(KEY_SESSIONS, [good, dict(good, id="2", end="later")])
        assert [s.id for s in SessionRepo(store).list()] == ["1"]

    def test_float_timestamps_are_accepted(self, db):
        store = make_store(db)
        store.save(KEY_TIMER, {"is_running": True, "end_time": 1_700_000_300_000.0, "remaining": 300.0})
        state = TimerRepo(store).get()
        assert state.end_time == 1_700_000_300_000
        assert isinstance(state.end_time, int)

    def test_timer_state_roundtrip(self, db):
        store = make_store(db)
        state = TimerState(
            mode="short",
            is_running=True,
            end_time=1_700_000_300_000,
            remaining=300,
            current_task_id="t1",
            cycle_count=2,
            last_start=1_700_000_000_000,
        )
        TimerRepo(store).save(state)
        assert TimerRepo(store).get() == state

    def test_sessions_newest_first(self, db):
        repo = SessionRepo(make_store(db))
        repo.append(SessionLog(id="1", task_id="t", type="work", start=0, end=1))
        repo.append(SessionLog(id="2", task_id=None, type="work", start=2, end=3))
        assert [s.id for s in repo.list()] == ["2", "1"]


class TestTypeCorruptStartup:
    def test_bad_end_time_does_not_block_startup(self, db, clock, notifier):
        make_store(db).save(KEY_TIMER, {"is_running": True, "end_time": "soon"})

        app = AppService(db, notifier=notifier, clock=clock)
        state = app.timer.get_snapshot()
        assert not state.is_running
        assert state.end_time is None

    def test_null_cycle_count_still_expires(self, db, clock, notifier):
        task = Task(id="t1", title="focus")
        store = make_store(db)
        TaskRepo(store).save_all([task])
        store.save(KEY_TIMER, {
            "mode": MODE_WORK,
            "is_running": True,
            "end_time": clock() + 60_000,
            "remaining": 60,
            "current_task_id": "t1",
            "cycle_count": None,
            "last_start": clock(),
        })

        app = AppService(db, notifier=notifier, clock=clock)
        clock.advance(60)
        app.refresh()

        assert len(app.session_repo.list()) == 1
        assert app.ui_repo.get().show_end_prompt

    def test_null_completed_sessions_counts_from_zero(self, db, clock, notifier):
        record = dict(asdict(Task(id="t1", title="focus", estimate=2)), completed_sessions=None)
        make_store(db).save(KEY_TASKS, [record])

        app = AppService(db, notifier=notifier, clock=clock)
        app.start_for_task("t1")
        clock.advance(app.timer.get_snapshot().remaining)
        app.refresh()

        assert app.tasks.get_task("t1").completed_sessions == 1
