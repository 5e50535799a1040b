import pytest

from domain.models import STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_PENDING
from services.task_service import TaskService
from storage.repos import AppStateRepo, JsonStore, TaskRepo


@pytest.fixture
def tasks(db):
    return TaskService(TaskRepo(JsonStore(AppStateRepo(db))))


class TestAdd:
    def test_defaults(self, tasks):
        t = tasks.add_task("  Read paper  ", description=" notes ")
        assert t.title == "Read paper"
        assert t.description == "notes"
        assert t.estimate == 1
        assert t.status == STATUS_PENDING
        assert t.completed_sessions == 0

    def test_newest_first(self, tasks):
        a = tasks.add_task("a")
        b = tasks.add_task("b")
        assert [t.id for t in tasks.list_tasks()] == [b.id, a.id]

    def test_ids_are_unique(self, tasks):
        ids = {tasks.add_task(f"t{i}").id for i in range(50)}
        assert len(ids) == 50

    @pytest.mark.parametrize("raw,expected", [(0, 1), (-5, 1), ("3", 3), ("x", 1), (None, 1)])
    def test_estimate_clamped(self, tasks, raw, expected):
        assert tasks.add_task("t", estimate=raw).estimate == expected

    def test_blank_title_is_noop(self, tasks):
        assert tasks.add_task("   ") is None
        assert tasks.list_tasks() == []


class TestUpdate:
    def test_merges_fields(self, tasks):
        t = tasks.add_task("old", estimate=2)
        tasks.update_task(t.id, title="new", description="d")
        got = tasks.get_task(t.id)
        assert (got.title, got.description, got.estimate) == ("new", "d", 2)

    def test_ignores_unknown_fields_and_bad_values(self, tasks):
        t = tasks.add_task("keep")
        tasks.update_task(t.id, id="hijack", title="  ", status="Bogus", estimate=0)
        got = tasks.get_task(t.id)
        assert got.id == t.id
        assert got.title == "keep"
        assert got.status == STATUS_PENDING
        assert got.estimate == 1

    def test_unknown_id_is_noop(self, tasks):
        assert tasks.update_task("missing", title="x") is None


class TestDelete:
    def test_removes(self, tasks):
        t = tasks.add_task("x")
        assert tasks.delete_task(t.id) is True
        assert tasks.get_task(t.id) is None

    def test_unknown_id(self, tasks):
        assert tasks.delete_task("missing") is False


class TestProgress:
    def test_mark_started_only_from_pending(self, tasks):
        t = tasks.add_task("x")
        tasks.mark_started(t.id)
        assert tasks.get_task(t.id).status == STATUS_IN_PROGRESS

        tasks.update_task(t.id, status=STATUS_COMPLETED)
        tasks.mark_started(t.id)
        assert tasks.get_task(t.id).status == STATUS_COMPLETED

    def test_completion_is_sticky(self, tasks):
        t = tasks.add_task("x", estimate=1)
        tasks.record_work_session(t.id)
        assert tasks.get_task(t.id).status == STATUS_COMPLETED

        # raising the estimate later does not reopen the task
        tasks.update_task(t.id, estimate=5)
        tasks.record_work_session(t.id)
        got = tasks.get_task(t.id)
        assert got.completed_sessions == 2
        assert got.status == STATUS_COMPLETED

    def test_record_for_missing_task(self, tasks):
        assert tasks.record_work_session(None) is None
        assert tasks.record_work_session("gone") is None

    def test_counts(self, tasks):
        a = tasks.add_task("a")
        tasks.add_task("b")
        tasks.mark_started(a.id)
        counts = tasks.counts()
        assert counts["total"] == 2
        assert counts[STATUS_PENDING] == 1
        assert counts[STATUS_IN_PROGRESS] == 1
        assert counts[STATUS_COMPLETED] == 0
