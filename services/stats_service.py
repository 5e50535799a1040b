# -*- coding: utf-8 -*-

import time
from typing import Iterable, Optional

from domain.models import MODE_WORK, STATUS_COMPLETED, SessionLog
from storage.repos import SessionRepo, TaskRepo

DAY_MS = 24 * 60 * 60 * 1000


def _start_of_day_ms(now_ms: Optional[int] = None) -> int:
    now = (now_ms if now_ms is not None else int(time.time() * 1000)) / 1000.0
    lt = time.localtime(now)
    start = time.mktime(
        (
            lt.tm_year,
            lt.tm_mon,
            lt.tm_mday,
            0,
            0,
            0,
            lt.tm_wday,
            lt.tm_yday,
            -1,
        )
    )
    return int(start) * 1000


def _work(sessions: Iterable[SessionLog]):
    return [s for s in sessions if s.type == MODE_WORK]


class StatsService:
    """Counting over the session log and task list. Read-only."""

    def __init__(self, session_repo: SessionRepo, task_repo: TaskRepo):
        self.session_repo = session_repo
        self.task_repo = task_repo

    def pomodoros_today(self, now_ms: Optional[int] = None) -> int:
        day0 = _start_of_day_ms(now_ms)
        return sum(1 for s in _work(self.session_repo.list()) if s.end >= day0)

    def pomodoros_this_week(self, now_ms: Optional[int] = None) -> int:
        # rolling seven days including today
        day7 = _start_of_day_ms(now_ms) - 6 * DAY_MS
        return sum(1 for s in _work(self.session_repo.list()) if s.end >= day7)

    def tasks_completed_today(self, now_ms: Optional[int] = None) -> int:
        day0 = _start_of_day_ms(now_ms)
        touched = {s.task_id for s in _work(self.session_repo.list()) if s.end >= day0}
        return sum(
            1
            for t in self.task_repo.list()
            if t.status == STATUS_COMPLETED and t.id in touched
        )

    def tasks_completed_total(self) -> int:
        return sum(1 for t in self.task_repo.list() if t.status == STATUS_COMPLETED)

    def total_today_work_sec(self, now_ms: Optional[int] = None) -> int:
        day0 = _start_of_day_ms(now_ms)
        total_ms = sum(
            max(0, s.end - s.start)
            for s in _work(self.session_repo.list())
            if s.start >= day0
        )
        return total_ms // 1000
