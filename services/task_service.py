# services/task_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Dict, List, Optional

from domain.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    STATUSES,
    Task,
)
from storage.repos import TaskRepo

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "estimate", "status", "completed_sessions")


def _clamp_estimate(value, fallback: int = 1) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return max(1, fallback)


class TaskService:
    def __init__(self, tasks: TaskRepo):
        self.tasks = tasks

    # ---- queries ----
    def list_tasks(self, status: Optional[str] = None) -> List[Task]:
        all_tasks = self.tasks.list()
        if status:
            return [t for t in all_tasks if t.status == status]
        return all_tasks

    def get_task(self, task_id: Optional[str]) -> Optional[Task]:
        if not task_id:
            return None
        return self.tasks.get(task_id)

    def counts(self) -> Dict[str, int]:
        all_tasks = self.tasks.list()
        out = {"total": len(all_tasks)}
        for s in STATUSES:
            out[s] = sum(1 for t in all_tasks if t.status == s)
        return out

    # ---- commands ----
    def add_task(self, title: str, description: str = "", estimate=1) -> Optional[Task]:
        title = (title or "").strip()
        if not title:
            return None
        task = Task(
            id=uuid.uuid4().hex,
            title=title,
            description=(description or "").strip(),
            estimate=_clamp_estimate(estimate),
            status=STATUS_PENDING,
            completed_sessions=0,
        )
        # newest first
        self.tasks.save_all([task] + self.tasks.list())
        logger.info("added task %s (%r)", task.id, task.title)
        return task

    def update_task(self, task_id: str, **updates) -> Optional[Task]:
        changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                changes.pop("title")
            else:
                changes["title"] = title
        if "estimate" in changes:
            changes["estimate"] = _clamp_estimate(changes["estimate"])
        if "status" in changes and changes["status"] not in STATUSES:
            changes.pop("status")

        all_tasks = self.tasks.list()
        updated = None
        for i, t in enumerate(all_tasks):
            if t.id == task_id:
                updated = replace(t, **changes)
                all_tasks[i] = updated
                break
        if updated is None:
            return None
        self.tasks.save_all(all_tasks)
        return updated

    def delete_task(self, task_id: str) -> bool:
        all_tasks = self.tasks.list()
        kept = [t for t in all_tasks if t.id != task_id]
        if len(kept) == len(all_tasks):
            return False
        # session logs keep their task_id; the history view shows it as unknown
        self.tasks.save_all(kept)
        logger.info("deleted task %s", task_id)
        return True

    # ---- timer hooks ----
    def mark_started(self, task_id: str) -> None:
        t = self.tasks.get(task_id)
        if t and t.status == STATUS_PENDING:
            self.update_task(task_id, status=STATUS_IN_PROGRESS)

    def record_work_session(self, task_id: Optional[str]) -> Optional[Task]:
        t = self.get_task(task_id)
        if t is None:
            return None
        done = t.completed_sessions + 1
        status = STATUS_COMPLETED if done >= t.estimate else t.status
        if status == STATUS_COMPLETED and t.status != STATUS_COMPLETED:
            logger.info("task %s reached its estimate of %d", t.id, t.estimate)
        return self.update_task(t.id, completed_sessions=done, status=status)
