# -*- coding: utf-8 -*-

import math
from dataclasses import dataclass, replace
from typing import Optional

from domain.models import (
    MODE_LONG,
    MODE_SHORT,
    MODE_WORK,
    Settings,
    TimerState,
)


@dataclass(frozen=True)
class Expiry:
    """What an elapsed interval looked like when it ended."""

    mode: str
    task_id: Optional[str]
    start: int
    end: int
    next_break: Optional[str] = None  # set only after work


def remaining_from(end_time: int, now_ms: int) -> int:
    # halves round up, so 2.5s left shows as 3
    return max(0, int(math.floor((end_time - now_ms) / 1000.0 + 0.5)))


class TimerEngine:
    """
    Pure countdown engine (no Tkinter, no storage).
    Remaining time is always derived from the absolute end_time, so a caller
    that polls late (hidden window, suspended process) never drifts.
    All methods take the current wall clock in epoch milliseconds.
    """

    def __init__(self, state: Optional[TimerState] = None, settings: Optional[Settings] = None):
        self.state = state or TimerState()
        self.settings = settings or Settings()

    def snapshot(self) -> TimerState:
        return replace(self.state)

    @property
    def is_idle(self) -> bool:
        return not self.state.is_running

    @property
    def is_ticking(self) -> bool:
        return self.state.is_running and not self.state.is_paused

    def duration_sec(self, mode: str) -> int:
        s = self.settings
        if mode == MODE_WORK:
            minutes = s.work_minutes
        elif mode == MODE_SHORT:
            minutes = s.short_break_minutes
        else:
            minutes = s.long_break_minutes
        return max(1, int(minutes)) * 60

    def next_break_mode(self) -> str:
        every = max(1, int(self.settings.long_break_every))
        if (self.state.cycle_count + 1) % every == 0:
            return MODE_LONG
        return MODE_SHORT

    # ----- transitions -----
    def start(self, task_id: str, now_ms: int) -> None:
        self.state.current_task_id = task_id
        self.switch_mode(MODE_WORK, now_ms)

    def switch_mode(self, mode: str, now_ms: int) -> None:
        duration = self.duration_sec(mode)
        st = self.state
        st.mode = mode
        st.is_running = True
        st.is_paused = False
        st.end_time = now_ms + duration * 1000
        st.remaining = duration
        st.last_start = now_ms

    def pause(self, now_ms: int) -> bool:
        if not self.is_ticking:
            return False
        self.recompute(now_ms)
        self.state.is_paused = True
        return True

    def resume(self, now_ms: int) -> bool:
        st = self.state
        if not (st.is_running and st.is_paused):
            return False
        st.end_time = now_ms + st.remaining * 1000
        st.is_paused = False
        return True

    def reset(self) -> None:
        self.state = TimerState()

    def recompute(self, now_ms: int) -> int:
        st = self.state
        if self.is_ticking and st.end_time is not None:
            st.remaining = remaining_from(st.end_time, now_ms)
        return st.remaining

    def expire(self, now_ms: int) -> Optional[Expiry]:
        """
        Finish the current interval if its time is up.
        Returns None (and changes nothing) when there is nothing to expire,
        so repeated polls after the end are harmless.
        """
        if not self.is_ticking or self.recompute(now_ms) > 0:
            return None

        st = self.state
        done = Expiry(
            mode=st.mode,
            task_id=st.current_task_id,
            start=st.last_start if st.last_start is not None else now_ms,
            end=now_ms,
        )

        if st.mode == MODE_WORK:
            done = replace(done, next_break=self.next_break_mode())
            st.is_running = False
            st.is_paused = False
            return done

        # breaks roll straight into work
        if st.mode == MODE_LONG:
            st.cycle_count = 0
        self.switch_mode(MODE_WORK, now_ms)
        return done

    def take_break(self, mode: str, now_ms: int) -> None:
        self.state.cycle_count += 1
        self.switch_mode(mode, now_ms)
