# -*- coding: utf-8 -*-

from typing import Any, Dict

from domain.models import Settings
from storage.repos import SettingsRepo

NUMERIC_FIELDS = (
    "work_minutes",
    "short_break_minutes",
    "long_break_minutes",
    "long_break_every",
)


def _as_count(value, fallback: int) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return fallback


def clamp_settings(current: Settings, updates: Dict[str, Any]) -> Settings:
    """Merge updates into current; numbers are clamped to >= 1, junk keeps the old value."""
    defaults = Settings()
    out = Settings()
    for key in NUMERIC_FIELDS:
        old = _as_count(getattr(current, key), getattr(defaults, key))
        if key in updates:
            setattr(out, key, _as_count(updates[key], old))
        else:
            setattr(out, key, old)
    sound = updates.get("sound", current.sound)
    out.sound = bool(sound)
    return out


class SettingsService:
    def __init__(self, repo: SettingsRepo):
        self.repo = repo

    def get(self) -> Settings:
        # a hand-edited db must not yield zero-length intervals
        return clamp_settings(self.repo.get(), {})

    def save(self, **updates) -> Settings:
        merged = clamp_settings(self.get(), updates)
        self.repo.save(merged)
        return merged
