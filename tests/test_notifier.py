import subprocess

import pytest

import services.notifier as notifier_mod
from services.notifier import SoundNotifier


class FakeProc:
    def __init__(self):
        self.waited = False

    def wait(self):
        self.waited = True


class InlineThread:
    """Runs the target on start() so the reaper is observable."""

    def __init__(self, target, daemon=None):
        self.target = target

    def start(self):
        self.target()


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(notifier_mod.sys, "platform", "linux")
    monkeypatch.setattr(notifier_mod.threading, "Thread", InlineThread)


def test_linux_uses_first_available_player(monkeypatch, linux):
    calls = []
    procs = []

    def fake_popen(cmd, **kwargs):
        calls.append(cmd[0])
        if cmd[0] == "paplay":
            raise FileNotFoundError(cmd[0])
        procs.append(FakeProc())
        return procs[-1]

    monkeypatch.setattr(subprocess, "Popen", fake_popen)

    SoundNotifier().play()
    assert calls == ["paplay", "paplay", "aplay"]


def test_player_process_is_reaped(monkeypatch, linux):
    proc = FakeProc()
    monkeypatch.setattr(subprocess, "Popen", lambda cmd, **kwargs: proc)

    SoundNotifier().play()
    assert proc.waited


def test_falls_back_when_no_player(monkeypatch, linux):
    rang = []

    def no_player(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "Popen", no_player)

    SoundNotifier(fallback=lambda: rang.append(True)).play()
    assert rang == [True]


def test_failures_are_swallowed(monkeypatch, linux):
    def broken(cmd, **kwargs):
        raise PermissionError("denied")

    def bad_bell():
        raise RuntimeError("no display")

    monkeypatch.setattr(subprocess, "Popen", broken)

    SoundNotifier(fallback=bad_bell).play()
