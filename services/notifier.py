# -*- coding: utf-8 -*-

import logging
import subprocess
import sys
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

LINUX_PLAYERS: List[List[str]] = [
    ["paplay", "/usr/share/sounds/freedesktop/stereo/complete.oga"],
    ["paplay", "/usr/share/sounds/freedesktop/stereo/message.oga"],
    ["aplay", "-q", "/usr/share/sounds/sound-icons/prompt.wav"],
]


def _spawn(cmd: List[str]) -> None:
    proc = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    # reap in the background so finished players do not linger as zombies
    threading.Thread(target=proc.wait, daemon=True).start()


class SoundNotifier:
    """
    One short cue when an interval ends.
    Audio is optional: every failure is ignored and never reaches the timer.
    """

    def __init__(self, fallback: Optional[Callable[[], None]] = None):
        # e.g. Tk's root.bell, used when no system player is available
        self.fallback = fallback

    def play(self) -> None:
        try:
            if self._play_system():
                return
        except Exception as e:
            logger.debug("system sound failed: %s", e)

        if self.fallback is not None:
            try:
                self.fallback()
            except Exception as e:
                logger.debug("fallback sound failed: %s", e)

    def _play_system(self) -> bool:
        if sys.platform.startswith("win"):
            import winsound

            winsound.MessageBeep(winsound.MB_ICONASTERISK)
            return True

        if sys.platform == "darwin":
            _spawn(["afplay", "/System/Library/Sounds/Glass.aiff"])
            return True

        for cmd in LINUX_PLAYERS:
            try:
                _spawn(cmd)
                return True
            except FileNotFoundError:
                continue
        return False
