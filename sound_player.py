import logging
import os
from pathlib import Path
from typing import Callable, Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame
from pygame import mixer

logger = logging.getLogger(__name__)


class SoundPlayer:
    """Streams one clip at a time through ``pygame.mixer.music``.

    ``play`` pre-empts whatever is sounding. Empty or missing paths, and
    clips the mixer cannot open, fall back to ``beep``. Streaming keeps a
    long clip from being decoded up front on the Tk event loop.
    """

    SAMPLE_RATE = 44100
    VOLUME = 1.0

    def __init__(self, beep: Callable[[], None]) -> None:
        self._beep = beep
        self._mixer_initialized = False
        self._loaded: Optional[Path] = None

    def play(self, path: str) -> None:
        self.stop()
        resolved = self._resolve(path)
        if resolved is None:
            logger.info("Sound %r unavailable; beeping instead", path)
            self._beep()
            return
        if not self._play_sound_file(resolved):
            self._beep()

    def stop(self) -> None:
        if self._loaded is None:
            return
        try:
            if mixer.get_init():
                mixer.music.stop()
                mixer.music.unload()
        except pygame.error as exc:
            logger.warning("Unable to stop playback: %s", exc)
        finally:
            self._loaded = None

    def _resolve(self, path: str) -> Optional[Path]:
        if not path:
            return None
        candidate = Path(path)
        if not candidate.is_file():
            return None
        return candidate.absolute()

    def _play_sound_file(self, path: Path) -> bool:
        if not self._ensure_mixer():
            return False
        try:
            mixer.music.load(str(path))
            self._loaded = path
            mixer.music.set_volume(self.VOLUME)
            mixer.music.play(loops=0)
        except pygame.error as exc:
            logger.warning("Unable to play sound file %s: %s", path, exc)
            self._loaded = None
            return False
        return True

    def _ensure_mixer(self) -> bool:
        if not self._mixer_initialized or not mixer.get_init():
            try:
                mixer.init(frequency=self.SAMPLE_RATE, size=-16, channels=2)
            except pygame.error as exc:
                logger.warning("Unable to initialise audio playback: %s", exc)
                self._mixer_initialized = False
                return False
            self._mixer_initialized = True
        return mixer.get_init() is not None

    def close(self) -> None:
        self.stop()
        if self._mixer_initialized and mixer.get_init():
            mixer.quit()
        self._mixer_initialized = False
