import logging
from datetime import datetime
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from config_loader import TimerConfig

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    return int(datetime.now().timestamp() * 1000)


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    ENDED = "ended"


class Snapshot(NamedTuple):
    current_ms: int
    phase: Phase


DisplaySubscriber = Callable[[Snapshot], None]
EdgeSubscriber = Callable[[], None]


class CountdownEngine:
    """Countdown that runs past zero into overtime and stops at a floor.

    Remaining time is always ``target_end_ms - clock()`` while running, so
    late or skipped ticks never accumulate drift. The host calls
    :meth:`tick` on its own cadence while :attr:`is_running` is true.
    """

    def __init__(self, config: TimerConfig, clock: Callable[[], int] = epoch_ms) -> None:
        self._config = config
        self._clock = clock

        self.phase = Phase.IDLE
        self.current_ms = 0
        self.limit_ms = 0
        self.target_end_ms: Optional[int] = None
        self.zero_sound_fired = False

        self._display_subscribers: List[DisplaySubscriber] = []
        self._zero_subscribers: List[EdgeSubscriber] = []
        self._limit_subscribers: List[EdgeSubscriber] = []

        self.reset()

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self.phase is Phase.RUNNING

    def subscribe_display(self, callback: DisplaySubscriber) -> None:
        self._display_subscribers.append(callback)

    def subscribe_zero_crossed(self, callback: EdgeSubscriber) -> None:
        self._zero_subscribers.append(callback)

    def subscribe_limit_reached(self, callback: EdgeSubscriber) -> None:
        self._limit_subscribers.append(callback)

    def snapshot(self) -> Snapshot:
        return Snapshot(self.current_ms, self.phase)

    def reset(self) -> None:
        self.zero_sound_fired = False
        self.target_end_ms = None
        self.current_ms = 1000 * self._config.start_seconds
        self.limit_ms = -1000 * self._config.limit_seconds
        self._set_phase(Phase.IDLE)
        self._publish_display()

    def start(self) -> bool:
        if self.phase not in (Phase.IDLE, Phase.PAUSED):
            return False
        self.target_end_ms = self._clock() + self.current_ms
        self._set_phase(Phase.RUNNING)
        return True

    def pause(self) -> bool:
        if self.phase is not Phase.RUNNING:
            return False
        # current_ms keeps the value of the last tick
        self.target_end_ms = None
        self._set_phase(Phase.PAUSED)
        return True

    def start_or_pause(self) -> Phase:
        if self.phase is Phase.RUNNING:
            self.pause()
        elif self.phase is not Phase.ENDED:
            self.start()
        return self.phase

    def tick(self) -> Snapshot:
        if self.phase is not Phase.RUNNING or self.target_end_ms is None:
            return self.snapshot()

        self.current_ms = self.target_end_ms - self._clock()
        self._publish_display()

        if self.current_ms <= 0 and not self.zero_sound_fired:
            self.zero_sound_fired = True
            for callback in list(self._zero_subscribers):
                callback()

        if self.current_ms <= self.limit_ms:
            self.current_ms = self.limit_ms
            self.target_end_ms = None
            self._set_phase(Phase.ENDED)
            self._publish_display()
            for callback in list(self._limit_subscribers):
                callback()

        return self.snapshot()

    def _set_phase(self, phase: Phase) -> None:
        if phase is not self.phase:
            logger.debug("Timer %s -> %s at %d ms", self.phase.value, phase.value, self.current_ms)
        self.phase = phase

    def _publish_display(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._display_subscribers):
            callback(snapshot)
