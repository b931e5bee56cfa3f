import pytest

from config_loader import TimerConfig
from countdown_engine import CountdownEngine, Phase


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


def make_engine(clock, start=3, limit=2):
    engine = CountdownEngine(TimerConfig(start_seconds=start, limit_seconds=limit), clock=clock)
    events = []
    engine.subscribe_zero_crossed(lambda: events.append("zero"))
    engine.subscribe_limit_reached(lambda: events.append("limit"))
    return engine, events


def run_for(engine, clock, ms, step=50):
    for _ in range(ms // step):
        clock.advance(step)
        engine.tick()


def test_new_engine_is_idle_with_start_duration(clock):
    engine, _ = make_engine(clock, start=10, limit=5)

    assert engine.snapshot() == (10_000, Phase.IDLE)
    assert engine.limit_ms == -5_000
    assert engine.zero_sound_fired is False


def test_overtime_runs_to_limit_and_ends(clock):
    engine, events = make_engine(clock, start=3, limit=2)

    engine.start_or_pause()
    run_for(engine, clock, 3_000)

    assert engine.current_ms == 0
    assert events == ["zero"]

    clock.advance(1)
    engine.tick()
    assert engine.current_ms == -1

    run_for(engine, clock, 2_000)

    assert events == ["zero", "limit"]
    assert engine.snapshot() == (-2_000, Phase.ENDED)


def test_pause_freezes_and_resume_reanchors(clock):
    engine, events = make_engine(clock, start=10, limit=5)

    engine.start_or_pause()
    run_for(engine, clock, 4_000)
    assert engine.start_or_pause() is Phase.PAUSED
    assert engine.current_ms == 6_000

    clock.advance(10_000)
    engine.tick()
    assert engine.current_ms == 6_000

    engine.start_or_pause()
    run_for(engine, clock, 5_950)
    assert events == []

    clock.advance(50)
    engine.tick()
    assert engine.current_ms == 0
    assert events == ["zero"]


def test_late_ticks_do_not_drift(clock):
    engine, _ = make_engine(clock, start=60, limit=0)

    engine.start()
    for step in (50, 13, 870, 2, 4_065):
        clock.advance(step)
        engine.tick()

    assert engine.current_ms == 60_000 - 5_000


def test_zero_limit_fires_both_edges_in_one_tick(clock):
    engine, events = make_engine(clock, start=0, limit=0)
    seen = []
    engine.subscribe_display(lambda snap: seen.append(snap))

    engine.start_or_pause()
    clock.advance(50)
    engine.tick()

    assert events == ["zero", "limit"]
    assert engine.snapshot() == (0, Phase.ENDED)
    assert [snap.current_ms for snap in seen] == [-50, 0]


def test_ended_is_terminal_until_reset(clock):
    engine, events = make_engine(clock, start=1, limit=1)
    engine.start()
    run_for(engine, clock, 2_000)
    assert engine.phase is Phase.ENDED

    clock.advance(5_000)
    engine.tick()
    assert engine.start_or_pause() is Phase.ENDED
    assert engine.current_ms == -1_000
    assert events == ["zero", "limit"]

    engine.reset()
    assert engine.snapshot() == (1_000, Phase.IDLE)
    assert engine.zero_sound_fired is False


def test_zero_edge_fires_once_across_pause_and_resume(clock):
    engine, events = make_engine(clock, start=1, limit=10)

    engine.start()
    run_for(engine, clock, 1_500)
    engine.pause()
    engine.start()
    run_for(engine, clock, 1_000)

    assert events == ["zero"]
    assert engine.phase is Phase.RUNNING


def test_reset_restores_values_from_any_phase(clock):
    engine, _ = make_engine(clock, start=5, limit=3)

    engine.start()
    run_for(engine, clock, 700)
    engine.reset()

    assert engine.snapshot() == (5_000, Phase.IDLE)
    assert engine.limit_ms == -3_000
    assert engine.target_end_ms is None

    # a tick left over from before the reset must not mutate state
    clock.advance(1_000)
    engine.tick()
    assert engine.current_ms == 5_000


def test_reset_notifies_display(clock):
    engine, _ = make_engine(clock)
    seen = []
    engine.subscribe_display(seen.append)

    engine.reset()

    assert seen == [(3_000, Phase.IDLE)]


def test_start_and_pause_report_invalid_transitions(clock):
    engine, _ = make_engine(clock)

    assert engine.pause() is False
    assert engine.start() is True
    assert engine.start() is False
    assert engine.pause() is True
    assert engine.is_running is False


def test_clock_jump_is_reflected_in_remaining_time(clock):
    engine, _ = make_engine(clock, start=30, limit=30)

    engine.start()
    clock.advance(-2_000)
    engine.tick()

    assert engine.current_ms == 32_000
