import random

import pytest
from PIL import Image

from skyframe.display.slideshow import SlideshowEngine
from skyframe.models import Photo, SlideshowSettings
from skyframe.scheduler import Scheduler, VirtualClock


class FakeLoader:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.loaded = []

    def __call__(self, photo):
        self.loaded.append(photo.id)
        if photo.id in self.failing:
            raise OSError("broken image")
        return Image.new("RGB", (64, 64), (len(self.loaded) * 10 % 255, 0, 0))


def _photos(count):
    return [Photo(id=f"p{i}", src=f"/photos/p{i}.jpg") for i in range(count)]


def _engine(count, shuffle=False, interval=10000, loader=None, seed=7, **kwargs):
    clock = VirtualClock()
    scheduler = Scheduler(clock_fn=clock, sleep_fn=clock.sleep)
    engine = SlideshowEngine(
        _photos(count),
        SlideshowSettings(interval=interval, shuffle=shuffle),
        scheduler,
        loader=loader or FakeLoader(),
        rng=random.Random(seed),
        **kwargs,
    )
    return engine, scheduler


def test_pick_next_sequential_wraps():
    engine, _ = _engine(3)
    assert [engine.pick_next(i) for i in range(3)] == [1, 2, 0]


def test_pick_next_shuffle_with_two_photos_alternates():
    engine, _ = _engine(2, shuffle=True)
    index = 0
    seen = []
    for _ in range(6):
        index = engine.pick_next(index)
        seen.append(index)
    assert seen == [1, 0, 1, 0, 1, 0]


def test_pick_next_shuffle_never_repeats_immediately():
    engine, _ = _engine(5, shuffle=True)
    for trial in range(500):
        exclude = trial % 5
        assert engine.pick_next(exclude) != exclude


def test_pick_next_requires_photos():
    engine, _ = _engine(0)
    with pytest.raises(ValueError):
        engine.pick_next(0)


def test_zero_photos_never_starts():
    engine, scheduler = _engine(0)
    engine.start()
    assert engine.running is False
    assert scheduler.pending() == 0


def test_single_photo_never_arms_a_transition():
    loader = FakeLoader()
    engine, scheduler = _engine(1, loader=loader)
    engine.start()
    scheduler.advance(3600)
    state = engine.state()
    assert state.active_index == 0
    assert state.hidden_index is None
    assert state.hidden_ready is False
    assert state.transitioning is False
    assert loader.loaded == ["p0"]


def test_full_cycle_preload_arm_crossfade_swap():
    engine, scheduler = _engine(3, interval=10000, crossfade_ms=1000)
    engine.start()
    assert engine.state().active_layer == "A"
    assert engine.state().hidden_index == 1

    scheduler.advance(0)
    assert engine.hidden_ready is True
    assert engine.transitioning is False

    scheduler.advance(10)
    assert engine.transitioning is True
    scheduler.advance(0.5)
    assert engine.crossfade_progress() == pytest.approx(0.5)

    scheduler.advance(0.5)
    state = engine.state()
    assert state.transitioning is False
    assert state.active_layer == "B"
    assert state.active_index == 1
    assert state.hidden_index == 2


def test_photos_rotate_in_order_over_time():
    engine, scheduler = _engine(3, interval=1000, crossfade_ms=0)
    engine.start()
    shown = [engine.active_photo().id]
    for _ in range(4):
        scheduler.advance(1)
        shown.append(engine.active_photo().id)
    assert shown == ["p0", "p1", "p2", "p0", "p1"]


def test_broken_photo_still_counts_as_ready():
    loader = FakeLoader(failing={"p1"})
    engine, scheduler = _engine(3, loader=loader)
    engine.start()
    scheduler.advance(0)
    assert engine.hidden_ready is True
    assert engine.hidden_layer.image is None
    scheduler.advance(12)
    assert engine.active_photo().id == "p1"


def test_duplicate_crossfade_completion_is_coalesced():
    engine, scheduler = _engine(4)
    engine.start()
    scheduler.advance(10)
    assert engine.transitioning is True

    engine.on_crossfade_complete()
    engine.on_crossfade_complete()
    assert engine.state().active_index == 1
    assert engine.state().active_layer == "B"

    # the scheduled completion arrives late and is ignored as well
    scheduler.advance(2)
    assert engine.state().active_index == 1


def test_swap_guard_resets_when_next_crossfade_begins():
    engine, scheduler = _engine(3, interval=1000, crossfade_ms=500)
    engine.start()
    scheduler.advance(1.5)
    assert engine.swap_guard is True
    scheduler.advance(1)
    assert engine.transitioning is True
    assert engine.swap_guard is False


def test_stop_cancels_timers_and_ignores_late_preload():
    engine, scheduler = _engine(3)
    engine.start()
    generation = engine._generation
    engine.stop()
    assert scheduler.pending() == 0

    engine.on_preload_complete(generation, Image.new("RGB", (64, 64)))
    assert engine.hidden_ready is False
    scheduler.advance(600)
    assert engine.state().active_index == 0


def test_corners_toggle_and_offset_drifts_independently():
    engine, scheduler = _engine(1, corner_seconds=180, drift_seconds=90, drift_max_px=8)
    engine.start()
    assert (engine.clock_corner, engine.dots_corner) == ("right", "left")

    scheduler.advance(90)
    offset = engine.offset
    assert all(-8 <= value <= 8 for value in offset)
    assert engine.clock_corner == "right"

    scheduler.advance(90)
    assert (engine.clock_corner, engine.dots_corner) == ("left", "right")
    scheduler.advance(180)
    assert (engine.clock_corner, engine.dots_corner) == ("right", "left")


def test_on_change_fires_for_crossfade_and_swap():
    events = []
    engine, scheduler = _engine(2, on_change=lambda e: events.append(e.transitioning))
    engine.start()
    scheduler.advance(12)
    assert events == [False, True, False]


def test_shuffle_start_index_comes_from_rng():
    engine, _ = _engine(10, shuffle=True, seed=3)
    expected = random.Random(3).randrange(10)
    engine.start()
    assert engine.state().active_index == expected
