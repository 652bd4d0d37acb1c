"""
Double-buffered photo slideshow.

Two layers hold photo indices; one is shown, the other preloads the next
photo. A transition is armed only once the hidden layer reports ready
(loaded or failed), then a crossfade runs and the layers swap roles.

Overlay drift for burn-in avoidance runs on its own timers:
clock and dots corners toggle every `corner_seconds`, and a shared x/y
offset is redrawn every `drift_seconds`.
"""

import logging
import random
from dataclasses import dataclass

from PIL import Image

from skyframe.models import Photo, SlideshowSettings

LOGGER = logging.getLogger("skyframe")

DEFAULT_CROSSFADE_MS = 1200
DEFAULT_CORNER_SECONDS = 180
DEFAULT_DRIFT_SECONDS = 90
DEFAULT_DRIFT_MAX_PX = 8


@dataclass
class Layer:
    name: str
    photo_index: int | None = None
    image: Image.Image | None = None


@dataclass(frozen=True)
class SlideshowState:
    active_layer: str
    active_index: int | None
    hidden_index: int | None
    hidden_ready: bool
    transitioning: bool
    clock_corner: str
    dots_corner: str
    offset: tuple[int, int]


def _other_corner(corner: str) -> str:
    return "left" if corner == "right" else "right"


class SlideshowEngine:
    def __init__(
        self,
        photos,
        settings: SlideshowSettings,
        scheduler,
        loader=None,
        rng: random.Random | None = None,
        crossfade_ms: int = DEFAULT_CROSSFADE_MS,
        corner_seconds: float = DEFAULT_CORNER_SECONDS,
        drift_seconds: float = DEFAULT_DRIFT_SECONDS,
        drift_max_px: int = DEFAULT_DRIFT_MAX_PX,
        on_change=None,
    ):
        self.photos: tuple[Photo, ...] = tuple(photos or ())
        self.settings = settings
        self.scheduler = scheduler
        self.loader = loader
        self.rng = rng or random.Random()
        self.crossfade_ms = int(crossfade_ms)
        self.corner_seconds = corner_seconds
        self.drift_seconds = drift_seconds
        self.drift_max_px = int(drift_max_px)
        self.on_change = on_change

        self.layers = (Layer("A"), Layer("B"))
        self.active = 0
        self.hidden_ready = False
        self.transitioning = False
        self.swap_guard = False
        self.crossfade_started_at: float | None = None
        self.clock_corner = "right"
        self.dots_corner = "left"
        self.offset = (0, 0)
        self.running = False
        self._generation = 0
        self._arm_timer = None
        self._crossfade_timer = None
        self._preload_timer = None
        self._drift_timers = []

    @property
    def active_layer(self) -> Layer:
        return self.layers[self.active]

    @property
    def hidden_layer(self) -> Layer:
        return self.layers[1 - self.active]

    def active_photo(self) -> Photo | None:
        index = self.active_layer.photo_index
        return self.photos[index] if index is not None else None

    def state(self) -> SlideshowState:
        return SlideshowState(
            active_layer=self.active_layer.name,
            active_index=self.active_layer.photo_index,
            hidden_index=self.hidden_layer.photo_index,
            hidden_ready=self.hidden_ready,
            transitioning=self.transitioning,
            clock_corner=self.clock_corner,
            dots_corner=self.dots_corner,
            offset=self.offset,
        )

    def pick_next(self, exclude: int) -> int:
        count = len(self.photos)
        if count == 0:
            raise ValueError("Cannot pick a photo from an empty list.")
        if not self.settings.shuffle:
            return (exclude + 1) % count
        if count == 1:
            return 0
        if count == 2:
            return 1 - exclude
        while True:
            candidate = self.rng.randrange(count)
            if candidate != exclude:
                return candidate

    def start(self):
        if self.running:
            return
        count = len(self.photos)
        if count == 0:
            LOGGER.warning("Slideshow has no photos; nothing to show.")
            return
        self.running = True
        self._generation += 1
        first = self.rng.randrange(count) if self.settings.shuffle else 0
        self.active = 0
        self.active_layer.photo_index = first
        self.active_layer.image = self._load(first)
        self.hidden_ready = False
        self.transitioning = False
        self.swap_guard = False
        LOGGER.info("Slideshow started with %s photos (shuffle: %s).", count, self.settings.shuffle)

        self._drift_timers = [
            self.scheduler.call_every(self.corner_seconds, self._toggle_clock_corner, name="clock-corner"),
            self.scheduler.call_every(self.corner_seconds, self._toggle_dots_corner, name="dots-corner"),
            self.scheduler.call_every(self.drift_seconds, self._redraw_offset, name="overlay-drift"),
        ]
        if count > 1:
            self.hidden_layer.photo_index = self.pick_next(first)
            self._schedule_preload()
        self._notify()

    def stop(self):
        for timer in (self._arm_timer, self._crossfade_timer, self._preload_timer, *self._drift_timers):
            self.scheduler.cancel(timer)
        self._arm_timer = self._crossfade_timer = self._preload_timer = None
        self._drift_timers = []
        self._generation += 1
        self.running = False
        self.transitioning = False

    def _load(self, index: int) -> Image.Image | None:
        if self.loader is None:
            return None
        photo = self.photos[index]
        try:
            return self.loader(photo)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Photo load failed (%s): %s", photo.src, exc)
            return None

    def _schedule_preload(self):
        generation = self._generation
        self._preload_timer = self.scheduler.call_later(0, self._preload, generation, name="preload")

    def _preload(self, generation: int):
        self._preload_timer = None
        layer = self.hidden_layer
        image = self._load(layer.photo_index)
        self.on_preload_complete(generation, image)

    def on_preload_complete(self, generation: int, image):
        """Mark the hidden layer ready; a load error still counts as ready."""
        if generation != self._generation or not self.running:
            LOGGER.debug("Ignoring stale slideshow preload.")
            return
        self.hidden_layer.image = image
        self.hidden_ready = True
        self._arm()

    def _arm(self):
        if not self.hidden_ready or self.transitioning or self._arm_timer is not None:
            return
        self._arm_timer = self.scheduler.call_later(self.settings.interval / 1000.0, self._begin_crossfade, name="slide-interval")

    def _begin_crossfade(self):
        self._arm_timer = None
        if not self.running:
            return
        self.transitioning = True
        self.swap_guard = False
        self.crossfade_started_at = self.scheduler.now()
        self._crossfade_timer = self.scheduler.call_later(
            self.crossfade_ms / 1000.0, self.on_crossfade_complete, name="crossfade"
        )
        self._notify()

    def on_crossfade_complete(self):
        if self.swap_guard or not self.transitioning:
            LOGGER.debug("Duplicate crossfade completion ignored.")
            return
        self.swap_guard = True
        self._crossfade_timer = None
        self.transitioning = False
        self.crossfade_started_at = None
        self.active = 1 - self.active

        hidden = self.hidden_layer
        hidden.photo_index = self.pick_next(self.active_layer.photo_index)
        hidden.image = None
        self.hidden_ready = False
        self._schedule_preload()
        self._notify()

    def crossfade_progress(self) -> float:
        if not self.transitioning or self.crossfade_started_at is None or self.crossfade_ms <= 0:
            return 0.0
        elapsed = (self.scheduler.now() - self.crossfade_started_at) * 1000.0
        return max(0.0, min(1.0, elapsed / self.crossfade_ms))

    def _toggle_clock_corner(self):
        self.clock_corner = _other_corner(self.clock_corner)
        self._notify()

    def _toggle_dots_corner(self):
        self.dots_corner = _other_corner(self.dots_corner)
        self._notify()

    def _redraw_offset(self):
        limit = self.drift_max_px
        self.offset = (self.rng.randint(-limit, limit), self.rng.randint(-limit, limit))
        self._notify()

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self)
