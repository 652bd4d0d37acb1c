import logging
import random

from skyframe.display.mode import DisplayModeController
from skyframe.display.slideshow import SlideshowEngine
from skyframe.flight.providers.base import ProviderError
from skyframe.models import DisplayMode, Flight
from skyframe.render.flight_view import build_and_send_flight_card
from skyframe.render.holding_view import build_and_send_holding_screen
from skyframe.render.photo_view import build_and_send_crossfade, build_and_send_photo_frame
from skyframe.scheduler import Scheduler

LOGGER = logging.getLogger("skyframe")


class SkyframeController:
    """
    Drives the display from one scheduler.

    Timers: the adaptive poll, the flight carousel, and (while in photos
    mode) the slideshow's own countdown and drift timers.
    """

    def __init__(
        self,
        settings,
        pixoo_service=None,
        flight_service=None,
        photos=None,
        slideshow_settings=None,
        photo_loader=None,
        scheduler=None,
        sleep_fn=None,
        clock_fn=None,
        rng=None,
    ):
        self.settings = settings

        if pixoo_service is None:
            from skyframe.services.pixoo_client import PixooClient
            pixoo_service = PixooClient(settings)
        if flight_service is None:
            from skyframe.services.flight_service import FlightService
            flight_service = FlightService(settings)
        if photos is None:
            from skyframe.services.photo_service import load_photo_manifest
            photos, manifest_settings = load_photo_manifest(settings.photo_manifest_path, settings.slideshow_defaults())
            slideshow_settings = slideshow_settings or manifest_settings
        slideshow_settings = slideshow_settings or settings.slideshow_defaults()
        if photo_loader is None:
            from skyframe.services.photo_service import PhotoLoader
            photo_loader = PhotoLoader(fit_mode=slideshow_settings.fit_mode, timeout_seconds=settings.http_timeout_seconds)

        self.pixoo_service = pixoo_service
        self.flight_service = flight_service
        self.scheduler = scheduler or Scheduler(clock_fn=clock_fn, sleep_fn=sleep_fn)
        self.mode = DisplayModeController(settings.empty_poll_threshold, on_mode_change=self._on_mode_change)
        self.slideshow = SlideshowEngine(
            photos,
            slideshow_settings,
            self.scheduler,
            loader=photo_loader,
            rng=rng or random.Random(),
            crossfade_ms=settings.crossfade_ms,
            corner_seconds=settings.clock_corner_seconds,
            drift_seconds=settings.drift_seconds,
            drift_max_px=settings.drift_max_px,
            on_change=self._on_slideshow_change,
        )
        self.pizzoo = None
        self.poll_interval = settings.poll_idle_seconds
        self.poll_timer = None
        self.carousel_timer = None
        self.current_render_signature = None
        self.last_snapshot = None
        self._issued_seq = 0
        self._applied_seq = 0

    @staticmethod
    def flight_render_signature(flight: Flight, index: int, count: int) -> tuple:
        return (
            flight.id,
            flight.position.altitude,
            flight.position.speed,
            flight.position.heading,
            flight.status.value,
            index,
            count,
        )

    def reset_tracking(self):
        self.current_render_signature = None

    def reconnect(self, fail_fast: bool = False):
        self.pizzoo = self.pixoo_service.connect_with_retry(fail_fast=fail_fast)
        self.reset_tracking()

    def start(self):
        self.poll_timer = self.scheduler.call_later(0, self.poll, name="poll")
        self.carousel_timer = self.scheduler.call_every(self.settings.carousel_seconds, self.carousel_tick, name="carousel")
        self.render()

    def stop(self):
        self.scheduler.cancel(self.poll_timer)
        self.scheduler.cancel(self.carousel_timer)
        self.poll_timer = self.carousel_timer = None
        self.slideshow.stop()
        self.scheduler.stop()

    def run(self):
        self.reconnect(fail_fast=True)
        self.start()
        try:
            self.scheduler.run_forever()
        finally:
            self.stop()

    def _schedule_next_poll(self, delay: float | None = None):
        delay = self.poll_interval if delay is None else delay
        self.poll_timer = self.scheduler.call_later(delay, self.poll, name="poll")

    def begin_poll(self) -> int:
        self._issued_seq += 1
        return self._issued_seq

    def try_reconnect(self) -> bool:
        """Single reconnect attempt from inside the loop; redraws the current view on success."""
        self.pizzoo = self.pixoo_service.connect_once()
        self.reset_tracking()
        if self.pizzoo is None:
            return False
        self.render()
        return True

    def poll(self):
        self.poll_timer = None
        if not self.pixoo_service.is_reachable():
            LOGGER.warning("Pixoo offline; checking again in %ss.", self.settings.pixoo_reconnect_seconds)
            self.pizzoo = None
            self._schedule_next_poll(self.settings.pixoo_reconnect_seconds)
            return
        if self.pizzoo is None and not self.try_reconnect():
            self._schedule_next_poll(self.settings.pixoo_reconnect_seconds)
            return

        seq = self.begin_poll()
        try:
            snapshot = self.flight_service.fetch()
        except ProviderError as exc:
            LOGGER.warning("Flight poll failed (%s); next poll in %ss.", exc, self.poll_interval)
            self.apply_poll_result(seq, error=exc)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Unexpected error during flight poll (%r); counted as a failed poll.", exc)
            self.apply_poll_result(seq, error=exc)
        else:
            self.apply_poll_result(seq, snapshot=snapshot)
        finally:
            self._schedule_next_poll()

    def apply_poll_result(self, seq: int, snapshot=None, error=None) -> bool:
        """Apply one poll outcome; results older than the last applied one are dropped."""
        if seq <= self._applied_seq:
            LOGGER.debug("Discarding stale poll result #%s (last applied #%s).", seq, self._applied_seq)
            return False
        self._applied_seq = seq

        if error is not None:
            self.mode.on_poll_error()
        else:
            self.last_snapshot = snapshot
            flights = snapshot.flights if snapshot is not None else ()
            self.mode.on_poll_success(flights)
            self.poll_interval = self.settings.poll_active_seconds if flights else self.settings.poll_idle_seconds
            LOGGER.info("Poll #%s: %s flights; next poll in %ss.", seq, len(flights), self.poll_interval)

        if self.mode.mode == DisplayMode.FLIGHT:
            self.render()
        return True

    def carousel_tick(self):
        if self.mode.carousel_tick():
            self.render()

    def select_flight(self, index: int) -> bool:
        if not self.mode.select_flight(index):
            return False
        self.render()
        return True

    def _on_mode_change(self, previous: DisplayMode, current: DisplayMode):
        self.reset_tracking()
        if current == DisplayMode.PHOTOS:
            self.slideshow.start()
            if not self.slideshow.running:
                self.render()
        else:
            self.slideshow.stop()

    def _on_slideshow_change(self, engine):
        if self.mode.mode != DisplayMode.PHOTOS:
            return
        if engine.transitioning:
            self._send(build_and_send_crossfade, engine, view="crossfade")
        else:
            self._send(build_and_send_photo_frame, engine, view="photo")

    def render(self):
        if self.pizzoo is None:
            return
        if self.mode.mode == DisplayMode.PHOTOS:
            if not self.slideshow.photos:
                self._send(build_and_send_holding_screen, "NO FLIGHTS", view="holding")
            else:
                self._send(build_and_send_photo_frame, self.slideshow, view="photo")
            return

        flight = self.mode.current_flight()
        if flight is None:
            if self.current_render_signature != "scanning":
                if self._send(build_and_send_holding_screen, "SCANNING", view="holding"):
                    self.current_render_signature = "scanning"
            return

        index = self.mode.state.current_flight_index
        count = len(self.mode.flights)
        signature = self.flight_render_signature(flight, index, count)
        if signature == self.current_render_signature:
            LOGGER.debug("Still showing %s; telemetry unchanged.", flight.flight_number or flight.id)
            return
        if self._send(build_and_send_flight_card, flight, index, count, view="flight"):
            self.current_render_signature = signature

    def _send(self, builder, *args, view: str) -> bool:
        if self.pizzoo is None:
            return False
        try:
            builder(self.pizzoo, self.settings, *args)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Lost Pixoo connection while rendering %s view (%s); reconnecting on next poll.", view, exc)
            self.pizzoo = None
            self.reset_tracking()
            return False
        return True
