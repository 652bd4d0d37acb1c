"""Flight/photo mode hysteresis and the flight carousel index."""

import logging

from skyframe.models import DisplayMode, DisplayState, Flight

LOGGER = logging.getLogger("skyframe")

DEFAULT_EMPTY_POLL_THRESHOLD = 3


class DisplayModeController:
    """
    Owns `DisplayState`.

    One non-empty poll switches to flight mode at once; photo mode needs
    `empty_threshold` consecutive empty or failed polls. Timers live with the
    caller, this class only reacts to events.
    """

    def __init__(self, empty_threshold: int = DEFAULT_EMPTY_POLL_THRESHOLD, on_mode_change=None):
        if int(empty_threshold) < 1:
            raise ValueError(f"Empty poll threshold must be >= 1: {empty_threshold!r}")
        self.empty_threshold = int(empty_threshold)
        self.on_mode_change = on_mode_change
        self.state = DisplayState()

    @property
    def mode(self) -> DisplayMode:
        return self.state.mode

    @property
    def flights(self) -> tuple[Flight, ...]:
        return self.state.flights

    def _set_mode(self, mode: DisplayMode):
        previous = self.state.mode
        if previous == mode:
            return
        self.state.mode = mode
        LOGGER.info("Display mode: %s -> %s", previous.value, mode.value)
        if self.on_mode_change is not None:
            self.on_mode_change(previous, mode)

    def on_poll_success(self, flights) -> DisplayMode:
        flights = tuple(flights or ())
        if not flights:
            return self._record_miss()
        self.state.empty_streak = 0
        self.state.flights = flights
        self.state.current_flight_index = min(self.state.current_flight_index, len(flights) - 1)
        self._set_mode(DisplayMode.FLIGHT)
        return self.state.mode

    def on_poll_error(self) -> DisplayMode:
        return self._record_miss()

    def _record_miss(self) -> DisplayMode:
        self.state.empty_streak += 1
        if self.state.empty_streak >= self.empty_threshold:
            self.state.flights = ()
            self.state.current_flight_index = 0
            self._set_mode(DisplayMode.PHOTOS)
        else:
            LOGGER.debug(
                "Empty poll %s/%s; keeping last flights on screen.",
                self.state.empty_streak,
                self.empty_threshold,
            )
        return self.state.mode

    def carousel_tick(self) -> bool:
        """Advance to the next flight; returns True when the index moved."""
        count = len(self.state.flights)
        if self.state.mode != DisplayMode.FLIGHT or count < 2:
            return False
        self.state.current_flight_index = (self.state.current_flight_index + 1) % count
        return True

    def select_flight(self, index: int) -> bool:
        if not 0 <= index < len(self.state.flights):
            LOGGER.debug("Ignoring flight selection %s (have %s).", index, len(self.state.flights))
            return False
        self.state.current_flight_index = index
        return True

    def current_flight(self) -> Flight | None:
        if self.state.mode != DisplayMode.FLIGHT or not self.state.flights:
            return None
        return self.state.flights[self.state.current_flight_index]
