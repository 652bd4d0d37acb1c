import logging
from dataclasses import replace

from skyframe.flight.airports import AirportDirectory
from skyframe.flight.geometry import bounds_from_rectangle, haversine_km
from skyframe.flight.logos import LogoManager
from skyframe.flight.normalize import normalize_batch
from skyframe.flight.provider import create_provider
from skyframe.flight.providers.base import ProviderError
from skyframe.models import FeedSnapshot, Flight

LOGGER = logging.getLogger("skyframe")


class FlightService:
    """Query the configured area, normalize and enrich the result."""

    def __init__(self, settings, provider=None, airports: AirportDirectory | None = None, logos: LogoManager | None = None):
        self.settings = settings
        self.provider = provider or create_provider(settings)
        self.airports = airports or AirportDirectory()
        self.logos = logos if logos is not None else LogoManager(settings.logo_dir, bg_color=settings.logo_bg_color)
        self._last_api_error: str | None = None

    def get_last_api_error(self) -> str | None:
        return self._last_api_error

    def _query(self):
        if self.settings.area_mode == "rectangle":
            bounds = bounds_from_rectangle(self.settings.area_northwest, self.settings.area_southeast)
            return self.provider.bounds_query(bounds.north, bounds.south, bounds.west, bounds.east)
        return self.provider.area_query(self.settings.latitude, self.settings.longitude, self.settings.radius_km)

    def fetch(self) -> FeedSnapshot:
        """Return the current snapshot; raises ProviderError on feed failure."""
        try:
            batch = self._query()
        except ProviderError as exc:
            self._last_api_error = str(exc)
            raise
        self._last_api_error = None

        snapshot = normalize_batch(batch)
        center = snapshot.center or (self.settings.latitude, self.settings.longitude)
        flights = sorted(
            (self._enrich(flight) for flight in snapshot.flights),
            key=lambda flight: haversine_km(
                center[0], center[1], flight.position.latitude, flight.position.longitude
            ),
        )
        LOGGER.debug("Fetched %s flights from %s.", len(flights), snapshot.source)
        return replace(snapshot, flights=tuple(flights))

    def _enrich(self, flight: Flight) -> Flight:
        logo = None
        if self.logos is not None:
            logo = self.logos.resolve_or_fetch_logo(self.provider, flight.airline.iata, flight.airline.icao)
        return replace(
            flight,
            airline=replace(flight.airline, logo=logo) if logo else flight.airline,
            departure=self.airports.enrich(flight.departure),
            arrival=self.airports.enrich(flight.arrival),
        )
