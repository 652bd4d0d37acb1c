"""FlightRadar24 public feed adapter (no authentication)."""

import logging
from math import isfinite
from time import time

from skyframe.flight.geometry import approximate_radius_km, bounds_from_circle, sanitize_bounds
from skyframe.flight.providers.base import FlightProvider, ProviderError, extract_airline_code
from skyframe.models import FeedUnits, RawFlight, RawFlightBatch, RectangleBounds

LOGGER = logging.getLogger("skyframe")

FEED_URL = "https://data-cloud.flightradar24.com/zones/fcgi/feed.js"
DETAILS_URL = "https://data-live.flightradar24.com/clickhandler/"
FEED_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:106.0) Gecko/20100101 Firefox/106.0",
    "cache-control": "no-store, no-cache, must-revalidate, post-check=0, pre-check=0",
    "accept": "application/json",
}
FEED_FLAGS = {
    "faa": 1,
    "satellite": 1,
    "mlat": 1,
    "flarm": 1,
    "adsb": 1,
    "gnd": 0,
    "air": 1,
    "vehicles": 0,
    "estimated": 0,
    "maxage": 14400,
    "gliders": 0,
    "stats": 0,
    "ems": 1,
}
MIN_RECORD_FIELDS = 13
DETAIL_SECTIONS = ("identification", "aircraft", "airline", "airport", "status", "time", "trail")


def _load_logo_client():
    try:
        # Expected package for this project: FlightRadarAPI (module: FlightRadar24)
        from FlightRadar24.api import FlightRadar24API
    except ModuleNotFoundError as exc:
        if exc.name == "FlightRadar24":
            raise ImportError(
                "Missing compatible FlightRadar24 client. Install `FlightRadarAPI` and remove `flightradar24` if present: "
                "`pip uninstall -y flightradar24 && pip install FlightRadarAPI`."
            ) from exc
        if exc.name == "bs4":
            raise ImportError(
                "Missing dependency `beautifulsoup4` required by `FlightRadarAPI`. "
                "Install it with: `pip install beautifulsoup4`."
            ) from exc
        raise
    return FlightRadar24API()


def _field(values: list, index: int):
    return values[index] if index < len(values) else None


def _text(value) -> str:
    return str(value).strip() if value not in (None, "") else ""


def _number(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if isfinite(number) else None


def parse_feed_record(flight_id: str, values) -> RawFlight | None:
    """
    Parse one feed entry.

    Layout: [0] icao24, [1] lat, [2] lon, [3] heading, [4] altitude ft,
    [5] speed kt, [6] squawk, [7] radar, [8] aircraft type, [9] registration,
    [10] timestamp, [11] origin, [12] destination, [13] flight number,
    [14] on-ground, [15] vertical rate fpm, [16] callsign.
    """
    if not isinstance(values, list) or len(values) < MIN_RECORD_FIELDS:
        return None
    latitude = _number(values[1])
    longitude = _number(values[2])
    if latitude is None or longitude is None:
        return None

    flight_number = _text(_field(values, 13))
    callsign = _text(_field(values, 16)) or flight_number
    return RawFlight(
        id=str(flight_id),
        icao24=_text(values[0]),
        callsign=callsign,
        flight_number=flight_number,
        airline=extract_airline_code(callsign or flight_number),
        aircraft_type=_text(values[8]),
        registration=_text(values[9]),
        origin=_text(values[11]),
        destination=_text(values[12]),
        latitude=latitude,
        longitude=longitude,
        altitude=_number(values[4]),
        heading=_number(values[3]),
        velocity=_number(values[5]),
        vertical_rate=_number(_field(values, 15)),
        on_ground=_field(values, 14) in (1, True),
        timestamp=_field(values, 10),
    )


class FlightRadarProvider(FlightProvider):
    """Scrapes the FlightRadar24 bounds feed; one request per query."""

    name = "flightradar24"

    def __init__(self, session=None, timeout_seconds: float = 10.0, logo_client=None, now_fn=None):
        super().__init__(session=session, timeout_seconds=timeout_seconds)
        self._logo_client = logo_client
        self.now_fn = now_fn or time

    def area_query(self, latitude: float, longitude: float, radius_km: float) -> RawFlightBatch:
        lat, lon, radius = self._check_area(latitude, longitude, radius_km)
        bounds = bounds_from_circle(lat, lon, radius)
        batch = self.bounds_query(bounds.north, bounds.south, bounds.west, bounds.east)
        batch.center = (lat, lon)
        batch.radius_km = radius
        batch.location = f"FlightRadar24 ({lat:.4f}, {lon:.4f})"
        return batch

    def bounds_query(self, north: float, south: float, west: float, east: float) -> RawFlightBatch:
        bounds = sanitize_bounds(RectangleBounds(north=north, south=south, east=east, west=west))
        bounds_param = f"{bounds.north},{bounds.south},{bounds.west},{bounds.east}"
        LOGGER.info("FlightRadar24: fetching flights for bounds %s.", bounds_param)
        payload = self._get_json(FEED_URL, params={"bounds": bounds_param, **FEED_FLAGS}, headers=FEED_HEADERS, what="feed")
        if not isinstance(payload, dict):
            raise ProviderError(f"{self.name} feed returned unexpected payload type {type(payload).__name__}")

        records = []
        dropped = 0
        for key, value in payload.items():
            # Metadata keys (full_count, version, stats) are not lists.
            if not isinstance(value, list):
                continue
            record = parse_feed_record(key, value)
            if record is None:
                dropped += 1
                continue
            records.append(record)
        if dropped:
            LOGGER.debug("FlightRadar24: dropped %s malformed records.", dropped)

        return RawFlightBatch(
            source=self.name,
            units=FeedUnits.AVIATION,
            records=records,
            timestamp=int(self.now_fn() * 1000),
            bounds=bounds,
            center=bounds.center,
            radius_km=approximate_radius_km(bounds),
            location=(
                f"FlightRadar24 Rectangle ({bounds.north:.4f}, {bounds.west:.4f}) "
                f"to ({bounds.south:.4f}, {bounds.east:.4f})"
            ),
        )

    def flight_details(self, flight_id: str) -> dict:
        if not str(flight_id or "").strip():
            raise ValueError("Flight id must be a non-empty string.")
        payload = self._get_json(DETAILS_URL, params={"flight": flight_id}, headers=FEED_HEADERS, what="flight details")
        payload = payload if isinstance(payload, dict) else {}
        details = {section: payload.get(section) or {} for section in DETAIL_SECTIONS}
        details["trail"] = payload.get("trail") or []
        return details

    def get_airline_logo(self, airline_iata: str | None, airline_icao: str | None):
        if self._logo_client is None:
            self._logo_client = _load_logo_client()
        return self._logo_client.get_airline_logo(iata=airline_iata, icao=airline_icao)
