"""
OpenSky Network adapter (OAuth2 client credentials).

State vector layout (array indices):
0: icao24, 1: callsign, 2: origin_country, 3: time_position, 4: last_contact,
5: longitude, 6: latitude, 7: baro_altitude (m), 8: on_ground,
9: velocity (m/s), 10: true_track, 11: vertical_rate (m/s), 12: sensors,
13: geo_altitude, 14: squawk, 15: spi, 16: position_source
"""

import logging
import re
from datetime import datetime, timezone
from math import isfinite
from time import time

import requests

from skyframe.flight.geometry import approximate_radius_km, bounds_from_circle, sanitize_bounds
from skyframe.flight.providers.base import (
    FlightProvider,
    ProviderAuthError,
    ProviderError,
    normalize_icao_code,
    validate_time_window,
)
from skyframe.models import FeedUnits, ProviderToken, RawFlight, RawFlightBatch, RectangleBounds

LOGGER = logging.getLogger("skyframe")

AUTH_URL = "https://auth.opensky-network.org/auth/realms/opensky-network/protocol/openid-connect/token"
API_URL = "https://opensky-network.org/api"
USER_AGENT = "Skyframe/1.0"
TOKEN_REFRESH_MARGIN_SECONDS = 300
STATE_VECTOR_FIELDS = 17
CALLSIGN_RE = re.compile(r"^([A-Z]{2,3})(\d+.*)?$")


def parse_callsign(callsign) -> tuple[str, str]:
    """Split a callsign into (airline, flight number)."""
    trimmed = str(callsign or "").strip()
    if not trimmed:
        return "", ""
    match = CALLSIGN_RE.match(trimmed)
    if match:
        return match.group(1), match.group(2) or ""
    return "", trimmed


def _number(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if isfinite(number) else None


def parse_state_vector(state) -> RawFlight | None:
    if not isinstance(state, list) or len(state) < STATE_VECTOR_FIELDS:
        return None
    latitude = _number(state[6])
    longitude = _number(state[5])
    if latitude is None or longitude is None:
        return None

    callsign = str(state[1] or "").strip()
    airline, flight_number = parse_callsign(callsign)
    last_contact = _number(state[4])
    return RawFlight(
        id=None,
        icao24=str(state[0] or "").strip().lower(),
        callsign=callsign,
        flight_number=flight_number,
        airline=airline,
        latitude=latitude,
        longitude=longitude,
        altitude=_number(state[7]),
        heading=_number(state[10]),
        velocity=_number(state[9]),
        vertical_rate=_number(state[11]),
        on_ground=bool(state[8]),
        timestamp=int(last_contact * 1000) if last_contact is not None else None,
    )


class OpenSkyProvider(FlightProvider):
    name = "opensky"

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        session=None,
        timeout_seconds: float = 10.0,
        now_fn=None,
        auth_url: str = AUTH_URL,
        api_url: str = API_URL,
    ):
        super().__init__(session=session, timeout_seconds=timeout_seconds)
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.auth_url = auth_url
        self.api_url = api_url.rstrip("/")
        self.now_fn = now_fn or time
        self._token: ProviderToken | None = None

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_access_token(self) -> str:
        now = self.now_fn()
        if self._token is not None and self._token.is_valid(now):
            return self._token.access_token

        LOGGER.info("OpenSky: requesting new access token.")
        try:
            response = self.session.post(
                self.auth_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
            access_token = payload["access_token"]
            expires_in = float(payload.get("expires_in", 1800))
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as exc:
            LOGGER.error("OpenSky: failed to obtain access token (%s).", exc)
            raise ProviderAuthError(f"OpenSky authentication failed: {exc}") from exc

        self._token = ProviderToken(
            access_token=access_token,
            expiry=now + expires_in - TOKEN_REFRESH_MARGIN_SECONDS,
        )
        LOGGER.info("OpenSky: access token obtained, expires at %s.", self._format_expiry())
        return access_token

    def _format_expiry(self) -> str | None:
        if self._token is None:
            return None
        return datetime.fromtimestamp(self._token.expiry, tz=timezone.utc).isoformat()

    def _authorized_get(self, path: str, params: dict, what: str):
        token = self.get_access_token()
        headers = {"Authorization": f"Bearer {token}", "User-Agent": USER_AGENT}
        clean_params = {key: value for key, value in params.items() if value is not None}
        return self._get_json(f"{self.api_url}{path}", params=clean_params, headers=headers, what=what)

    def area_query(self, latitude: float, longitude: float, radius_km: float) -> RawFlightBatch:
        lat, lon, radius = self._check_area(latitude, longitude, radius_km)
        LOGGER.info("OpenSky: fetching flights for area %s, %s (radius: %skm).", lat, lon, radius)
        bounds = bounds_from_circle(lat, lon, radius)
        batch = self._states(bounds)
        batch.center = (lat, lon)
        batch.radius_km = radius
        batch.location = f"OpenSky ({lat:.4f}, {lon:.4f})"
        return batch

    def bounds_query(self, north: float, south: float, west: float, east: float) -> RawFlightBatch:
        bounds = sanitize_bounds(RectangleBounds(north=north, south=south, east=east, west=west))
        LOGGER.info("OpenSky: fetching flights for bounds %s.", bounds.to_dict())
        batch = self._states(bounds)
        batch.center = bounds.center
        batch.radius_km = approximate_radius_km(bounds)
        batch.location = (
            f"OpenSky Rectangle ({bounds.north:.4f}, {bounds.west:.4f}) "
            f"to ({bounds.south:.4f}, {bounds.east:.4f})"
        )
        return batch

    def _states(self, bounds: RectangleBounds) -> RawFlightBatch:
        payload = self._authorized_get(
            "/states/all",
            {"lamin": bounds.south, "lamax": bounds.north, "lomin": bounds.west, "lomax": bounds.east},
            what="states",
        )
        if not isinstance(payload, dict):
            raise ProviderError(f"{self.name} states returned unexpected payload type {type(payload).__name__}")

        states = payload.get("states") or []
        records = [record for record in (parse_state_vector(state) for state in states) if record is not None]
        if len(records) != len(states):
            LOGGER.debug("OpenSky: dropped %s malformed state vectors.", len(states) - len(records))

        api_time = _number(payload.get("time"))
        timestamp = int(api_time * 1000) if api_time is not None else int(self.now_fn() * 1000)
        return RawFlightBatch(
            source=self.name,
            units=FeedUnits.METRIC,
            records=records,
            timestamp=timestamp,
            bounds=bounds,
        )

    def flight_details(self, flight_id: str):
        icao24 = str(flight_id or "").strip().lower()
        if not icao24:
            raise ValueError("Aircraft icao24 must be a non-empty string.")
        return self._authorized_get("/flights/aircraft", {"icao24": icao24}, what="flight details")

    def airport_arrivals(self, icao_code: str, begin=None, end=None):
        icao = normalize_icao_code(icao_code)
        begin, end = validate_time_window(begin, end)
        return self._authorized_get("/flights/arrival", {"airport": icao, "begin": begin, "end": end}, what="arrivals")

    def airport_departures(self, icao_code: str, begin=None, end=None):
        icao = normalize_icao_code(icao_code)
        begin, end = validate_time_window(begin, end)
        return self._authorized_get("/flights/departure", {"airport": icao, "begin": begin, "end": end}, what="departures")

    def health_status(self) -> dict:
        return {
            "name": self.name,
            "has_token": self._token is not None,
            "token_expiry": self._format_expiry(),
            "configured": self.configured,
        }
