"""Common contract for flight feed providers."""

import logging
import re
from abc import ABC, abstractmethod

import requests

from skyframe.flight.geometry import validate_coordinates

LOGGER = logging.getLogger("skyframe")
ICAO_AIRPORT_RE = re.compile(r"^[A-Z]{4}$")
AIRLINE_PREFIX_RE = re.compile(r"^([A-Z]{2,3})")

OPTIONAL_CAPABILITIES = ("airport_arrivals", "airport_departures", "health_status")


class _Unsupported:
    """Returned by optional capabilities a provider does not implement."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSUPPORTED"


UNSUPPORTED = _Unsupported()


class ProviderError(RuntimeError):
    """Transport, HTTP status or payload failure talking to a provider."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderAuthError(ProviderError):
    """Token acquisition failed."""


def normalize_icao_code(code) -> str:
    icao = str(code or "").strip().upper()
    if not ICAO_AIRPORT_RE.match(icao):
        raise ValueError(f"Invalid ICAO airport code: {code!r}")
    return icao


def validate_time_window(begin, end) -> tuple[int | None, int | None]:
    """Parse optional epoch-second bounds, raising ValueError on junk input."""
    parsed = []
    for name, value in (("begin", begin), ("end", end)):
        if value is None or value == "":
            parsed.append(None)
            continue
        try:
            parsed.append(int(value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid {name} timestamp: {value!r}") from exc
    return parsed[0], parsed[1]


def extract_airline_code(text) -> str:
    """Return the 2-3 letter airline prefix of a callsign/flight number, or ''."""
    match = AIRLINE_PREFIX_RE.match(str(text or "").strip())
    return match.group(1) if match else ""


class FlightProvider(ABC):
    """
    Polymorphic feed adapter.

    Query methods return provider-shaped batches (`RawFlightBatch`); turning
    them into `Flight` objects is the job of `skyframe.flight.normalize`.
    Optional capabilities return `UNSUPPORTED` unless a subclass overrides them.
    """

    name = "base"

    def __init__(self, session: requests.Session | None = None, timeout_seconds: float = 10.0):
        self.session = session or requests.Session()
        self.timeout_seconds = float(timeout_seconds)

    @abstractmethod
    def area_query(self, latitude: float, longitude: float, radius_km: float):
        raise NotImplementedError

    @abstractmethod
    def bounds_query(self, north: float, south: float, west: float, east: float):
        raise NotImplementedError

    @abstractmethod
    def flight_details(self, flight_id: str):
        raise NotImplementedError

    def airport_arrivals(self, icao_code: str, begin=None, end=None):
        normalize_icao_code(icao_code)
        return UNSUPPORTED

    def airport_departures(self, icao_code: str, begin=None, end=None):
        normalize_icao_code(icao_code)
        return UNSUPPORTED

    def health_status(self):
        return UNSUPPORTED

    def supports(self, capability: str) -> bool:
        if capability not in OPTIONAL_CAPABILITIES:
            return hasattr(self, capability)
        return getattr(type(self), capability) is not getattr(FlightProvider, capability)

    @staticmethod
    def _check_area(latitude, longitude, radius_km) -> tuple[float, float, float]:
        lat, lon = validate_coordinates(latitude, longitude)
        try:
            radius = float(radius_km)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Radius must be numeric: {radius_km!r}") from exc
        if not radius > 0:
            raise ValueError(f"Radius must be > 0 km: {radius_km!r}")
        return lat, lon, radius

    def _get_json(self, url: str, params=None, headers=None, what: str = "request"):
        """GET a JSON document, mapping every failure onto ProviderError."""
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as exc:
            status = getattr(exc.response, "status_code", None)
            if status == 429:
                LOGGER.warning("%s rate limit exceeded during %s.", self.name, what)
            raise ProviderError(f"{self.name} {what} failed with HTTP {status}", status_code=status) from exc
        except requests.exceptions.RequestException as exc:
            raise ProviderError(f"{self.name} {what} failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"{self.name} {what} returned invalid JSON: {exc}") from exc
