"""Map provider batches into the canonical Flight schema."""

from math import floor, isfinite
from time import time

from skyframe.models import (
    UNKNOWN_AIRLINE,
    UNKNOWN_AIRPORT,
    UNKNOWN_CODE,
    Aircraft,
    Airline,
    Airport,
    FeedSnapshot,
    FeedUnits,
    Flight,
    FlightStatus,
    Position,
    RawFlight,
    RawFlightBatch,
)

FEET_PER_METER = 3.28084
KNOTS_PER_MPS = 1.94384
FPM_PER_MPS = 196.8504

APPROACH_CEILING_FT = 3000
APPROACH_SINK_FPM = -200
CLIMB_THRESHOLD_FPM = 300
DESCENT_THRESHOLD_FPM = -300


def _to_number(value, default=0.0):
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if isfinite(number) else default


def round_half_up(value) -> int:
    """Round .5 towards +infinity (2.5 -> 3, -2.5 -> -2); `round` would go to even."""
    return int(floor(_to_number(value) + 0.5))


def meters_to_feet(value) -> int:
    return round_half_up(_to_number(value) * FEET_PER_METER)


def mps_to_knots(value) -> int:
    return round_half_up(_to_number(value) * KNOTS_PER_MPS)


def mps_to_fpm(value) -> int:
    return round_half_up(_to_number(value) * FPM_PER_MPS)


def resolve_status(on_ground: bool, altitude_ft, vertical_speed_fpm) -> FlightStatus:
    """Classify flight phase; the first matching rule wins."""
    if on_ground:
        return FlightStatus.LANDED
    altitude = _to_number(altitude_ft)
    vertical_speed = _to_number(vertical_speed_fpm)
    if altitude < APPROACH_CEILING_FT and vertical_speed < APPROACH_SINK_FPM:
        return FlightStatus.APPROACHING
    if vertical_speed > CLIMB_THRESHOLD_FPM:
        return FlightStatus.CLIMBING
    if vertical_speed < DESCENT_THRESHOLD_FPM:
        return FlightStatus.DESCENDING
    return FlightStatus.CRUISING


def normalize_airline(code) -> Airline:
    code = str(code or "").strip().upper()
    if not code:
        return Airline(name=UNKNOWN_AIRLINE, iata=UNKNOWN_CODE, icao=UNKNOWN_CODE)
    return Airline(
        name=code,
        iata=code if len(code) == 2 else UNKNOWN_CODE,
        icao=code if len(code) == 3 else UNKNOWN_CODE,
    )


def normalize_airport(code) -> Airport:
    code = str(code or "").strip().upper()
    if not code:
        return Airport(airport=UNKNOWN_AIRPORT, iata=UNKNOWN_CODE)
    return Airport(airport=code, iata=code)


def flight_identifier(raw: RawFlight) -> str:
    if raw.id:
        return str(raw.id)
    return f"{raw.icao24 or 'unknown'}_{raw.callsign or 'unknown'}"


def normalize_flight(raw: RawFlight, units: FeedUnits) -> Flight | None:
    """Return a Flight, or None when the record has no usable position."""
    latitude = _to_number(raw.latitude, default=None)
    longitude = _to_number(raw.longitude, default=None)
    if latitude is None or longitude is None:
        return None

    if units == FeedUnits.METRIC:
        altitude = meters_to_feet(raw.altitude)
        speed = mps_to_knots(raw.velocity)
        vertical_speed = mps_to_fpm(raw.vertical_rate)
    else:
        altitude = round_half_up(raw.altitude)
        speed = round_half_up(raw.velocity)
        vertical_speed = round_half_up(raw.vertical_rate)
    heading = round_half_up(raw.heading) % 360

    callsign = str(raw.callsign or "").strip()
    aircraft_type = str(raw.aircraft_type or "").strip()
    return Flight(
        id=flight_identifier(raw),
        flight_number=str(raw.flight_number or callsign).strip(),
        callsign=callsign,
        airline=normalize_airline(raw.airline),
        aircraft=Aircraft(
            type=aircraft_type,
            icao=aircraft_type,
            registration=str(raw.registration or "").strip(),
        ),
        departure=normalize_airport(raw.origin),
        arrival=normalize_airport(raw.destination),
        position=Position(
            altitude=altitude,
            speed=speed,
            heading=heading,
            vertical_speed=vertical_speed,
            latitude=latitude,
            longitude=longitude,
        ),
        status=resolve_status(raw.on_ground, altitude, vertical_speed),
    )


def normalize_batch(batch: RawFlightBatch | None) -> FeedSnapshot:
    if batch is None:
        return FeedSnapshot(flights=(), source="unknown", timestamp=int(time() * 1000))
    flights = []
    for raw in batch.records:
        flight = normalize_flight(raw, batch.units)
        if flight is not None:
            flights.append(flight)
    return FeedSnapshot(
        flights=tuple(flights),
        source=batch.source or "unknown",
        timestamp=batch.timestamp or int(time() * 1000),
        center=batch.center,
        radius_km=batch.radius_km,
        location=batch.location,
    )
