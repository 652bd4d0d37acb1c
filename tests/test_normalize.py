import pytest

from skyframe.flight.normalize import (
    meters_to_feet,
    mps_to_fpm,
    mps_to_knots,
    normalize_batch,
    normalize_flight,
    resolve_status,
    round_half_up,
)
from skyframe.models import UNKNOWN_AIRLINE, UNKNOWN_AIRPORT, FeedUnits, FlightStatus, RawFlight, RawFlightBatch


def _batch(records, units=FeedUnits.METRIC):
    return RawFlightBatch(source="test", units=units, records=records, timestamp=1_700_000_000_000)


def test_metric_record_converts_units_and_approaches():
    raw = RawFlight(
        icao24="abc123",
        callsign="BAW123",
        latitude=51.0,
        longitude=-0.1,
        altitude=900,
        velocity=80,
        vertical_rate=-3,
        on_ground=False,
    )
    flight = normalize_flight(raw, FeedUnits.METRIC)
    assert flight.position.altitude == 2953
    assert flight.position.speed == 156
    assert flight.position.vertical_speed == -591
    assert flight.status == FlightStatus.APPROACHING


def test_aviation_record_passes_units_through():
    raw = RawFlight(id="2f3a", latitude=51.0, longitude=-0.1, altitude=35000, velocity=450, vertical_rate=0, heading=370)
    flight = normalize_flight(raw, FeedUnits.AVIATION)
    assert flight.position.altitude == 35000
    assert flight.position.speed == 450
    assert flight.position.vertical_speed == 0
    assert flight.position.heading == 10
    assert flight.status == FlightStatus.CRUISING


def test_unit_converters_treat_missing_as_zero():
    assert meters_to_feet(None) == 0
    assert mps_to_knots(float("nan")) == 0
    assert mps_to_fpm("junk") == 0
    assert meters_to_feet(1000) == 3281


@pytest.mark.parametrize("altitude,vertical_speed", [(0, 0), (35000, 3000), (100, -5000)])
def test_on_ground_is_always_landed(altitude, vertical_speed):
    assert resolve_status(True, altitude, vertical_speed) == FlightStatus.LANDED


@pytest.mark.parametrize(
    "altitude,vertical_speed,expected",
    [
        (2999, -201, FlightStatus.APPROACHING),
        (2999, -400, FlightStatus.APPROACHING),
        (3000, -400, FlightStatus.DESCENDING),
        (2999, -200, FlightStatus.CRUISING),
        (10000, 301, FlightStatus.CLIMBING),
        (10000, 300, FlightStatus.CRUISING),
        (10000, -301, FlightStatus.DESCENDING),
        (10000, -300, FlightStatus.CRUISING),
        (1000, 500, FlightStatus.CLIMBING),
    ],
)
def test_status_rules_apply_in_order(altitude, vertical_speed, expected):
    assert resolve_status(False, altitude, vertical_speed) == expected


def test_missing_codes_use_unknown_placeholder():
    raw = RawFlight(icao24="abc123", latitude=1.0, longitude=2.0)
    flight = normalize_flight(raw, FeedUnits.METRIC)
    assert flight.airline.iata == "unknown"
    assert flight.airline.icao == "unknown"
    assert flight.airline.name == UNKNOWN_AIRLINE
    assert flight.departure.iata == "unknown"
    assert flight.arrival.airport == UNKNOWN_AIRPORT


def test_airline_code_length_selects_iata_or_icao():
    two = normalize_flight(RawFlight(airline="ba", latitude=1.0, longitude=2.0), FeedUnits.AVIATION)
    three = normalize_flight(RawFlight(airline="BAW", latitude=1.0, longitude=2.0), FeedUnits.AVIATION)
    assert (two.airline.iata, two.airline.icao) == ("BA", "unknown")
    assert (three.airline.iata, three.airline.icao) == ("unknown", "BAW")


def test_identifier_falls_back_to_icao24_and_callsign():
    assert normalize_flight(RawFlight(id="2f3a", latitude=1, longitude=2), FeedUnits.AVIATION).id == "2f3a"
    assert normalize_flight(RawFlight(icao24="abc", callsign="BAW1", latitude=1, longitude=2), FeedUnits.METRIC).id == "abc_BAW1"
    assert normalize_flight(RawFlight(latitude=1, longitude=2), FeedUnits.METRIC).id == "unknown_unknown"


def test_flight_number_falls_back_to_callsign():
    flight = normalize_flight(RawFlight(callsign="EZY12AB ", latitude=1, longitude=2), FeedUnits.METRIC)
    assert flight.flight_number == "EZY12AB"
    assert flight.callsign == "EZY12AB"


def test_batch_drops_records_without_position():
    snapshot = normalize_batch(
        _batch(
            [
                RawFlight(icao24="a", latitude=1.0, longitude=2.0),
                RawFlight(icao24="b", latitude=None, longitude=2.0),
                RawFlight(icao24="c", latitude=1.0, longitude=float("nan")),
            ]
        )
    )
    assert [flight.id for flight in snapshot.flights] == ["a_unknown"]
    assert snapshot.source == "test"
    assert snapshot.timestamp == 1_700_000_000_000


def test_snapshot_serializes_flight_fields():
    snapshot = normalize_batch(_batch([RawFlight(icao24="a", callsign="BAW1", airline="BAW", latitude=1.0, longitude=2.0)]))
    payload = snapshot.to_dict()
    flight = payload["flights"][0]
    assert payload["source"] == "test"
    assert flight["flightNumber"] == "BAW1"
    assert flight["position"]["verticalSpeed"] == 0
    assert flight["status"] == "cruising"
    assert flight["airline"]["icao"] == "BAW"


@pytest.mark.parametrize("value,expected", [(2.5, 3), (-2.5, -2), (154.5, 155), (-0.4, 0), (None, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_aviation_halves_round_up():
    raw = RawFlight(id="h", latitude=51.0, longitude=-0.1, altitude=1500.5, velocity=154.5, vertical_rate=-250.5, heading=359.5)
    flight = normalize_batch(_batch([raw], units=FeedUnits.AVIATION)).flights[0]
    assert flight.position.altitude == 1501
    assert flight.position.speed == 155
    assert flight.position.vertical_speed == -250
    assert flight.position.heading == 0
