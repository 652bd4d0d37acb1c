import pytest

from skyframe.flight.providers.base import ProviderAuthError, ProviderError
from skyframe.flight.providers.opensky import (
    API_URL,
    AUTH_URL,
    OpenSkyProvider,
    parse_callsign,
    parse_state_vector,
)
from skyframe.models import FeedUnits
from tests.fake_http import FakeResponse, FakeSession


class Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _token(expires_in=1800, token="tok-1"):
    return FakeResponse({"access_token": token, "expires_in": expires_in})


def _state(**overrides):
    state = [
        "4CA2D6",
        "BAW832  ",
        "United Kingdom",
        1_700_000_000,
        1_700_000_005,
        -0.4,
        51.5,
        900.0,
        False,
        80.0,
        270.0,
        -3.0,
        None,
        950.0,
        "4521",
        False,
        0,
    ]
    for index, value in overrides.items():
        state[int(index.lstrip("i"))] = value
    return state


def _provider(session, clock=None):
    return OpenSkyProvider(client_id="id", client_secret="secret", session=session, now_fn=clock or Clock())


def test_parse_callsign_splits_airline_and_number():
    assert parse_callsign("BAW832  ") == ("BAW", "832")
    assert parse_callsign("EZY") == ("EZY", "")
    assert parse_callsign("N123AB") == ("", "N123AB")
    assert parse_callsign("   ") == ("", "")


def test_parse_state_vector_keeps_metric_units():
    record = parse_state_vector(_state())
    assert record.id is None
    assert record.icao24 == "4ca2d6"
    assert record.callsign == "BAW832"
    assert record.airline == "BAW"
    assert record.latitude == 51.5
    assert record.longitude == -0.4
    assert record.altitude == 900.0
    assert record.velocity == 80.0
    assert record.vertical_rate == -3.0
    assert record.timestamp == 1_700_000_005_000


def test_parse_state_vector_rejects_malformed_rows():
    assert parse_state_vector(_state()[:10]) is None
    assert parse_state_vector(_state(i6=None)) is None
    assert parse_state_vector(None) is None


def test_token_is_requested_with_client_credentials_and_reused():
    session = FakeSession(
        post=[_token()],
        get=[FakeResponse({"time": 1_700_000_010, "states": [_state()]}), FakeResponse({"time": 1, "states": None})],
    )
    provider = _provider(session)

    provider.bounds_query(52, 51, -1, 1)
    provider.bounds_query(52, 51, -1, 1)

    assert len(session.post_calls) == 1
    post = session.post_calls[0]
    assert post["url"] == AUTH_URL
    assert post["data"] == {"grant_type": "client_credentials", "client_id": "id", "client_secret": "secret"}
    assert session.get_calls[0]["headers"]["Authorization"] == "Bearer tok-1"


def test_token_refreshes_five_minutes_before_expiry():
    clock = Clock()
    session = FakeSession(post=[_token(token="a"), _token(token="b")])
    provider = _provider(session, clock)

    assert provider.get_access_token() == "a"
    clock.now += 1800 - 300 - 1
    assert provider.get_access_token() == "a"
    clock.now += 1
    assert provider.get_access_token() == "b"
    assert len(session.post_calls) == 2


def test_token_failure_raises_auth_error():
    session = FakeSession(post=[FakeResponse(status_code=401)])
    provider = _provider(session)
    with pytest.raises(ProviderAuthError):
        provider.bounds_query(52, 51, -1, 1)
    assert session.get_calls == []


def test_states_batch_is_metric_and_timestamped_from_api_time():
    session = FakeSession(
        post=[_token()],
        get=[FakeResponse({"time": 1_700_000_010, "states": [_state(), ["short"]]})],
    )
    provider = _provider(session)

    batch = provider.bounds_query(north=51, south=52, west=1, east=-1)

    call = session.get_calls[0]
    assert call["url"] == f"{API_URL}/states/all"
    assert call["params"] == {"lamin": 51, "lamax": 52, "lomin": -1, "lomax": 1}
    assert batch.units == FeedUnits.METRIC
    assert batch.timestamp == 1_700_000_010_000
    assert len(batch.records) == 1


def test_area_query_sets_center_and_radius():
    session = FakeSession(post=[_token()], get=[FakeResponse({"time": 1, "states": []})])
    batch = _provider(session).area_query(51.0, -0.1, 25)
    assert batch.center == (51.0, -0.1)
    assert batch.radius_km == 25
    assert "OpenSky" in batch.location


def test_http_error_on_states_raises_provider_error():
    session = FakeSession(post=[_token()], get=[FakeResponse(status_code=503)])
    with pytest.raises(ProviderError) as exc:
        _provider(session).bounds_query(52, 51, -1, 1)
    assert exc.value.status_code == 503


def test_arrivals_uppercase_icao_and_pass_window():
    session = FakeSession(post=[_token()], get=[FakeResponse([{"icao24": "abc"}])])
    provider = _provider(session)

    result = provider.airport_arrivals("egll", begin="1700000000", end=1700003600)

    call = session.get_calls[0]
    assert call["url"] == f"{API_URL}/flights/arrival"
    assert call["params"] == {"airport": "EGLL", "begin": 1700000000, "end": 1700003600}
    assert result == [{"icao24": "abc"}]


def test_departures_omit_missing_window():
    session = FakeSession(post=[_token()], get=[FakeResponse([])])
    _provider(session).airport_departures("KJFK")
    call = session.get_calls[0]
    assert call["url"] == f"{API_URL}/flights/departure"
    assert call["params"] == {"airport": "KJFK"}


@pytest.mark.parametrize("code", ["EGL", "EG1L", "", None, "EGLLX"])
def test_airport_queries_reject_bad_icao_before_network(code):
    session = FakeSession()
    with pytest.raises(ValueError):
        _provider(session).airport_arrivals(code)
    assert session.post_calls == []
    assert session.get_calls == []


def test_airport_queries_reject_bad_timestamps():
    session = FakeSession()
    with pytest.raises(ValueError, match="begin"):
        _provider(session).airport_departures("EGLL", begin="yesterday")
    assert session.post_calls == []


def test_health_status_reports_token_state():
    session = FakeSession(post=[_token()])
    provider = _provider(session)
    assert provider.health_status() == {"name": "opensky", "has_token": False, "token_expiry": None, "configured": True}

    provider.get_access_token()
    status = provider.health_status()
    assert status["has_token"] is True
    assert status["token_expiry"].endswith("+00:00")
    assert provider.supports("health_status") is True


def test_unconfigured_provider_reports_not_configured():
    assert OpenSkyProvider(session=FakeSession()).health_status()["configured"] is False


def test_flight_details_queries_aircraft_history():
    session = FakeSession(post=[_token()], get=[FakeResponse([{"callsign": "BAW832"}])])
    result = _provider(session).flight_details("4CA2D6")
    assert session.get_calls[0]["params"] == {"icao24": "4ca2d6"}
    assert result == [{"callsign": "BAW832"}]
