import random
from dataclasses import replace
from datetime import datetime

import pytest
from PIL import Image

from skyframe.display.slideshow import SlideshowEngine
from skyframe.models import Airline, FlightStatus, Photo, SlideshowSettings
from skyframe.render.common import (
    COLOR_DOT_ACTIVE,
    TOTAL_FRAMES,
    format_heading,
    format_speed,
)
from skyframe.render.flight_view import CAROUSEL_DOTS_Y, build_and_send_flight_card, format_aircraft_display
from skyframe.render.holding_view import area_label, build_and_send_holding_screen
from skyframe.render.photo_view import (
    CROSSFADE_STEPS,
    build_and_send_crossfade,
    build_and_send_photo_frame,
    overlay_x,
)
from skyframe.scheduler import Scheduler, VirtualClock
from tests.factories import make_flight, make_settings
from tests.render_recorder import RecordingPizzoo

NOON = datetime(2026, 1, 1, 12, 34)


def _dots(pizzoo):
    return [op for op in pizzoo.of("draw_rectangle") if op["width"] == 2 and op["height"] == 2]


def _engine(count=3):
    clock = VirtualClock()
    scheduler = Scheduler(clock_fn=clock, sleep_fn=clock.sleep)
    photos = [Photo(id=f"p{i}", src=f"p{i}.jpg") for i in range(count)]
    colors = iter([(255, 0, 0), (0, 0, 255), (0, 255, 0), (9, 9, 9)])
    engine = SlideshowEngine(
        photos,
        SlideshowSettings(interval=10000, shuffle=False),
        scheduler,
        loader=lambda photo: Image.new("RGB", (64, 64), next(colors)),
        rng=random.Random(0),
        crossfade_ms=1200,
    )
    engine.start()
    return engine, scheduler


def test_flight_card_is_one_animation():
    pizzoo = RecordingPizzoo()
    build_and_send_flight_card(pizzoo, make_settings(), make_flight())

    assert len(pizzoo.of("cls")) == TOTAL_FRAMES
    assert len(pizzoo.of("add_frame")) == TOTAL_FRAMES - 1
    assert pizzoo.of("render") == [{"op": "render", "frame_speed": 300}]


def test_flight_card_pages_show_route_and_telemetry():
    pizzoo = RecordingPizzoo()
    flight = make_flight(status=FlightStatus.DESCENDING)
    build_and_send_flight_card(pizzoo, make_settings(flight_speed_unit="kt"), flight)

    texts = set(pizzoo.texts())
    assert {"LHR", "JFK", "CS", "BAW123", "12,000", "A320", "DESCENDING", "250Kt", "090"} <= texts
    assert "BAW" in texts


def test_flight_card_uses_logo_when_available(tmp_path):
    pizzoo = RecordingPizzoo()
    flight = make_flight()
    flight = replace(flight, airline=replace(flight.airline, logo=str(tmp_path / "BAW.png")))
    build_and_send_flight_card(pizzoo, make_settings(), flight)

    images = pizzoo.of("draw_image")
    assert len(images) == TOTAL_FRAMES
    assert images[0]["size"] == [64, 20]
    assert "BAW" not in pizzoo.texts()


def test_flight_card_hides_unknown_airline_and_codes():
    pizzoo = RecordingPizzoo()
    flight = make_flight(airline=Airline(name="Unknown Airline", iata="unknown", icao="unknown"))
    flight = replace(flight, departure=replace(flight.departure, iata="unknown"))
    build_and_send_flight_card(pizzoo, make_settings(), flight)

    texts = pizzoo.texts()
    assert "Unknown Airline" not in texts
    assert "---" in texts


def test_carousel_dots_only_with_several_flights():
    single = RecordingPizzoo()
    build_and_send_flight_card(single, make_settings(), make_flight(), index=0, count=1)
    assert _dots(single) == []

    several = RecordingPizzoo()
    build_and_send_flight_card(several, make_settings(), make_flight(), index=1, count=3)
    dots = _dots(several)
    assert len(dots) == 3 * TOTAL_FRAMES
    first_frame = dots[:3]
    assert all(op["xy"][1] == CAROUSEL_DOTS_Y for op in first_frame)
    assert [op["color"] for op in first_frame].index(COLOR_DOT_ACTIVE) == 1


def test_holding_screen_shows_status_and_area():
    pizzoo = RecordingPizzoo()
    build_and_send_holding_screen(pizzoo, make_settings(radius_km=25), "SCANNING")
    texts = pizzoo.texts()
    assert "SCANNING" in texts
    assert "AREA" in texts and "25KM" in texts
    assert len(pizzoo.of("render")) == 1


@pytest.mark.parametrize(
    "overrides,expected",
    [({"area_name": "heathrow"}, "HEATHR"), ({"area_mode": "rectangle"}, "BOX"), ({"radius_km": 0.2}, "1KM")],
)
def test_area_label(overrides, expected):
    assert area_label(make_settings(**overrides)) == expected


def test_overlay_x_anchors_and_clamps():
    assert overlay_x("left", 10, 0) == 2
    assert overlay_x("right", 10, 0) == 52
    assert overlay_x("left", 10, -8) == 0
    assert overlay_x("right", 10, 8) == 54


def test_photo_frame_draws_image_clock_and_dots():
    engine, _ = _engine(3)
    pizzoo = RecordingPizzoo()
    build_and_send_photo_frame(pizzoo, make_settings(), engine, now=NOON)

    assert pizzoo.of("draw_image")[0]["image"] == "<image 64x64>"
    clock = pizzoo.of("draw_text")[0]
    assert clock["text"] == "12:34"
    assert clock["xy"] == [64 - 29 - 2, 1]
    dots = _dots(pizzoo)
    assert len(dots) == 3
    assert dots[0]["xy"] == [2, 60]


def test_photo_frame_follows_corner_swap_and_offset():
    engine, _ = _engine(3)
    engine.clock_corner, engine.dots_corner = "left", "right"
    engine.offset = (3, -1)
    pizzoo = RecordingPizzoo()
    build_and_send_photo_frame(pizzoo, make_settings(), engine, now=NOON)

    assert pizzoo.of("draw_text")[0]["xy"] == [5, 0]
    dots = _dots(pizzoo)
    assert dots[0]["xy"] == [54, 59]


def test_crossfade_is_a_multi_frame_animation():
    engine, scheduler = _engine(2)
    scheduler.advance(10)
    assert engine.transitioning is True

    pizzoo = RecordingPizzoo()
    build_and_send_crossfade(pizzoo, make_settings(), engine, now=NOON)

    assert len(pizzoo.of("draw_image")) == CROSSFADE_STEPS
    assert len(pizzoo.of("add_frame")) == CROSSFADE_STEPS - 1
    assert pizzoo.of("render") == [{"op": "render", "frame_speed": 200}]


def test_formatters():
    assert format_speed(100, "mph") == "115Mph"
    assert format_speed(None, "kt") == "---Kt"
    assert format_heading(365) == "005"
    assert format_heading(None) == "---"
    assert format_aircraft_display("Boeing 787-9 Dreamliner") == "Boeing 787"
    assert format_aircraft_display("") == "----"
