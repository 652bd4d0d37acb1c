import logging

from PIL import Image

from skyframe.models import UNKNOWN_CODE, Flight

from .common import (
    AIRPLANE_CYCLE,
    COLOR_LABEL,
    COLOR_ROUTE_LINE,
    ROUTE_END,
    ROUTE_START,
    TOTAL_FRAMES,
    center_x,
    draw_airplane_icon,
    draw_position_dots,
    draw_separator_line,
    dots_width,
    ensure_clean_render_buffer,
    format_altitude_feet_raw,
    format_heading,
    format_speed,
    measure_text_width,
)

LOGGER = logging.getLogger("skyframe")

TOP_BAND_HEIGHT = 20
TOP_TEXT_HEIGHT = 7
TOP_TEXT_Y_CENTERED = (TOP_BAND_HEIGHT - TOP_TEXT_HEIGHT) // 2
TOP_TEXT_Y_STATIC = 7
AIRLINE_SCROLL_GAP_PX = 12
CAROUSEL_DOTS_Y = 62
TEXT_ONLY = "__TEXT_ONLY__"
ALT_RAW_FT = "__ALT_RAW_FT__"


def _draw_airline_name(pizzoo, settings, airline_name: str, frame_idx: int | None) -> None:
    name = str(airline_name or "")
    if not name:
        return

    if frame_idx is None:
        static_name = name[:10]
        pizzoo.draw_text(static_name, xy=(center_x(64, static_name), TOP_TEXT_Y_STATIC), font=settings.font_name, color="#FFFFFF")
        return

    text_w = measure_text_width(name)
    if text_w <= 64:
        pizzoo.draw_text(name, xy=(center_x(64, name), TOP_TEXT_Y_CENTERED), font=settings.font_name, color="#FFFFFF")
        return

    # Long names scroll left once across the animation.
    total_steps = max(1, TOTAL_FRAMES - 1)
    travel_px = text_w + AIRLINE_SCROLL_GAP_PX
    progress = min(max(frame_idx, 0), total_steps) / total_steps
    pizzoo.draw_text(name, xy=(int(round(-travel_px * progress)), TOP_TEXT_Y_CENTERED), font=settings.font_name, color="#FFFFFF")


def draw_top_section(
    pizzoo,
    settings,
    logo: str | None,
    origin: str,
    destination: str,
    airline_name: str = "",
    y_route: int = 20,
    frame_idx: int | None = None,
) -> None:
    if logo:
        pizzoo.draw_image(logo, xy=(0, 0), size=(64, 20), resample_method=Image.LANCZOS)
    elif airline_name:
        _draw_airline_name(pizzoo, settings, airline_name, frame_idx=frame_idx)

    draw_separator_line(pizzoo, y=20, style="dashed")
    pizzoo.draw_rectangle(xy=(0, 21), width=64, height=11, color=settings.color_box, filled=True)
    pizzoo.draw_text(origin, xy=(2, y_route), font=settings.font_name, color=settings.color_text)
    dest_width = measure_text_width(destination)
    pizzoo.draw_text(destination, xy=(62 - dest_width, y_route), font=settings.font_name, color=settings.color_text)

    for i in range(ROUTE_START, ROUTE_END, 3):
        pizzoo.draw_rectangle(xy=(i, y_route + 6), width=2, height=1, color=COLOR_ROUTE_LINE, filled=True)


def draw_label_value(pizzoo, settings, label: str, value: str, y: int) -> None:
    full_text = f"{label} {value}"
    x_start = center_x(64, full_text)
    pizzoo.draw_text(label, xy=(x_start, y), font=settings.font_name, color=COLOR_LABEL)
    value_x = x_start + (len(label) + 1) * 6
    pizzoo.draw_text(value, xy=(value_x, y), font=settings.font_name, color=settings.color_text)


def draw_value_only(pizzoo, settings, value: str, y: int) -> None:
    text = str(value or "----")
    while len(text) > 1 and measure_text_width(text) > 64:
        text = text[:-1]
    pizzoo.draw_text(text, xy=(center_x(64, text), y), font=settings.font_name, color=settings.color_text)


def draw_altitude_ft_value(pizzoo, settings, altitude_raw, y: int) -> None:
    value = format_altitude_feet_raw(altitude_raw)
    suffix = "ft"
    x_start = center_x(64, f"{value} {suffix}")
    pizzoo.draw_text(value, xy=(x_start, y), font=settings.font_name, color=settings.color_text)
    suffix_x = x_start + measure_text_width(f"{value} ")
    pizzoo.draw_text(suffix, xy=(suffix_x, y), font=settings.font_name, color=COLOR_LABEL)


def _draw_row(pizzoo, settings, pair: tuple, y: int) -> None:
    label, value = pair
    if label == TEXT_ONLY:
        draw_value_only(pizzoo, settings, value, y=y)
    elif label == ALT_RAW_FT:
        draw_altitude_ft_value(pizzoo, settings, value, y=y)
    else:
        draw_label_value(pizzoo, settings, label, value, y=y)


def draw_info_page(pizzoo, settings, upper_pair: tuple, lower_pair: tuple) -> None:
    pizzoo.draw_rectangle(xy=(0, 33), width=64, height=31, color=settings.color_box, filled=True)
    draw_separator_line(pizzoo, y=32, style="dashed")
    _draw_row(pizzoo, settings, upper_pair, y=34)
    draw_separator_line(pizzoo, y=48, style="dashed")
    _draw_row(pizzoo, settings, lower_pair, y=50)


def _code(value: str) -> str:
    value = str(value or "").strip()
    return "---" if not value or value == UNKNOWN_CODE else value[:3].upper()


def format_aircraft_display(aircraft_type: str) -> str:
    display = str(aircraft_type or "").strip()
    if len(display) > 10:
        display = display[:10].rstrip()
    return display or "----"


def info_pages(flight: Flight, speed_unit: str) -> list[tuple[tuple, tuple]]:
    callsign = (flight.callsign or flight.flight_number or "----")[:7]
    registration = (flight.aircraft.registration or "------")[:7]
    return [
        (("CS", callsign), (ALT_RAW_FT, flight.position.altitude)),
        ((TEXT_ONLY, format_aircraft_display(flight.aircraft.type)), (TEXT_ONLY, flight.status.value.upper())),
        (("SPD", format_speed(flight.position.speed, speed_unit)), ("HDG", format_heading(flight.position.heading))),
    ]


def build_and_send_flight_card(pizzoo, settings, flight: Flight, index: int = 0, count: int = 1) -> None:
    """Render the animated flight card; `index`/`count` drive the carousel dots."""
    ensure_clean_render_buffer(pizzoo)
    logo = flight.airline.logo
    airline_name = "" if flight.airline.iata == flight.airline.icao == UNKNOWN_CODE else flight.airline.name
    origin = _code(flight.departure.iata)
    destination = _code(flight.arrival.iata)
    pages = info_pages(flight, settings.flight_speed_unit)
    frames_per_page = TOTAL_FRAMES // len(pages)
    dots_x = (64 - dots_width(count)) // 2
    y_route = 20

    for frame_idx in range(TOTAL_FRAMES):
        pizzoo.cls()
        draw_top_section(pizzoo, settings, logo, origin, destination, airline_name, y_route, frame_idx=frame_idx)
        plane_x = ROUTE_START - 5 + (frame_idx % AIRPLANE_CYCLE)
        draw_airplane_icon(pizzoo, plane_x, y_route + 4, clip_left=ROUTE_START, clip_right=ROUTE_END)

        page_idx = min(frame_idx // frames_per_page, len(pages) - 1)
        upper_pair, lower_pair = pages[page_idx]
        draw_info_page(pizzoo, settings, upper_pair, lower_pair)
        draw_position_dots(pizzoo, count, index, x=dots_x, y=CAROUSEL_DOTS_Y)
        if frame_idx < TOTAL_FRAMES - 1:
            pizzoo.add_frame()

    LOGGER.info(
        "Sending flight %s (%s/%s) to device (%s frames, %sms).",
        flight.flight_number or flight.id,
        index + 1,
        count,
        TOTAL_FRAMES,
        settings.animation_frame_speed,
    )
    pizzoo.render(frame_speed=settings.animation_frame_speed)
