import logging

COLOR_ROUTE_LINE = "#666666"
COLOR_PLANE = "#FFFFFF"
COLOR_SEPARATOR = "#555555"
COLOR_LABEL = "#999999"
COLOR_DOT_ACTIVE = "#FFFFFF"
COLOR_DOT_IDLE = "#555555"

LOGGER = logging.getLogger("skyframe")

DISPLAY_SIZE = 64
PLANE_WIDTH = 5
ROUTE_START = 21
ROUTE_END = 43
ROUTE_WIDTH = ROUTE_END - ROUTE_START
AIRPLANE_CYCLE = ROUTE_WIDTH + PLANE_WIDTH
TOTAL_FRAMES = AIRPLANE_CYCLE
DOT_SIZE = 2
DOT_GAP = 2
MAX_DOTS = 8


def measure_text_width(text: str) -> int:
    return max(1, len(str(text)) * 6 - 1)


def center_x(rect_width: int, text: str) -> int:
    return max(0, (rect_width - measure_text_width(text)) // 2)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def draw_separator_line(pizzoo, y: int, style: str = "solid") -> None:
    if style == "solid":
        pizzoo.draw_rectangle(xy=(0, y), width=64, height=1, color=COLOR_SEPARATOR, filled=True)
    elif style == "dashed":
        for x in range(0, 64, 4):
            pizzoo.draw_rectangle(xy=(x, y), width=2, height=1, color=COLOR_SEPARATOR, filled=True)


def draw_airplane_icon(pizzoo, x: int, y: int, clip_left: int = 0, clip_right: int = 64, color: str = COLOR_PLANE) -> None:
    for px in range(x, x + 5):
        if clip_left <= px < clip_right:
            pizzoo.draw_rectangle(xy=(px, y + 2), width=1, height=1, color=color, filled=True)
    if clip_left <= x + 2 < clip_right:
        pizzoo.draw_rectangle(xy=(x + 2, y), width=1, height=5, color=color, filled=True)
    if clip_left <= x < clip_right:
        pizzoo.draw_rectangle(xy=(x, y + 1), width=1, height=3, color=color, filled=True)


def dots_width(count: int) -> int:
    count = min(count, MAX_DOTS)
    return count * DOT_SIZE + max(0, count - 1) * DOT_GAP


def draw_position_dots(pizzoo, count: int, index: int, x: int, y: int) -> None:
    """Row of small squares marking item `index` of `count` (capped at MAX_DOTS)."""
    if count < 2:
        return
    shown = min(count, MAX_DOTS)
    active = index % shown
    for i in range(shown):
        color = COLOR_DOT_ACTIVE if i == active else COLOR_DOT_IDLE
        pizzoo.draw_rectangle(xy=(x + i * (DOT_SIZE + DOT_GAP), y), width=DOT_SIZE, height=DOT_SIZE, color=color, filled=True)


def format_altitude_feet_raw(altitude_ft) -> str:
    """Format raw altitude in feet with thousands separator."""
    if altitude_ft is None:
        return "---"
    try:
        value = int(round(float(altitude_ft)))
    except (TypeError, ValueError):
        return "---"
    return f"{value:,}"


def format_speed(speed_kts, unit: str) -> str:
    if speed_kts is None:
        return "---Mph" if unit.lower() == "mph" else "---Kt"
    if unit.lower() == "mph":
        return f"{int(round(float(speed_kts) * 1.15078))}Mph"
    return f"{int(round(float(speed_kts)))}Kt"


def format_heading(heading) -> str:
    if heading is None:
        return "---"
    return f"{int(heading) % 360:03d}"


def ensure_clean_render_buffer(pizzoo) -> None:
    """
    Reset render buffer before drawing to avoid frame accumulation after failures.

    The upstream `pizzoo` object can retain buffered frames if `render()` fails
    before it resets internal state.
    """
    reset_buffer = getattr(pizzoo, "reset_buffer", None)
    if not callable(reset_buffer):
        return
    try:
        removed = int(reset_buffer())
    except Exception:  # noqa: BLE001
        return
    if removed > 1:
        LOGGER.warning("Recovered stale Pixoo frame buffer before render (%s old frames removed).", removed)
