import logging

from .common import ensure_clean_render_buffer
from .flight_view import TEXT_ONLY, draw_info_page, draw_top_section

LOGGER = logging.getLogger("skyframe")


def area_label(settings) -> str:
    if settings.area_name:
        return str(settings.area_name)[:6].upper()
    if settings.area_mode == "rectangle":
        return "BOX"
    return f"{max(1, int(round(float(settings.radius_km))))}KM"


def build_and_send_holding_screen(pizzoo, settings, status: str = "SCANNING") -> None:
    """Static card shown before the first flight arrives or when no photos are configured."""
    ensure_clean_render_buffer(pizzoo)
    pizzoo.cls()
    draw_top_section(pizzoo, settings, logo=None, origin="---", destination="---", airline_name=status, y_route=20)
    draw_info_page(pizzoo, settings, (TEXT_ONLY, status[:10]), ("AREA", area_label(settings)))
    LOGGER.info("Sending holding screen (%s).", status)
    pizzoo.render(frame_speed=settings.animation_frame_speed)
