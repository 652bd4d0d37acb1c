import logging
from datetime import datetime

from PIL import Image

from .common import (
    DISPLAY_SIZE,
    clamp,
    dots_width,
    draw_position_dots,
    ensure_clean_render_buffer,
    measure_text_width,
)

LOGGER = logging.getLogger("skyframe")

COLOR_CLOCK = "#FFFFFF"
CLOCK_Y = 1
DOTS_Y = 60
EDGE_MARGIN = 2
CROSSFADE_STEPS = 6


def overlay_x(corner: str, width: int, offset_x: int) -> int:
    """Left or right anchored x, shifted by the drift offset and kept on screen."""
    base = EDGE_MARGIN if corner == "left" else DISPLAY_SIZE - width - EDGE_MARGIN
    return clamp(base + offset_x, 0, max(0, DISPLAY_SIZE - width))


def _blank() -> Image.Image:
    return Image.new("RGB", (DISPLAY_SIZE, DISPLAY_SIZE), (0, 0, 0))


def _draw_overlays(pizzoo, settings, engine, clock_text: str) -> None:
    offset_x, offset_y = engine.offset
    clock_w = measure_text_width(clock_text)
    clock_y = clamp(CLOCK_Y + offset_y, 0, DISPLAY_SIZE - 8)
    pizzoo.draw_text(
        clock_text,
        xy=(overlay_x(engine.clock_corner, clock_w, offset_x), clock_y),
        font=settings.font_name,
        color=COLOR_CLOCK,
    )
    count = len(engine.photos)
    index = engine.active_layer.photo_index or 0
    dots_y = clamp(DOTS_Y + offset_y, 0, DISPLAY_SIZE - 2)
    draw_position_dots(pizzoo, count, index, x=overlay_x(engine.dots_corner, dots_width(count), offset_x), y=dots_y)


def build_and_send_photo_frame(pizzoo, settings, engine, now: datetime | None = None) -> None:
    """Show the active photo with clock and position dots at their drifted corners."""
    ensure_clean_render_buffer(pizzoo)
    clock_text = (now or datetime.now()).strftime("%H:%M")
    image = engine.active_layer.image or _blank()

    pizzoo.cls()
    pizzoo.draw_image(image, xy=(0, 0), size=(DISPLAY_SIZE, DISPLAY_SIZE), resample_method=Image.LANCZOS)
    _draw_overlays(pizzoo, settings, engine, clock_text)
    pizzoo.render(frame_speed=settings.animation_frame_speed)


def build_and_send_crossfade(pizzoo, settings, engine, now: datetime | None = None, steps: int = CROSSFADE_STEPS) -> None:
    """
    Send the active->hidden blend as one device animation.

    The Pixoo cannot take per-frame pushes fast enough, so the crossfade is
    pre-computed into `steps` frames spread over the crossfade duration.
    """
    ensure_clean_render_buffer(pizzoo)
    clock_text = (now or datetime.now()).strftime("%H:%M")
    source = (engine.active_layer.image or _blank()).convert("RGB")
    target = (engine.hidden_layer.image or _blank()).convert("RGB")
    steps = max(1, int(steps))

    for step in range(1, steps + 1):
        pizzoo.cls()
        blended = Image.blend(source, target, step / steps)
        pizzoo.draw_image(blended, xy=(0, 0), size=(DISPLAY_SIZE, DISPLAY_SIZE), resample_method=Image.LANCZOS)
        _draw_overlays(pizzoo, settings, engine, clock_text)
        if step < steps:
            pizzoo.add_frame()

    frame_speed = max(1, int(engine.crossfade_ms / steps))
    LOGGER.debug("Sending %s-step crossfade (%sms per frame).", steps, frame_speed)
    pizzoo.render(frame_speed=frame_speed)
