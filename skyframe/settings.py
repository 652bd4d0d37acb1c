import logging
import re
from dataclasses import dataclass
from math import isfinite
from pathlib import Path

import config as app_config

from skyframe.flight.provider import resolve_provider_name, validate_provider_config
from skyframe.models import SlideshowSettings


@dataclass(frozen=True)
class AppSettings:
    pixoo_ip: str
    pixoo_port: int
    pixoo_reconnect_seconds: int
    font_name: str
    font_path: str
    animation_frame_speed: int
    color_box: str
    color_text: str
    flight_provider: str
    flight_speed_unit: str
    area_mode: str
    latitude: float
    longitude: float
    radius_km: float
    log_level: str
    log_verbose_events: bool
    logo_dir: str
    photo_manifest_path: str
    area_northwest: tuple | None = None
    area_southeast: tuple | None = None
    area_name: str = ""
    opensky_client_id: str = ""
    opensky_client_secret: str = ""
    poll_active_seconds: int = 15
    poll_idle_seconds: int = 30
    empty_poll_threshold: int = 3
    carousel_seconds: int = 15
    http_timeout_seconds: float = 10.0
    slideshow_interval_ms: int = 10000
    slideshow_shuffle: bool = True
    slideshow_fit_mode: str = "cover"
    crossfade_ms: int = 1200
    clock_corner_seconds: int = 180
    drift_seconds: int = 90
    drift_max_px: int = 8
    logo_bg_color: tuple = (255, 255, 255, 0)
    pixoo_startup_connect_timeout_seconds: int = 120

    def slideshow_defaults(self) -> SlideshowSettings:
        return SlideshowSettings(
            interval=int(self.slideshow_interval_ms),
            shuffle=bool(self.slideshow_shuffle),
            fit_mode=self.slideshow_fit_mode,
        )


def _valid_log_level(level_name: str) -> bool:
    return isinstance(getattr(logging, str(level_name).upper(), None), int)


def _valid_corner(value) -> bool:
    try:
        lat, lon = float(value[0]), float(value[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return False
    return isfinite(lat) and isfinite(lon) and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def validate_settings(settings: AppSettings) -> AppSettings:
    """Validate startup configuration and raise a clear error on invalid values."""
    errors = []

    if not str(settings.pixoo_ip).strip():
        errors.append("PIXOO_IP must be a non-empty string.")
    if int(settings.pixoo_port) < 1 or int(settings.pixoo_port) > 65535:
        errors.append("PIXOO_PORT must be between 1 and 65535.")

    if int(settings.pixoo_reconnect_seconds) <= 0:
        errors.append("PIXOO_RECONNECT_SECONDS must be > 0.")
    if int(settings.pixoo_startup_connect_timeout_seconds) <= 0:
        errors.append("PIXOO_STARTUP_CONNECT_TIMEOUT_SECONDS must be > 0.")
    if int(settings.animation_frame_speed) <= 0:
        errors.append("ANIMATION_FRAME_SPEED must be > 0.")

    for name in (
        "poll_active_seconds",
        "poll_idle_seconds",
        "empty_poll_threshold",
        "carousel_seconds",
        "slideshow_interval_ms",
        "clock_corner_seconds",
        "drift_seconds",
    ):
        if int(getattr(settings, name)) <= 0:
            errors.append(f"{name.upper()} must be > 0.")
    if float(settings.http_timeout_seconds) <= 0:
        errors.append("HTTP_TIMEOUT_SECONDS must be > 0.")
    if int(settings.crossfade_ms) < 0:
        errors.append("CROSSFADE_MS must be >= 0.")
    if int(settings.drift_max_px) < 0:
        errors.append("DRIFT_MAX_PX must be >= 0.")

    provider = resolve_provider_name(settings.flight_provider)
    if provider is None:
        errors.append(f"FLIGHT_PROVIDER must be 'opensky' or 'flightradar24' (alias 'fr24'), got {settings.flight_provider!r}.")
    else:
        check = validate_provider_config(provider, settings.opensky_client_id, settings.opensky_client_secret)
        if not check.valid:
            errors.append(check.message + ".")

    area_mode = str(settings.area_mode).lower()
    if area_mode not in {"circle", "rectangle"}:
        errors.append("AREA_MODE must be 'circle' or 'rectangle'.")
    if not isfinite(float(settings.latitude)) or not (-90.0 <= float(settings.latitude) <= 90.0):
        errors.append("LATITUDE must be a finite value in range [-90, 90].")
    if not isfinite(float(settings.longitude)) or not (-180.0 <= float(settings.longitude) <= 180.0):
        errors.append("LONGITUDE must be a finite value in range [-180, 180].")
    if area_mode == "circle" and not float(settings.radius_km) > 0:
        errors.append("RADIUS_KM must be > 0.")
    if area_mode == "rectangle":
        if not _valid_corner(settings.area_northwest):
            errors.append("AREA_NORTHWEST must be a (latitude, longitude) pair when AREA_MODE is 'rectangle'.")
        if not _valid_corner(settings.area_southeast):
            errors.append("AREA_SOUTHEAST must be a (latitude, longitude) pair when AREA_MODE is 'rectangle'.")

    if str(settings.flight_speed_unit).lower() not in {"mph", "kt"}:
        errors.append("FLIGHT_SPEED_UNIT must be 'mph' or 'kt'.")
    if str(settings.slideshow_fit_mode).lower() not in {"cover", "contain"}:
        errors.append("SLIDESHOW_FIT_MODE must be 'cover' or 'contain'.")
    if not _valid_log_level(settings.log_level):
        errors.append("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL (or equivalent).")

    font_path = Path(settings.font_path).expanduser()
    if not font_path.is_file():
        errors.append(f"FONT_PATH does not exist or is not a file: {settings.font_path}")
    if settings.photo_manifest_path and not Path(settings.photo_manifest_path).expanduser().is_file():
        errors.append(f"PHOTO_MANIFEST_PATH does not exist or is not a file: {settings.photo_manifest_path}")

    if errors:
        raise ValueError("Invalid configuration:\n- " + "\n- ".join(errors))
    return settings


def load_settings() -> AppSettings:
    try:
        settings = AppSettings(
            pixoo_ip=app_config.PIXOO_IP,
            pixoo_port=app_config.PIXOO_PORT,
            pixoo_reconnect_seconds=app_config.PIXOO_RECONNECT_SECONDS,
            font_name=app_config.FONT_NAME,
            font_path=app_config.FONT_PATH,
            animation_frame_speed=app_config.ANIMATION_FRAME_SPEED,
            color_box=app_config.COLOR_BOX,
            color_text=app_config.COLOR_TEXT,
            flight_provider=app_config.FLIGHT_PROVIDER,
            flight_speed_unit=app_config.FLIGHT_SPEED_UNIT,
            area_mode=str(getattr(app_config, "AREA_MODE", "circle")).lower(),
            latitude=app_config.LATITUDE,
            longitude=app_config.LONGITUDE,
            radius_km=app_config.RADIUS_KM,
            log_level=app_config.LOG_LEVEL,
            log_verbose_events=app_config.LOG_VERBOSE_EVENTS,
            logo_dir=app_config.LOGO_DIR,
            photo_manifest_path=app_config.PHOTO_MANIFEST_PATH,
            area_northwest=getattr(app_config, "AREA_NORTHWEST", None),
            area_southeast=getattr(app_config, "AREA_SOUTHEAST", None),
            area_name=getattr(app_config, "AREA_NAME", ""),
            opensky_client_id=getattr(app_config, "OPENSKY_CLIENT_ID", ""),
            opensky_client_secret=getattr(app_config, "OPENSKY_CLIENT_SECRET", ""),
            poll_active_seconds=getattr(app_config, "POLL_ACTIVE_SECONDS", 15),
            poll_idle_seconds=getattr(app_config, "POLL_IDLE_SECONDS", 30),
            empty_poll_threshold=getattr(app_config, "EMPTY_POLL_THRESHOLD", 3),
            carousel_seconds=getattr(app_config, "CAROUSEL_SECONDS", 15),
            http_timeout_seconds=getattr(app_config, "HTTP_TIMEOUT_SECONDS", 10.0),
            slideshow_interval_ms=getattr(app_config, "SLIDESHOW_INTERVAL_MS", 10000),
            slideshow_shuffle=getattr(app_config, "SLIDESHOW_SHUFFLE", True),
            slideshow_fit_mode=str(getattr(app_config, "SLIDESHOW_FIT_MODE", "cover")).lower(),
            crossfade_ms=getattr(app_config, "CROSSFADE_MS", 1200),
            clock_corner_seconds=getattr(app_config, "CLOCK_CORNER_SECONDS", 180),
            drift_seconds=getattr(app_config, "DRIFT_SECONDS", 90),
            drift_max_px=getattr(app_config, "DRIFT_MAX_PX", 8),
            logo_bg_color=tuple(getattr(app_config, "LOGO_BG_COLOR", (255, 255, 255, 0))),
            pixoo_startup_connect_timeout_seconds=getattr(app_config, "PIXOO_STARTUP_CONNECT_TIMEOUT_SECONDS", 120),
        )
    except AttributeError as exc:
        attr_match = re.search(r"has no attribute '([^']+)'", str(exc))
        missing_attr = attr_match.group(1) if attr_match else str(exc)
        raise ValueError(f"Invalid configuration:\n- Missing required config setting: {missing_attr}") from exc
    return validate_settings(settings)
