"""Airline logo cache and Pillow resizing for the flight card."""

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from skyframe.models import UNKNOWN_CODE

LOGGER = logging.getLogger("skyframe")

LOGO_SIZE = (64, 20)


def _usable_code(code) -> str | None:
    code = str(code or "").strip()
    if not code or code == UNKNOWN_CODE:
        return None
    return code


def fit_logo(logo_bytes: bytes, size=LOGO_SIZE, bg=(255, 255, 255, 0)) -> bytes | None:
    """Scale a logo into `size`, centred on a `bg` canvas. Returns PNG bytes or None."""
    try:
        src = Image.open(BytesIO(logo_bytes)).convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    if src.width == 0 or src.height == 0:
        return None

    flattened = Image.new("RGBA", src.size, bg)
    flattened.paste(src, mask=src.getchannel("A"))

    target_w, target_h = size
    fitted = ImageOps.contain(flattened, (target_w, target_h), method=Image.LANCZOS)
    fitted = ImageOps.autocontrast(fitted.convert("RGB"), cutoff=0).convert("RGBA")
    fitted = fitted.filter(ImageFilter.UnsharpMask(radius=0.8, percent=150, threshold=2))

    canvas = Image.new("RGBA", (target_w, target_h), bg)
    canvas.paste(fitted, ((target_w - fitted.width) // 2, (target_h - fitted.height) // 2), fitted)
    out = BytesIO()
    canvas.save(out, format="PNG", optimize=True)
    return out.getvalue()


class LogoManager:
    """Resolve airline logos to PNG files under `logo_dir`."""

    def __init__(self, logo_dir: str | Path | None, bg_color=(255, 255, 255, 0)):
        self.logo_dir = Path(logo_dir) if logo_dir else None
        self.bg_color = tuple(bg_color)
        self._misses: set[str] = set()
        if self.logo_dir:
            self.logo_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def file_stem(iata: str | None, icao: str | None) -> str | None:
        base = _usable_code(iata) or _usable_code(icao)
        if not base:
            return None
        safe = "".join(c for c in base if c.isalnum() or c in ("-", "_"))
        return safe.upper() or None

    def cached_path(self, iata: str | None, icao: str | None) -> Path | None:
        stem = self.file_stem(iata, icao)
        if not self.logo_dir or not stem:
            return None
        path = self.logo_dir / f"{stem}.png"
        return path if path.exists() else None

    def resolve_or_fetch_logo(self, provider, iata: str | None, icao: str | None) -> str | None:
        """Return a logo path, fetching through the provider on a cache miss."""
        stem = self.file_stem(iata, icao)
        if not self.logo_dir or not stem:
            return None
        cached = self.cached_path(iata, icao)
        if cached:
            return str(cached)
        if stem in self._misses or not hasattr(provider, "get_airline_logo"):
            return None

        try:
            result = provider.get_airline_logo(_usable_code(iata), _usable_code(icao))
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Airline logo fetch failed for %s: %s", stem, exc)
            self._misses.add(stem)
            return None

        # FlightRadarAPI returns (bytes, extension).
        logo_bytes = result[0] if isinstance(result, tuple) and result else result
        if not logo_bytes:
            LOGGER.debug("No airline logo available for %s.", stem)
            self._misses.add(stem)
            return None

        to_save = fit_logo(logo_bytes, bg=self.bg_color) or logo_bytes
        path = self.logo_dir / f"{stem}.png"
        try:
            path.write_bytes(to_save)
        except OSError as exc:
            LOGGER.warning("Could not save airline logo %s: %s", path, exc)
            self._misses.add(stem)
            return None
        LOGGER.info("Saved airline logo %s.", path)
        return str(path)
