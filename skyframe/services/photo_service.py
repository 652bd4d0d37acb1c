import json
import logging
from io import BytesIO
from pathlib import Path

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from skyframe.models import Photo, SlideshowSettings

LOGGER = logging.getLogger("skyframe")

DISPLAY_SIZE = 64


def load_photo_manifest(path, defaults: SlideshowSettings | None = None) -> tuple[tuple[Photo, ...], SlideshowSettings]:
    """
    Read the photo list and optional slideshow overrides.

    Accepts either a bare list of `{id, src, caption?}` or an object
    `{"photos": [...], "slideshow": {"interval", "shuffle", "fitMode"}}`.
    Relative `src` paths resolve against the manifest's directory.
    """
    defaults = defaults or SlideshowSettings()
    if not path:
        return (), defaults
    manifest_path = Path(path)
    try:
        raw = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        LOGGER.warning("Photo manifest not found: %s", manifest_path)
        return (), defaults
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.warning("Failed to read photo manifest (%s): %s", manifest_path, exc)
        return (), defaults

    if isinstance(raw, list):
        entries, overrides = raw, None
    elif isinstance(raw, dict):
        entries, overrides = raw.get("photos") or [], raw.get("slideshow")
    else:
        LOGGER.warning("Photo manifest has invalid format (expected list or object): %s", manifest_path)
        return (), defaults

    photos = []
    for entry in entries:
        if isinstance(entry, str):
            entry = {"src": entry}
        if not isinstance(entry, dict):
            continue
        photo = Photo.from_dict(entry)
        if not photo.src:
            LOGGER.debug("Skipping photo entry without src: %s", entry)
            continue
        if "://" not in photo.src and not Path(photo.src).is_absolute():
            photo = Photo(id=photo.id, src=str(manifest_path.parent / photo.src), caption=photo.caption)
        photos.append(photo)

    settings = SlideshowSettings.from_dict(overrides if isinstance(overrides, dict) else None, defaults=defaults)
    LOGGER.info("Loaded %s photos from %s.", len(photos), manifest_path)
    return tuple(photos), settings


def fit_image(image: Image.Image, fit_mode: str = "cover", size: int = DISPLAY_SIZE) -> Image.Image:
    """Scale to the square display: `cover` crops, `contain` letterboxes on black."""
    image = image.convert("RGB")
    if fit_mode == "contain":
        contained = ImageOps.contain(image, (size, size), method=Image.LANCZOS)
        canvas = Image.new("RGB", (size, size), (0, 0, 0))
        canvas.paste(contained, ((size - contained.width) // 2, (size - contained.height) // 2))
        return canvas
    return ImageOps.fit(image, (size, size), method=Image.LANCZOS)


class PhotoLoader:
    """Callable used by the slideshow to preload a photo; returns None on failure."""

    def __init__(self, fit_mode: str = "cover", size: int = DISPLAY_SIZE, session=None, timeout_seconds: float = 10.0):
        self.fit_mode = fit_mode
        self.size = size
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def _read_bytes(self, src: str) -> bytes:
        if src.startswith(("http://", "https://")):
            response = self.session.get(src, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.content
        return Path(src).read_bytes()

    def __call__(self, photo: Photo) -> Image.Image | None:
        try:
            data = self._read_bytes(photo.src)
            with Image.open(BytesIO(data)) as image:
                image = ImageOps.exif_transpose(image)
                return fit_image(image, self.fit_mode, self.size)
        except (requests.exceptions.RequestException, OSError, UnidentifiedImageError, ValueError) as exc:
            LOGGER.warning("Photo %s could not be loaded: %s", photo.id or photo.src, exc)
            return None
