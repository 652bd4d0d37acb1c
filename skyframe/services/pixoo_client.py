"""
Pixoo64 connection handling.

Startup blocks (bounded by PIXOO_STARTUP_CONNECT_TIMEOUT_SECONDS) until the
device answers. Once the display loop is running, reconnects are single
attempts so a missing device never stalls the scheduler.
"""

import logging
import socket
from time import monotonic, sleep

from pizzoo import Pizzoo

LOGGER = logging.getLogger("skyframe")

RENDER_POST_TIMEOUT_SECONDS = 5.0
REACHABILITY_TIMEOUT_SECONDS = 2.0
_render_timeout_installed = False


def _install_pizzoo_http_timeout_patch(timeout_seconds: float = RENDER_POST_TIMEOUT_SECONDS) -> bool:
    """Make pizzoo's render posts time out instead of hanging on a vanished device."""
    global _render_timeout_installed
    if _render_timeout_installed:
        return True
    try:
        import pizzoo._renderers as renderers
    except ImportError as exc:
        LOGGER.warning("Pixoo render timeout not applied: %s", exc)
        return False

    post = getattr(renderers, "post", None)
    if not callable(post):
        LOGGER.warning("Pixoo render timeout not applied: pizzoo renderer has no post().")
        return False

    def post_with_timeout(*args, **kwargs):
        kwargs.setdefault("timeout", timeout_seconds)
        return post(*args, **kwargs)

    renderers.post = post_with_timeout
    _render_timeout_installed = True
    LOGGER.info("Pixoo render posts now time out after %ss.", timeout_seconds)
    return True


class PixooClient:
    def __init__(self, settings, pizzoo_factory=None, sleep_fn=None, clock_fn=None):
        self.settings = settings
        self.pizzoo_factory = pizzoo_factory or (lambda ip: Pizzoo(ip, debug=True))
        self.sleep_fn = sleep_fn or sleep
        self.clock_fn = clock_fn or monotonic

    @property
    def address(self) -> str:
        return f"{self.settings.pixoo_ip}:{self.settings.pixoo_port}"

    def _load_font(self, pixoo) -> None:
        name, path = self.settings.font_name, self.settings.font_path
        try:
            pixoo.load_font(name, path)
        except Exception as exc:
            raise RuntimeError(f"Failed to load font '{name}' from '{path}': {exc}") from exc

    def _open(self):
        _install_pizzoo_http_timeout_patch()
        pixoo = self.pizzoo_factory(self.settings.pixoo_ip)
        self._load_font(pixoo)
        LOGGER.info("Pixoo connected at %s.", self.address)
        return pixoo

    def connect_once(self):
        """One connection attempt; None while the device is away. Font errors still raise."""
        try:
            return self._open()
        except RuntimeError:
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Pixoo at %s still unavailable: %s", self.address, exc)
            return None

    def connect_with_retry(self, fail_fast: bool = False):
        """Retry every PIXOO_RECONNECT_SECONDS; with fail_fast, give up after the startup timeout."""
        limit = float(self.settings.pixoo_startup_connect_timeout_seconds)
        deadline = self.clock_fn() + limit if fail_fast else None
        while True:
            try:
                return self._open()
            except RuntimeError:
                raise
            except Exception as exc:
                if deadline is not None and self.clock_fn() >= deadline:
                    raise RuntimeError(f"Failed to connect to Pixoo at {self.address} within {limit:g}s: {exc}") from exc
                LOGGER.warning("Pixoo unavailable (%s). Retrying in %ss...", exc, self.settings.pixoo_reconnect_seconds)
                self.sleep_fn(self.settings.pixoo_reconnect_seconds)

    def is_reachable(self, timeout_seconds: float = REACHABILITY_TIMEOUT_SECONDS) -> bool:
        try:
            with socket.create_connection((self.settings.pixoo_ip, self.settings.pixoo_port), timeout=timeout_seconds):
                return True
        except OSError:
            return False
