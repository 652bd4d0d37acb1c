"""
Configuration settings for the Skyframe Pixoo display.

Copy this file to config.py and adjust the values for your setup.
"""

# =============================================================================
# Pixoo Device Settings
# =============================================================================
PIXOO_IP = "192.168.x.x"   # Replace with your Pixoo's IP address
PIXOO_PORT = 80
# Reconnect delay (seconds) when Pixoo is unreachable or drops from network.
PIXOO_RECONNECT_SECONDS = 60
# Give up at startup if the device is not reachable within this many seconds.
PIXOO_STARTUP_CONNECT_TIMEOUT_SECONDS = 120

# =============================================================================
# Flight Provider
# =============================================================================
# "flightradar24" (alias "fr24", no account needed) or "opensky".
FLIGHT_PROVIDER = "flightradar24"
# OpenSky OAuth2 client credentials (required when FLIGHT_PROVIDER = "opensky").
OPENSKY_CLIENT_ID = ""
OPENSKY_CLIENT_SECRET = ""
# Timeout for every provider request (seconds).
HTTP_TIMEOUT_SECONDS = 10

# =============================================================================
# Area to Watch
# =============================================================================
# "circle" uses LATITUDE/LONGITUDE/RADIUS_KM.
# "rectangle" uses AREA_NORTHWEST/AREA_SOUTHEAST corners as (lat, lon).
AREA_MODE = "circle"
LATITUDE = 52.5200    # Replace with your latitude
LONGITUDE = 13.4050   # Replace with your longitude
RADIUS_KM = 50
AREA_NORTHWEST = (52.70, 13.00)
AREA_SOUTHEAST = (52.30, 13.80)
AREA_NAME = "Berlin"

# =============================================================================
# Polling and Carousel
# =============================================================================
# Poll interval after a poll that returned flights / returned none.
POLL_ACTIVE_SECONDS = 15
POLL_IDLE_SECONDS = 30
# Consecutive empty or failed polls before switching to the photo slideshow.
EMPTY_POLL_THRESHOLD = 3
# Seconds each flight stays on screen when several are in range.
CAROUSEL_SECONDS = 15

# =============================================================================
# Photo Slideshow
# =============================================================================
# JSON file: a list of {"id", "src", "caption"} or
# {"photos": [...], "slideshow": {"interval", "shuffle", "fitMode"}}.
PHOTO_MANIFEST_PATH = "photos/manifest.json"
SLIDESHOW_INTERVAL_MS = 10000
SLIDESHOW_SHUFFLE = True
# "cover" crops to fill the screen, "contain" letterboxes.
SLIDESHOW_FIT_MODE = "cover"
CROSSFADE_MS = 1200
# Burn-in avoidance: clock/dots corner toggle and overlay drift.
CLOCK_CORNER_SECONDS = 180
DRIFT_SECONDS = 90
DRIFT_MAX_PX = 8

# =============================================================================
# Display Settings
# =============================================================================
FONT_NAME = "splitflap"
FONT_PATH = "./fonts/splitflap.bdf"
LOGO_DIR = "airline_logos"

# Animation frame speed in milliseconds for the flight card.
ANIMATION_FRAME_SPEED = 300

# Flight speed display unit: "mph" or "kt" (displayed as Mph/Kt)
FLIGHT_SPEED_UNIT = "kt"

# Verbose runtime logging for mode changes, polling, and slideshow events.
LOG_VERBOSE_EVENTS = True

# Standard Python logging level (e.g. DEBUG, INFO, WARNING, ERROR).
LOG_LEVEL = "INFO"

# =============================================================================
# Colors
# =============================================================================
COLOR_TEXT = "#FFFF00"           # Yellow - main text color
COLOR_BOX = "#454545"            # Dark gray - info boxes

# Background color for airline logos (RGBA)
LOGO_BG_COLOR = (186, 186, 186, 255)
