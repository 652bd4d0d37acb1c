import sys
import types


if "config" not in sys.modules:
    config = types.ModuleType("config")
    config.PIXOO_IP = "127.0.0.1"
    config.PIXOO_PORT = 80
    config.PIXOO_RECONNECT_SECONDS = 5
    config.PIXOO_STARTUP_CONNECT_TIMEOUT_SECONDS = 120
    config.FONT_NAME = "splitflap"
    config.FONT_PATH = "./fonts/splitflap.bdf"
    config.ANIMATION_FRAME_SPEED = 300
    config.COLOR_BOX = "#454545"
    config.COLOR_TEXT = "#FFFF00"
    config.FLIGHT_PROVIDER = "flightradar24"
    config.OPENSKY_CLIENT_ID = ""
    config.OPENSKY_CLIENT_SECRET = ""
    config.HTTP_TIMEOUT_SECONDS = 10
    config.FLIGHT_SPEED_UNIT = "kt"
    config.AREA_MODE = "circle"
    config.LATITUDE = 51.47
    config.LONGITUDE = -0.45
    config.RADIUS_KM = 50
    config.AREA_NORTHWEST = (51.7, -0.8)
    config.AREA_SOUTHEAST = (51.2, 0.1)
    config.AREA_NAME = ""
    config.POLL_ACTIVE_SECONDS = 15
    config.POLL_IDLE_SECONDS = 30
    config.EMPTY_POLL_THRESHOLD = 3
    config.CAROUSEL_SECONDS = 15
    config.PHOTO_MANIFEST_PATH = ""
    config.SLIDESHOW_INTERVAL_MS = 10000
    config.SLIDESHOW_SHUFFLE = True
    config.SLIDESHOW_FIT_MODE = "cover"
    config.CROSSFADE_MS = 1200
    config.CLOCK_CORNER_SECONDS = 180
    config.DRIFT_SECONDS = 90
    config.DRIFT_MAX_PX = 8
    config.LOG_LEVEL = "INFO"
    config.LOG_VERBOSE_EVENTS = True
    config.LOGO_DIR = "airline_logos"
    config.LOGO_BG_COLOR = (186, 186, 186, 255)
    sys.modules["config"] = config
