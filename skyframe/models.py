from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_CODE = "unknown"
UNKNOWN_AIRLINE = "Unknown Airline"
UNKNOWN_AIRPORT = "Unknown Airport"


class FlightStatus(str, Enum):
    CLIMBING = "climbing"
    DESCENDING = "descending"
    CRUISING = "cruising"
    APPROACHING = "approaching"
    LANDED = "landed"


class DisplayMode(str, Enum):
    FLIGHT = "flight"
    PHOTOS = "photos"


class FeedUnits(str, Enum):
    """Units a provider reports altitude/speed/vertical rate in."""

    METRIC = "metric"  # m, m/s, m/s
    AVIATION = "aviation"  # ft, kt, ft/min


@dataclass(frozen=True)
class RectangleBounds:
    north: float
    south: float
    east: float
    west: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.north + self.south) / 2, (self.east + self.west) / 2

    def to_dict(self) -> dict:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


@dataclass
class RawFlight:
    """One provider record after positional parsing, still in provider units."""

    id: str | None = None
    icao24: str = ""
    callsign: str = ""
    flight_number: str = ""
    airline: str = ""
    aircraft_type: str = ""
    registration: str = ""
    origin: str = ""
    destination: str = ""
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    heading: float | None = None
    velocity: float | None = None
    vertical_rate: float | None = None
    on_ground: bool = False
    timestamp: int | None = None


@dataclass
class RawFlightBatch:
    source: str
    units: FeedUnits
    records: list[RawFlight]
    timestamp: int
    bounds: RectangleBounds | None = None
    center: tuple[float, float] | None = None
    radius_km: float | None = None
    location: str | None = None


@dataclass(frozen=True)
class Airline:
    name: str
    iata: str
    icao: str
    logo: str | None = None


@dataclass(frozen=True)
class Aircraft:
    type: str
    icao: str
    registration: str


@dataclass(frozen=True)
class Airport:
    airport: str
    iata: str
    city: str = ""
    country: str = ""
    time: str | None = None


@dataclass(frozen=True)
class Position:
    altitude: int
    speed: int
    heading: int
    vertical_speed: int
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Flight:
    id: str
    flight_number: str
    callsign: str
    airline: Airline
    aircraft: Aircraft
    departure: Airport
    arrival: Airport
    position: Position
    status: FlightStatus

    def to_dict(self) -> dict:
        def airport(value: Airport) -> dict:
            data = {"airport": value.airport, "iata": value.iata, "city": value.city, "country": value.country}
            if value.time:
                data["time"] = value.time
            return data

        airline = {"name": self.airline.name, "iata": self.airline.iata, "icao": self.airline.icao}
        if self.airline.logo:
            airline["logo"] = self.airline.logo
        return {
            "id": self.id,
            "flightNumber": self.flight_number,
            "callsign": self.callsign,
            "airline": airline,
            "aircraft": {
                "type": self.aircraft.type,
                "icao": self.aircraft.icao,
                "registration": self.aircraft.registration,
            },
            "departure": airport(self.departure),
            "arrival": airport(self.arrival),
            "position": {
                "altitude": self.position.altitude,
                "speed": self.position.speed,
                "heading": self.position.heading,
                "verticalSpeed": self.position.vertical_speed,
                "latitude": self.position.latitude,
                "longitude": self.position.longitude,
            },
            "status": self.status.value,
        }


@dataclass(frozen=True)
class FeedSnapshot:
    flights: tuple[Flight, ...]
    source: str
    timestamp: int
    center: tuple[float, float] | None = None
    radius_km: float | None = None
    location: str | None = None

    def to_dict(self) -> dict:
        return {
            "flights": [flight.to_dict() for flight in self.flights],
            "source": self.source,
            "timestamp": self.timestamp,
            "center": {"lat": self.center[0], "lon": self.center[1]} if self.center else None,
            "radius": self.radius_km,
            "location": self.location,
        }


@dataclass(frozen=True)
class ProviderToken:
    access_token: str
    expiry: float  # epoch seconds

    def is_valid(self, now: float) -> bool:
        return now < self.expiry


@dataclass(frozen=True)
class Photo:
    id: str
    src: str
    caption: str | None = None

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            id=str(data.get("id") or data.get("src") or ""),
            src=str(data.get("src") or data.get("url") or ""),
            caption=data.get("caption") or None,
        )


@dataclass(frozen=True)
class SlideshowSettings:
    interval: int = 10000
    shuffle: bool = True
    fit_mode: str = "cover"

    @classmethod
    def from_dict(cls, data: dict | None, defaults: "SlideshowSettings | None" = None):
        data = data or {}
        defaults = defaults or cls()
        try:
            interval = int(data.get("interval", defaults.interval))
        except (TypeError, ValueError):
            interval = defaults.interval
        if interval <= 0:
            interval = defaults.interval
        shuffle = defaults.shuffle if data.get("shuffle") is None else bool(data.get("shuffle"))
        fit_mode = data.get("fitMode", data.get("fit_mode", defaults.fit_mode))
        return cls(interval=interval, shuffle=shuffle, fit_mode="contain" if fit_mode == "contain" else "cover")


@dataclass
class DisplayState:
    mode: DisplayMode = DisplayMode.FLIGHT
    empty_streak: int = 0
    current_flight_index: int = 0
    flights: tuple[Flight, ...] = field(default_factory=tuple)
