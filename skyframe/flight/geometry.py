"""Bounding box and distance helpers for area queries."""

from math import asin, cos, isfinite, radians, sin, sqrt

from skyframe.models import RectangleBounds

MIN_CIRCLE_OFFSET_DEG = 0.05


def validate_coordinates(latitude, longitude) -> tuple[float, float]:
    """Return (lat, lon) as floats or raise ValueError for unusable input."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Coordinates must be numeric: {latitude!r}, {longitude!r}") from exc
    if not isfinite(lat) or not (-90.0 <= lat <= 90.0):
        raise ValueError(f"Latitude must be a finite value in range [-90, 90]: {latitude!r}")
    if not isfinite(lon) or not (-180.0 <= lon <= 180.0):
        raise ValueError(f"Longitude must be a finite value in range [-180, 180]: {longitude!r}")
    return lat, lon


def sanitize_bounds(bounds: RectangleBounds) -> RectangleBounds:
    """Swap inverted edges so north >= south and east >= west."""
    return RectangleBounds(
        north=max(bounds.north, bounds.south),
        south=min(bounds.north, bounds.south),
        east=max(bounds.east, bounds.west),
        west=min(bounds.east, bounds.west),
    )


def bounds_from_circle(latitude: float, longitude: float, radius_km: float) -> RectangleBounds:
    """
    Approximate a search circle with a square box.

    The offset is radius/100 degrees (never below 0.05) on both axes. This is
    not geodesically exact and is not corrected near the poles.
    """
    offset = max(float(radius_km) / 100.0, MIN_CIRCLE_OFFSET_DEG)
    return sanitize_bounds(
        RectangleBounds(
            north=latitude + offset,
            south=latitude - offset,
            east=longitude + offset,
            west=longitude - offset,
        )
    )


def _corner(point) -> tuple[float, float]:
    if isinstance(point, dict):
        return float(point["latitude"]), float(point["longitude"])
    lat, lon = point
    return float(lat), float(lon)


def bounds_from_rectangle(northwest, southeast) -> RectangleBounds:
    """Build bounds from NW/SE corners given as (lat, lon) or {latitude, longitude}."""
    nw_lat, nw_lon = _corner(northwest)
    se_lat, se_lon = _corner(southeast)
    return sanitize_bounds(RectangleBounds(north=nw_lat, south=se_lat, east=se_lon, west=nw_lon))


def approximate_radius_km(bounds: RectangleBounds) -> float:
    lat_diff = bounds.north - bounds.south
    lon_diff = bounds.east - bounds.west
    return sqrt(lat_diff * lat_diff + lon_diff * lon_diff) * 111.0 / 2


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance in kilometers."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(a))
    return c * 6371.0
