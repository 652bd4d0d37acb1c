"""Airport name/city/country lookup backed by airportsdata."""

import logging
from dataclasses import replace

from skyframe.models import UNKNOWN_CODE, Airport

LOGGER = logging.getLogger("skyframe")


class AirportDirectory:
    """IATA-keyed airport table, loaded lazily on first lookup."""

    def __init__(self, table: dict | None = None):
        self._table = table

    def _ensure_table(self) -> dict:
        if self._table is None:
            try:
                import airportsdata
            except ModuleNotFoundError:
                LOGGER.warning("Missing dependency `airportsdata`; install with: pip install airportsdata")
                self._table = {}
            else:
                self._table = airportsdata.load("IATA")
        return self._table

    def lookup(self, iata: str | None) -> dict | None:
        code = str(iata or "").strip().upper()
        if not code or code == UNKNOWN_CODE.upper():
            return None
        return self._ensure_table().get(code)

    def enrich(self, airport: Airport) -> Airport:
        record = self.lookup(airport.iata)
        if not record:
            return airport
        return replace(
            airport,
            airport=record.get("name") or airport.airport,
            city=record.get("city") or airport.city,
            country=record.get("country") or airport.country,
        )
