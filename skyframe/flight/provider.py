"""Provider factory keyed on configuration."""

import logging
from dataclasses import dataclass

from skyframe.flight.providers.flightradar import FlightRadarProvider
from skyframe.flight.providers.opensky import OpenSkyProvider

LOGGER = logging.getLogger("skyframe")

PROVIDER_ALIASES = {
    "opensky": "opensky",
    "flightradar24": "flightradar24",
    "fr24": "flightradar24",
}


@dataclass(frozen=True)
class ProviderValidation:
    valid: bool
    provider: str
    message: str


def available_providers() -> list[str]:
    return ["opensky", "flightradar24"]


def resolve_provider_name(name) -> str | None:
    return PROVIDER_ALIASES.get(str(name or "").strip().lower())


def validate_provider_config(name, client_id: str = "", client_secret: str = "") -> ProviderValidation:
    provider = resolve_provider_name(name)
    if provider == "opensky":
        has_credentials = bool(client_id and client_secret)
        return ProviderValidation(
            valid=has_credentials,
            provider=provider,
            message=(
                "OpenSky credentials configured"
                if has_credentials
                else "OpenSky requires OPENSKY_CLIENT_ID and OPENSKY_CLIENT_SECRET"
            ),
        )
    if provider == "flightradar24":
        return ProviderValidation(valid=True, provider=provider, message="FlightRadar24 requires no authentication")
    return ProviderValidation(
        valid=False,
        provider=str(name),
        message=f"Unknown provider '{name}'. Available: {', '.join(available_providers())}",
    )


def create_provider(settings, session=None):
    """Build the adapter selected by `settings.flight_provider`."""
    provider = resolve_provider_name(settings.flight_provider)
    if provider == "opensky":
        LOGGER.info("Creating OpenSky Network adapter.")
        return OpenSkyProvider(
            client_id=settings.opensky_client_id,
            client_secret=settings.opensky_client_secret,
            session=session,
            timeout_seconds=settings.http_timeout_seconds,
        )
    if provider != "flightradar24":
        LOGGER.warning("Unknown provider '%s', defaulting to FlightRadar24.", settings.flight_provider)
    else:
        LOGGER.info("Creating FlightRadar24 adapter.")
    return FlightRadarProvider(session=session, timeout_seconds=settings.http_timeout_seconds)
