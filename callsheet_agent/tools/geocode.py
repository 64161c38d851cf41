"""
Google Maps Geocoding Tool

Converts an address into GPS coordinates. Any lookup problem degrades to
null coordinates with the original address kept, so the model can still
produce a final answer.
"""

import logging
from typing import Optional

import requests

from ..config import config

logger = logging.getLogger(__name__)

# Confidence by Google's location_type; anything else scores 0.5
LOCATION_TYPE_CONFIDENCE = {
    "ROOFTOP": 1.0,
    "RANGE_INTERPOLATED": 0.8,
    "GEOMETRIC_CENTER": 0.6,
    "APPROXIMATE": 0.4,
}


def _unresolved(address: str) -> dict:
    return {
        "latitude": None,
        "longitude": None,
        "formatted_address": address,
        "confidence": 0,
    }


def _country_code(result: dict) -> Optional[str]:
    for component in result.get("address_components", []):
        if "country" in component.get("types", []):
            short_name = component.get("short_name")
            return str(short_name).upper() if short_name else None
    return None


def _lookup(address: str, api_key: str, region: Optional[str] = None) -> dict:
    params = {"address": address, "key": api_key}
    if region:
        params["region"] = region
        params["components"] = f"country:{region}"

    response = requests.get(
        config.tools.geocode_endpoint,
        params=params,
        timeout=config.tools.timeout,
    )
    response.raise_for_status()
    return response.json()


def _first_result(data: dict) -> Optional[dict]:
    if data.get("status") == "REQUEST_DENIED":
        logger.error(
            "Geocoding REQUEST_DENIED - check API key validity and restrictions: %s",
            data.get("error_message"),
        )
        return None
    results = data.get("results") or []
    if data.get("status") != "OK" or not results:
        return None
    return results[0]


def geocode(address: str, region: Optional[str] = None, api_key: Optional[str] = None) -> dict:
    """
    Geocode an address with the Google Maps Geocoding API.

    Args:
        address: Address to geocode (ideally the output of address_normalize)
        region: Optional ISO country code used to bias the lookup
        api_key: Google Maps key; defaults to the configured key

    Returns:
        Dictionary with latitude, longitude, formatted_address and confidence
    """
    if not address or not address.strip():
        raise ValueError("Address is empty. Provide the address to geocode.")

    key = api_key or config.tools.google_maps_api_key
    if not key:
        logger.warning("Google Maps API key not configured; returning unresolved address")
        return _unresolved(address)

    region = region.strip().upper() if region else None

    try:
        result = None
        if region:
            biased = _first_result(_lookup(address, key, region))
            if biased and _country_code(biased) in (None, region):
                result = biased
        if result is None:
            result = _first_result(_lookup(address, key))
    except requests.exceptions.RequestException as e:
        logger.error(f"Geocoding failed for '{address}': {e}")
        return _unresolved(address)

    if result is None:
        logger.warning(f"No geocoding results for '{address}'")
        return _unresolved(address)

    geometry = result.get("geometry", {})
    location = geometry.get("location", {})
    confidence = LOCATION_TYPE_CONFIDENCE.get(geometry.get("location_type"), 0.5)

    logger.debug(
        "Geocoded '%s' -> %s (%s, %s) [confidence: %s]",
        address,
        result.get("formatted_address"),
        location.get("lat"),
        location.get("lng"),
        confidence,
    )
    return {
        "latitude": location.get("lat"),
        "longitude": location.get("lng"),
        "formatted_address": result.get("formatted_address", address),
        "confidence": confidence,
    }


def _handle_geocode(params: dict) -> dict:
    return geocode(params.get("address", ""), region=params.get("region"))


# Register tool with the registry
def _register():
    from .registry import default_registry

    default_registry.register(
        name="geocode_address",
        description=(
            "Geocode an address with the Google Maps API, converting it "
            "into GPS coordinates"
        ),
        parameters={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "The address to geocode (use the result of address_normalize)",
                },
                "region": {
                    "type": "string",
                    "description": "Optional two-letter country code to bias results, e.g. AT or DE",
                },
            },
            "required": ["address"],
        },
        handler=_handle_geocode,
    )


_register()
