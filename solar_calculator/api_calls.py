"""
NREL PVWatts integration for estimating site production factors.
"""

import logging
from typing import Optional

import requests

from .config import CalculatorConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

PVWATTS_URL = "https://developer.nrel.gov/api/pvwatts/v8.json"


def get_nrel_production_factor(
    latitude: float,
    longitude: float,
    api_key: str = "DEMO_KEY"
) -> Optional[float]:
    """
    Get annual yield for a 1 kW system from NREL PVWatts.

    Args:
        latitude: Latitude
        longitude: Longitude
        api_key: NREL API key (DEMO_KEY works with rate limits)

    Returns:
        Annual AC output in kWh per kW installed, or None if failed
    """
    params = {
        'api_key': api_key,
        'lat': latitude,
        'lon': longitude,
        'system_capacity': 1,  # 1 kW for normalized output
        'azimuth': 180,        # South-facing
        'tilt': min(abs(latitude), 90),  # Optimal tilt ~ latitude
        'array_type': 0,       # Fixed open rack (ground or flat commercial roof)
        'module_type': 0,      # Standard
        'losses': 14           # System losses (%)
    }

    try:
        response = requests.get(PVWATTS_URL, params=params, timeout=10)
        response.raise_for_status()
        data = response.json()
        return float(data['outputs']['ac_annual'])
    except requests.exceptions.Timeout:
        logger.warning("PVWatts request timed out for (%s, %s)", latitude, longitude)
    except requests.exceptions.RequestException as e:
        logger.warning("PVWatts request failed: %s", e)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Unexpected PVWatts response: %s", e)

    return None


def suggest_production_factor(
    latitude: float,
    longitude: float,
    api_key: str = "DEMO_KEY",
    config: CalculatorConfig = DEFAULT_CONFIG
) -> Optional[float]:
    """
    Production factor for a site, rounded and kept within the calculator's range.

    Returns:
        Production factor in kWh/kW/year, or None if the lookup failed
    """
    ac_annual = get_nrel_production_factor(latitude, longitude, api_key)
    if ac_annual is None:
        return None

    factor = round(ac_annual)
    suggested = max(config.min_production_factor, min(config.max_production_factor, factor))
    logger.info("PVWatts yield %.0f kWh/kW/yr, suggesting %.0f", ac_annual, suggested)
    return float(suggested)
