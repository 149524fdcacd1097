"""Solar data providers: Enphase monitoring and Google Solar / Geocoding.

Calls raise httpx errors; endpoints turn them into 502 responses.
"""

import logging
from typing import Optional

import httpx

from app.core.config import IntegrationConfig

logger = logging.getLogger(__name__)

ENPHASE_ENDPOINTS = ("summary", "energy_lifetime", "stats", "inventory")

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
BUILDING_INSIGHTS_URL = "https://solar.googleapis.com/v1/buildingInsights:findClosest"
DATA_LAYERS_URL = "https://solar.googleapis.com/v1/dataLayers:get"
SOLAR_DATA_TYPES = ("buildingInsights", "dataLayers")

DEFAULT_SUN_HOURS = 1500
DEFAULT_CARBON_FACTOR_KG_PER_MWH = 428
SQ_METERS_PER_KW = 6
DEFAULT_SYSTEM_KW = 10
MAX_SYSTEM_KW = 15
COST_PER_KW = 3000
DEGRADATION_FACTOR = 0.85
KG_CO2_PER_TREE = 20


class AddressNotFound(LookupError):
    pass


async def fetch_enphase(config: IntegrationConfig, system_id: str, endpoint: str = "summary") -> dict:
    if endpoint not in ENPHASE_ENDPOINTS:
        raise ValueError(f"Invalid endpoint: {endpoint}")
    async with httpx.AsyncClient(timeout=15.0) as client:
        response = await client.get(
            f"{config['ENPHASE_API_URL']}/systems/{system_id}/{endpoint}",
            headers={
                "Authorization": f"Bearer {config['ENPHASE_API_KEY']}",
                "User-ID": config["ENPHASE_API_USER_ID"],
            },
        )
        response.raise_for_status()
        return response.json()


async def geocode(client: httpx.AsyncClient, api_key: str, address: str) -> dict:
    """Return ``{"lat": .., "lng": ..}`` for the first match. Raises AddressNotFound."""
    response = await client.get(GEOCODE_URL, params={"address": address, "key": api_key})
    response.raise_for_status()
    results = response.json().get("results") or []
    if not results:
        logger.warning("No geocoding match for %s", address)
        raise AddressNotFound(address)
    return results[0]["geometry"]["location"]


async def fetch_solar_data(config: IntegrationConfig, address: str, data_type: str = "buildingInsights") -> dict:
    if data_type not in SOLAR_DATA_TYPES:
        raise ValueError(f"Invalid endpoint: {data_type}")
    api_key = config["GOOGLE_SOLAR_API_KEY"]

    async with httpx.AsyncClient(timeout=20.0) as client:
        location = await geocode(client, api_key, address)
        params = {
            "location.latitude": location["lat"],
            "location.longitude": location["lng"],
            "requiredQuality": "HIGH",
            "key": api_key,
        }
        if data_type == "dataLayers":
            params.update({"radiusMeters": 100, "view": "FULL_LAYERS", "pixelSizeMeters": 0.5})
            url = DATA_LAYERS_URL
        else:
            url = BUILDING_INSIGHTS_URL
        response = await client.get(url, params=params)
        response.raise_for_status()
        data = response.json()

    return {**data, "requestedAddress": address, "geocodedLocation": location}


def estimate_savings(
    building: dict,
    monthly_bill: float,
    system_size_kw: Optional[float] = None,
    rate_per_kwh: Optional[float] = None,
) -> dict:
    """Size, production, 20-year savings and carbon offset for a roof."""
    potential = building.get("solarPotential") or {}
    sun_hours = potential.get("maxSunshineHoursPerYear") or DEFAULT_SUN_HOURS
    carbon_factor = potential.get("carbonOffsetFactorKgPerMwh") or DEFAULT_CARBON_FACTOR_KG_PER_MWH
    roof_area = potential.get("maxArrayAreaMeters2") or 0

    size = system_size_kw or min(roof_area / SQ_METERS_PER_KW or DEFAULT_SYSTEM_KW, MAX_SYSTEM_KW)
    annual_production = size * sun_hours
    rate = rate_per_kwh or (monthly_bill * 12) / annual_production

    annual_cost = monthly_bill * 12
    net_annual_savings = min(annual_production * rate, annual_cost)
    twenty_year_savings = net_annual_savings * 20 * DEGRADATION_FACTOR
    annual_offset = annual_production / 1000 * carbon_factor
    twenty_year_offset = annual_offset * 20
    system_cost = size * COST_PER_KW

    return {
        "solarAnalysis": {
            "estimatedSystemSizeKw": size,
            "annualEnergyProductionKwh": annual_production,
            "maxSunshineHoursPerYear": sun_hours,
            "roofAreaMeters2": roof_area,
        },
        "financialProjection": {
            "currentMonthlyBill": monthly_bill,
            "currentAnnualCost": annual_cost,
            "estimatedMonthlySavings": round(net_annual_savings / 12),
            "estimatedAnnualSavings": round(net_annual_savings),
            "twentyYearSavings": round(twenty_year_savings),
            "estimatedSystemCost": round(system_cost),
            "paybackPeriodYears": round(system_cost / net_annual_savings, 1) if net_annual_savings else None,
        },
        "environmentalImpact": {
            "annualCarbonOffsetKg": round(annual_offset),
            "twentyYearCarbonOffsetKg": round(twenty_year_offset),
            "equivalentTreesPlanted": round(twenty_year_offset / KG_CO2_PER_TREE),
        },
    }

