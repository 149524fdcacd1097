"""Third-party integrations for the CRM (authenticated).

- POST /api/v1/integrations/twilio → Send one SMS
- PUT /api/v1/integrations/twilio → Bulk SMS with [Name] personalization
- GET /api/v1/integrations/twilio → Message templates
- GET /api/v1/integrations/enphase → System monitoring data
- POST /api/v1/integrations/enphase → Summaries for several systems
- GET /api/v1/integrations/google-solar → Building insights or data layers for an address
- POST /api/v1/integrations/google-solar → Savings estimate for an address
"""

import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from twilio.base.exceptions import TwilioRestException

from app.core.config import settings, INTEGRATION_UNAVAILABLE
from app.core.deps import get_current_user, CurrentUser
from app.services import solar_data
from app.services.sms import SMS_TEMPLATES, SmsNotConfigured, personalize, send_sms

router = APIRouter()
logger = logging.getLogger(__name__)


class SmsRequest(BaseModel):
    to: str
    message: str
    type: Optional[str] = None


class SmsRecipient(BaseModel):
    phone: str
    name: Optional[str] = None


class BulkSmsRequest(BaseModel):
    recipients: List[SmsRecipient]
    message: str


class EnphaseBulkRequest(BaseModel):
    system_ids: List[str]

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SavingsRequest(BaseModel):
    address: str
    monthly_bill: float
    system_size_kw: Optional[float] = None
    electricity_rate_per_kwh: Optional[float] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def _require(name: str, label: str):
    config = settings.integration(name)
    if config is INTEGRATION_UNAVAILABLE:
        raise HTTPException(status_code=503, detail=f"{label} configuration missing")
    return config


# ---------------------------------------------------------------------------
# Twilio
# ---------------------------------------------------------------------------
@router.post("/integrations/twilio")
async def send_single_sms(data: SmsRequest, user: CurrentUser = Depends(get_current_user)):
    if not data.to or not data.message:
        raise HTTPException(status_code=400, detail="Phone number and message are required")
    try:
        sid = await send_sms(data.to, data.message)
    except SmsNotConfigured:
        raise HTTPException(status_code=503, detail="Twilio configuration missing")
    except TwilioRestException as e:
        logger.error("Twilio rejected SMS to %s: %s", data.to, e)
        raise HTTPException(status_code=502, detail="Failed to send SMS")
    return {"success": True, "messageSid": sid}


@router.put("/integrations/twilio")
async def send_bulk_sms(data: BulkSmsRequest, user: CurrentUser = Depends(get_current_user)):
    if not data.message:
        raise HTTPException(status_code=400, detail="Recipients array and message are required")
    _require("sms", "Twilio")

    results = []
    for recipient in data.recipients:
        try:
            sid = await send_sms(recipient.phone, personalize(data.message, recipient.name))
            results.append({"phone": recipient.phone, "success": True, "messageSid": sid})
        except Exception as e:
            logger.error("Bulk SMS to %s failed: %s", recipient.phone, e)
            results.append({"phone": recipient.phone, "success": False, "error": "Failed to send"})

    successful = sum(1 for r in results if r["success"])
    return {
        "success": True,
        "results": results,
        "summary": {"total": len(results), "successful": successful, "failed": len(results) - successful},
    }


@router.get("/integrations/twilio")
async def sms_templates(user: CurrentUser = Depends(get_current_user)):
    return {"templates": SMS_TEMPLATES}


# ---------------------------------------------------------------------------
# Enphase
# ---------------------------------------------------------------------------
@router.get("/integrations/enphase")
async def enphase_data(
    system_id: Optional[str] = Query(None, alias="systemId"),
    endpoint: str = Query("summary"),
    user: CurrentUser = Depends(get_current_user),
):
    if not system_id:
        raise HTTPException(status_code=400, detail="System ID is required")
    if endpoint not in solar_data.ENPHASE_ENDPOINTS:
        raise HTTPException(status_code=400, detail="Invalid endpoint")
    config = _require("enphase", "Enphase API")

    try:
        return await solar_data.fetch_enphase(config, system_id, endpoint)
    except httpx.HTTPError as e:
        logger.error("Enphase %s for system %s failed: %s", endpoint, system_id, e)
        raise HTTPException(status_code=502, detail="Failed to fetch data from Enphase API")


@router.post("/integrations/enphase")
async def enphase_bulk(data: EnphaseBulkRequest, user: CurrentUser = Depends(get_current_user)):
    config = _require("enphase", "Enphase API")
    systems = []
    for system_id in data.system_ids:
        try:
            summary = await solar_data.fetch_enphase(config, system_id, "summary")
            systems.append({"systemId": system_id, **summary})
        except httpx.HTTPError as e:
            logger.error("Enphase summary for system %s failed: %s", system_id, e)
            systems.append({"systemId": system_id, "error": "Failed to fetch system data"})
    return {"systems": systems}


# ---------------------------------------------------------------------------
# Google Solar
# ---------------------------------------------------------------------------
@router.get("/integrations/google-solar")
async def google_solar_data(
    address: Optional[str] = Query(None),
    data_type: str = Query("buildingInsights", alias="type"),
    user: CurrentUser = Depends(get_current_user),
):
    if not address:
        raise HTTPException(status_code=400, detail="Address is required")
    if data_type not in solar_data.SOLAR_DATA_TYPES:
        raise HTTPException(status_code=400, detail="Invalid endpoint")
    config = _require("google_solar", "Google Solar API")

    try:
        return await solar_data.fetch_solar_data(config, address, data_type)
    except solar_data.AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")
    except httpx.HTTPError as e:
        logger.error("Google Solar %s for %s failed: %s", data_type, address, e)
        raise HTTPException(status_code=502, detail="Failed to fetch data from Google Solar API")


@router.post("/integrations/google-solar")
async def google_solar_savings(data: SavingsRequest, user: CurrentUser = Depends(get_current_user)):
    if not data.address or not data.monthly_bill:
        raise HTTPException(status_code=400, detail="Address and monthly bill are required")
    config = _require("google_solar", "Google Solar API")

    try:
        building = await solar_data.fetch_solar_data(config, data.address)
    except solar_data.AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")
    except httpx.HTTPError as e:
        logger.error("Building insights for %s failed: %s", data.address, e)
        raise HTTPException(status_code=502, detail="Failed to get building insights")

    estimate = solar_data.estimate_savings(
        building,
        data.monthly_bill,
        system_size_kw=data.system_size_kw,
        rate_per_kwh=data.electricity_rate_per_kwh,
    )
    return {"address": data.address, "buildingInsights": building, **estimate}
