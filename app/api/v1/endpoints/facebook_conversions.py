"""Meta Conversions API relay.

- POST /api/v1/facebook-conversions → Forward a browser event server-side

The browser pixel and this relay share ``eventId`` so Meta deduplicates them.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.config import settings, INTEGRATION_UNAVAILABLE
from app.services import conversions

router = APIRouter()
logger = logging.getLogger(__name__)


class ConversionEventIn(BaseModel):
    event_name: str
    customer_info: dict = {}
    custom_data: dict = {}
    event_id: Optional[str] = None
    source_url: Optional[str] = None
    fbc: Optional[str] = None
    fbp: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.post("/facebook-conversions")
async def relay_conversion(data: ConversionEventIn, request: Request):
    config = settings.integration("meta_conversions")
    if config is INTEGRATION_UNAVAILABLE:
        raise HTTPException(status_code=503, detail="Meta Conversions API is not configured")

    event = conversions.build_meta_event(
        data.event_name,
        data.customer_info,
        custom_data={
            "content_name": data.custom_data.get("contentName"),
            "content_category": data.custom_data.get("contentCategory"),
            "value": data.custom_data.get("value"),
            "currency": data.custom_data.get("currency"),
        },
        event_id=data.event_id,
        source_url=data.source_url,
        client_ip=request.headers.get("x-forwarded-for") or (request.client.host if request.client else None),
        user_agent=request.headers.get("user-agent"),
        fbc=data.fbc,
        fbp=data.fbp,
    )
    try:
        body = await conversions.send_meta_events(config, [event])
    except httpx.HTTPError as e:
        logger.error("Meta Conversions API error for %s: %s", data.event_name, e)
        raise HTTPException(status_code=502, detail="Failed to send event to Meta Conversions API")

    return {
        "success": True,
        "eventId": event["event_id"],
        "eventsReceived": body.get("events_received"),
        "fbtrace_id": body.get("fbtrace_id"),
    }
