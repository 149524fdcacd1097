"""Server-side ad and analytics events.

Meta Conversions API (hashed customer matching, deduplicated by event id)
and the GA4 Measurement Protocol. Both are plain HTTPS calls via httpx.
"""

import hashlib
import logging
import random
import re
import string
import time
from typing import Optional

import httpx

from app.core.config import IntegrationConfig

logger = logging.getLogger(__name__)

META_GRAPH_URL = "https://graph.facebook.com/v18.0"
GA4_COLLECT_URL = "https://www.google-analytics.com/mp/collect"

# customerInfo key -> Conversions API user_data key
_CUSTOMER_KEYS = {
    "email": "em",
    "phone": "ph",
    "firstName": "fn",
    "lastName": "ln",
    "city": "ct",
    "state": "st",
    "zipCode": "zp",
}


def generate_event_id() -> str:
    """``evt_<epoch ms>_<6 chars>``, shared by browser and server events for dedup."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"evt_{int(time.time() * 1000)}_{suffix}"


def _normalize(key: str, value: str) -> str:
    value = value.strip().lower()
    if key == "phone":
        digits = re.sub(r"\D", "", value)
        return digits if len(digits) != 10 else "1" + digits
    if key in ("city", "firstName", "lastName"):
        return re.sub(r"\s+", "", value)
    return value


def hash_value(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_customer_info(customer_info: dict) -> dict:
    """Normalize and SHA-256 hash customer identifiers for matching."""
    user_data = {}
    for key, meta_key in _CUSTOMER_KEYS.items():
        value = customer_info.get(key)
        if value:
            user_data[meta_key] = [hash_value(_normalize(key, str(value)))]
    return user_data


def build_meta_event(
    event_name: str,
    customer_info: dict,
    custom_data: Optional[dict] = None,
    event_id: Optional[str] = None,
    source_url: Optional[str] = None,
    client_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
    fbc: Optional[str] = None,
    fbp: Optional[str] = None,
) -> dict:
    user_data = hash_customer_info(customer_info)
    # Browser identifiers are sent unhashed.
    for key, value in (("client_ip_address", client_ip), ("client_user_agent", user_agent), ("fbc", fbc), ("fbp", fbp)):
        if value:
            user_data[key] = value

    event = {
        "event_name": event_name,
        "event_time": int(time.time()),
        "event_id": event_id or generate_event_id(),
        "action_source": "website",
        "user_data": user_data,
    }
    if source_url:
        event["event_source_url"] = source_url
    if custom_data:
        event["custom_data"] = {k: v for k, v in custom_data.items() if v is not None}
    return event


async def send_meta_events(config: IntegrationConfig, events: list[dict]) -> dict:
    """POST events to the Conversions API. Raises httpx errors on failure."""
    body = {"data": events}
    if config.get("FACEBOOK_TEST_EVENT_CODE"):
        body["test_event_code"] = config["FACEBOOK_TEST_EVENT_CODE"]

    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(
            f"{META_GRAPH_URL}/{config['FACEBOOK_PIXEL_ID']}/events",
            params={"access_token": config["FACEBOOK_ACCESS_TOKEN"]},
            json=body,
        )
        response.raise_for_status()
        return response.json()


def build_ga4_event(name: str, params: Optional[dict] = None) -> dict:
    return {"name": name, "params": {k: v for k, v in (params or {}).items() if v is not None}}


async def send_ga4_events(config: IntegrationConfig, client_id: str, events: list[dict]) -> None:
    """POST events to the GA4 Measurement Protocol. Raises httpx errors on failure."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(
            GA4_COLLECT_URL,
            params={"measurement_id": config["GA4_MEASUREMENT_ID"], "api_secret": config["GA4_API_SECRET"]},
            json={"client_id": client_id, "events": events},
        )
        response.raise_for_status()
