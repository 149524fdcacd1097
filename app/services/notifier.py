"""Best-effort notifications.

Every fire-and-forget side effect (email, SMS, ad pixel, analytics) goes
through ``BestEffortNotifier.notify``. It never raises: failures are logged
here once and reported through ``NotifyResult``, which callers may ignore.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings, INTEGRATION_UNAVAILABLE
from app.services import conversions
from app.services.email_service import (
    email_service,
    build_lead_email,
    build_disqualified_email,
    build_bill_upload_email,
    build_contact_email,
    build_appointment_email,
)
from app.services.sms import send_sms

logger = logging.getLogger(__name__)


@dataclass
class NotifyResult:
    delivered: bool
    detail: Optional[str] = None


class BestEffortNotifier:
    """Base class. Subclasses implement ``_deliver``."""

    name = "notifier"

    async def notify(self, event: str, payload: dict) -> NotifyResult:
        try:
            result = await self._deliver(event, payload)
        except Exception as e:
            logger.error("%s notification '%s' failed: %s", self.name, event, e)
            return NotifyResult(delivered=False, detail=str(e))

        if result.delivered:
            logger.info("%s notification '%s' delivered", self.name, event)
        else:
            logger.warning("%s notification '%s' not delivered: %s", self.name, event, result.detail)
        return result

    async def _deliver(self, event: str, payload: dict) -> NotifyResult:
        raise NotImplementedError


class EmailNotifier(BestEffortNotifier):
    """Sales inbox emails. ``event`` selects the template."""

    name = "email"

    _BUILDERS = {
        "lead_submitted": lambda p: build_lead_email(p["lead"], p.get("record_id")),
        "lead_disqualified": lambda p: build_disqualified_email(p["lead"], p["reason"], p.get("record_id")),
        "bill_uploaded": lambda p: build_bill_upload_email(p["upload"], p.get("recent_lead")),
        "contact_submitted": lambda p: build_contact_email(p["contact"]),
        "appointment_requested": lambda p: build_appointment_email(p["preference"], p.get("recent_lead")),
    }

    def __init__(self, service=None):
        self.service = service or email_service

    async def _deliver(self, event, payload):
        if not self.service.enabled:
            return NotifyResult(delivered=False, detail="email integration unavailable")
        subject, html_body, plain_body = self._BUILDERS[event](payload)
        sent = await self.service.send_notification(subject, html_body, plain_body)
        return NotifyResult(delivered=sent, detail=None if sent else "rejected by provider")


class SmsNotifier(BestEffortNotifier):
    """Customer SMS. Payload: ``to``, ``body``."""

    name = "sms"

    async def _deliver(self, event, payload):
        if settings.integration("sms") is INTEGRATION_UNAVAILABLE:
            return NotifyResult(delivered=False, detail="sms integration unavailable")
        sid = await send_sms(payload["to"], payload["body"])
        return NotifyResult(delivered=True, detail=sid)


class MetaConversionsNotifier(BestEffortNotifier):
    """Meta Conversions API event. ``event`` is the Meta event name (e.g. Lead).

    Payload keys: ``customer_info`` plus optional ``custom_data``,
    ``event_id``, ``source_url``.
    """

    name = "meta_conversions"

    async def _deliver(self, event, payload):
        config = settings.integration("meta_conversions")
        if config is INTEGRATION_UNAVAILABLE:
            return NotifyResult(delivered=False, detail="meta_conversions integration unavailable")
        meta_event = conversions.build_meta_event(
            event,
            payload.get("customer_info") or {},
            custom_data=payload.get("custom_data"),
            event_id=payload.get("event_id"),
            source_url=payload.get("source_url"),
        )
        body = await conversions.send_meta_events(config, [meta_event])
        return NotifyResult(delivered=True, detail=f"events_received={body.get('events_received')}")


class GA4Notifier(BestEffortNotifier):
    """GA4 Measurement Protocol event. Payload: ``client_id``, ``params``."""

    name = "ga4"

    async def _deliver(self, event, payload):
        config = settings.integration("ga4")
        if config is INTEGRATION_UNAVAILABLE:
            return NotifyResult(delivered=False, detail="ga4 integration unavailable")
        await conversions.send_ga4_events(
            config,
            payload.get("client_id") or "anonymous",
            [conversions.build_ga4_event(event, payload.get("params"))],
        )
        return NotifyResult(delivered=True)


email_notifier = EmailNotifier()
sms_notifier = SmsNotifier()
