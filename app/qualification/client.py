"""Splash form client: HTTP gateway to the lead endpoints and the form driver.

The driver holds one LeadSession, feeds user input through the reducer in
app.qualification.flow, writes the local cache on every change and runs the
effects the reducer asks for.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from app.core.config import settings
from app.qualification.cache import LocalSessionCache
from app.qualification.flow import (
    Action,
    EffectKind,
    Next,
    Restart,
    SetConsent,
    SetField,
    Transition,
    apply,
)
from app.qualification.session import LeadSession
from app.qualification.steps import CONSENT_STEP
from app.services.notifier import GA4Notifier, MetaConversionsNotifier

logger = logging.getLogger(__name__)

SPLASH_LEADS_PATH = "/api/v1/splash-leads"
DISQUALIFIED_LEADS_PATH = "/api/v1/disqualified-leads"
THANK_YOU_PATH = "/state-promotions/illinois/ameren-il/thank-you"
DISQUALIFIED_PATH = "/state-promotions/illinois/ameren-il/disqualified"
FORM_NAME = "ameren_illinois_splash_competitor"


class SubmissionError(Exception):
    """The terminal lead write failed. The user may retry."""

    retryable = True


class LeadGateway:
    """Posts form sessions to the lead endpoints.

    Pass ``client`` to reuse an existing httpx.AsyncClient (it must carry the
    base URL); otherwise a short-lived client is opened per call.
    """

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url or settings.SITE_URL
        self._client = client

    async def _post(self, path: str, body: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(path, json=body)
        async with httpx.AsyncClient(base_url=self.base_url, timeout=15.0) as client:
            return await client.post(path, json=body)

    async def save_partial(self, session: LeadSession, send_email: bool = False) -> bool:
        body = {
            **session.form_fields(),
            "isPartial": True,
            "currentStep": session.current_step,
            "sendEmailNotification": send_email,
            "timestamp": datetime.utcnow().isoformat(),
        }
        try:
            response = await self._post(SPLASH_LEADS_PATH, body)
        except httpx.HTTPError as e:
            logger.error("Partial save failed for %s: %s", session.session_id, e)
            return False
        if not response.is_success:
            logger.error("Partial save failed for %s: %s %s", session.session_id, response.status_code, response.text)
            return False
        return True

    async def submit(self, session: LeadSession) -> dict:
        body = {
            **session.form_fields(),
            "isPartial": False,
            "currentStep": session.current_step,
            "sendEmailNotification": True,
            "completedAt": datetime.utcnow().isoformat(),
        }
        try:
            response = await self._post(SPLASH_LEADS_PATH, body)
        except httpx.HTTPError as e:
            raise SubmissionError(str(e)) from e
        if not response.is_success:
            try:
                detail = response.json().get("detail") or response.json().get("message")
            except ValueError:
                detail = response.text
            raise SubmissionError(f"Submission failed ({response.status_code}): {detail or 'Unknown error'}")
        return response.json()

    async def report_disqualified(self, session: LeadSession) -> bool:
        body = {
            **session.form_fields(),
            "disqualificationReason": session.disqualification_reason,
            "timestamp": datetime.utcnow().isoformat(),
        }
        try:
            response = await self._post(DISQUALIFIED_LEADS_PATH, body)
        except httpx.HTTPError as e:
            logger.error("Disqualified lead notification failed for %s: %s", session.session_id, e)
            return False
        if not response.is_success:
            logger.error(
                "Disqualified lead notification rejected for %s: %s %s",
                session.session_id, response.status_code, response.text,
            )
            return False
        return True


def default_submission_notifiers() -> list:
    """(notifier, event) pairs fired after a successful submission."""
    return [
        (MetaConversionsNotifier(), "Lead"),
        (GA4Notifier(), "generate_lead"),
        (GA4Notifier(), "conversion_event_submit_lead_form"),
    ]


@dataclass
class StepOutcome:
    errors: dict = field(default_factory=dict)
    destination: Optional[str] = None


class SplashFormDriver:
    def __init__(
        self,
        gateway: LeadGateway,
        cache: Optional[LocalSessionCache] = None,
        notifiers: Optional[list] = None,
        session: Optional[LeadSession] = None,
    ):
        self.gateway = gateway
        self.cache = cache or LocalSessionCache()
        self.notifiers = default_submission_notifiers() if notifiers is None else notifiers
        self.state = session or LeadSession.new()
        self.errors: dict = {}
        self._pending: set[asyncio.Task] = set()
        # A fresh form never resumes a stale cache entry.
        self.cache.clear()

    def _dispatch(self, action: Action) -> Transition:
        transition = apply(self.state, action)
        changed = transition.state != self.state
        self.state = transition.state
        self.errors = transition.errors
        if isinstance(action, Restart):
            self.cache.clear()
        elif changed:
            self.cache.save(self.state)
        return transition

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def set_value(self, value) -> None:
        self._dispatch(SetField(value))

    def set_consent(self, tcpa_consent: Optional[bool] = None, sms_consent: Optional[bool] = None) -> None:
        self._dispatch(SetConsent(tcpa_consent=tcpa_consent, sms_consent=sms_consent))

    def restart(self) -> None:
        self._dispatch(Restart())

    async def next(self) -> StepOutcome:
        transition = self._dispatch(Next())
        if transition.errors:
            return StepOutcome(errors=transition.errors)

        destination = None
        for effect in transition.effects:
            if effect.kind == EffectKind.DISQUALIFY:
                await self.gateway.report_disqualified(self.state)
                destination = DISQUALIFIED_PATH
            elif effect.kind == EffectKind.SAVE_PARTIAL:
                await self.gateway.save_partial(self.state)
            elif effect.kind == EffectKind.SUBMIT:
                return await self._submit()
        return StepOutcome(destination=destination)

    async def _submit(self) -> StepOutcome:
        try:
            await self.gateway.submit(self.state)
        except SubmissionError as e:
            logger.error("Form submission failed for %s: %s", self.state.session_id, e)
            self.errors = {"submission": f"Failed to submit form: {e}. Please try again or contact support."}
            return StepOutcome(errors=self.errors)

        self.state = self.state.model_copy(update={"is_partial": False})
        for notifier, event in self.notifiers:
            self._spawn(notifier.notify(event, self._event_payload(event)))
        self.cache.clear()
        return StepOutcome(destination=THANK_YOU_PATH)

    def _event_payload(self, event: str) -> dict:
        qualification = {
            "form_type": FORM_NAME,
            "homeowner_status": self.state.homeowner_status,
            "credit_score": self.state.credit_score,
            "utility_company": self.state.utility_company,
            "average_monthly_bill": self.state.average_monthly_bill,
        }
        if event == "Lead":
            return {
                "customer_info": self.state.customer_info(),
                "custom_data": {
                    "content_name": "Ameren Illinois Splash Form Competitor",
                    "content_category": "solar_lead",
                    "value": 1,
                    "currency": "USD",
                },
                "source_url": settings.SITE_URL,
            }
        if event == "generate_lead":
            return {"client_id": self.state.session_id, "params": {"lead_source": FORM_NAME, "value": 1, "currency": "USD"}}
        return {"client_id": self.state.session_id, "params": qualification}

    def handle_unload(self) -> Optional[asyncio.Task]:
        """Start a final partial save when the user leaves after consenting.

        Returns the in-flight task without waiting on it; it may not finish.
        """
        s = self.state
        if s.disqualified or not (s.consented and s.phone and s.current_step > CONSENT_STEP):
            return None
        return self._spawn(self.gateway.save_partial(s, send_email=True))

    async def drain(self) -> None:
        """Wait for outstanding fire-and-forget work."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
