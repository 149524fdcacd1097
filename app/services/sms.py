"""Twilio SMS service.

Used for project stage updates, the CRM messaging tools and bulk sends.
``send_sms`` raises on Twilio errors; best-effort callers go through the
notifier in app.services.notifier.
"""

import logging
import re
from typing import Optional

from twilio.rest import Client

from app.core.config import settings, INTEGRATION_UNAVAILABLE

logger = logging.getLogger(__name__)

SMS_TEMPLATES: dict[str, str] = {
    "appointment_reminder": "Hi [Name]! This is a reminder about your solar consultation appointment tomorrow at [Time]. We're excited to help you save money with solar! - Quantum Solar",
    "follow_up": "Hi [Name]! Thanks for your interest in solar. We'd love to answer any questions and provide your custom solar proposal. When's a good time to chat? - Quantum Solar",
    "installation_update": "Hi [Name]! Great news - your solar installation is scheduled for [Date]. Our team will arrive between [Time]. Any questions? - Quantum Solar",
    "project_complete": "Congratulations [Name]! Your solar system is now active and generating clean energy. You should see savings on your next bill! - Quantum Solar",
    "welcome_new_lead": "Thanks for your interest in solar, [Name]! We'll have a solar expert contact you within 24 hours with your custom proposal. - Quantum Solar",
}

# Sent to the customer when a project enters the stage.
STAGE_MESSAGES: dict[int, str] = {
    2: "Hi {name}! Our team will be conducting your site survey and system design. We'll contact you to schedule a convenient time.",
    3: "Great news {name}! We're submitting your solar permits to the local authorities. This typically takes 2-3 weeks.",
    4: "Excellent! {name}, your permits have been approved. We're now ordering your solar equipment.",
    5: "Hi {name}! Your solar equipment has arrived. We're now scheduling your installation.",
    6: "Exciting news {name}! Your solar installation has been scheduled. We'll call you to confirm the date.",
    7: "Installation day is here! {name}, our crew is on their way to begin your solar installation.",
    8: "Fantastic! {name}, your solar system installation is complete. Next step: electrical inspection.",
    9: "Great news {name}! Your system passed inspection. We're now submitting interconnection paperwork to your utility.",
    10: "Hi {name}! Your utility interconnection is in process. Almost ready to start saving with solar!",
    11: "Exciting! {name}, your solar system is being commissioned and tested. Final step coming up!",
    12: "Congratulations {name}! Your solar system is now officially online and generating clean energy savings!",
}

WELCOME_MESSAGE = (
    "Welcome to Quantum Solar, {name}! Your solar project has officially started. "
    "We'll keep you updated throughout the process. - Quantum Solar"
)


class SmsNotConfigured(Exception):
    """Twilio credentials are missing."""


def format_phone_number(phone: str) -> str:
    """Return E.164; bare numbers are treated as US."""
    if phone.startswith("+"):
        return phone
    return "+1" + re.sub(r"\D", "", phone)


def personalize(message: str, name: Optional[str]) -> str:
    return message.replace("[Name]", name) if name else message


def stage_message(stage: int, customer_name: str) -> Optional[str]:
    template = STAGE_MESSAGES.get(stage)
    return template.format(name=customer_name) if template else None


def _get_twilio_client(config) -> Client:
    return Client(config["TWILIO_ACCOUNT_SID"], config["TWILIO_AUTH_TOKEN"])


async def send_sms(to: str, body: str) -> str:
    """Send an SMS via Twilio and return the message SID."""
    config = settings.integration("sms")
    if config is INTEGRATION_UNAVAILABLE:
        raise SmsNotConfigured("Twilio configuration missing")

    client = _get_twilio_client(config)
    message = client.messages.create(
        body=body,
        from_=config["TWILIO_PHONE_NUMBER"],
        to=format_phone_number(to),
    )
    logger.info("SMS sent to %s, SID: %s", to, message.sid)
    return message.sid
