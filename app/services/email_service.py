"""Email notification service using SendGrid.

Messages go to the sales inbox (LEAD_NOTIFICATION_EMAIL). Each ``build_*``
function returns ``(subject, html_body, plain_body)`` for one kind of event.
"""

import logging
from datetime import datetime
from html import escape
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.core.config import settings

logger = logging.getLogger(__name__)

# Lead fields in the order they are rendered. Empty values are skipped.
LEAD_FIELD_LABELS: list[tuple[str, str]] = [
    ("firstName", "First Name"),
    ("lastName", "Last Name"),
    ("phone", "Phone"),
    ("email", "Email"),
    ("streetAddress", "Address"),
    ("city", "City"),
    ("state", "State"),
    ("zipCode", "ZIP"),
    ("utilityCompany", "Utility"),
    ("averageMonthlyBill", "Average Monthly Bill"),
    ("homeownerStatus", "Homeowner"),
    ("creditScore", "Credit Score"),
    ("shading", "Shading"),
]


class EmailService:
    """Thin wrapper around the SendGrid client."""

    def __init__(self):
        config = settings.integration("email")
        self.enabled = bool(config)
        if self.enabled:
            self.from_email = config["SENDGRID_FROM_EMAIL"]
            self.from_name = config.get("SENDGRID_FROM_NAME") or "Quantum Solar"
            self.recipient = config["LEAD_NOTIFICATION_EMAIL"]
            self.client = SendGridAPIClient(config["SENDGRID_API_KEY"])
        else:
            self.from_email = self.from_name = self.recipient = None
            self.client = None

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
    ) -> bool:
        """
        Send an email. Returns True on a 2xx response.

        SendGrid client errors propagate to the caller.
        """
        if not self.enabled:
            logger.info("Email service disabled. Would have sent to %s: %s", to, subject)
            return False

        message = Mail(
            from_email=(self.from_email, self.from_name),
            to_emails=to,
            subject=subject,
            html_content=html_body,
        )
        if plain_body:
            message.plain_text_content = plain_body

        response = self.client.send(message)
        if 200 <= response.status_code < 300:
            logger.info("Email sent to %s: %s", to, subject)
            return True
        logger.error("SendGrid rejected email to %s: %s %s", to, response.status_code, response.body)
        return False

    async def send_notification(self, subject: str, html_body: str, plain_body: Optional[str] = None) -> bool:
        """Send to the sales notification inbox."""
        return await self.send_email(self.recipient, subject, html_body, plain_body)


def _filled_fields(lead: dict) -> list[tuple[str, str]]:
    return [(label, str(lead[key])) for key, label in LEAD_FIELD_LABELS if lead.get(key) not in (None, "")]


def _html_fields(fields: list[tuple[str, str]]) -> str:
    if not fields:
        return "<p><em>No information provided</em></p>"
    return "".join(f"<p><strong>{escape(label)}:</strong> {escape(value)}</p>" for label, value in fields)


def _plain_fields(fields: list[tuple[str, str]]) -> str:
    return "\n".join(f"{label}: {value}" for label, value in fields)


def _consent_html(lead: dict) -> str:
    tcpa, sms = lead.get("tcpaConsent"), lead.get("smsConsent")
    if tcpa is None and sms is None:
        return ""
    parts = ["<hr><h3>TCPA Compliance Information:</h3>"]
    if tcpa is not None:
        parts.append(f"<p><strong>TCPA Consent:</strong> {'Yes' if tcpa else 'No'}</p>")
    if sms is not None:
        parts.append(f"<p><strong>SMS Consent:</strong> {'Yes' if sms else 'No'}</p>")
    if tcpa or sms:
        parts.append(f"<p><strong>Consent Timestamp:</strong> {datetime.utcnow():%Y-%m-%d %H:%M:%S} UTC</p>")
    else:
        parts.append("<p><em>No consent provided - follow-up must comply with TCPA regulations.</em></p>")
    return "".join(parts)


def build_lead_email(lead: dict, record_id: Optional[str] = None) -> tuple[str, str, str]:
    """Qualified or partial splash lead."""
    name = " ".join(p for p in (lead.get("firstName"), lead.get("lastName")) if p) or "Unknown"
    partial = lead.get("isPartial", False)
    kind = "Partial Lead" if partial else "New Lead"
    subject = f"{kind} - Ameren Illinois: {name}"
    fields = _filled_fields(lead)
    footer = f"<p><small>Database ID: {record_id}</small></p>" if record_id else ""
    html_body = (
        f"<h2>{kind} from Ameren Illinois Splash Page</h2>"
        f"<p><strong>Step reached:</strong> {lead.get('currentStep', '')}</p><hr>"
        f"<h3>Lead Information:</h3>{_html_fields(fields)}{_consent_html(lead)}<hr>{footer}"
    )
    plain_body = f"{kind} - {name}\n\n{_plain_fields(fields)}"
    return subject, html_body, plain_body


def build_disqualified_email(lead: dict, reason: str, record_id: Optional[str] = None) -> tuple[str, str, str]:
    """Disqualified lead; lists only the fields collected so far."""
    subject = f"Disqualified Lead - Ameren Illinois: {lead.get('firstName') or ''} {lead.get('lastName') or ''}".rstrip()
    fields = _filled_fields(lead)
    fields.append(("Disqualification Reason", reason))
    footer = f"<p><small>Database ID: {record_id}</small></p>" if record_id else ""
    html_body = (
        "<h2>Disqualified Ameren Illinois Splash Page Lead</h2>"
        "<p><strong>Status:</strong> Lead disqualified during form completion</p>"
        f"<p><strong>Reason:</strong> {escape(reason)}</p><hr>"
        f"<h3>Lead Information:</h3>{_html_fields(fields)}{_consent_html(lead)}<hr>"
        "<p>Consider adding to nurture campaign if consent was provided.</p>"
        f"{footer}"
    )
    plain_body = f"Disqualified lead ({reason})\n\n{_plain_fields(fields)}"
    return subject, html_body, plain_body


def build_bill_upload_email(upload: dict, recent_lead: Optional[dict]) -> tuple[str, str, str]:
    subject = f"New Bill Upload: {upload.get('originalName')}"
    rows = [
        ("File", upload.get("originalName") or ""),
        ("Stored As", upload.get("fileName") or ""),
        ("Type", upload.get("fileType") or ""),
        ("Size", f"{int(upload.get('fileSize') or 0) / 1024:.1f} KB"),
        ("Source", upload.get("source") or ""),
        ("Link", upload.get("fileUrl") or "Not stored"),
    ]
    lead_fields = _filled_fields(recent_lead) if recent_lead else []
    lead_html = f"<hr><h3>Most Recent Lead:</h3>{_html_fields(lead_fields)}" if recent_lead else ""
    html_body = f"<h2>Utility Bill Uploaded</h2>{_html_fields(rows)}{lead_html}"
    plain_body = _plain_fields(rows + lead_fields)
    return subject, html_body, plain_body


def build_contact_email(contact: dict) -> tuple[str, str, str]:
    subject = f"New Contact Form Submission: {contact.get('name')}"
    rows = [(label, str(contact[key])) for key, label in (
        ("name", "Name"), ("email", "Email"), ("phone", "Phone"),
        ("address", "Address"), ("homeowner", "Homeowner"), ("message", "Message"),
    ) if contact.get(key) not in (None, "")]
    return subject, f"<h2>Contact Form</h2>{_html_fields(rows)}", _plain_fields(rows)


def build_appointment_email(preference: dict, recent_lead: Optional[dict]) -> tuple[str, str, str]:
    rows = [
        ("Preferred Date", preference.get("preferredDate") or "Not specified"),
        ("Preferred Time", preference.get("preferredTime") or "Not specified"),
        ("Source", preference.get("source") or "unknown"),
    ]
    lead_fields = _filled_fields(recent_lead) if recent_lead else []
    name = " ".join(p for p in ((recent_lead or {}).get("firstName"), (recent_lead or {}).get("lastName")) if p)
    subject = f"Appointment Preference Confirmed{': ' + name if name else ''}"
    html_body = f"<h2>Appointment Preference</h2>{_html_fields(rows)}"
    if recent_lead:
        html_body += f"<hr><h3>Lead Information:</h3>{_html_fields(lead_fields)}"
    return subject, html_body, _plain_fields(rows + lead_fields)


# Global email service instance
email_service = EmailService()
