"""Tests for the SMS service when Twilio is not configured."""

import pytest
from app.services.notifier import SmsNotifier
from app.services.sms import (
    SMS_TEMPLATES,
    SmsNotConfigured,
    format_phone_number,
    personalize,
    send_sms,
    stage_message,
)


def test_format_phone_number():
    assert format_phone_number("(217) 555-0100") == "+12175550100"
    assert format_phone_number("+442071234567") == "+442071234567"


def test_personalize():
    template = SMS_TEMPLATES["follow_up"]
    assert personalize(template, "Jane").startswith("Hi Jane!")
    assert personalize(template, None) == template


def test_stage_message():
    assert "Jane" in stage_message(6, "Jane")
    assert stage_message(1, "Jane") is None


@pytest.mark.asyncio
async def test_send_sms_raises_when_no_credentials():
    with pytest.raises(SmsNotConfigured):
        await send_sms("+15551234567", "hello")


@pytest.mark.asyncio
async def test_sms_notifier_skipped_when_no_credentials():
    """Best-effort SMS reports not delivered instead of raising."""
    result = await SmsNotifier().notify("stage_update", {"to": "+15551234567", "body": "hello"})
    assert result.delivered is False
