"""Tests for the splash form step table, reducer and driver."""

from itertools import product

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select

from app.main import app
from app.models.splash_lead import SplashLead
from app.qualification.cache import LocalSessionCache
from app.qualification.client import (
    DISQUALIFIED_PATH,
    THANK_YOU_PATH,
    LeadGateway,
    SplashFormDriver,
    SubmissionError,
)
from app.qualification.flow import EffectKind, Next, SetConsent, SetField, apply, should_save_partial
from app.qualification.rules import NOT_A_HOMEOWNER, evaluate
from app.qualification.session import LeadSession, generate_session_id
from app.qualification.steps import (
    CONSENT_STEP,
    CREDIT_OPTIONS,
    FORM_STEPS,
    SHADING_OPTIONS,
    TOTAL_STEPS,
    parse_bill,
    step_for_index,
)

QUALIFYING_ANSWERS = [
    "62701",
    "Ameren Illinois",
    150,
    "yes",
    "650+",
    "none",
    "Jane",
    "Doe",
    "jane.doe@example.com",
    "(217) 555-0100",
    None,  # consent
    "100 Capitol Ave",
    "Springfield",
    "IL",
]

INVALID_VALUES = {
    "zip_code": "abc",
    "utility_company": "  ",
    "average_monthly_bill": 20,
    "homeowner_status": "maybe",
    "credit_score": "",
    "shading": "some",
    "first_name": "",
    "last_name": "",
    "email": "not-an-email",
    "phone": "12345",
    "street_address": "",
    "city": "",
    "state": "",
}


def _session_at(step: int) -> LeadSession:
    """Session with every answer before ``step`` filled in."""
    state = LeadSession.new()
    for index in range(step):
        if index == CONSENT_STEP:
            state = apply(state, SetConsent(tcpa_consent=True, sms_consent=True)).state
        else:
            state = apply(state, SetField(QUALIFYING_ANSWERS[index])).state
        state = apply(state, Next()).state
    assert state.current_step == step
    return state


def _gateway_client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _mock_notifiers():
    return [(MagicMock(notify=AsyncMock()), event) for event in ("Lead", "generate_lead", "conversion_event_submit_lead_form")]


def test_session_id_format():
    parts = generate_session_id().split("-")
    assert parts[0] == "QSLID"
    assert parts[1].isdigit()
    assert len(parts[2]) == 6 and parts[2] == parts[2].upper()


def test_step_table_layout():
    assert TOTAL_STEPS == 14
    assert len(FORM_STEPS) == 13
    assert step_for_index(CONSENT_STEP) is None
    assert step_for_index(3).field == "homeowner_status"
    assert step_for_index(11).field == "street_address"
    with pytest.raises(IndexError):
        step_for_index(TOTAL_STEPS)


@pytest.mark.parametrize("step", [i for i in range(TOTAL_STEPS) if i != CONSENT_STEP])
def test_invalid_value_blocks_advance(step):
    state = _session_at(step)
    field = step_for_index(step).field

    state = apply(state, SetField(INVALID_VALUES[field])).state
    transition = apply(state, Next())

    assert transition.state.current_step == step
    assert transition.errors.get(field)
    assert transition.effects == ()


def test_consent_step_requires_both_flags():
    state = _session_at(CONSENT_STEP)
    state = apply(state, SetConsent(tcpa_consent=True)).state

    transition = apply(state, Next())

    assert transition.state.current_step == CONSENT_STEP
    assert set(transition.errors) == {"sms_consent"}


def test_only_homeowner_no_disqualifies():
    assert evaluate("homeowner_status", "no") == NOT_A_HOMEOWNER
    assert evaluate("homeowner_status", "yes") is None
    for credit in ("650+", "below650"):
        assert evaluate("credit_score", credit) is None
    for shading in ("none", "heavy"):
        assert evaluate("shading", shading) is None


def test_homeowner_no_emits_single_disqualify_effect():
    state = apply(_session_at(3), SetField("no")).state

    transition = apply(state, Next())

    assert transition.state.current_step == 3
    assert transition.state.disqualification_reason == NOT_A_HOMEOWNER
    assert [e.kind for e in transition.effects] == [EffectKind.DISQUALIFY]

    # Nothing moves a disqualified session again.
    again = apply(transition.state, Next())
    assert again.effects == ()
    assert again.state.current_step == 3


@pytest.mark.parametrize("credit,shading", product(
    [value for value, _ in CREDIT_OPTIONS], [value for value, _ in SHADING_OPTIONS]
))
def test_homeowner_reaches_contact_steps_for_any_credit_and_shading(credit, shading):
    state = _session_at(3)
    effects = []
    for value in ("yes", credit, shading):
        state = apply(state, SetField(value)).state
        transition = apply(state, Next())
        assert transition.errors == {}
        effects += transition.effects
        state = transition.state

    assert state.current_step == 6
    assert not state.disqualified
    assert state.disqualification_reason is None
    assert EffectKind.DISQUALIFY not in [e.kind for e in effects]


@pytest.mark.parametrize("raw,expected", [
    (150, 150), ("150", 150), ("$150", 150), ("$1,200+", 1200), (210.7, 210),
    ("abc", None), ("", None), (None, None), (True, None),
])
def test_parse_bill(raw, expected):
    assert parse_bill(raw) == expected


def test_bill_text_is_stored_as_dollars_on_advance():
    state = apply(_session_at(2), SetField("$150")).state
    assert state.average_monthly_bill == "$150"

    transition = apply(state, Next())

    assert transition.errors == {}
    assert transition.state.current_step == 3
    assert transition.state.average_monthly_bill == 150


def test_non_numeric_bill_is_kept_but_blocks_advance():
    state = apply(_session_at(2), SetField("abc")).state

    transition = apply(state, Next())

    assert transition.state.current_step == 2
    assert transition.state.average_monthly_bill == "abc"
    assert transition.errors == {"average_monthly_bill": "Please select a valid bill amount"}


def test_partial_save_cadence():
    assert [s for s in range(TOTAL_STEPS) if should_save_partial(s)] == [12]

    state = apply(_session_at(12), SetField("Springfield")).state
    transition = apply(state, Next())
    assert transition.effects_of(EffectKind.SAVE_PARTIAL)
    assert transition.state.current_step == 13


@pytest.mark.asyncio
async def test_disqualified_flow_reports_once(cache_dir):
    gateway = LeadGateway(base_url="http://test")
    driver = SplashFormDriver(gateway, cache=LocalSessionCache(cache_dir), notifiers=[])
    with patch.object(gateway, "report_disqualified", new_callable=AsyncMock) as report, \
         patch.object(gateway, "save_partial", new_callable=AsyncMock) as save_partial:
        for value in QUALIFYING_ANSWERS[:3]:
            driver.set_value(value)
            assert (await driver.next()).destination is None

        driver.set_value("no")
        outcome = await driver.next()

        assert outcome.destination == DISQUALIFIED_PATH
        assert driver.state.current_step == 3
        report.assert_awaited_once()
        assert report.await_args.args[0].disqualification_reason == NOT_A_HOMEOWNER

        # Further input does nothing.
        outcome = await driver.next()
        assert outcome.destination is None
        assert report.await_count == 1
        save_partial.assert_not_awaited()


@pytest.mark.asyncio
async def test_full_qualifying_flow_submits_lead(db, cache_dir):
    notifiers = _mock_notifiers()
    async with _gateway_client() as http:
        driver = SplashFormDriver(LeadGateway(client=http), cache=LocalSessionCache(cache_dir), notifiers=notifiers)

        outcome = None
        for step, value in enumerate(QUALIFYING_ANSWERS):
            if step == CONSENT_STEP:
                driver.set_consent(tcpa_consent=True, sms_consent=True)
            else:
                driver.set_value(value)
            outcome = await driver.next()
            assert not outcome.errors, outcome.errors

        assert outcome.destination == THANK_YOU_PATH
        await driver.drain()

    result = await db.execute(select(SplashLead))
    leads = result.scalars().all()
    assert len(leads) == 1
    lead = leads[0]
    assert lead.session_id == driver.state.session_id
    assert lead.is_partial is False
    assert lead.disqualification_reason is None
    assert lead.zip_code == "62701"
    assert lead.average_monthly_bill == 150
    assert lead.tcpa_consent and lead.sms_consent
    assert lead.completed_at is not None

    for notifier, event in notifiers:
        notifier.notify.assert_awaited_once()
        assert notifier.notify.await_args.args[0] == event

    assert LocalSessionCache(cache_dir).load() is None


@pytest.mark.asyncio
async def test_failed_submission_keeps_cache(cache_dir):
    gateway = LeadGateway(base_url="http://test")
    notifiers = _mock_notifiers()
    driver = SplashFormDriver(gateway, cache=LocalSessionCache(cache_dir), notifiers=notifiers, session=_session_at(13))
    driver.set_value("MO")

    with patch.object(gateway, "submit", new_callable=AsyncMock, side_effect=SubmissionError("boom")):
        outcome = await driver.next()

    assert outcome.destination is None
    assert "submission" in outcome.errors
    cached = LocalSessionCache(cache_dir).load()
    assert cached is not None and cached.session_id == driver.state.session_id
    for notifier, _ in notifiers:
        notifier.notify.assert_not_called()


@pytest.mark.asyncio
async def test_unload_saves_only_after_consent(cache_dir):
    gateway = LeadGateway(base_url="http://test")
    with patch.object(gateway, "save_partial", new_callable=AsyncMock) as save_partial:
        early = SplashFormDriver(gateway, cache=LocalSessionCache(cache_dir), notifiers=[], session=_session_at(9))
        assert early.handle_unload() is None

        late = SplashFormDriver(gateway, cache=LocalSessionCache(cache_dir), notifiers=[], session=_session_at(11))
        task = late.handle_unload()
        assert task is not None
        await late.drain()

    save_partial.assert_awaited_once()
    assert save_partial.await_args.kwargs == {"send_email": True}
