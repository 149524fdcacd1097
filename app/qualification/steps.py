"""Splash form step table.

Steps 0-9 are FORM_STEPS[0:10]. Step 10 is the consent step, which is not a
field step. Steps 11-13 are FORM_STEPS[10:13]. Step 13 is terminal.
"""

import enum
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

CONSENT_STEP = 10
TOTAL_STEPS = 14
LAST_STEP = TOTAL_STEPS - 1

TCPA_CONSENT_ERROR = "You must consent to be contacted to continue."
SMS_CONSENT_ERROR = "You must consent to receive text messages to continue."

ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$")


class InputKind(str, enum.Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    SELECT = "select"
    SLIDER = "slider"


@dataclass(frozen=True)
class SliderConfig:
    min: int
    max: int
    step: int
    format_value: Callable[[int], str]


@dataclass(frozen=True)
class FormStep:
    field: str
    label: str
    kind: InputKind
    validate: Callable[[Any], Optional[str]]
    placeholder: str = ""
    options: tuple[tuple[str, str], ...] = ()
    slider: Optional[SliderConfig] = None
    # Turns an accepted raw value into the stored one.
    parse: Optional[Callable[[Any], Any]] = None


def _required(message: str) -> Callable[[Any], Optional[str]]:
    def validate(value):
        return message if not str(value if value is not None else "").strip() else None
    return validate


def _pattern(required: str, invalid: str, pattern: re.Pattern) -> Callable[[Any], Optional[str]]:
    def validate(value):
        text = str(value if value is not None else "")
        if not text.strip():
            return required
        if not pattern.match(text):
            return invalid
        return None
    return validate


def _choice(message: str, options: tuple[tuple[str, str], ...]) -> Callable[[Any], Optional[str]]:
    allowed = {value for value, _ in options}

    def validate(value):
        return None if value in allowed else message
    return validate


def parse_bill(value) -> Optional[int]:
    """Whole dollars from 150, "150", "$150" or "$1,200+"; None when not a number."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        value = re.sub(r"[$,+\s]", "", str(value if value is not None else ""))
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return None


def _bill_amount(value) -> Optional[str]:
    amount = parse_bill(value)
    if amount is None or amount < 50 or amount > 500:
        return "Please select a valid bill amount"
    return None


def format_bill(value: int) -> str:
    return "$500+" if value >= 500 else f"${value}"


HOMEOWNER_OPTIONS = (("yes", "Yes"), ("no", "No"))
CREDIT_OPTIONS = (("650+", "650 or above"), ("below650", "Below 650"))
SHADING_OPTIONS = (("none", "No Heavy Shading"), ("heavy", "Heavy Shading"))

FORM_STEPS: tuple[FormStep, ...] = (
    FormStep("zip_code", "What's your ZIP code?", InputKind.TEXT,
             _pattern("ZIP code is required", "Please enter a valid ZIP code", ZIP_RE), placeholder="12345"),
    FormStep("utility_company", "Who is your utility company?", InputKind.TEXT,
             _required("Utility company is required"), placeholder="Utility company name"),
    FormStep("average_monthly_bill", "What's your average monthly electric bill?", InputKind.SLIDER,
             _bill_amount, slider=SliderConfig(min=50, max=500, step=10, format_value=format_bill), parse=parse_bill),
    FormStep("homeowner_status", "Are you a homeowner?", InputKind.SELECT,
             _choice("Please select your homeowner status", HOMEOWNER_OPTIONS), options=HOMEOWNER_OPTIONS),
    FormStep("credit_score", "What's your credit score range?", InputKind.SELECT,
             _choice("Please select your credit score range", CREDIT_OPTIONS), options=CREDIT_OPTIONS),
    FormStep("shading", "How much shading does your home have?", InputKind.SELECT,
             _choice("Please select your home's shading condition", SHADING_OPTIONS), options=SHADING_OPTIONS),
    FormStep("first_name", "What's your first name?", InputKind.TEXT,
             _required("First name is required"), placeholder="Enter your first name"),
    FormStep("last_name", "What's your last name?", InputKind.TEXT,
             _required("Last name is required"), placeholder="Enter your last name"),
    FormStep("email", "What's your email address?", InputKind.EMAIL,
             _pattern("Email is required", "Please enter a valid email address", EMAIL_RE), placeholder="your@email.com"),
    FormStep("phone", "What's your phone number?", InputKind.TEL,
             _pattern("Phone number is required", "Please enter a valid phone number", PHONE_RE), placeholder="(123) 456-7890"),
    FormStep("street_address", "What's your street address?", InputKind.TEXT,
             _required("Street address is required"), placeholder="123 Main Street"),
    FormStep("city", "What city do you live in?", InputKind.TEXT,
             _required("City is required"), placeholder="City name"),
    FormStep("state", "What state do you live in?", InputKind.TEXT,
             _required("State is required"), placeholder="IL"),
)


def step_for_index(index: int) -> Optional[FormStep]:
    """Field step shown at ``index``, or None for the consent step."""
    if not 0 <= index < TOTAL_STEPS:
        raise IndexError(f"step {index} out of range")
    if index == CONSENT_STEP:
        return None
    return FORM_STEPS[index] if index < CONSENT_STEP else FORM_STEPS[index - 1]


def consent_errors(tcpa_consent: bool, sms_consent: bool) -> dict[str, str]:
    errors = {}
    if not tcpa_consent:
        errors["tcpa_consent"] = TCPA_CONSENT_ERROR
    if not sms_consent:
        errors["sms_consent"] = SMS_CONSENT_ERROR
    return errors
