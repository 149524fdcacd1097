"""Lead session state for one splash form attempt."""

import random
import string
import time
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

SESSION_ID_PREFIX = "QSLID"


def generate_session_id() -> str:
    """``QSLID-<epoch ms>-<6 uppercase base36 chars>``."""
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"{SESSION_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


class LeadSession(BaseModel):
    """Serializable form state. Field names serialize to camelCase."""

    session_id: str
    zip_code: str = ""
    utility_company: str = "Ameren Illinois"
    # Raw input until the bill step accepts it, then whole dollars.
    average_monthly_bill: Union[int, float, str] = 150
    homeowner_status: str = ""
    credit_score: str = ""
    shading: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    tcpa_consent: bool = False
    sms_consent: bool = False
    street_address: str = ""
    city: str = ""
    state: str = "IL"

    current_step: int = 0
    is_partial: bool = True
    disqualification_reason: Optional[str] = None
    last_saved: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def new(cls) -> "LeadSession":
        return cls(session_id=generate_session_id())

    @property
    def disqualified(self) -> bool:
        return self.disqualification_reason is not None

    @property
    def consented(self) -> bool:
        return self.tcpa_consent and self.sms_consent

    def form_fields(self) -> dict:
        """Form values keyed the way the lead endpoints expect them."""
        return self.model_dump(
            by_alias=True,
            mode="json",
            exclude={"current_step", "is_partial", "disqualification_reason", "last_saved"},
        )

    def customer_info(self) -> dict:
        return {
            "email": self.email,
            "phone": self.phone,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
        }
