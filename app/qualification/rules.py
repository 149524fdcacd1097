"""Disqualification rule.

Only homeowner status disqualifies. Credit score and shading are collected
but accepted whatever the answer.
"""

from typing import Any, Optional

NOT_A_HOMEOWNER = "Not a homeowner"


def evaluate(field: str, value: Any) -> Optional[str]:
    """Return the disqualification reason for ``value``, or None."""
    if field == "homeowner_status" and value == "no":
        return NOT_A_HOMEOWNER
    return None
