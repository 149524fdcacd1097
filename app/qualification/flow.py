"""Reducer for the splash form.

``apply(state, action)`` is pure: it returns the next LeadSession, any field
errors, and the side effects the caller should run (disqualify, partial save,
submit). The driver in app.qualification.client performs the effects.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from app.qualification.rules import evaluate
from app.qualification.session import LeadSession
from app.qualification.steps import (
    CONSENT_STEP,
    LAST_STEP,
    consent_errors,
    step_for_index,
)


@dataclass(frozen=True)
class SetField:
    """Set the value of the field shown at the current step."""
    value: Any


@dataclass(frozen=True)
class SetConsent:
    tcpa_consent: Optional[bool] = None
    sms_consent: Optional[bool] = None


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Restart:
    pass


Action = Union[SetField, SetConsent, Next, Restart]


class EffectKind(str, enum.Enum):
    DISQUALIFY = "disqualify"
    SAVE_PARTIAL = "save_partial"
    SUBMIT = "submit"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    reason: Optional[str] = None


@dataclass(frozen=True)
class Transition:
    state: LeadSession
    errors: dict = field(default_factory=dict)
    effects: tuple = ()

    def effects_of(self, kind: EffectKind) -> list[Effect]:
        return [e for e in self.effects if e.kind == kind]


def should_save_partial(step: int) -> bool:
    """Partial saves run on every third step once consent is given."""
    return step > CONSENT_STEP and step % 3 == 0


def apply(state: LeadSession, action: Action) -> Transition:
    if isinstance(action, Restart):
        return Transition(state=LeadSession.new())

    # A disqualified session is finished; nothing moves it again.
    if state.disqualified:
        return Transition(state=state)

    if isinstance(action, SetField):
        step = step_for_index(state.current_step)
        if step is None:
            raise ValueError("consent step has no field; use SetConsent")
        return Transition(state=state.model_copy(update={step.field: action.value}))

    if isinstance(action, SetConsent):
        update = {}
        if action.tcpa_consent is not None:
            update["tcpa_consent"] = action.tcpa_consent
        if action.sms_consent is not None:
            update["sms_consent"] = action.sms_consent
        return Transition(state=state.model_copy(update=update))

    if isinstance(action, Next):
        return _next(state)

    raise TypeError(f"unknown action {action!r}")


def _next(state: LeadSession) -> Transition:
    current = state.current_step
    step = step_for_index(current)

    if step is None:
        errors = consent_errors(state.tcpa_consent, state.sms_consent)
        if errors:
            return Transition(state=state, errors=errors)
    else:
        value = getattr(state, step.field)
        error = step.validate(value)
        if error:
            return Transition(state=state, errors={step.field: error})
        if step.parse is not None:
            value = step.parse(value)
            state = state.model_copy(update={step.field: value})

        reason = evaluate(step.field, value)
        if reason:
            disqualified = state.model_copy(update={"disqualification_reason": reason, "is_partial": False})
            return Transition(state=disqualified, effects=(Effect(EffectKind.DISQUALIFY, reason=reason),))

    effects = []
    if current < LAST_STEP:
        state = state.model_copy(update={"current_step": current + 1})
    else:
        effects.append(Effect(EffectKind.SUBMIT))
    if should_save_partial(current):
        effects.append(Effect(EffectKind.SAVE_PARTIAL))
    return Transition(state=state, effects=tuple(effects))
