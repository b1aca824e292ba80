from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from cardpicker.domain.models import Card, RotatingRule, UserRotatingState


@dataclass(frozen=True, slots=True)
class RotatingWindow:
    active: bool
    reason: str | None
    boost_rate_percent: float
    after_rate_percent: float | None
    remaining_cap_cents: float


@dataclass(frozen=True, slots=True)
class CapSplit:
    boost_val: float
    base_val: float
    boost_cents: float
    base_cents: float


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def _rule_is_live(rule: RotatingRule, now: datetime) -> bool:
    if rule.start is not None and now < _start_of_day(rule.start):
        return False
    if rule.end is not None and now > _end_of_day(rule.end):
        return False
    return True


def active_rotating_window(
    card: Card,
    category_id: str,
    now: datetime,
    user_rotating: Mapping[str, UserRotatingState] | None = None,
) -> RotatingWindow | None:
    """Return the window of the first rule covering ``now`` and ``category_id``.

    Scanning stops at the first match even when that rule still needs
    activation, so a later rule for the same category never takes over.
    """
    for rule in card.rotating_rules:
        if not _rule_is_live(rule, now):
            continue
        if category_id not in rule.category_ids:
            continue

        state = (user_rotating or {}).get(card.id) or UserRotatingState()
        activated = state.activated if rule.activation_required else True
        remaining = state.remaining_cap_cents
        if remaining is None:
            remaining = rule.cap_cents

        return RotatingWindow(
            active=activated,
            reason=None if activated else "Activation required",
            boost_rate_percent=rule.rate,
            after_rate_percent=rule.after_rate,
            remaining_cap_cents=max(0.0, remaining),
        )

    return None


def apply_cap_split(
    amount_cents: float,
    boost_percent: float,
    base_percent: float,
    remaining_cap_cents: float,
) -> CapSplit:
    boost_cents = min(amount_cents, max(0.0, remaining_cap_cents))
    base_cents = amount_cents - boost_cents
    return CapSplit(
        boost_val=(boost_cents / 100) * (boost_percent / 100),
        base_val=(base_cents / 100) * (base_percent / 100),
        boost_cents=boost_cents,
        base_cents=base_cents,
    )
