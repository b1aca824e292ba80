import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from cardpicker.domain.models import Card, Offer

logger = logging.getLogger(__name__)

ENROLLMENT_NOTE = "Offer requires enrollment"


@dataclass(slots=True)
class OfferStack:
    bonus_value: float = 0.0
    notes: list[str] = field(default_factory=list)


def _money(dollars: float) -> str:
    return f"${dollars:.2f}"


def offer_active_now(offer: Offer, now: datetime) -> bool:
    if offer.start_at is not None and now < offer.start_at:
        return False
    if offer.end_at is not None and now > offer.end_at:
        return False
    return True


def offer_applies_to_card(offer: Offer, card: Card) -> bool:
    if offer.card_scope == "all":
        return True
    if isinstance(offer.card_scope, list):
        return card.id in offer.card_scope
    return False


def offer_matches_category(offer: Offer, category_id: str) -> bool:
    # Offers without categories are merchant-specific and match any category.
    if not offer.categories:
        return True
    return category_id in offer.categories


def _percent_back(offer: Offer, amount: float) -> tuple[float, str]:
    percent = offer.value.percent or 0.0
    value = amount * (percent / 100)
    cap_cents = offer.value.cap_cents
    if cap_cents is None:
        return value, f"{percent:g}% back"
    cap = cap_cents / 100
    return min(value, cap), f"{percent:g}% back (capped at {_money(cap)})"


def _statement_credit(offer: Offer, card: Card, amount_cents: int, cpp: float) -> tuple[float, str] | None:
    if amount_cents < offer.min_spend_cents:
        return None
    fixed = offer.value.fixed_amount
    if fixed:
        credit = fixed / 100
        return credit, f"{_money(credit)} statement credit"
    if offer.value.percent:
        return _percent_back(offer, amount_cents / 100)
    return None


def _percent_back_offer(offer: Offer, card: Card, amount_cents: int, cpp: float) -> tuple[float, str]:
    return _percent_back(offer, amount_cents / 100)


def _points_multiplier(offer: Offer, card: Card, amount_cents: int, cpp: float) -> tuple[float, str]:
    extra = offer.value.points_multiplier or 0.0
    amount = amount_cents / 100
    if card.is_cashback:
        # cashback cards have no points currency: read "+Nx" as "+N%"
        value = amount * (extra / 100)
    else:
        value = amount * extra * (cpp / 100)
    return value, f"+{extra:g}x points"


OFFER_EVALUATORS = {
    "statement_credit": _statement_credit,
    "percent_back": _percent_back_offer,
    "points_multiplier": _points_multiplier,
}


def stack_offers(
    card: Card,
    category_id: str,
    amount_cents: int,
    now: datetime,
    enrolled_offer_ids: Collection[str],
    offers: Iterable[Offer],
    cpp: float,
) -> OfferStack:
    """Sum every qualifying offer for one card, in catalog order."""
    stack = OfferStack()
    for offer in offers:
        if not offer_active_now(offer, now):
            continue
        if not offer_applies_to_card(offer, card):
            continue
        if not offer_matches_category(offer, category_id):
            continue

        if offer.enrollment_required and offer.id not in enrolled_offer_ids:
            if ENROLLMENT_NOTE not in stack.notes:
                stack.notes.append(ENROLLMENT_NOTE)
            continue

        evaluator = OFFER_EVALUATORS.get(offer.offer_type)
        if evaluator is None:
            logger.debug("ignoring offer %s with type %s", offer.id, offer.offer_type)
            continue

        result = evaluator(offer, card, amount_cents, cpp)
        if result is None:
            continue
        value, note = result
        stack.bonus_value += value
        stack.notes.append(note)

    return stack
