import logging
from collections.abc import Iterable

from cardpicker.domain.models import Card, CardValuation, Offer, ValuationParams
from cardpicker.engine.offers import stack_offers
from cardpicker.engine.programs import DEFAULT_RESOLVER, ProgramValuationResolver
from cardpicker.engine.rotating import active_rotating_window, apply_cap_split

logger = logging.getLogger(__name__)

ACTIVATION_NOTE = "Activation required for rotating bonus"


def _static_rate(card: Card, category_id: str) -> float:
    rate = card.categories.get(category_id)
    if rate is not None:
        return rate
    return card.base or 1.0


def value_for(
    card: Card,
    params: ValuationParams,
    offers: Iterable[Offer] = (),
    resolver: ProgramValuationResolver | None = None,
) -> CardValuation:
    resolver = resolver or DEFAULT_RESOLVER
    cpp = resolver.resolve(card, params.program_overrides)
    static_rate = _static_rate(card, params.category_id)
    amount = params.amount_cents / 100

    base_value = 0.0
    bonus_value = 0.0
    notes: list[str] = []

    if card.is_cashback:
        window = active_rotating_window(card, params.category_id, params.now, params.user_rotating)
        if window is not None and window.active:
            after_rate = window.after_rate_percent
            split = apply_cap_split(
                amount_cents=params.amount_cents,
                boost_percent=window.boost_rate_percent,
                base_percent=after_rate if after_rate is not None else static_rate,
                remaining_cap_cents=window.remaining_cap_cents,
            )
            base_value += split.base_val
            bonus_value += split.boost_val
            notes.append(
                f"Rotating {window.boost_rate_percent:g}% applied to "
                f"${split.boost_cents / 100:.2f} (cap remaining)"
            )
        else:
            base_value += amount * (static_rate / 100)
            if window is not None:
                notes.append(ACTIVATION_NOTE)
    else:
        # Points and miles cards never consult rotating rules.
        base_value += amount * static_rate * (cpp / 100)

    stack = stack_offers(
        card=card,
        category_id=params.category_id,
        amount_cents=params.amount_cents,
        now=params.now,
        enrolled_offer_ids=params.user_enrolled_offer_ids,
        offers=offers,
        cpp=cpp,
    )
    bonus_value += stack.bonus_value
    notes.extend(stack.notes)

    logger.debug(
        "valued card=%s category=%s base=%.4f bonus=%.4f",
        card.id,
        params.category_id,
        base_value,
        bonus_value,
    )
    return CardValuation(
        card=card,
        dollars=base_value + bonus_value,
        base_value=base_value,
        bonus_value=bonus_value,
        notes=notes,
    )
