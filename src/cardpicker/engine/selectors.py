from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from cardpicker.domain.models import Card, CardValuation, Offer, ValuationParams
from cardpicker.engine.evaluator import value_for
from cardpicker.engine.programs import ProgramValuationResolver


@dataclass(frozen=True, slots=True)
class CategoryPick:
    card: Card
    multiplier: float
    type: str


def rank_cards(
    cards: Iterable[Card],
    params: ValuationParams,
    offers_by_card: Mapping[str, Sequence[Offer]] | None = None,
    resolver: ProgramValuationResolver | None = None,
) -> list[CardValuation]:
    offers_by_card = offers_by_card or {}
    valuations = [
        value_for(card, params, offers_by_card.get(card.id, ()), resolver=resolver)
        for card in cards
    ]
    # list.sort is stable, so cards tied on both keys keep wallet order
    valuations.sort(key=lambda item: (item.dollars, item.bonus_value), reverse=True)
    return valuations


def category_strategy(
    cards: Sequence[Card],
    category_ids: Iterable[str],
    points_cpp: float = 1.25,
) -> dict[str, CategoryPick]:
    """Best card per category by headline earn rate, ignoring offers and caps.

    Points rates are scaled by ``points_cpp`` so they compare with cashback
    percentages. Categories where nothing beats a flat 1 are left out.
    """
    picks: dict[str, CategoryPick] = {}
    for category_id in category_ids:
        best_card = None
        best_value = 0.0
        for card in cards:
            multiplier = card.categories.get(category_id) or card.base or 1.0
            value = multiplier if card.is_cashback else multiplier * points_cpp
            if value > best_value:
                best_value = value
                best_card = card

        if best_card is not None and best_value > 1:
            multiplier = best_card.categories.get(category_id) or best_card.base or 1.0
            picks[category_id] = CategoryPick(card=best_card, multiplier=multiplier, type=best_card.type)
    return picks
