"""Wallet assembly around the valuation engine.

These helpers turn catalog records and persisted user choices into the
inputs ``rank_cards`` expects. None of them mutate catalog records.
"""

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from cardpicker.domain.models import Card, Offer, UserRotatingState
from cardpicker.engine.offers import offer_active_now

logger = logging.getLogger(__name__)

CHOSEN_PLACEHOLDER = "chosen"
UNCATEGORIZED = "other"

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


class WalletError(ValueError):
    pass


class CategoryChoice(BaseModel):
    """A bonus category picked by the cardholder, e.g. a 3% choice category."""

    inject: dict[str, float] = Field(default_factory=dict)
    replace: bool = False
    label: str | None = None


def _apply_choice(card: Card, choice: CategoryChoice) -> Card:
    if choice.replace:
        categories = dict(choice.inject)
    else:
        categories = {k: v for k, v in card.categories.items() if k != CHOSEN_PLACEHOLDER}
        categories.update(choice.inject)
    return card.model_copy(update={"categories": categories})


def build_wallet(
    catalog: Sequence[Card],
    owned_ids: Collection[str],
    category_choices: Mapping[str, CategoryChoice] | None = None,
) -> list[Card]:
    category_choices = category_choices or {}
    known_ids = {card.id for card in catalog}
    for card_id in owned_ids:
        if card_id not in known_ids:
            logger.warning("owned card %s is not in the catalog, skipping", card_id)

    wallet: list[Card] = []
    for card in catalog:
        if card.id not in owned_ids:
            continue
        choice = category_choices.get(card.id)
        wallet.append(_apply_choice(card, choice) if choice else card)

    if owned_ids and not wallet:
        raise WalletError("None of the owned cards are in the catalog.")
    return wallet


def offers_for_merchant(
    offers: Iterable[Offer],
    cards: Iterable[Card],
    merchant_id: str | None,
    now: datetime,
) -> dict[str, list[Offer]]:
    relevant: list[Offer] = []
    if merchant_id:
        relevant = [o for o in offers if o.merchant_id == merchant_id and offer_active_now(o, now)]
    return {card.id: list(relevant) for card in cards}


def rotating_state_from_dollars(activated: bool, cap_remaining_dollars: float | None) -> UserRotatingState:
    try:
        cents = round(float(cap_remaining_dollars or 0) * 100)
    except (TypeError, ValueError, OverflowError):
        cents = 0
    return UserRotatingState(activated=bool(activated), remaining_cap_cents=max(0, cents))


def _eligible_for_wallet(offer: Offer, owned_ids: Collection[str]) -> bool:
    if offer.card_scope == "all":
        return True
    if not isinstance(offer.card_scope, list):
        return False
    if not offer.card_scope:
        return True
    return any(card_id in owned_ids for card_id in offer.card_scope)


def group_live_offers(
    offers: Iterable[Offer],
    owned_ids: Collection[str],
    now: datetime,
) -> dict[str, list[Offer]]:
    """Bucket live, wallet-eligible offers by category for browsing.

    Each bucket is ordered by soonest expiry, then by lowest minimum spend.
    """
    buckets: dict[str, list[Offer]] = {}
    for offer in offers:
        if not offer_active_now(offer, now) or not _eligible_for_wallet(offer, owned_ids):
            continue
        for category in offer.categories or [UNCATEGORIZED]:
            buckets.setdefault(category, []).append(offer)

    for bucket in buckets.values():
        bucket.sort(key=lambda o: (o.end_at or _FAR_FUTURE, o.min_spend_cents))
    return buckets
