from datetime import datetime, timezone

import pytest

from cardpicker.domain.models import Card, Offer
from cardpicker.engine.offers import (
    ENROLLMENT_NOTE,
    offer_active_now,
    offer_applies_to_card,
    offer_matches_category,
    stack_offers,
)

NOW = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
CASHBACK = Card(id="cb", type="cashback", base=1)
POINTS = Card(id="pts", type="points", program="UR", base=1)


def _offer(**fields) -> Offer:
    data = {"id": "o1", "offer_type": "percent_back", "value": {"percent": 10}}
    data.update(fields)
    return Offer.model_validate(data)


def _stack(offers, card=CASHBACK, amount_cents=10000, enrolled=(), cpp=1.0, category="dining"):
    return stack_offers(
        card=card,
        category_id=category,
        amount_cents=amount_cents,
        now=NOW,
        enrolled_offer_ids=frozenset(enrolled),
        offers=offers,
        cpp=cpp,
    )


def test_active_window_is_inclusive() -> None:
    assert offer_active_now(_offer(start_at=NOW, end_at=NOW), NOW)
    assert offer_active_now(_offer(), NOW)
    assert not offer_active_now(_offer(start_at="2026-10-20T00:00:00Z"), NOW)
    assert not offer_active_now(_offer(end_at="2026-10-19T11:59:59Z"), NOW)


def test_card_scope() -> None:
    assert offer_applies_to_card(_offer(card_scope="all"), CASHBACK)
    assert offer_applies_to_card(_offer(card_scope=["cb"]), CASHBACK)
    assert not offer_applies_to_card(_offer(card_scope=["pts"]), CASHBACK)
    assert not offer_applies_to_card(_offer(card_scope="issuer"), CASHBACK)
    assert not offer_applies_to_card(_offer(card_scope=None), CASHBACK)


def test_empty_categories_match_everything() -> None:
    assert offer_matches_category(_offer(categories=[]), "anything")
    assert offer_matches_category(_offer(categories=["dining"]), "dining")
    assert not offer_matches_category(_offer(categories=["dining"]), "gas")


def test_statement_credit_with_cap() -> None:
    offer = _offer(
        offer_type="statement_credit",
        min_spend_cents=2000,
        value={"percent": 10, "max_back_cents": 2000},
    )
    stack = _stack([offer], amount_cents=50000)

    assert stack.bonus_value == pytest.approx(20.0)
    assert stack.notes == ["10% back (capped at $20.00)"]


def test_statement_credit_accepts_max_amount_cents() -> None:
    offer = _offer(offer_type="statement_credit", value={"percent": 10, "max_amount_cents": 500})
    assert _stack([offer], amount_cents=50000).bonus_value == pytest.approx(5.0)


def test_statement_credit_fixed_amount() -> None:
    offer = _offer(offer_type="statement_credit", min_spend_cents=2000, value={"fixed_amount": 500})
    stack = _stack([offer], amount_cents=2000)

    assert stack.bonus_value == pytest.approx(5.0)
    assert stack.notes == ["$5.00 statement credit"]


def test_statement_credit_below_min_spend_contributes_nothing() -> None:
    offer = _offer(offer_type="statement_credit", min_spend_cents=2000, value={"fixed_amount": 500})
    stack = _stack([offer], amount_cents=1999)

    assert stack.bonus_value == 0
    assert stack.notes == []


def test_percent_back_ignores_min_spend() -> None:
    offer = _offer(offer_type="percent_back", min_spend_cents=999999, value={"percent": 5})
    stack = _stack([offer], amount_cents=10000)

    assert stack.bonus_value == pytest.approx(5.0)
    assert stack.notes == ["5% back"]


def test_points_multiplier_on_points_card_uses_cpp() -> None:
    offer = _offer(offer_type="points_multiplier", value={"points_multiplier": 2})
    stack = _stack([offer], card=POINTS, amount_cents=10000, cpp=1.25)

    assert stack.bonus_value == pytest.approx(2.5)
    assert stack.notes == ["+2x points"]


def test_points_multiplier_on_cashback_card_is_extra_percent() -> None:
    offer = _offer(offer_type="points_multiplier", value={"points_multiplier": 2})
    stack = _stack([offer], card=CASHBACK, amount_cents=10000, cpp=1.25)

    assert stack.bonus_value == pytest.approx(2.0)


def test_unknown_offer_type_is_silent() -> None:
    stack = _stack([_offer(offer_type="portal_deal")])
    assert stack.bonus_value == 0
    assert stack.notes == []


def test_enrollment_note_appears_once() -> None:
    offers = [
        _offer(id="a", enrollment_required=True),
        _offer(id="b", enrollment_required=True),
    ]
    stack = _stack(offers)

    assert stack.bonus_value == 0
    assert stack.notes.count(ENROLLMENT_NOTE) == 1


def test_enrolled_offer_counts() -> None:
    offers = [_offer(id="a", enrollment_required=True), _offer(id="b", enrollment_required=True)]
    stack = _stack(offers, enrolled={"a"})

    assert stack.bonus_value == pytest.approx(10.0)
    assert stack.notes == ["10% back", ENROLLMENT_NOTE]


def test_enrollment_note_follows_catalog_order() -> None:
    offers = [_offer(id="a", enrollment_required=True), _offer(id="b", enrollment_required=True)]
    stack = _stack(offers, enrolled={"b"})

    assert stack.bonus_value == pytest.approx(10.0)
    assert stack.notes == [ENROLLMENT_NOTE, "10% back"]


def test_offers_stack_additively_in_catalog_order() -> None:
    first = _offer(id="a", value={"percent": 10})
    second = _offer(id="b", offer_type="statement_credit", value={"fixed_amount": 300})

    alone = _stack([first])
    both = _stack([first, second])

    assert both.bonus_value >= alone.bonus_value
    assert both.bonus_value == pytest.approx(13.0)
    assert both.notes == ["10% back", "$3.00 statement credit"]


def test_filtered_offers_contribute_nothing() -> None:
    offers = [
        _offer(id="expired", end_at="2026-01-01T00:00:00Z"),
        _offer(id="other_card", card_scope=["pts"]),
        _offer(id="other_category", categories=["gas"]),
    ]
    stack = _stack(offers)
    assert stack.bonus_value == 0
    assert stack.notes == []
