from cardpicker.domain.models import (
    Card,
    CardValuation,
    Offer,
    OfferValue,
    RotatingRule,
    UserRotatingState,
    ValuationParams,
)
from cardpicker.engine.evaluator import value_for
from cardpicker.engine.programs import ProgramValuationResolver, resolve_cpp
from cardpicker.engine.selectors import category_strategy, rank_cards
from cardpicker.repository.catalog_store import CatalogStore

__all__ = [
    "Card",
    "CardValuation",
    "CatalogStore",
    "Offer",
    "OfferValue",
    "ProgramValuationResolver",
    "RotatingRule",
    "UserRotatingState",
    "ValuationParams",
    "category_strategy",
    "rank_cards",
    "resolve_cpp",
    "value_for",
]
