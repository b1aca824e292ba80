from collections.abc import Mapping
from types import MappingProxyType

from cardpicker.domain.models import Card
from cardpicker.engine.fields import finite_or_none

FALLBACK_CPP = 1.0

# Cents per point for well-known transferable currencies.
CPP_DEFAULTS: Mapping[str, float] = MappingProxyType(
    {
        "UR": 1.25,  # Chase Ultimate Rewards, portal/blended
        "MR": 1.0,  # Amex Membership Rewards, conservative
        "Cap1": 1.0,  # Capital One miles
        "TYP": 1.0,  # Citi ThankYou
    }
)


class ProgramValuationResolver:
    """Resolves the cents-per-point value of a card's reward currency."""

    def __init__(self, defaults: Mapping[str, float] = CPP_DEFAULTS):
        self.defaults: Mapping[str, float] = MappingProxyType(dict(defaults))

    def resolve(self, card: Card, overrides: Mapping[str, float] | None = None) -> float:
        """First defined wins: caller override, card default, program table, 1.0."""
        if overrides and card.program is not None:
            override = finite_or_none(overrides.get(card.program))
            if override is not None:
                return override
        if card.cpp_default is not None:
            return card.cpp_default
        if card.program is not None:
            table_value = finite_or_none(self.defaults.get(card.program))
            if table_value is not None:
                return table_value
        return FALLBACK_CPP


DEFAULT_RESOLVER = ProgramValuationResolver()


def resolve_cpp(card: Card, overrides: Mapping[str, float] | None = None) -> float:
    return DEFAULT_RESOLVER.resolve(card, overrides)
