from pydantic import BaseModel

from cardpicker.domain.models import CardValuation, Offer


class RankResponse(BaseModel):
    best_card: CardValuation
    ranked_cards: list[CardValuation]
    category_used: str
    offers_considered: int


class StrategyPick(BaseModel):
    card_id: str
    card_name: str | None
    multiplier: float
    type: str


class StrategyResponse(BaseModel):
    picks: dict[str, StrategyPick]


class OffersResponse(BaseModel):
    offers: dict[str, list[Offer]]
