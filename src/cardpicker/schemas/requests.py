from datetime import datetime

from pydantic import BaseModel, Field

from cardpicker.domain.models import UserRotatingState
from cardpicker.services.wallet import CategoryChoice

MAX_AMOUNT_DOLLARS = 10_000_000


class RotatingPreference(BaseModel):
    """Persisted rotating-category state, with the remaining cap in dollars."""

    activated: bool = False
    cap_remaining: float | None = Field(default=None, allow_inf_nan=False)


class RankRequest(BaseModel):
    owned_card_ids: list[str]
    category: str
    amount: float = Field(ge=0, le=MAX_AMOUNT_DOLLARS, allow_inf_nan=False)
    merchant_id: str | None = None
    enrolled_offer_ids: list[str] = Field(default_factory=list)
    user_rotating: dict[str, UserRotatingState] = Field(default_factory=dict)
    rotating_preferences: dict[str, RotatingPreference] = Field(default_factory=dict)
    category_choices: dict[str, CategoryChoice] = Field(default_factory=dict)
    program_overrides: dict[str, float] = Field(default_factory=dict)
    now: datetime | None = None


class StrategyRequest(BaseModel):
    owned_card_ids: list[str]
    category_choices: dict[str, CategoryChoice] = Field(default_factory=dict)
    categories: list[str] | None = None
