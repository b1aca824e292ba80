import logging
from datetime import date, datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from cardpicker.engine.fields import finite_or_none, first_present, number_or_none

logger = logging.getLogger(__name__)

CASHBACK = "cashback"
CARD_TYPES = ("cashback", "points", "miles")
CATEGORY_IDS = (
    "grocery",
    "dining",
    "gas",
    "transit",
    "drugstore",
    "travel",
    "online",
    "warehouse",
    "department_store",
    "utilities",
    "ev_charging",
    "home_improve",
    "streaming",
    "other",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(item) for item in value if item is not None]


class RotatingRule(BaseModel):
    start: date | None = None
    end: date | None = None
    category_ids: list[str] = Field(default_factory=list)
    rate: float = 0
    after_rate: float | None = None
    cap_cents: float = 0
    activation_required: bool = False

    @field_validator("category_ids", mode="before")
    @classmethod
    def _category_ids(cls, value: Any) -> list[str]:
        return _str_list(value)

    @field_validator("rate", mode="before")
    @classmethod
    def _rate(cls, value: Any) -> float:
        return number_or_none(value) or 0.0

    @field_validator("after_rate", mode="before")
    @classmethod
    def _after_rate(cls, value: Any) -> float | None:
        return finite_or_none(value)

    @field_validator("cap_cents", mode="before")
    @classmethod
    def _cap_cents(cls, value: Any) -> float:
        return max(0.0, finite_or_none(value) or 0.0)


class Card(BaseModel):
    id: str
    name: str | None = None
    issuer: str | None = None
    program: str | None = None
    type: str = "points"
    base: float | None = None
    cpp_default: float | None = None
    categories: dict[str, float] = Field(default_factory=dict)
    rotating_rules: list[RotatingRule] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> str:
        # miles cards are valued exactly like points cards
        return value if value in CARD_TYPES else "points"

    @field_validator("base", mode="before")
    @classmethod
    def _base(cls, value: Any) -> float | None:
        return number_or_none(value)

    @field_validator("cpp_default", mode="before")
    @classmethod
    def _cpp_default(cls, value: Any) -> float | None:
        return finite_or_none(value)

    @field_validator("categories", mode="before")
    @classmethod
    def _categories(cls, value: Any) -> dict[str, float]:
        if not isinstance(value, dict):
            return {}
        rates = {}
        for category, rate in value.items():
            number = finite_or_none(rate)
            if number is not None:
                rates[str(category)] = number
        return rates

    @field_validator("rotating_rules", mode="before")
    @classmethod
    def _rotating_rules(cls, value: Any) -> list[RotatingRule]:
        if not isinstance(value, (list, tuple)):
            return []
        rules = []
        for raw in value:
            try:
                rules.append(RotatingRule.model_validate(raw))
            except ValidationError as exc:
                logger.debug("dropping malformed rotating rule %r: %s", raw, exc)
        return rules

    @property
    def is_cashback(self) -> bool:
        return self.type == CASHBACK


class OfferValue(BaseModel):
    fixed_amount: float | None = None
    percent: float | None = None
    points_multiplier: float | None = None
    max_back_cents: float | None = None
    max_amount_cents: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _finite(cls, value: Any) -> float | None:
        return finite_or_none(value)

    @property
    def cap_cents(self) -> float | None:
        """Cap on percent-based offers; catalogs use either field name."""
        return first_present(self.max_back_cents, self.max_amount_cents)


class Offer(BaseModel):
    id: str
    issuer: str | None = None
    title: str | None = None
    offer_type: str
    value: OfferValue = Field(default_factory=OfferValue)
    min_spend_cents: float = 0
    merchant_id: str | None = None
    categories: list[str] = Field(default_factory=list)
    card_scope: str | list[str] = "all"
    start_at: datetime | None = None
    end_at: datetime | None = None
    enrollment_required: bool = False

    @field_validator("value", mode="before")
    @classmethod
    def _value(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("min_spend_cents", mode="before")
    @classmethod
    def _min_spend(cls, value: Any) -> float:
        return finite_or_none(value) or 0.0

    @field_validator("categories", mode="before")
    @classmethod
    def _categories(cls, value: Any) -> list[str]:
        return _str_list(value)

    @field_validator("card_scope", mode="before")
    @classmethod
    def _card_scope(cls, value: Any) -> str | list[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            return _str_list(value)
        # unrecognised scope matches no card
        return ""

    @field_validator("start_at", "end_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value) if value is not None else None


class UserRotatingState(BaseModel):
    activated: bool = False
    remaining_cap_cents: float | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("remaining_cap_cents", mode="before")
    @classmethod
    def _remaining(cls, value: Any) -> float | None:
        return finite_or_none(value)


class ValuationParams(BaseModel):
    amount_cents: int = Field(ge=0)
    category_id: str
    program_overrides: dict[str, float] = Field(default_factory=dict)
    now: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        validation_alias=AliasChoices("nowISO", "now"),
        serialization_alias="nowISO",
    )
    user_rotating: dict[str, UserRotatingState] = Field(default_factory=dict)
    user_enrolled_offer_ids: frozenset[str] = frozenset()

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("program_overrides", mode="before")
    @classmethod
    def _overrides(cls, value: Any) -> dict[str, float]:
        if not isinstance(value, dict):
            return {}
        overrides = {}
        for program, cpp in value.items():
            number = finite_or_none(cpp)
            if number is not None:
                overrides[str(program)] = number
        return overrides

    @field_validator("now")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class CardValuation(BaseModel):
    card: Card
    dollars: float
    base_value: float
    bonus_value: float
    notes: list[str] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
