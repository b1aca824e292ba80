import logging
from datetime import datetime, timezone

from cardpicker.domain.models import CATEGORY_IDS, Offer, ValuationParams
from cardpicker.engine.programs import ProgramValuationResolver
from cardpicker.engine.selectors import category_strategy, rank_cards
from cardpicker.repository.catalog_store import CatalogStore
from cardpicker.schemas.requests import RankRequest, StrategyRequest
from cardpicker.schemas.responses import RankResponse, StrategyPick, StrategyResponse
from cardpicker.services.wallet import (
    WalletError,
    build_wallet,
    group_live_offers,
    offers_for_merchant,
    rotating_state_from_dollars,
)

logger = logging.getLogger(__name__)


class RecommendationOrchestrator:
    def __init__(self, store: CatalogStore, resolver: ProgramValuationResolver | None = None):
        self.store = store
        self.resolver = resolver or ProgramValuationResolver()

    def _build_params(self, request: RankRequest, now: datetime) -> ValuationParams:
        user_rotating = {
            card_id: rotating_state_from_dollars(pref.activated, pref.cap_remaining)
            for card_id, pref in request.rotating_preferences.items()
        }
        # cent-based state sent alongside wins for the same card
        user_rotating.update(request.user_rotating)
        return ValuationParams(
            amount_cents=round(request.amount * 100),
            category_id=request.category,
            program_overrides=request.program_overrides,
            now=now,
            user_rotating=user_rotating,
            user_enrolled_offer_ids=frozenset(request.enrolled_offer_ids),
        )

    def recommend(self, request: RankRequest) -> RankResponse:
        now = request.now or datetime.now(timezone.utc)
        wallet = build_wallet(self.store.load_cards(), request.owned_card_ids, request.category_choices)
        if not wallet:
            raise WalletError("No cards available.")

        params = self._build_params(request, now)
        offers_by_card = offers_for_merchant(self.store.load_offers(), wallet, request.merchant_id, params.now)
        ranked = rank_cards(wallet, params, offers_by_card, resolver=self.resolver)

        offers_considered = len(next(iter(offers_by_card.values()), []))
        logger.info(
            "ranked %d cards for category=%s merchant=%s, best=%s",
            len(ranked),
            params.category_id,
            request.merchant_id,
            ranked[0].card.id,
        )
        return RankResponse(
            best_card=ranked[0],
            ranked_cards=ranked,
            category_used=params.category_id,
            offers_considered=offers_considered,
        )

    def strategy(self, request: StrategyRequest) -> StrategyResponse:
        wallet = build_wallet(self.store.load_cards(), request.owned_card_ids, request.category_choices)
        picks = category_strategy(wallet, request.categories or CATEGORY_IDS)
        return StrategyResponse(
            picks={
                category_id: StrategyPick(
                    card_id=pick.card.id,
                    card_name=pick.card.name,
                    multiplier=pick.multiplier,
                    type=pick.type,
                )
                for category_id, pick in picks.items()
            }
        )

    def browse_offers(self, owned_ids: list[str], now: datetime | None = None) -> dict[str, list[Offer]]:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return group_live_offers(self.store.load_offers(), set(owned_ids), now)
