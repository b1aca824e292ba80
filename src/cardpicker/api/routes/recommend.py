from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from cardpicker.config import settings
from cardpicker.engine.programs import ProgramValuationResolver
from cardpicker.repository.catalog_store import CatalogStore
from cardpicker.schemas.requests import RankRequest, StrategyRequest
from cardpicker.schemas.responses import OffersResponse, RankResponse, StrategyResponse
from cardpicker.services.orchestrator import RecommendationOrchestrator

router = APIRouter(tags=["recommend"])
orchestrator = RecommendationOrchestrator(
    CatalogStore(settings.card_catalog_file, settings.offer_catalog_file),
    ProgramValuationResolver(settings.cpp_defaults),
)


@router.post("/rank", response_model=RankResponse)
def rank(request: RankRequest) -> RankResponse:
    try:
        return orchestrator.recommend(request)
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/strategy", response_model=StrategyResponse)
def strategy(request: StrategyRequest) -> StrategyResponse:
    try:
        return orchestrator.strategy(request)
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/offers", response_model=OffersResponse)
def offers(owned: list[str] = Query(default=[]), now: datetime | None = None) -> OffersResponse:
    return OffersResponse(offers=orchestrator.browse_offers(owned, now))
