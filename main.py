import argparse
import json

from cardpicker.api.app import run as run_api
from cardpicker.config import configure_logging, settings
from cardpicker.engine.programs import ProgramValuationResolver
from cardpicker.repository.catalog_store import CatalogStore
from cardpicker.schemas.requests import RankRequest, RotatingPreference
from cardpicker.services.orchestrator import RecommendationOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CardPicker unified entrypoint")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["api", "rank"],
        default="api",
        help="Run mode: api (default), rank",
    )
    parser.add_argument("--cards", default="", help="Comma separated owned card ids (rank mode)")
    parser.add_argument("--category", default="other")
    parser.add_argument("--amount", type=float, default=0.0, help="Purchase amount in dollars")
    parser.add_argument("--merchant")
    parser.add_argument("--enrolled", default="", help="Comma separated enrolled offer ids")
    parser.add_argument(
        "--rotating",
        action="append",
        default=[],
        metavar="CARD_ID=CAP_DOLLARS",
        help="Activated rotating bonus with its remaining cap in dollars, repeatable",
    )
    parser.add_argument(
        "--inactive",
        action="append",
        default=[],
        metavar="CARD_ID",
        help="Card whose rotating bonus is not activated, repeatable",
    )
    return parser


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_rotating(values: list[str], inactive: list[str]) -> dict[str, RotatingPreference]:
    preferences: dict[str, RotatingPreference] = {}
    for value in values:
        card_id, _, cap = value.partition("=")
        if not card_id or not cap:
            raise ValueError(f"Expected CARD_ID=CAP_DOLLARS, got {value!r}")
        preferences[card_id.strip()] = RotatingPreference(activated=True, cap_remaining=float(cap))
    for card_id in inactive:
        cap = preferences[card_id].cap_remaining if card_id in preferences else None
        preferences[card_id] = RotatingPreference(activated=False, cap_remaining=cap)
    return preferences


def run_rank(args: argparse.Namespace) -> None:
    orchestrator = RecommendationOrchestrator(
        CatalogStore(settings.card_catalog_file, settings.offer_catalog_file),
        ProgramValuationResolver(settings.cpp_defaults),
    )
    result = orchestrator.recommend(
        RankRequest(
            owned_card_ids=_split(args.cards),
            category=args.category,
            amount=args.amount,
            merchant_id=args.merchant,
            enrolled_offer_ids=_split(args.enrolled),
            rotating_preferences=parse_rotating(args.rotating, args.inactive),
        )
    )
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.mode == "api":
        run_api()
        return

    configure_logging()
    try:
        run_rank(args)
    except (ValueError, FileNotFoundError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
