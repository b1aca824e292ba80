import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cardpicker.domain.models import Card, Offer

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CatalogStore:
    def __init__(self, card_file: str, offer_file: str | None = None):
        self.card_file = Path(card_file)
        self.offer_file = Path(offer_file) if offer_file else None

    def load_cards(self) -> list[Card]:
        if not self.card_file.exists():
            raise FileNotFoundError(f"Card catalog not found: {self.card_file}")
        return self._load(self.card_file, Card)

    def load_offers(self) -> list[Offer]:
        if self.offer_file is None or not self.offer_file.exists():
            logger.info("no offer catalog at %s, continuing without offers", self.offer_file)
            return []
        return self._load(self.offer_file, Offer)

    def _load(self, path: Path, model: type[ModelT]) -> list[ModelT]:
        with path.open("r", encoding="utf-8") as fh:
            data: Any = json.load(fh)

        if not isinstance(data, list):
            raise ValueError(f"Catalog {path} must contain a JSON array")

        records: list[ModelT] = []
        for index, item in enumerate(data):
            try:
                records.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("skipping %s record %d in %s: %s", model.__name__, index, path, exc)
        logger.debug("loaded %d %s records from %s", len(records), model.__name__, path)
        return records
