import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    card_catalog_file: str = "data/cards/cards.json"
    offer_catalog_file: str = "data/offers/offers.json"
    log_level: str = "INFO"

    # Cents-per-point defaults per reward program, e.g. CPP_DEFAULTS='{"UR": 1.5}'
    cpp_defaults: dict[str, float] = Field(
        default_factory=lambda: {"UR": 1.25, "MR": 1.0, "Cap1": 1.0, "TYP": 1.0}
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
