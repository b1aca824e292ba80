import uvicorn
from fastapi import FastAPI

from cardpicker.api.routes.health import router as health_router
from cardpicker.api.routes.recommend import router as recommend_router
from cardpicker.config import configure_logging, settings

app = FastAPI(title="CardPicker API", version="0.1.0")
app.include_router(health_router)
app.include_router(recommend_router)


def run() -> None:
    configure_logging()
    uvicorn.run("cardpicker.api.app:app", host=settings.app_host, port=settings.app_port, reload=False)
