# askstream/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from askstream.core import config
from askstream.core.logging import configure_logging
from askstream.api.routers.health import router as health_router
from askstream.api.routers.providers import router as providers_router
from askstream.api.routers.ask import router as ask_router


def create_app() -> FastAPI:
    configure_logging(config.LOG_LEVEL)

    app = FastAPI(title="askstream", version="0.3.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health_router)
    app.include_router(providers_router)
    app.include_router(ask_router)

    return app


app = create_app()
