"""FastAPI application factory for the notification service."""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from hms_messaging.config import configure_logging
from hms_messaging.infrastructure.database import engine, initialize_database
from hms_messaging.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(title="Hospital notification service", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
