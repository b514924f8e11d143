# app/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routers import carts, orders, health
from app.data import models  # noqa: F401  registers every model in Base.metadata
from app.data.database import Base, engine
from app.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Order & Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app
