"""
cartsync - FastAPI Application

Single entry point for the cart API.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cartsync.logging import configure_logging, get_logger
from cartsync.routers import cart_router
from cartsync.routers.deps import shutdown_services

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("cartsync API starting")
    yield
    await shutdown_services()
    logger.info("cartsync API stopped")


app = FastAPI(title="cartsync", lifespan=lifespan)
app.include_router(cart_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
