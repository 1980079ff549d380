# path: route-metadata-api/route_metadata/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from route_metadata.config import LOG_LEVEL
from route_metadata.api.routes.routes import get_metadata_engine, router as routes_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Only close the lookup client if a request ever built it
    if get_metadata_engine.cache_info().currsize:
        await get_metadata_engine().aclose()
        logger.info("Road classifier closed")


app = FastAPI(title="route-metadata-api", lifespan=lifespan)


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}


app.include_router(routes_router)
