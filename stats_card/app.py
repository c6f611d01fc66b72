"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stats_card.routers import cards

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the card service (and negotiate the cache backend) once at startup."""
    from stats_card.services.card_service import get_card_service
    service = get_card_service()
    logger.info("Stats card service ready (cache backend: %s)", service.store.backend_name)

    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="LeetCode Stats Card",
        description=(
            "Dynamic SVG cards summarizing a LeetCode user's solved problems, "
            "ranking, submission activity and recent accepted submissions."
        ),
        version="1.0.0",
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    # Cards router last; its /{username} route would shadow anything after it
    app.include_router(cards.router)

    return app
