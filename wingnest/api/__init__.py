from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wingnest.api.endpoints import get_endpoints_router
from wingnest.config import settings
from wingnest.connections.manager import ConnectionManager
from wingnest.llms.base import TextGenerator
from wingnest.stores.base import WingStore


def create_app(
    *,
    store: WingStore,
    generator: TextGenerator,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    # The extension calls in from its own chrome-extension:// origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    manager = ConnectionManager(
        store=store,
        generator=generator,
        score_threshold=settings.score_threshold,
        high_score_threshold=settings.high_score_threshold,
    )
    app.include_router(router=get_endpoints_router(store=store, manager=manager))

    return app
