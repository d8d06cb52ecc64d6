# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront.api.dependencies import SessionRegistry
from storefront.api.routers import carts, health, orders
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(sessions: SessionRegistry | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Disposing storefront sessions")
        app.state.sessions.dispose_all()

    app = FastAPI(
        title="Storefront Cart Engine",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.sessions = sessions or SessionRegistry()

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
