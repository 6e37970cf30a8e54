"""
GoMarketplace Cart - Main FastAPI Application

Composition root: owns the single cart store for the process.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cartstore.cart import CartStore, CartStorage
from cartstore.config import CartSettings, load_settings
from cartstore.errors import CartStoreNotInitializedError
from cartstore.logging import get_logger
from cartstore.routers import cart_router
from cartstore.routers.deps import find_cart_store, install_cart_store

logger = get_logger(__name__)


def create_app(settings: Optional[CartSettings] = None, storage: Optional[CartStorage] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Cart settings (default: from environment)
        storage: Storage backend override (default: chosen by settings)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        cart_settings = settings or load_settings()
        store = CartStore.from_settings(cart_settings, storage=storage)
        install_cart_store(app, store)
        logger.info(f"Cart store started (key={cart_settings.storage_key})")
        try:
            yield
        finally:
            # Shutdown: let pending snapshot writes land
            await store.aclose()
            install_cart_store(app, None)
            logger.info("Cart store stopped")

    app = FastAPI(
        title="GoMarketplace Cart",
        description="Cart store synchronized with durable key-value storage",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.exception_handler(CartStoreNotInitializedError)
    async def cart_store_not_initialized_handler(request: Request, exc: CartStoreNotInitializedError):
        logger.error(f"{exc} ({request.url.path})")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        store = find_cart_store(app)
        return {
            "status": "ok",
            "cart_store": store is not None,
            "hydrated": store.hydrated if store else False,
        }

    app.include_router(cart_router)
    return app


app = create_app()
