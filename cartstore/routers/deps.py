"""
Shared Dependencies for Routers

The cart store is created by the application lifespan and kept on
app.state; routers receive it through get_cart_store_dep.
"""

from typing import Optional

from fastapi import FastAPI, Request

from cartstore.cart import CartStore
from cartstore.errors import CartStoreNotInitializedError

STATE_ATTR = "cart_store"


def find_cart_store(app: FastAPI) -> Optional[CartStore]:
    """The app's cart store, or None when the lifespan has not created one."""
    store = getattr(app.state, STATE_ATTR, None)
    if isinstance(store, CartStore):
        return store
    return None


def get_cart_store(app: FastAPI) -> CartStore:
    """
    The app's cart store.

    Raises:
        CartStoreNotInitializedError: if the lifespan has not created it
    """
    store = find_cart_store(app)
    if store is None:
        raise CartStoreNotInitializedError()
    return store


def install_cart_store(app: FastAPI, store: Optional[CartStore]) -> None:
    """Attach (or detach, with None) the cart store."""
    setattr(app.state, STATE_ATTR, store)


async def get_cart_store_dep(request: Request) -> CartStore:
    """FastAPI dependency."""
    return get_cart_store(request.app)
