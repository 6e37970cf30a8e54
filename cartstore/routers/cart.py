"""
Cart Router

Cart endpoints for the presentation layer.

Response format:
- Prices are floats with 2 decimals, computed from Decimal values
- Every mutation returns the full cart
"""
from fastapi import APIRouter, Depends

from cartstore.cart import Cart, CartProduct, CartStore
from cartstore.logging import get_logger, sanitize_id_for_logging
from cartstore.services.money import to_float
from .deps import get_cart_store_dep

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _format_cart_response(cart: Cart) -> dict:
    return {
        "items": [
            {
                "id": item.id,
                "title": item.title,
                "image_url": item.image_url,
                "price": to_float(item.price),
                "quantity": item.quantity,
                "total_price": to_float(item.total_price),
            }
            for item in cart.items
        ],
        "total_items": cart.total_items,
        "subtotal": to_float(cart.subtotal),
        "hydrated": cart.hydrated,
    }


@router.get("")
async def get_cart(store: CartStore = Depends(get_cart_store_dep)):
    """Current cart, once the stored cart has been loaded."""
    await store.wait_hydrated()
    return _format_cart_response(store.cart)


@router.post("/items")
async def add_to_cart(product: CartProduct, store: CartStore = Depends(get_cart_store_dep)):
    """Add one unit of a product."""
    cart = await store.add_to_cart(product)
    logger.info(f"Added {sanitize_id_for_logging(product.id)} to cart")
    return _format_cart_response(cart)


@router.post("/items/{product_id}/increment")
async def increment_item(product_id: str, store: CartStore = Depends(get_cart_store_dep)):
    return _format_cart_response(await store.increment(product_id))


@router.post("/items/{product_id}/decrement")
async def decrement_item(product_id: str, store: CartStore = Depends(get_cart_store_dep)):
    return _format_cart_response(await store.decrement(product_id))
