"""Cart package: models, reconciliation, storage, and the store."""
from .models import CartProduct, LineItem, Cart
from .service import CartStore
from .storage import CartStorage, MemoryCartStorage, RedisCartStorage, create_storage

__all__ = [
    "CartProduct",
    "LineItem",
    "Cart",
    "CartStore",
    "CartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
    "create_storage",
]
