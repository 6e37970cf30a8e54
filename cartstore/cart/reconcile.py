"""
Pure reconciliation of cart mutations.

Every function takes the current items tuple and returns a new tuple.
When the mutation does not change anything the input tuple itself is
returned, so callers can detect a no-op with an identity check.
"""
from dataclasses import replace
from typing import Tuple

from .models import CartProduct, LineItem

Items = Tuple[LineItem, ...]


def find_index(items: Items, product_id: str) -> int:
    """Position of the item with this id, or -1."""
    for idx, item in enumerate(items):
        if item.id == product_id:
            return idx
    return -1


def _with_quantity(items: Items, idx: int, quantity: int) -> Items:
    updated = replace(items[idx], quantity=quantity)
    return items[:idx] + (updated,) + items[idx + 1:]


def add_item(items: Items, product: CartProduct) -> Items:
    """
    Append the product with quantity 1, or bump the quantity of the
    existing entry.

    An existing entry keeps its own title, image and price.
    """
    idx = find_index(items, product.id)
    if idx == -1:
        return items + (LineItem.from_product(product),)
    return _with_quantity(items, idx, items[idx].quantity + 1)


def increment_item(items: Items, product_id: str) -> Items:
    """Quantity + 1 in place; unknown ids are a no-op."""
    idx = find_index(items, product_id)
    if idx == -1:
        return items
    return _with_quantity(items, idx, items[idx].quantity + 1)


def decrement_item(items: Items, product_id: str, remove_on_zero: bool = False) -> Items:
    """
    Quantity - 1 in place; unknown ids are a no-op.

    A quantity of 1 is clamped (no change) unless remove_on_zero is set,
    in which case the item is dropped.
    """
    idx = find_index(items, product_id)
    if idx == -1:
        return items

    quantity = items[idx].quantity - 1
    if quantity > 0:
        return _with_quantity(items, idx, quantity)
    if remove_on_zero:
        return items[:idx] + items[idx + 1:]
    return items
