"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

from pydantic import BaseModel, field_validator

from cartstore.services.money import parse_decimal, round_money, multiply


class CartProduct(BaseModel):
    """Product as it is added to the cart (a line item without quantity)."""
    id: str
    title: str
    image_url: str
    price: Decimal

    class Config:
        extra = "ignore"

    @field_validator("id")
    @classmethod
    def id_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("id must be a non-empty string")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def price_not_negative(cls, v):
        price = parse_decimal(v)
        if price < 0:
            raise ValueError("price must be non-negative")
        return price


@dataclass(frozen=True)
class LineItem:
    """Single product entry in the cart."""
    id: str
    title: str
    image_url: str
    price: Decimal
    quantity: int = 1

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return round_money(multiply(self.price, self.quantity))

    @classmethod
    def from_product(cls, product: CartProduct) -> "LineItem":
        """New line item for a product added for the first time."""
        return cls(
            id=product.id,
            title=product.title,
            image_url=product.image_url,
            price=product.price,
            quantity=1,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for snapshot storage."""
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "price": str(self.price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from dictionary.

        Raises:
            KeyError, TypeError, ValueError: on missing or invalid fields
        """
        quantity = data["quantity"]
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"quantity must be a positive integer, got {quantity!r}")
        price = parse_decimal(data["price"])
        if price < 0:
            raise ValueError("price must be non-negative")
        item_id = data["id"]
        if not isinstance(item_id, str) or not item_id:
            raise ValueError("id must be a non-empty string")
        return cls(
            id=item_id,
            title=str(data["title"]),
            image_url=str(data["image_url"]),
            price=price,
            quantity=quantity,
        )


@dataclass(frozen=True)
class Cart:
    """Read-only view of the cart contents."""
    items: Tuple[LineItem, ...] = ()
    hydrated: bool = False

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals."""
        return round_money(sum((item.total_price for item in self.items), Decimal("0")))

    def get(self, product_id: str):
        """Line item by product id, or None."""
        return next((item for item in self.items if item.id == product_id), None)

    def __len__(self) -> int:
        return len(self.items)
