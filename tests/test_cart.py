"""
Tests for cart models and reconciliation
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from cartstore.cart import Cart, CartProduct, LineItem
from cartstore.cart.reconcile import add_item, decrement_item, find_index, increment_item


def _product(product_id, price=10, title="T"):
    return CartProduct(id=product_id, title=title, image_url="u", price=price)


class TestCartProduct:
    """Tests for CartProduct validation."""

    def test_valid_product(self):
        product = _product("a", price="19.99")
        assert product.price == Decimal("19.99")

    def test_float_price_keeps_precision(self):
        assert _product("a", price=0.1).price == Decimal("0.1")

    def test_zero_price_allowed(self):
        assert _product("free", price=0).price == Decimal("0")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _product("a", price=-1)

    @pytest.mark.parametrize("product_id", ["", "   "])
    def test_empty_id_rejected(self, product_id):
        with pytest.raises(ValidationError):
            _product(product_id)

    def test_non_numeric_price_rejected(self):
        with pytest.raises(ValidationError):
            _product("a", price="ten")

    def test_extra_fields_ignored(self):
        """A quantity sent by the caller is not part of the product."""
        product = CartProduct.model_validate(
            {"id": "a", "title": "T", "image_url": "u", "price": 1, "quantity": 7}
        )
        assert not hasattr(product, "quantity")


class TestLineItem:
    """Tests for LineItem dataclass."""

    def test_from_product_starts_at_one(self):
        item = LineItem.from_product(_product("a", price="2.50"))
        assert item.quantity == 1
        assert item.price == Decimal("2.50")

    def test_total_price(self):
        item = LineItem(id="a", title="T", image_url="u", price=Decimal("19.99"), quantity=3)
        assert item.total_price == Decimal("59.97")

    def test_from_dict_rejects_zero_quantity(self):
        with pytest.raises(ValueError):
            LineItem.from_dict({"id": "a", "title": "T", "image_url": "u", "price": "1", "quantity": 0})

    def test_from_dict_rejects_bool_quantity(self):
        with pytest.raises(ValueError):
            LineItem.from_dict({"id": "a", "title": "T", "image_url": "u", "price": "1", "quantity": True})

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            LineItem.from_dict({"id": "a", "price": "1", "quantity": 1})


class TestCart:
    """Tests for Cart totals."""

    def test_empty_cart(self):
        cart = Cart()
        assert cart.total_items == 0
        assert cart.subtotal == Decimal("0.00")
        assert len(cart) == 0

    def test_totals(self):
        cart = Cart(items=(
            LineItem(id="a", title="A", image_url="u", price=Decimal("10"), quantity=2),
            LineItem(id="b", title="B", image_url="u", price=Decimal("0.10"), quantity=3),
        ))
        assert cart.total_items == 5
        assert cart.subtotal == Decimal("20.30")
        assert cart.get("b").quantity == 3
        assert cart.get("missing") is None


class TestReconcile:
    """Tests for pure reconciliation functions."""

    def test_distinct_ids_appended_in_order(self):
        items = ()
        for product_id in ["x", "a", "m"]:
            items = add_item(items, _product(product_id))

        assert [item.id for item in items] == ["x", "a", "m"]
        assert all(item.quantity == 1 for item in items)

    def test_add_existing_equals_increment(self):
        items = add_item(add_item((), _product("a")), _product("b"))

        twice = add_item(items, _product("a"))
        incremented = increment_item(items, "a")

        assert twice == incremented
        assert [item.id for item in twice] == ["a", "b"]
        assert twice[0].quantity == 2

    def test_add_existing_keeps_stored_fields(self):
        items = add_item((), _product("a", price=10, title="Original"))
        items = add_item(items, _product("a", price=99, title="Changed"))

        assert items[0].title == "Original"
        assert items[0].price == Decimal("10")
        assert items[0].quantity == 2

    def test_input_tuple_not_modified(self):
        items = add_item((), _product("a"))
        increment_item(items, "a")
        assert items[0].quantity == 1

    def test_increment_unknown_returns_same_tuple(self):
        items = add_item((), _product("a"))
        assert increment_item(items, "zzz") is items

    def test_decrement_above_one(self):
        items = add_item((), _product("a"))
        items = add_item(items, _product("b"))
        items = increment_item(increment_item(items, "a"), "a")

        result = decrement_item(items, "a")

        assert [item.id for item in result] == ["a", "b"]
        assert result[0].quantity == 2
        assert result[0].title == items[0].title
        assert result[1] == items[1]

    def test_decrement_at_one_clamps(self):
        items = add_item((), _product("a"))
        assert decrement_item(items, "a") is items
        assert items[0].quantity == 1

    def test_decrement_at_one_removes_when_enabled(self):
        items = add_item(add_item((), _product("a")), _product("b"))
        result = decrement_item(items, "a", remove_on_zero=True)
        assert [item.id for item in result] == ["b"]

    def test_decrement_unknown_returns_same_tuple(self):
        items = add_item((), _product("a"))
        assert decrement_item(items, "zzz", remove_on_zero=True) is items

    def test_find_index(self):
        items = add_item(add_item((), _product("a")), _product("b"))
        assert find_index(items, "b") == 1
        assert find_index(items, "c") == -1
