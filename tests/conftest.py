"""Pytest configuration and fixtures"""
import asyncio
import os
from typing import Dict, List, Optional

import pytest

# Set test environment variables
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from cartstore.cart import CartStore, MemoryCartStorage  # noqa: E402

CART_KEY = "@GoMarketplace:cart"


class RecordingStorage(MemoryCartStorage):
    """Memory storage that records writes and can hold reads/writes open."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.writes: List[str] = []
        self.get_gate: Optional[asyncio.Event] = None
        self.set_gate: Optional[asyncio.Event] = None
        self.set_started = asyncio.Event()

    async def get(self, key: str) -> Optional[str]:
        if self.get_gate is not None:
            await self.get_gate.wait()
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_started.set()
        if self.set_gate is not None:
            gate, self.set_gate = self.set_gate, None
            await gate.wait()
        self.writes.append(value)
        await super().set(key, value)


class FlakyStorage(MemoryCartStorage):
    """Memory storage whose first `failures` writes raise."""

    def __init__(self, failures: int, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.failures = failures
        self.set_calls = 0

    async def set(self, key: str, value: str) -> None:
        self.set_calls += 1
        if self.set_calls <= self.failures:
            raise ConnectionError("storage unavailable")
        await super().set(key, value)


@pytest.fixture
def make_store():
    """Factory for stores; call it inside the running test loop."""
    def _make(storage=None, **kwargs) -> CartStore:
        kwargs.setdefault("persist_backoff_multiplier", 0)
        return CartStore(storage if storage is not None else MemoryCartStorage(), CART_KEY, **kwargs)
    return _make


@pytest.fixture
def product_a():
    """Sample product"""
    return {"id": "a", "title": "T", "image_url": "u", "price": 10}


@pytest.fixture
def product_b():
    """Another sample product"""
    return {
        "id": "b",
        "title": "Camiseta Ai Sim",
        "image_url": "https://example.com/camiseta.png",
        "price": "149.90",
    }
