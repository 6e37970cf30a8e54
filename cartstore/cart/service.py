"""Cart store: in-memory cart kept in sync with key-value storage."""
import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, stop_any, wait_exponential

from cartstore.config import CartSettings, DEFAULT_STORAGE_KEY
from cartstore.errors import SnapshotCorruptError
from cartstore.logging import get_logger, sanitize_id_for_logging
from .models import Cart, CartProduct
from .reconcile import Items, add_item, decrement_item, increment_item
from .snapshot import decode_snapshot, encode_snapshot
from .storage import CartStorage, create_storage

logger = get_logger(__name__)

Listener = Callable[[Cart], Any]


class CartStore:
    """
    Owns the cart for the lifetime of the process.

    Features:
    - Hydrates from storage once, right after construction
    - Mutations are serialized and queued behind hydration
    - Every mutation is published to subscribers before it is persisted
    - One background writer persists snapshots in mutation order,
      superseded snapshots are skipped
    - Failed writes are retried with backoff, then dropped; memory stays
      authoritative

    Must be constructed inside a running event loop.
    """

    def __init__(
        self,
        storage: CartStorage,
        key: str = DEFAULT_STORAGE_KEY,
        *,
        remove_on_zero: bool = False,
        persist_attempts: int = 3,
        persist_backoff_max: float = 10.0,
        persist_backoff_multiplier: float = 1.0,
    ):
        self.storage = storage
        self.key = key
        self.remove_on_zero = remove_on_zero
        self.persist_attempts = persist_attempts
        self.persist_backoff_max = persist_backoff_max
        self.persist_backoff_multiplier = persist_backoff_multiplier

        self._items: Items = ()
        self._hydrated = False
        self._listeners: List[Listener] = []
        self._lock = asyncio.Lock()
        self._pending_snapshot: Optional[str] = None
        self._writer: Optional[asyncio.Task] = None
        self._hydration = asyncio.get_running_loop().create_task(self._hydrate())

    @classmethod
    def from_settings(cls, settings: CartSettings, storage: Optional[CartStorage] = None) -> "CartStore":
        """Build a store and its storage backend from settings."""
        return cls(
            storage if storage is not None else create_storage(settings),
            settings.storage_key,
            remove_on_zero=settings.remove_on_zero,
            persist_attempts=settings.persist_attempts,
            persist_backoff_max=settings.persist_backoff_max,
        )

    # ==================== READ ====================

    @property
    def items(self) -> Items:
        return self._items

    @property
    def hydrated(self) -> bool:
        """True once a stored cart has been loaded."""
        return self._hydrated

    @property
    def cart(self) -> Cart:
        return Cart(items=self._items, hydrated=self._hydrated)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with the new Cart after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_hydrated(self) -> None:
        """Wait until the startup load has finished or been abandoned."""
        await asyncio.shield(self._hydration)

    # ==================== MUTATIONS ====================

    async def add_to_cart(self, product: Union[CartProduct, Mapping[str, Any]]) -> Cart:
        """Add one unit of a product."""
        if not isinstance(product, CartProduct):
            product = CartProduct.model_validate(product)
        return await self._apply("add", product.id, lambda items: add_item(items, product))

    async def increment(self, product_id: str) -> Cart:
        """Add one unit of a product already in the cart."""
        return await self._apply("increment", product_id, lambda items: increment_item(items, product_id))

    async def decrement(self, product_id: str) -> Cart:
        """Remove one unit of a product already in the cart."""
        return await self._apply(
            "decrement",
            product_id,
            lambda items: decrement_item(items, product_id, remove_on_zero=self.remove_on_zero),
        )

    async def _apply(self, operation: str, product_id: str, mutate: Callable[[Items], Items]) -> Cart:
        await self.wait_hydrated()

        # Read-modify-write without suspension: each mutation sees the
        # result of the previous one
        async with self._lock:
            current = self._items
            updated = mutate(current)
            if updated is current:
                logger.debug(f"Cart {operation} {sanitize_id_for_logging(product_id)}: no change")
                return self.cart

            self._items = updated
            self._publish()
            self._schedule_persist()
            return self.cart

    def _publish(self) -> None:
        cart = self.cart
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.exception("Cart listener failed")

    # ==================== PERSISTENCE ====================

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_any(stop_after_attempt(self.persist_attempts), self._superseded),
            wait=wait_exponential(multiplier=self.persist_backoff_multiplier, max=self.persist_backoff_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _superseded(self, retry_state) -> bool:
        return self._pending_snapshot is not None

    def _schedule_persist(self) -> None:
        self._pending_snapshot = encode_snapshot(self._items)
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._drain_writes())

    async def _drain_writes(self) -> None:
        while self._pending_snapshot is not None:
            snapshot, self._pending_snapshot = self._pending_snapshot, None
            try:
                async for attempt in self._retrying():
                    with attempt:
                        await self.storage.set(self.key, snapshot)
            except Exception as e:
                if self._pending_snapshot is not None:
                    logger.warning(f"Cart snapshot write failed, retrying with newer snapshot: {e}")
                else:
                    logger.error(f"Failed to persist cart after {self.persist_attempts} attempts: {e}")

    async def flush(self) -> None:
        """Wait until every scheduled write has landed or been given up."""
        while self._writer is not None and not self._writer.done():
            await asyncio.shield(self._writer)

    async def aclose(self) -> None:
        """Finish hydration and pending writes."""
        await self.wait_hydrated()
        await self.flush()

    # ==================== HYDRATION ====================

    async def _read_snapshot(self) -> Optional[Union[str, bytes]]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.persist_attempts),
            wait=wait_exponential(multiplier=self.persist_backoff_multiplier, max=self.persist_backoff_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.storage.get(self.key)
        return None

    async def _hydrate(self) -> None:
        try:
            raw = await self._read_snapshot()
        except Exception as e:
            logger.error(f"Failed to load cart from storage, starting empty: {e}")
            return

        if raw is None:
            logger.info("No stored cart, starting empty")
            return

        try:
            items = decode_snapshot(raw)
        except SnapshotCorruptError as e:
            logger.warning(f"Corrupted cart snapshot at {self.key}, starting empty: {e}")
            return
        except Exception:
            logger.exception(f"Unexpected error decoding cart snapshot at {self.key}, starting empty")
            return

        self._items = items
        self._hydrated = True
        logger.info(f"Cart hydrated with {len(items)} items")
        self._publish()
