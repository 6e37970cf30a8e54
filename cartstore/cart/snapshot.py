"""Persisted snapshot encoding."""
import json
from typing import Tuple, Union

from cartstore.errors import (
    SnapshotCorruptError,
    ERROR_SNAPSHOT_NOT_JSON,
    ERROR_SNAPSHOT_SHAPE,
    ERROR_SNAPSHOT_VERSION,
    ERROR_SNAPSHOT_ITEM,
    ERROR_SNAPSHOT_DUPLICATE,
)
from .models import LineItem

SNAPSHOT_VERSION = 1


def encode_snapshot(items: Tuple[LineItem, ...]) -> str:
    """Serialize the whole cart for storage."""
    return json.dumps({
        "version": SNAPSHOT_VERSION,
        "items": [item.to_dict() for item in items],
    })


def decode_snapshot(raw: Union[str, bytes]) -> Tuple[LineItem, ...]:
    """
    Parse a stored snapshot.

    Accepts the versioned object written by encode_snapshot and the bare
    JSON array of products written by earlier mobile clients. Bytes are
    decoded as UTF-8.

    Raises:
        SnapshotCorruptError: if the value cannot be parsed into a valid cart
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        # ValueError covers JSONDecodeError, UnicodeDecodeError and oversized ints
        raise SnapshotCorruptError(f"{ERROR_SNAPSHOT_NOT_JSON}: {e}") from e

    if isinstance(data, dict):
        if data.get("version") != SNAPSHOT_VERSION:
            raise SnapshotCorruptError(f"{ERROR_SNAPSHOT_VERSION}: {data.get('version')!r}")
        records = data.get("items")
    else:
        # Legacy format
        records = data

    if not isinstance(records, list):
        raise SnapshotCorruptError(ERROR_SNAPSHOT_SHAPE)

    items = []
    seen = set()
    for record in records:
        if not isinstance(record, dict):
            raise SnapshotCorruptError(ERROR_SNAPSHOT_SHAPE)
        try:
            item = LineItem.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotCorruptError(f"{ERROR_SNAPSHOT_ITEM}: {e}") from e
        if item.id in seen:
            raise SnapshotCorruptError(f"{ERROR_SNAPSHOT_DUPLICATE}: {item.id}")
        seen.add(item.id)
        items.append(item)

    return tuple(items)
