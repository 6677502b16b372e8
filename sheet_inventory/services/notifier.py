from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import httpx

from ..models.record import InventoryRecord

"""Restock notifier.

Posts a fixed JSON envelope to the configured webhook. Delivery is
fire-and-forget: the response status and body are never inspected, so an
endpoint that accepts the connection but ignores the payload looks exactly
like success. Only transport-level failures (DNS, refused connection,
timeouts) surface, as NotifyError.
"""

__all__ = [
    "NotifyError",
    "REQUEST_TYPE",
    "build_payload",
    "notify",
]

logger = logging.getLogger(__name__)

REQUEST_TYPE = "Restock Request"


class NotifyError(Exception):
    """Raised when the restock request could not be delivered."""


def _json_number(value: float) -> int | float:
    # 5.0 -> 5 so the payload reads like the sheet
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_payload(
    records: Sequence[InventoryRecord], *, source: str, timestamp: datetime | None = None
) -> dict[str, Any]:
    ts = (timestamp or datetime.now(UTC)).isoformat().replace("+00:00", "Z")
    return {
        "source": source,
        "type": REQUEST_TYPE,
        "timestamp": ts,
        "items": [
            {
                "itemName": r.name,
                "availableStock": _json_number(r.available_stock),
                "sku": r.sku,
                "restockThreshold": _json_number(r.restock_threshold),
            }
            for r in records
        ],
    }


async def notify(
    records: Sequence[InventoryRecord],
    *,
    webhook_url: str,
    source: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> None:
    """Dispatch one restock request for ``records``.

    The caller decides which records to send (usually the non In Stock ones).

    Raises:
        NotifyError: On any transport-level failure.
    """
    body = json.dumps(build_payload(records, source=source), ensure_ascii=False)
    headers = {"Content-Type": "text/plain"}
    logger.info(f"triggering restock webhook for {len(records)} items")
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                await owned.post(webhook_url, content=body, headers=headers)
        else:
            await client.post(webhook_url, content=body, headers=headers)
    except httpx.HTTPError as e:
        raise NotifyError(f"webhook delivery failed: {e}") from e
