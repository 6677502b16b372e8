from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import httpx

from ..config.loader import InventoryConfig
from ..models.metrics import LoadResult
from ..models.record import InventoryRecord
from ..sheets.fetcher import fetch_grid
from ..sheets.normalizer import normalize
from .metrics import compute_metrics, select_restock_candidates
from .notifier import notify

"""Entry points used by the presentation layer.

``load_records`` runs fetch -> normalize -> metrics in full every time and
``send_restock_notification`` dispatches the restock request. Neither keeps
state between calls; polling and retry belong to the caller.
"""

logger = logging.getLogger(__name__)


async def load_records(config: InventoryConfig, client: httpx.AsyncClient | None = None) -> LoadResult:
    """Fetch the sheet and return typed records, columns and metrics.

    Raises:
        ConfigError: If no sheet id is configured
        FetchError: If both transports failed
    """
    grid = await fetch_grid(config, client)
    fetched_at = datetime.now(UTC)
    records, columns = normalize(grid, fetched_at=fetched_at)
    metrics = compute_metrics(records)
    logger.debug(f"normalized rows={len(records)} columns={len(columns)}")
    return LoadResult(records=records, columns=columns, metrics=metrics, fetched_at=fetched_at)


async def send_restock_notification(
    config: InventoryConfig,
    records: Sequence[InventoryRecord],
    *,
    explicit: bool = False,
    client: httpx.AsyncClient | None = None,
) -> int:
    """Send a restock request and return the number of items included.

    By default only records that need restocking are sent; with
    ``explicit=True`` the given records are sent as-is. Nothing is
    dispatched when the selection is empty (returns 0).

    Raises:
        NotifyError: On transport-level delivery failure
    """
    selected = list(records) if explicit else select_restock_candidates(records)
    if not selected:
        logger.info("no items need restocking right now")
        return 0
    await notify(
        selected,
        webhook_url=config.webhook_url,
        source=config.source_name,
        client=client,
        timeout=config.request_timeout_seconds,
    )
    return len(selected)
