from __future__ import annotations

import json
import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from ..config.loader import ConfigError, InventoryConfig

"""Grid fetcher: remote spreadsheet -> RawGrid.

Two transports are tried in order:

1. Sheets API v4 ``values`` endpoint (needs an access key). Public sheets that
   are not API-enabled commonly reject this with 403/404.
2. The public gviz export, which answers with JSON wrapped in a JavaScript
   callback. It is normalized into the same header-first grid.

Only when both fail is a single FetchError raised. An empty grid (or header
with no data) is a successful result.
"""

__all__ = [
    "RawGrid",
    "FetchError",
    "fetch_grid",
    "parse_gviz_payload",
]

logger = logging.getLogger(__name__)

RawGrid = list[list[Any]]

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{sheet_range}"
GVIZ_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq"

# "/*O_o*/\ngoogle.visualization.Query.setResponse(" ... ");"
GVIZ_PREFIX_LEN = 47
GVIZ_SUFFIX_LEN = 2

PUBLIC_SHEET_HINT = (
    "Connection Failed. Ensure your Google Sheet is 'Public' (Anyone with the link)."
)


class FetchError(Exception):
    """Raised when no transport could deliver a usable grid."""


async def _fetch_sheets_api(client: httpx.AsyncClient, config: InventoryConfig) -> RawGrid:
    url = SHEETS_API_URL.format(
        sheet_id=quote(config.sheet_id, safe=""),
        sheet_range=quote(config.sheet_range, safe="!:"),
    )
    # t= defeats intermediate caches between polls
    params = {"key": config.api_key or "", "t": str(int(time.time() * 1000))}
    response = await client.get(url, params=params)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"unexpected sheets api payload: {type(payload).__name__}")
    values = payload.get("values")
    if values is None:
        return []
    if not isinstance(values, list) or not all(isinstance(row, (list, tuple)) for row in values):
        raise ValueError("unexpected sheets api payload: values is not a list of rows")
    return [list(row) for row in values]


def _gviz_cell(cell: Any) -> Any:
    if not cell:
        return ""
    value = cell.get("v")
    return "" if value is None else value


def parse_gviz_payload(text: str) -> RawGrid:
    """Strip the callback wrapper from a gviz response and build a RawGrid.

    Header row comes from ``table.cols[].label``; each data row from
    ``table.rows[].c[].v`` with missing cells as empty strings.

    Raises:
        FetchError: If the payload is too short, not JSON after stripping, or
            lacks the table/cols/rows structure.
    """
    if len(text) <= GVIZ_PREFIX_LEN + GVIZ_SUFFIX_LEN:
        raise FetchError(f"gviz payload too short ({len(text)} chars)")
    body = text[GVIZ_PREFIX_LEN:-GVIZ_SUFFIX_LEN]
    try:
        data = json.loads(body)
        table = data["table"]
        headers = [(col or {}).get("label") or "" for col in table["cols"]]
        rows = [[_gviz_cell(cell) for cell in row["c"]] for row in table["rows"]]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise FetchError(f"malformed gviz payload: {e}") from e
    return [headers, *rows]


async def _fetch_gviz(client: httpx.AsyncClient, config: InventoryConfig) -> RawGrid:
    url = GVIZ_URL.format(sheet_id=quote(config.sheet_id, safe=""))
    logger.info("attempting gviz fallback")
    response = await client.get(url, params={"tqx": "out:json"})
    if not response.is_success:
        raise FetchError(f"gviz fallback failed: {response.status_code} {response.reason_phrase}")
    return parse_gviz_payload(response.text)


async def _fetch_with_fallback(client: httpx.AsyncClient, config: InventoryConfig) -> RawGrid:
    if config.api_key:
        try:
            logger.info("fetching stock data (sheets api)")
            return await _fetch_sheets_api(client, config)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"sheets api failed, switching to gviz fallback: {e}")
    else:
        logger.debug("no api key configured -> gviz export only")

    try:
        grid = await _fetch_gviz(client, config)
    except (httpx.HTTPError, FetchError) as e:
        logger.debug(f"all fetch methods failed: {e}")
        raise FetchError(PUBLIC_SHEET_HINT) from e
    logger.info("gviz fallback successful")
    return grid


async def fetch_grid(config: InventoryConfig, client: httpx.AsyncClient | None = None) -> RawGrid:
    """Fetch the raw sheet grid, falling back to the gviz export on failure.

    Args:
        config: Source identifiers and timeouts
        client: Optional shared client; one is created (and closed) per call otherwise

    Returns:
        Header row followed by data rows; may have fewer than 2 rows.

    Raises:
        ConfigError: If no sheet id is configured
        FetchError: If both transports failed
    """
    if not config.sheet_id or not config.sheet_id.strip():
        raise ConfigError("Configuration Error: Sheet ID is missing.")
    if client is None:
        async with httpx.AsyncClient(timeout=config.request_timeout_seconds) as owned:
            return await _fetch_with_fallback(owned, config)
    return await _fetch_with_fallback(client, config)
