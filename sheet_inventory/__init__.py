"""Spreadsheet-backed inventory feed.

Public entry points for a presentation layer:

- ``load_records(config)``: fetch the sheet and return records, columns and metrics
- ``send_restock_notification(config, records)``: post a restock request
"""

from .config.loader import ConfigError, InventoryConfig, load_config
from .services.notifier import NotifyError
from .services.pipeline import load_records, send_restock_notification
from .sheets.fetcher import FetchError

__all__ = [
    "ConfigError",
    "FetchError",
    "InventoryConfig",
    "NotifyError",
    "load_config",
    "load_records",
    "send_restock_notification",
]
