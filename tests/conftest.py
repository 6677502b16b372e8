# Shared pytest fixtures
from __future__ import annotations
import asyncio
import json
import tempfile
from pathlib import Path
from typing import Any

import httpx
import pytest

from sheet_inventory.config.loader import InventoryConfig
from sheet_inventory.logging.init import reset_logging

# "/*O_o*/\ngoogle.visualization.Query.setResponse(" is exactly 47 chars
GVIZ_PREFIX = "/*O_o*/\ngoogle.visualization.Query.setResponse("
GVIZ_SUFFIX = ");"

WIDGET_GRID = [
    ["Product", "SKU", "Price", "Available Stock", "Restock Level"],
    ["Widget", "W1", "$10.00", "5", "10"],
    ["Gadget", "G1", "2.50", "40", "10"],
]


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        monkeypatch.chdir(p)
        # keep the developer's real environment out of config resolution
        for name in ("INVENTORY_SHEET_ID", "INVENTORY_SHEETS_API_KEY", "INVENTORY_WEBHOOK_URL"):
            monkeypatch.setenv(name, "")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheet_id: sheet-123
sheet_range: "Inventory!A1:Z"
api_key: key-abc
webhook_url: https://hooks.example.test/alert
source_name: Retailer Portal
refresh_interval_seconds: 30
critical_stock_level: 10
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "inventory.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def inventory_config() -> InventoryConfig:
    return InventoryConfig(
        sheet_id="sheet-123",
        webhook_url="https://hooks.example.test/alert",
        api_key="key-abc",
    )


@pytest.fixture()
def widget_grid() -> list[list[Any]]:
    return [list(r) for r in WIDGET_GRID]


def make_gviz_text(labels: list[Any], rows: list[list[Any]]) -> str:
    table = {
        "cols": [{"id": chr(65 + i), "label": label, "type": "string"} for i, label in enumerate(labels)],
        "rows": [{"c": [None if v is None else {"v": v} for v in row]} for row in rows],
    }
    return GVIZ_PREFIX + json.dumps({"version": "0.6", "status": "ok", "table": table}) + GVIZ_SUFFIX


@pytest.fixture()
def gviz_text():
    return make_gviz_text


@pytest.fixture()
def run_http():
    """Run ``call(client)`` against an AsyncClient backed by ``handler``."""
    def _run(handler, call):
        async def _go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await call(client)
        return asyncio.run(_go())
    return _run
