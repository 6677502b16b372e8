from __future__ import annotations

import re

from sheet_inventory.services.notifier import build_payload
from sheet_inventory.sheets.normalizer import normalize

"""Restock webhook envelope contract: fixed keys, nothing extra."""

ENVELOPE_KEYS = {"source", "type", "timestamp", "items"}
ITEM_KEYS = {"itemName", "availableStock", "sku", "restockThreshold"}
TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_envelope_has_exactly_the_contract_keys():
    records, _ = normalize([["Product", "SKU", "Stock Inventory", "Restock"], ["A", "a1", "1", "5"], ["B", "b1", "0", "5"]])
    payload = build_payload(records, source="Retailer Portal")

    assert set(payload) == ENVELOPE_KEYS
    assert payload["type"] == "Restock Request"
    assert TIMESTAMP.match(payload["timestamp"])
    assert len(payload["items"]) == 2
    for item, record in zip(payload["items"], records, strict=True):
        assert set(item) == ITEM_KEYS
        assert item["itemName"] == record.name
        assert item["sku"] == record.sku
        assert item["availableStock"] == record.available_stock
        assert item["restockThreshold"] == record.restock_threshold


def test_empty_item_list_is_still_a_valid_envelope():
    payload = build_payload([], source="Retailer Portal")
    assert payload["items"] == []
