from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

from sheet_inventory.cli import main as cli_main
from sheet_inventory.models.metrics import LoadResult
from sheet_inventory.services.metrics import compute_metrics
from sheet_inventory.services.notifier import NotifyError
from sheet_inventory.sheets.fetcher import FetchError, PUBLIC_SHEET_HINT
from sheet_inventory.sheets.normalizer import normalize

CLI = "sheet_inventory.cli.__main__"


def _result(grid) -> LoadResult:
    records, columns = normalize(grid)
    return LoadResult(records=records, columns=columns, metrics=compute_metrics(records), fetched_at=datetime.now(UTC))


def _loader(*outcomes):
    queue = list(outcomes)
    calls = []

    async def fake_load(config, client=None):
        calls.append(config)
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    fake_load.calls = calls  # type: ignore[attr-defined]
    return fake_load


def test_cli_load_prints_summary(write_config, widget_grid, capsys):
    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))):
        code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY products=2 low_stock=1 critical=1 stock_value=150" in out
    assert "WARN critical stock (<= 10): Widget" in out


def test_cli_missing_config(temp_workdir: Path, capsys):
    code = cli_main(["load"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_custom_config_path(write_config, widget_grid, capsys):
    other = write_config.parent / "other.yml"
    other.write_text(write_config.read_text(encoding="utf-8").replace("sheet-123", "other-sheet"), encoding="utf-8")
    write_config.unlink()
    fake = _loader(_result(widget_grid))
    with patch(f"{CLI}.load_records", fake):
        code = cli_main(["--config", str(other), "load"])
    assert code == 0
    assert fake.calls[0].sheet_id == "other-sheet"


def test_cli_fetch_error_is_fatal(write_config, capsys):
    with patch(f"{CLI}.load_records", _loader(FetchError(PUBLIC_SHEET_HINT))):
        code = cli_main(["load"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR fetch: Connection Failed." in out


def test_cli_show_prints_table(write_config, widget_grid, capsys):
    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))):
        code = cli_main(["show"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Available Stock" in out and "Status" in out
    assert "Gadget" in out and "In Stock" in out


def test_cli_show_low_only(write_config, widget_grid, capsys):
    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))):
        code = cli_main(["show", "--low-only"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Widget" in out
    assert "Gadget" not in out


def test_cli_restock_sends_pending_items(write_config, widget_grid, capsys):
    sent = []

    async def fake_send(config, records, **kwargs):
        sent.extend(r for r in records if r.needs_restock)
        return len(sent)

    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))), \
         patch(f"{CLI}.send_restock_notification", fake_send):
        code = cli_main(["restock"])
    out = capsys.readouterr().out
    assert code == 0
    assert [r.sku for r in sent] == ["W1"]
    assert "INFO restock request sent for 1 items" in out


def test_cli_restock_delivery_failure(write_config, widget_grid, capsys):
    async def failing_send(config, records, **kwargs):
        raise NotifyError("webhook delivery failed: connection refused")

    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))), \
         patch(f"{CLI}.send_restock_notification", failing_send):
        code = cli_main(["restock"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR restock: webhook delivery failed" in out


def test_cli_watch_partial_failure(write_config, widget_grid, capsys):
    fake = _loader(_result(widget_grid), FetchError("Connection Failed."), _result(widget_grid))
    with patch(f"{CLI}.load_records", fake):
        code = cli_main(["watch", "--interval", "0", "--cycles", "3"])
    out = capsys.readouterr().out
    assert code == 2
    assert len(fake.calls) == 3
    assert out.count("SUMMARY products=2") == 2
    assert "ERROR refresh failed: Connection Failed." in out


def test_cli_watch_all_failed(write_config, capsys):
    with patch(f"{CLI}.load_records", _loader(FetchError("down"))):
        code = cli_main(["watch", "--interval", "0", "--cycles", "2"])
    assert code == 1


def test_cli_watch_all_success(write_config, widget_grid, capsys):
    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))):
        code = cli_main(["watch", "--interval", "0", "--cycles", "2"])
    assert code == 0


def test_cli_debug_mode(write_config, widget_grid, capsys):
    with patch(f"{CLI}.load_records", _loader(_result(widget_grid))):
        code = cli_main(["--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out


def test_cli_env_file_overrides_config(write_config, temp_workdir: Path, widget_grid, monkeypatch):
    # setenv first so monkeypatch restores the variable after load_dotenv overwrites it
    monkeypatch.setenv("INVENTORY_SHEET_ID", "placeholder")
    (temp_workdir / ".env").write_text("INVENTORY_SHEET_ID=dotenv-sheet\n", encoding="utf-8")
    fake = _loader(_result(widget_grid))
    with patch(f"{CLI}.load_records", fake):
        code = cli_main([])
    assert code == 0
    assert fake.calls[0].sheet_id == "dotenv-sheet"
    assert os.environ["INVENTORY_SHEET_ID"] == "dotenv-sheet"
