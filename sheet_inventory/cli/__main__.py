from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheet_inventory.config.loader import DEFAULT_CONFIG_PATH, ConfigError, InventoryConfig, load_config
from sheet_inventory.logging.init import get_logger, log_summary, set_debug, setup_logging
from sheet_inventory.models.metrics import LoadResult
from sheet_inventory.services.metrics import critical_records, select_restock_candidates
from sheet_inventory.services.notifier import NotifyError
from sheet_inventory.services.pipeline import load_records, send_restock_notification
from sheet_inventory.services.scheduler import RefreshScheduler
from sheet_inventory.services.summary import render_summary_line
from sheet_inventory.services.table import render_table
from sheet_inventory.sheets.fetcher import FetchError

"""CLI entrypoint.

This is the presentation side of the pipeline: it loads the sheet, reports
metrics as a SUMMARY line and, on request, prints the table, sends the
restock request or keeps polling.

Commands:
- load (default): fetch + normalize, print SUMMARY
- show: same, then print every sheet column plus Status
- restock: send a restock request for every item not In Stock
- watch: auto-refresh every --interval seconds
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True lets .env win over variables already in the process, so the
    sheet id / access key / webhook URL in .env take precedence over config.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet-backed inventory feed")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command")
    sub.add_parser("load", help="Fetch the sheet and print a SUMMARY line")
    show = sub.add_parser("show", help="Fetch the sheet and print the full table")
    show.add_argument("--low-only", action="store_true", help="Only rows that need restocking")
    sub.add_parser("restock", help="Send a restock request for items not in stock")
    watch = sub.add_parser("watch", help="Refresh periodically")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between refreshes")
    watch.add_argument("--cycles", type=int, default=None, help="Stop after N refreshes")
    args = p.parse_args(argv)
    if args.command is None:
        args.command = "load"
    return args


def _report(cfg: InventoryConfig, result: LoadResult) -> None:
    logger = get_logger()
    critical = critical_records(result.records, cfg.critical_stock_level)
    if critical:
        names = ", ".join(r.name for r in critical)
        logger.warning(f"critical stock (<= {cfg.critical_stock_level:g}): {names}")
    log_summary(render_summary_line(result.metrics, critical_count=len(critical)))


async def _run_once(cfg: InventoryConfig, args: argparse.Namespace) -> int:
    logger = get_logger()
    try:
        result = await load_records(cfg)
    except (ConfigError, FetchError) as e:
        logger.error(f"fetch: {e}")
        return EXIT_FATAL
    _report(cfg, result)

    if args.command == "show":
        rows = select_restock_candidates(result.records) if args.low_only else result.records
        print(render_table(rows, result.columns))
    elif args.command == "restock":
        try:
            sent = await send_restock_notification(cfg, result.records)
        except NotifyError as e:
            logger.error(f"restock: {e}")
            return EXIT_FATAL
        if sent:
            logger.info(f"restock request sent for {sent} items")
    return EXIT_SUCCESS_ALL


def _watch(cfg: InventoryConfig, args: argparse.Namespace) -> int:
    logger = get_logger()
    scheduler = RefreshScheduler(
        cfg,
        interval=args.interval,
        loader=load_records,
        on_result=lambda result: _report(cfg, result),
    )
    try:
        stats = asyncio.run(scheduler.run(args.cycles))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:  # pragma: no cover (interactive)
        logger.info("auto-refresh stopped")
        stats = scheduler.stats

    if stats.failed and stats.succeeded:
        return EXIT_PARTIAL_FAILURE
    if stats.failed:
        return EXIT_FATAL
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む ([] はテストからの明示的な空引数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "watch":
        return _watch(cfg, args)
    return asyncio.run(_run_once(cfg, args))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
