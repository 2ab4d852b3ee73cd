from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from admin_console.api.bulk_submit import BulkSubmitter
from admin_console.api.client import AdminApiClient
from admin_console.api.endpoints import AdminEndpoints
from admin_console.api.user_store import ApiUserStore
from admin_console.auth.session_gate import StaticTokenProvider
from admin_console.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from admin_console.logging.init import log_summary, set_debug, setup_logging
from admin_console.services.orchestrator import ImportOrchestrator
from admin_console.services.poller import PayoutQueuePoller, PayoutSnapshot
from admin_console.services.summary import render_summary_line
from admin_console.tabular.reader import FileLevelError, normalize_record, read_upload
from admin_console.tabular.template import write_template

"""CLI entrypoint.

Sub-commands:
- import FILE      validate and bulk-submit a transaction upload
- template OUT     write the upload template (.csv / .xlsx)
- inspect FILE     print normalized header and first rows, then exit
- payouts          poll the payout queue

Exit codes: 0 all rows imported, 2 some/all rows rejected, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

ENV_TOKEN = "ADMIN_API_TOKEN"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env with python-dotenv (already-set variables win unless override)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Marketplace admin console tools")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default {DEFAULT_CONFIG_PATH})")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import transactions from .csv/.xlsx/.xls")
    imp.add_argument("file", type=Path)
    imp.add_argument("--resolve-users", action="store_true", help="Check every email against the user store first")

    tpl = sub.add_parser("template", help="Write the upload template")
    tpl.add_argument("output", type=Path)

    ins = sub.add_parser("inspect", help="Print normalized rows of an upload")
    ins.add_argument("file", type=Path)
    ins.add_argument("--rows", type=int, default=3)

    pay = sub.add_parser("payouts", help="Poll the payout queue")
    pay.add_argument("--cycles", type=int, default=1, help="Polling ticks before exit (0 = until interrupted)")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> AppConfig:
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AppConfig()
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


def _client(cfg: AppConfig) -> AdminApiClient:
    return AdminApiClient(
        StaticTokenProvider(os.getenv(ENV_TOKEN)),
        base_url=cfg.api.base_url,
        timeout=cfg.api.timeout_seconds,
    )


async def _run_import(cfg: AppConfig, file: Path, resolve_users: bool) -> int:
    logger = setup_logging()
    async with _client(cfg) as client:
        store = ApiUserStore(AdminEndpoints(client)) if resolve_users else None
        orchestrator = ImportOrchestrator(BulkSubmitter(client), user_store=store, settings=cfg.imports)
        result = await orchestrator.run(file)

    for message in result.errors:
        logger.warning(message)
    summary_line = render_summary_line(file.name, orchestrator.parsed_rows, result, orchestrator.elapsed_seconds)
    log_summary(summary_line[len("SUMMARY "):])

    if orchestrator.aborted:
        return EXIT_FATAL
    if result.errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


async def _run_payouts(cfg: AppConfig, cycles: int) -> int:
    logger = setup_logging()
    done = asyncio.Event()
    updates = 0

    def on_update(snapshot: PayoutSnapshot) -> None:
        nonlocal updates
        updates += 1
        logger.info(f"payouts: pending={len(snapshot.pending)} history={len(snapshot.history)}")
        # 初回 refresh + cycles 回の tick
        if cycles and updates > cycles:
            done.set()

    async with _client(cfg) as client:
        poller = PayoutQueuePoller(
            AdminEndpoints(client),
            interval_seconds=cfg.payouts.poll_interval_seconds,
            on_update=on_update,
        )
        if await poller.refresh() is None:
            return EXIT_FATAL
        poller.start()
        try:
            await done.wait()
        finally:
            await poller.stop()
    return EXIT_SUCCESS_ALL


def _inspect(file: Path, limit: int) -> int:
    try:
        records = read_upload(file)
    except FileLevelError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    header = list(records[0].keys()) if records else []
    print(f"FILE: {file.name} rows={len(records)} columns={header}")
    for raw in records[:limit]:
        print("  ", normalize_record(raw))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: None のときのみシステム引数を読む (テストで main([]) 等を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "template":
        try:
            out = write_template(args.output)
        except FileLevelError as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL
        logger.info(f"template written: {out}")
        return EXIT_SUCCESS_ALL

    if args.command == "inspect":
        return _inspect(args.file, args.rows)

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        resolve = args.resolve_users or cfg.imports.resolve_users
        return asyncio.run(_run_import(cfg, args.file, resolve))
    return asyncio.run(_run_payouts(cfg, args.cycles))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
