from __future__ import annotations

import argparse
import logging
import threading
from datetime import date
from typing import Sequence

from config import AppSettings, config
from domain.holding import Holding
from services.bitcoin_service import Failed, build_service
from services.poller import PollerState, PricePoller
from utils.snapshot_summary import print_snapshot


def _holding(settings: AppSettings) -> Holding:
    return Holding(amount_btc=settings.amount_of_bitcoin, initial_investment=settings.initial_investment)


def run_snapshot(settings: AppSettings, start_date: date) -> int:
    service = build_service(settings)
    result = service.get_bitcoin_data(start_date)
    if isinstance(result, Failed):
        print(f"Bitcoin data unavailable ({result.error}): {result.message}")
        return 1
    print_snapshot(result.data, _holding(settings))
    return 0


def run_watch(settings: AppSettings, start_date: date) -> int:
    service = build_service(settings)
    poller = PricePoller(service, start_date=start_date, interval_seconds=settings.poll_interval_seconds)
    holding = _holding(settings)

    def on_update(state: PollerState) -> None:
        if state.snapshot is None:
            print(f"No data yet ({state.last_error})")
            return
        print_snapshot(state.snapshot, holding, stale=state.is_stale)
        print()

    stop_event = threading.Event()
    try:
        poller.run(stop_event, on_update)
    except KeyboardInterrupt:
        stop_event.set()
    return 0


def run_gateway(host: str, port: int) -> int:
    import uvicorn

    from api.api import app

    uvicorn.run(app, host=host, port=port)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Track the value of a Bitcoin holding.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    snapshot_parser = subparsers.add_parser("snapshot", help="Fetch and print the current snapshot once.")
    snapshot_parser.add_argument("--start-date", type=date.fromisoformat, default=None)

    watch_parser = subparsers.add_parser("watch", help="Poll for updates until interrupted.")
    watch_parser.add_argument("--start-date", type=date.fromisoformat, default=None)

    gateway_parser = subparsers.add_parser("gateway", help="Serve the quote gateway.")
    gateway_parser.add_argument("--host", default="127.0.0.1")
    gateway_parser.add_argument("--port", type=int, default=3001)

    args = parser.parse_args(argv)
    if args.command == "gateway":
        return run_gateway(args.host, args.port)

    settings = config()
    start_date = args.start_date or settings.start_date
    if args.command == "watch":
        return run_watch(settings, start_date)
    return run_snapshot(settings, start_date)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    raise SystemExit(main())
