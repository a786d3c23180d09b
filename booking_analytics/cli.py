import argparse
import asyncio
from collections.abc import Sequence

from pymongo.errors import PyMongoError

from booking_analytics.core.config import settings
from booking_analytics.db.mongo import EventStore, EventStoreUnavailableError


async def ping_store() -> None:
    store = EventStore(settings)
    store.open()
    try:
        await store.ping()
    finally:
        await store.close()


def _run_ping() -> int:
    target = f"{settings.mongodb_database}.{settings.mongodb_collection}"
    try:
        asyncio.run(ping_store())
    except (EventStoreUnavailableError, PyMongoError) as exc:
        print(f"Event store unreachable ({target}): {exc}")
        return 1
    print(f"Event store reachable ({target})")
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "booking_analytics.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=bool(args.reload),
        log_config=None,
    )
    return 0


def _add_serve_command(subparsers) -> None:
    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (defaults to HOST)")
    serve.add_argument("--port", type=int, help="Listening port (defaults to PORT, then 3000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (local dev only)")


def _add_ping_command(subparsers) -> None:
    subparsers.add_parser("ping", help="Check that the event store answers a ping")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Booking funnel analytics service")
    subparsers = parser.add_subparsers(dest="command")
    _add_serve_command(subparsers)
    _add_ping_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command == "serve":
        return _run_serve(args)
    if args.command == "ping":
        return _run_ping()
    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
