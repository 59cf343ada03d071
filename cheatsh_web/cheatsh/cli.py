"""Command line entry point: run the relay, or use the lookup client from a terminal."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from .config import settings
from .lookup.client import LookupClient, SearchState
from .lookup.relay_client import RelayClient
from .lookup.storage import LocalStore, MemoryStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cheatsh", description="cheat.sh relay and lookup client")
    parser.add_argument("--relay", default=None, help=f"Relay base URL (default: {settings.relay_url})")
    parser.add_argument("--storage", default=None, help=f"Local store file (default: {settings.storage_path})")
    parser.add_argument("--ephemeral", action="store_true", help="Keep history and cache in memory only")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the relay")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8787)
    serve.add_argument("--reload", action="store_true")

    lookup = sub.add_parser("lookup", help="Fetch a cheat sheet through the relay")
    lookup.add_argument("query")
    lookup.add_argument("--plain", action="store_true", help="Strip ANSI colours")

    suggest = sub.add_parser("suggest", help="List completions for a partial query")
    suggest.add_argument("partial")

    history = sub.add_parser("history", help="Show recent searches")
    history.add_argument("--clear", action="store_true")

    return parser


def make_client(args: argparse.Namespace) -> LookupClient:
    store = MemoryStore() if args.ephemeral else LocalStore(args.storage)
    return LookupClient(RelayClient(base_url=args.relay), store)


async def run_lookup(client: LookupClient, query: str, plain: bool) -> int:
    result = await client.search(query)
    if result is None:
        if client.state == SearchState.ERROR:
            print(client.error_message, file=sys.stderr)
            return 1
        return 0
    print(client.copy_text() if plain else result.text)
    return 0


async def run_suggest(client: LookupClient, partial: str) -> int:
    task = client.start()
    if task is not None:
        await task
    for suggestion in client.input_changed(partial):
        print(suggestion.text)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn
        uvicorn.run("cheatsh.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    client = make_client(args)

    if args.command == "lookup":
        return asyncio.run(run_lookup(client, args.query, args.plain))

    if args.command == "suggest":
        return asyncio.run(run_suggest(client, args.partial))

    if args.command == "history":
        if args.clear:
            client.clear_history()
            return 0
        for query in client.history:
            print(query)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
