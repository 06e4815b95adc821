"""Command line access to a file datastore.

Provides argument parsing and a thin async driver around `FileDatastore`
so a datastore directory can be inspected or edited from a shell:

    datastore-fs --root ./data put /a/b hello
    datastore-fs --root ./data query --prefix /a --keys-only

Exit codes: 0 on success, 1 when a key is missing (or `has` is false),
2 on usage or datastore errors.
"""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from datastore_lib.config import (
    DatastoreConfig,
    default_config_path,
    dump_config,
    load_config,
    merge_options,
)
from datastore_lib.logging_config import configure_logging
from datastore_lib.storage import DatastoreError, FileDatastore, NotFoundError, Query
from datastore_lib.storage.query import sort_by_key

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISSING = 1
EXIT_ERROR = 2


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="datastore-fs", description="Inspect and edit a file system datastore")
    p.add_argument("--root", help="Datastore directory (overrides the config file path)")
    p.add_argument("--config", help="YAML config file (default: $DATASTORE_CONFIG or data/config/datastore.yml)")
    p.add_argument("--extension", help="File suffix for stored values, e.g. .data")
    p.add_argument("--no-create", action="store_true", help="Fail instead of creating a missing root directory")
    p.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the datastore directory if missing")
    sub.add_parser("print-template", help="Print a default YAML config to stdout and exit")

    put = sub.add_parser("put", help="Store a value")
    put.add_argument("key")
    put.add_argument("value", nargs="?", help="Value as text; read from --file or stdin when omitted")
    put.add_argument("--file", help="Read the value from this file")
    put.add_argument("--raw", action="store_true", help="Write without the configured extension")

    get = sub.add_parser("get", help="Write a stored value to stdout")
    get.add_argument("key")
    get.add_argument("--raw", action="store_true", help="Read the file without the configured extension")

    has = sub.add_parser("has", help="Exit 0 if the key exists, 1 otherwise")
    has.add_argument("key")

    delete = sub.add_parser("delete", help="Remove a key")
    delete.add_argument("key")

    query = sub.add_parser("query", help="List stored entries")
    query.add_argument("--prefix")
    query.add_argument("--keys-only", action="store_true")
    query.add_argument("--offset", type=int)
    query.add_argument("--limit", type=int)
    query.add_argument("--sort", action="store_true", help="Sort by key")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return get_parser().parse_args(list(argv) if argv is not None else None)


def resolve_config(args: argparse.Namespace) -> DatastoreConfig:
    """Merge the config file (if any) with command line overrides."""
    cfg_path = Path(args.config) if args.config else default_config_path()
    if cfg_path.exists():
        cfg = load_config(cfg_path)
    elif args.config:
        raise FileNotFoundError(f"config file not found: {cfg_path}")
    else:
        cfg = DatastoreConfig()

    updates = {}
    if args.extension:
        updates["extension"] = args.extension
    if args.no_create:
        updates["create_if_missing"] = False
    options = cfg.options
    if updates:
        options = merge_options(options, **updates)
    return DatastoreConfig(
        path=args.root or cfg.path,
        log_level=args.log_level or cfg.log_level,
        options=options,
    )


def _read_value(args: argparse.Namespace) -> bytes:
    if args.value is not None:
        return args.value.encode("utf-8")
    if args.file:
        return Path(args.file).read_bytes()
    return sys.stdin.buffer.read()


async def run(args: argparse.Namespace, cfg: DatastoreConfig) -> int:
    store = FileDatastore(cfg.path, cfg.options)
    async with store:
        if args.command == "init":
            print(store.path)
            return EXIT_OK

        if args.command == "put":
            value = _read_value(args)
            if args.raw:
                await store.put_raw(args.key, value)
            else:
                await store.put(args.key, value)
            return EXIT_OK

        if args.command == "get":
            data = await (store.get_raw(args.key) if args.raw else store.get(args.key))
            sys.stdout.buffer.write(data)
            sys.stdout.flush()
            return EXIT_OK

        if args.command == "has":
            present = await store.has(args.key)
            print("true" if present else "false")
            return EXIT_OK if present else EXIT_MISSING

        if args.command == "delete":
            await store.delete(args.key)
            return EXIT_OK

        if args.command == "query":
            q = Query(
                prefix=args.prefix,
                keys_only=args.keys_only,
                orders=(sort_by_key(),) if args.sort else (),
                offset=args.offset,
                limit=args.limit,
            )
            async for entry in store.query(q):
                if args.keys_only:
                    print(entry.key)
                else:
                    print(f"{entry.key}\t{entry.value.decode('utf-8', errors='backslashreplace')}")
            return EXIT_OK

    raise ValueError(f"unknown command: {args.command}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)

    if args.command == "print-template":
        sys.stdout.write(dump_config(DatastoreConfig()))
        return EXIT_OK

    try:
        cfg = resolve_config(args)
        configure_logging(Path(args.config) if args.config else None, level=cfg.log_level)
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        return asyncio.run(run(args, cfg))
    except NotFoundError as e:
        print(f"Not found: {e}", file=sys.stderr)
        return EXIT_MISSING
    except DatastoreError as e:
        logger.debug("Datastore command failed", exc_info=True)
        print(f"{e.code}: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
