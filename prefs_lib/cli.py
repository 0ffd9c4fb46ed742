"""Command line access to a preferences store.

    prefs [--config PATH] [--store NAME] list
    prefs get KEY
    prefs set KEY VALUE --type bool|int|double|string|list
    prefs remove KEY
    prefs clear

List values are given and printed comma-separated.
"""
from __future__ import annotations
import argparse
import asyncio
import sys
from typing import Any, Iterable, Optional

from prefs_lib.bootstrap import build_preferences_manager
from prefs_lib.config import PreferencesConfig, load_config
from prefs_lib.exceptions import PreferencesError
from prefs_lib.logging_config import configure_logging
from prefs_lib.values import ValueKind

TYPE_CHOICES = ["bool", "int", "double", "string", "list"]
_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="prefs", description="Read and write preferences stores.")
    p.add_argument("--config", default=None, help="Path to the YAML config file")
    p.add_argument("--store", default=None, help="Store name (defaults to the configured default store)")
    p.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Print every key=value pair")
    g = sub.add_parser("get", help="Print one value")
    g.add_argument("key")
    s = sub.add_parser("set", help="Store a value")
    s.add_argument("key")
    s.add_argument("value")
    s.add_argument("--type", dest="kind", choices=TYPE_CHOICES, default="string")
    r = sub.add_parser("remove", help="Remove a key")
    r.add_argument("key")
    sub.add_parser("clear", help="Remove every key of the store")
    return p


def parse_value(kind: ValueKind, raw: str) -> Any:
    """Convert command line text to a value of `kind`. Raises ValueError."""
    if kind is ValueKind.BOOL:
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if kind is ValueKind.INT:
        return int(raw)
    if kind is ValueKind.DOUBLE:
        return float(raw)
    if kind is ValueKind.STRING_LIST:
        return raw.split(",") if raw else []
    return raw


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(value)
    return str(value)


async def _close_backend(backend: Any) -> None:
    channel = getattr(backend, "channel", None)
    aclose = getattr(channel, "aclose", None)
    if aclose is not None:
        await aclose()


async def run(args: argparse.Namespace, config: PreferencesConfig) -> int:
    manager = build_preferences_manager(config)
    store = args.store if args.store is not None else config.default_store
    try:
        prefs = await manager.get_instance(store)
        if args.command == "list":
            for key in sorted(prefs.get_keys()):
                print(f"{key}={format_value(prefs.get(key))}")
            return 0
        if args.command == "get":
            if not prefs.contains_key(args.key):
                print(f"{args.key}: not set", file=sys.stderr)
                return 1
            print(format_value(prefs.get(args.key)))
            return 0
        if args.command == "set":
            kind = ValueKind.parse(args.kind)
            value = parse_value(kind, args.value)
            writer = {
                ValueKind.BOOL: prefs.set_bool,
                ValueKind.INT: prefs.set_int,
                ValueKind.DOUBLE: prefs.set_double,
                ValueKind.STRING: prefs.set_string,
                ValueKind.STRING_LIST: prefs.set_string_list,
            }[kind]
            return 0 if await writer(args.key, value) else 1
        if args.command == "remove":
            return 0 if await prefs.remove(args.key) else 1
        if args.command == "clear":
            return 0 if await prefs.clear() else 1
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await _close_backend(manager.backend)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = get_parser().parse_args(list(argv) if argv is not None else None)
    try:
        config = load_config(args.config)
        configure_logging(args.log_level or config.log_level)
        return asyncio.run(run(args, config))
    except (PreferencesError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
