"""Command-line wrapper around OktaApiClient.

Examples:
    okta-api test-connection
    okta-api --connection preview get users --query limit=200 --query search='status eq "ACTIVE"'
    okta-api patch groups/00g1abc --data '{"profile": {"description": "x"}}'
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import Optional, Sequence

from .config.settings import load_settings
from .core.client import OktaApiClient
from .core.exceptions import OktaError
from .core.response import ErrorEnvelope

VERBS = ("get", "post", "put", "patch", "delete")


def _parse_query(pairs: Sequence[str]) -> dict[str, str]:
    query = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--query expects key=value, got {pair!r}")
        query[key] = value
    return query


def _parse_data(raw: Optional[str]):
    if raw is None:
        return None
    if raw.startswith("@"):
        with open(raw[1:], encoding="utf-8") as f:
            return json.load(f)
    return json.loads(raw)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="okta-api", description="Okta API helper")
    parser.add_argument("--connection", default=os.environ.get("OKTA_DEFAULT_CONNECTION"),
                        help="Connection key from the OKTA_* configuration (default: prod)")
    parser.add_argument("--base-url", default=None, help="Explicit tenant URL, e.g. https://mycompany.okta.com")
    parser.add_argument("--token", default=None, help="Explicit API token (use with --base-url)")
    parser.add_argument("--exceptions", action="store_true", help="Raise typed errors for 4xx/5xx responses")
    parser.add_argument("--max-pages", type=int, default=None, help="Stop pagination after this many pages")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every API event to stderr")

    sub = parser.add_subparsers(dest="cmd")
    sub.add_parser("test-connection")

    for verb in VERBS:
        sp = sub.add_parser(verb)
        sp.add_argument("uri", help="Path under /api/v1/, e.g. users or groups/00g1abc/users")
        if verb == "get":
            sp.add_argument("--query", action="append", default=[], metavar="KEY=VALUE")
        else:
            sp.add_argument("--data", default=None, help="JSON body, or @file.json")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return 2

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr)

    try:
        settings = load_settings()
        settings.exceptions = settings.exceptions or args.exceptions
        if args.max_pages is not None:
            settings.max_pages = args.max_pages

        connection = None
        if args.base_url or args.token:
            connection = {"base_url": args.base_url, "token": args.token, "log_channels": settings.log_channels}
        client = OktaApiClient(args.connection, settings=settings, connection=connection)

        if args.cmd == "test-connection":
            ok = client.test_connection()
            print("Connection OK" if ok else "Connection failed")
            return 0 if ok else 1

        if args.cmd == "get":
            result = client.get(args.uri, _parse_query(args.query))
        else:
            result = getattr(client, args.cmd)(args.uri, _parse_data(args.data))
    except (OktaError, argparse.ArgumentTypeError, ValueError, OSError) as exc:
        print(f"[okta-api] {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result.as_dict(), indent=2, default=str))
    if isinstance(result, ErrorEnvelope) or result.status.failed:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
