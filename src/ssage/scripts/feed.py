"""CLI for feeding messages through a keyword engine or serving the HTTP API."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, TextIO

from ssage.config import Configuration, Settings, load_configuration
from ssage.engine import KeywordEngine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ssage", description="Rank conversation keywords")
    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser("feed", help="Feed messages line by line and print their keywords")
    feed.add_argument(
        "path",
        nargs="?",
        default="-",
        help="File with one message per line (default: stdin)",
    )
    feed.add_argument("--config", dest="config_path", help="YAML configuration file")
    feed.add_argument(
        "--prioritize",
        action="append",
        default=[],
        metavar="WORD",
        help="Raise a keyword's weight after feeding (repeatable)",
    )
    feed.add_argument(
        "--trivialize",
        action="append",
        default=[],
        metavar="WORD",
        help="Lower a keyword's weight after feeding (repeatable)",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: SSAGE_HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, help="Bind port (default: SSAGE_PORT or 8000)")
    return parser


def run_feed(
    messages: Iterable[str],
    *,
    configuration: Configuration,
    prioritize: Iterable[str] = (),
    trivialize: Iterable[str] = (),
    out: TextIO | None = None,
) -> KeywordEngine:
    if out is None:
        out = sys.stdout
    engine = KeywordEngine(configuration)
    for line in messages:
        message = line.rstrip("\n")
        if not message.strip():
            continue
        print(engine.feed(message), file=out)

    for word in prioritize:
        if not engine.prioritize_keyword(word):
            print(f"unknown keyword: {word}", file=sys.stderr)
    for word in trivialize:
        if not engine.trivialize_keyword(word):
            print(f"unknown keyword: {word}", file=sys.stderr)

    print(f"summary: {engine.feed_empty()}", file=out)
    return engine


def _serve(host: str | None, port: int | None) -> int:
    import uvicorn

    from ssage.app import create_app

    settings = Settings.from_env()
    app = create_app(settings=settings)
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":  # pragma: no cover - network entry
        return _serve(args.host, args.port)

    configuration = load_configuration(args.config_path) if args.config_path else Configuration.from_env()
    if args.path == "-":
        run_feed(sys.stdin, configuration=configuration, prioritize=args.prioritize, trivialize=args.trivialize)
        return 0

    path = Path(args.path)
    if not path.is_file():  # pragma: no cover - CLI validation
        parser.error(f"File '{args.path}' does not exist")
        return 1
    with path.open("r", encoding="utf-8") as handle:
        run_feed(handle, configuration=configuration, prioritize=args.prioritize, trivialize=args.trivialize)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
