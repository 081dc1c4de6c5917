from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional

import uvicorn

from ..config import Settings
from ..protocol.uci.loop import run_uci
from ..selector import open_selector


def main(argv: Optional[List[str]] = None) -> None:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(prog="chess-rules", description="Chess rules engine")
    sub = parser.add_subparsers(dest="command")
    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    sub.add_parser("uci", help="Speak UCI on stdin/stdout")
    args = parser.parse_args(argv)

    if args.command == "uci":
        # stdout carries the protocol; logs go to stderr
        logging.basicConfig(level=settings.log_level)
        rng = random.Random(settings.seed)
        run_uci(selector=open_selector(settings.book_path, rng), rng=rng)
        return

    uvicorn.run(
        "chess_rules.protocol.http.app:create_app",
        factory=True,
        host=getattr(args, "host", settings.host),
        port=getattr(args, "port", settings.port),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
