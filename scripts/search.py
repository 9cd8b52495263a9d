"""Run a full-text query against the daemon and print the resolved documents."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict

from application.use_cases.search import search
from domain.errors import SphinxBridgeError
from infrastructure.config import ContainerConfig, build_default_container
from ui.logging_utils import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", help="Query text in the daemon's extended syntax")
    parser.add_argument("--class", dest="class_tag", help="Restrict the search to one class")
    parser.add_argument(
        "--field",
        action="append",
        dest="fields",
        default=[],
        help="Indexed field of --class. Can be passed several times.",
    )
    parser.add_argument("--server", help="Daemon host for --class (default: the configured daemon)")
    parser.add_argument("--port", type=int, help="Daemon port for --class")
    parser.add_argument("--page", default=None, help="Page number (default: 1)")
    parser.add_argument("--page-size", default=None, help="Page size (default: 20)")
    parser.add_argument("--match-mode", default=None, help="Match mode (default: extended)")
    parser.add_argument("--sort-by", default=None, help='Sort clause, e.g. "@weight DESC, created_at ASC"')
    parser.add_argument("--raw", action="store_true", help="Print matched identifiers only")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()
    cfg = ContainerConfig.from_env()
    container = build_default_container(cfg)
    if args.class_tag:
        container.registry.register(
            args.class_tag,
            *(args.fields or ["title"]),
            server=args.server or cfg.daemon_server,
            port=args.port or cfg.daemon_port,
        )

    options = {
        "page": args.page,
        "page_size": args.page_size,
        "match_mode": args.match_mode,
        "sort_by": args.sort_by,
        "raw": args.raw,
    }
    try:
        outcome = search(
            args.query,
            class_tag=args.class_tag,
            options=options,
            registry=container.registry,
            store=container.store,
            client_factory=container.client_factory,
            query_builder=container.query_builder,
        )
    except SphinxBridgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if isinstance(outcome, list):
        print(json.dumps(outcome))
        return 0
    print(f"found {outcome.total_found}, page {outcome.page}/{outcome.total_pages or 1}")
    for document in outcome.documents:
        print(json.dumps(asdict(document), ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
