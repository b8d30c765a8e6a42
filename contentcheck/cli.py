import argparse
import json
import logging
import re
import sys
from typing import List, Optional

from contentcheck.services.corpus_checker import check_corpus, render_text
from contentcheck.services.post_loader import ContentRootError, load_all
from contentcheck.services.search_index import build_search_index, search
from contentcheck.settings import settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_USAGE = 2


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _separator(value: str) -> str:
    try:
        re.compile(value)
    except re.error as e:
        raise argparse.ArgumentTypeError(f"invalid separator pattern: {e}")
    return value


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "root",
        nargs="?",
        default=settings.CONTENT_ROOT,
        help=f"content directory (default: {settings.CONTENT_ROOT})",
    )
    p.add_argument("--separator", type=_separator, help="regex matching the post separator")
    p.add_argument("--glob", dest="file_glob", help=f"file pattern (default: {settings.FILE_GLOB})")
    p.add_argument("--workers", type=int, help="number of loader threads")
    p.add_argument("--log-level", help=f"log level (default: {settings.LOG_LEVEL})")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="contentcheck",
        description="Validate post front matter and cross links.",
    )
    _add_common_arguments(p)
    p.add_argument("--format", choices=["text", "json"], default="text", help="output format")
    p.add_argument("--verbose", action="store_true", help="list files without issues too")
    return p


def build_index_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="contentcheck-index",
        description="Print the site search index as JSON.",
    )
    _add_common_arguments(p)
    p.add_argument("--base-url", help="prefix for permalinks")
    p.add_argument("--include-drafts", action="store_true", help="index draft posts too")
    p.add_argument("--query", help="print search results instead of the whole index")
    p.add_argument("--limit", type=int, default=10, help="max search results")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        report = check_corpus(
            args.root,
            separator=args.separator,
            max_workers=args.workers,
            file_glob=args.file_glob,
        )
    except ContentRootError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if args.format == "json":
        print(report.model_dump_json(indent=2))
    else:
        print(render_text(report, verbose=args.verbose))

    return EXIT_OK if report.ok else EXIT_ERRORS


def index_main(argv: Optional[List[str]] = None) -> int:
    args = build_index_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        posts, _errors = load_all(
            args.root,
            separator=args.separator,
            max_workers=args.workers,
            file_glob=args.file_glob,
        )
    except ContentRootError as e:
        logger.error(str(e))
        return EXIT_USAGE

    entries = build_search_index(
        posts, base_url=args.base_url, include_drafts=args.include_drafts
    )
    if args.query is not None:
        entries = search(entries, args.query, limit=args.limit)

    print(json.dumps([entry.model_dump(mode="json") for entry in entries], indent=2))
    return EXIT_OK


def run() -> None:
    sys.exit(main())


def run_index() -> None:
    sys.exit(index_main())


if __name__ == "__main__":
    run()
