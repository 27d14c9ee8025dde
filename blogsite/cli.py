from __future__ import annotations

import argparse
import functools
import http.server
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .builder import build_site
from .config import DEFAULT_CONFIG, SiteConfig, load_config
from .errors import BlogsiteError

logger = logging.getLogger("blogsite")

DEFAULT_PORT = 8000


def configure_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity > 0:
        level = logging.DEBUG
    elif verbosity < 0:
        level = logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blogsite", description="Static Markdown blog generator.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="Path to site config file (TOML/YAML/JSON).",
    )
    parser.add_argument("--content", default=None, help="Directory containing Markdown content.")
    parser.add_argument("--output", default=None, help="Output directory for the site.")
    parser.add_argument(
        "--drafts",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Render drafts for local preview.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove the output directory before building.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the output directory over HTTP after building.",
    )
    parser.add_argument("--port", default=DEFAULT_PORT, type=int, help="Port for --serve.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug messages.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors.")
    return parser


def apply_arguments(config: SiteConfig, args: argparse.Namespace) -> SiteConfig:
    return config.with_overrides(
        content_dir=Path(args.content) if args.content else None,
        output_dir=Path(args.output) if args.output else None,
        include_drafts=args.drafts,
        clean=args.clean,
    )


def serve(directory: Path, port: int) -> None:
    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(directory))
    with http.server.ThreadingHTTPServer(("", port), handler) as httpd:
        logger.info("Serving %s at http://localhost:%d", directory, port)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = create_argument_parser().parse_args(argv)
    configure_logging(1 if args.verbose else -1 if args.quiet else 0)
    start = time.perf_counter()
    try:
        config = apply_arguments(load_config(Path(args.config)), args)
        summary = build_site(config)
    except BlogsiteError as exc:
        logger.error("%s", exc)
        return 1
    elapsed = time.perf_counter() - start
    logger.info("%s", summary.describe())
    logger.info("Build completed in %.2fs. Site generated in: %s", elapsed, config.output_dir)
    if args.serve:
        serve(config.output_dir, args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
