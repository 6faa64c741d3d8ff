"""Command line entry point: ``python -m repogen generate declarations.yaml``."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from repogen.core.config import settings
from repogen.core.errors import EntityGenError
from repogen.core.logging import configure_logging
from repogen.generators.entity_gen import generate_repositories, load_declarations, render_files
from repogen.generators.entity_gen.writer import stale_files

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repogen",
        description="Generate key lookup repositories from annotated record declarations",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Render repository modules for a declaration file")
    gen.add_argument("declarations", type=Path, help="JSON or YAML declaration document")
    gen.add_argument(
        "--out",
        type=Path,
        default=Path(settings.output_dir),
        help=f"Output directory (default: {settings.output_dir})",
    )
    gen.add_argument(
        "--package",
        default=settings.package_dir,
        help=f"Package directory inside the output directory (default: {settings.package_dir})",
    )
    gen.add_argument(
        "--check",
        action="store_true",
        help="Do not write; exit 1 if files on disk differ from a fresh render",
    )

    serve = sub.add_parser("serve", help="Run the HTTP generation API")
    serve.add_argument("--host", default=settings.api_host)
    serve.add_argument("--port", type=int, default=settings.api_port)
    return parser


def _serve(host: str, port: int) -> int:
    import uvicorn

    log.info("Serving %s on %s:%s", settings.app_name, host, port)
    uvicorn.run("repogen.main:app", host=host, port=port, log_level=settings.log_level.lower())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    if args.command == "serve":
        return _serve(args.host, args.port)

    if not args.declarations.exists():
        print(f"Error: declaration file not found: {args.declarations}", file=sys.stderr)
        return 2

    try:
        if args.check:
            files = render_files(load_declarations(args.declarations), package_dir=args.package)
            stale = stale_files(files, args.out)
            if stale:
                for path in stale:
                    print(f"out of date: {path}")
                return 1
            print(f"{len(files)} generated files up to date")
            return 0

        files = generate_repositories(args.declarations, args.out, package_dir=args.package)
    except EntityGenError as e:
        log.error("Generation failed: %s", e, extra={"entity": e.entity or "-", "stage": "-"})
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        return 2

    for file in files:
        print(f"wrote {args.out / file.path}")
    return 0
