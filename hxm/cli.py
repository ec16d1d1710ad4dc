"""hxmasm CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from . import __version__
from .asm import AssemblerConfig, assemble
from .errors import CompilerError
from .image import write_image

LOG = logging.getLogger("hxm.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HydroOS Executable Managed Assembly compiler")
    parser.add_argument("-i", "--input", type=Path, required=True, help="HXMASM source file")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output .hxm image")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every line as it is compiled")
    parser.add_argument("-c", "--comment-prefix", default="//", help="Comment prefix (default //)")
    parser.add_argument("-m", "--metadata-prefix", default="#", help="Metadata entry prefix (default #)")
    parser.add_argument(
        "--ignore-errors",
        action="store_true",
        help="Skip lines with errors instead of aborting",
    )
    parser.add_argument(
        "--fix-version-field",
        action="store_true",
        help="Write the version text into the version slot (not readable by legacy loaders)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("HXM_LOG", "INFO"),
        help="Logging level (default INFO, or $HXM_LOG)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging("DEBUG" if args.verbose else args.log_level)
    try:
        config = AssemblerConfig(
            comment_prefix=args.comment_prefix,
            metadata_prefix=args.metadata_prefix,
            ignore_errors=args.ignore_errors,
            verbose=args.verbose,
        )
    except ValueError as exc:
        parser.error(str(exc))

    LOG.info("Input: %s", args.input)
    LOG.info("Output: %s", args.output)
    try:
        lines = args.input.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        print(f"error: cannot read {args.input}: {exc}")
        return 1

    try:
        program = assemble(lines, config)
        size = write_image(args.output, program, legacy_version_field=not args.fix_version_field)
    except CompilerError as exc:
        LOG.debug("compilation failed", exc_info=True)
        print(f"error: {exc}")
        return 1
    except OSError as exc:
        print(f"error: cannot write {args.output}: {exc}")
        return 1

    if program.diagnostics:
        LOG.warning("%d line(s) skipped because of errors", len(program.diagnostics))
    print(f"Wrote {args.output} ({len(program.instructions)} instructions, {size} bytes)")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
