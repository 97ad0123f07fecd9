"""Command-line entry point: generate C headers from a declaration stream.

Usage::

    python -m abikit declarations.json -o include/ -l mylib
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from abikit.config import LIB_NAME_ENV_VAR, resolve_lib_name
from abikit.errors import BindgenError
from abikit.loader import load_declarations_file
from abikit.session import BindgenSession

logger = logging.getLogger(__name__)


def write_outputs(headers: dict[str, str], out_dir: Path) -> list[Path]:
    """Write every header below ``out_dir``, creating directories as needed.

    Every destination is checked before anything is written.

    :raises ValueError: If a header path would land outside ``out_dir``.
    """
    root = out_dir.resolve()
    dests = {}
    for header in headers:
        dest = out_dir / header
        if not dest.resolve().is_relative_to(root):
            raise ValueError(f"Header {header!r} would be written outside {out_dir}")
        dests[header] = dest

    written = []
    for header, text in headers.items():
        dest = dests[header]
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(text, encoding="utf-8")
        logger.info("Wrote %s", dest)
        written.append(dest)
    return written


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="abikit",
        description="Generate C headers from the exported declarations of a library.",
    )
    parser.add_argument("input", type=Path, help="JSON declaration stream produced by a front end")
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("."),
        help="directory the headers are written to (default: current directory)",
    )
    parser.add_argument(
        "-l",
        "--lib-name",
        default=None,
        help=f"library short name (default: ${LIB_NAME_ENV_VAR} or 'backend')",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="log every skipped declaration")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        lib_name = resolve_lib_name(args.lib_name)
        decls = load_declarations_file(args.input)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    session = BindgenSession(lib_name)
    errors = session.emit_all(decls)
    if errors:
        logger.error("%d declaration(s) could not be exported, no headers written", len(errors))
        return 1

    try:
        headers = session.finalize()
    except (BindgenError, ValueError) as e:
        logger.error("%s", e)
        return 1

    try:
        write_outputs(headers, args.output_dir)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
