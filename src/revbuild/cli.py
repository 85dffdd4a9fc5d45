"""Command-line interface for revbuild.

The input is a JSON document holding the chapter and its block commands
(see :func:`revbuild.converter.load_document`).

Usage::

    revbuild ch01.json                      # writes ch01.html
    revbuild ch01.json -b latex -o ch01.tex # explicit backend and output
    revbuild ch01.json --secnolevel 3 --outencoding SJIS
    revbuild --list-builders                # list available backends
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from revbuild import __version__
from revbuild.book import BookConfig
from revbuild.converter import Converter, load_document
from revbuild.exceptions import ReviewError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revbuild",
        description="Render Re:VIEW block commands to HTML, LaTeX or plain text.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the JSON chapter document.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input> with the backend's extension.",
    )
    parser.add_argument(
        "-b", "--builder",
        default="html",
        choices=list(Converter.BUILDERS),
        help="Output backend (default: %(default)s).",
    )
    parser.add_argument(
        "--secnolevel",
        type=int,
        help="Deepest heading level that gets a section number.",
    )
    parser.add_argument(
        "--outencoding",
        help="Output encoding: UTF-8, EUC, SJIS or JIS.",
    )
    parser.add_argument(
        "--stylesheet",
        help="Stylesheet linked from HTML output.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Warn about images that could not be found.",
    )
    parser.add_argument(
        "--list-builders",
        action="store_true",
        help="List available backends and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_builders:
        print("Available builders:")
        for name in Converter.BUILDERS:
            print(f"  - {name}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        config = BookConfig.from_mapping({
            "secnolevel": args.secnolevel,
            "outencoding": args.outencoding,
            "stylesheet": args.stylesheet,
        })
        converter = Converter(builder=args.builder, config=config, strict=args.strict)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(converter.builder.extension)

    if args.verbose:
        print(f"Input:   {input_path}")
        print(f"Output:  {output_path}")
        print(f"Builder: {args.builder}")

    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
        chapter, commands = load_document(data, config)
        output = converter.convert_bytes(chapter, commands, filename=input_path.name)
    except (ReviewError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(output)

    if converter.errors:
        print(f"{len(converter.errors)} error(s) reported", file=sys.stderr)
    if args.verbose:
        print(f"Done. {len(output)} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 1 if converter.errors else 0


if __name__ == "__main__":
    sys.exit(main())
