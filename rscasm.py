#!/usr/bin/env python3
"""
rscasm — RSC Assembler CLI

Usage:
    python rscasm.py <input.rsc> [-o output] [--format bin|hex|listing|raw|layout]
                                 [-v | -vv]

Output format is auto-detected from file extension:
    .txt          → binary strings, one word per line (default)
    .hex          → hex words, one per line
    .lst          → listing with addresses, words and source lines
    .bin / .rom   → raw big-endian 16-bit words
    .json         → physical ROM block layout

Examples:
    python rscasm.py programs/test.rsc                  # binary strings to stdout
    python rscasm.py programs/test.rsc -o test.lst
    python rscasm.py programs/test.rsc -o test.json -v
"""

import argparse
import logging
import os
import sys

from rsc_assembler import __version__
from rsc_assembler.assembler import assemble_file
from rsc_assembler.errors import AssemblerError
from rsc_assembler.formatting import format_listing, format_words, to_raw_image
from rsc_assembler.layout import write_layout

logger = logging.getLogger("rscasm")

EXTENSION_FORMATS = {
    '.hex': 'hex',
    '.lst': 'listing',
    '.bin': 'raw',
    '.rom': 'raw',
    '.json': 'layout',
}


def setup_logging(verbose: int):
    """Configure logging from the -v count."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s', stream=sys.stderr)


def detect_format(output: str) -> str:
    ext = os.path.splitext(output)[1].lower()
    return EXTENSION_FORMATS.get(ext, 'bin')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rscasm",
        description="Assembler for the RSC 16-bit instruction set",
    )
    parser.add_argument("input", help="Input assembly file")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument("--format", choices=["bin", "hex", "listing", "raw", "layout"],
                        default=None,
                        help="Output format (auto-detected from -o extension if not set)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--version", action="version",
                        version=f"rscasm {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.format:
        out_format = args.format
    elif args.output:
        out_format = detect_format(args.output)
    else:
        out_format = 'bin'

    if out_format == 'layout' and not args.output:
        print("Error: layout output requires -o <file.json>", file=sys.stderr)
        sys.exit(1)

    try:
        words, asm = assemble_file(args.input)

        if out_format == 'layout':
            write_layout(words, args.output)
            return

        if out_format == 'raw':
            result = to_raw_image(words)
        elif out_format == 'listing':
            result = format_listing(asm.listing)
        else:
            result = format_words(words, out_format)

        if args.output:
            if out_format == 'raw':
                with open(args.output, "wb") as f:
                    f.write(result)
            else:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(result)
                    if result and not result.endswith('\n'):
                        f.write("\n")
            logger.info(f"Output: {args.output} ({out_format}, {len(words)} words)")
        else:
            if out_format == 'raw':
                # Can't write raw bytes to stdout in text mode
                sys.stdout.buffer.write(result)
            elif result:
                print(result)

    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except UnicodeDecodeError as e:
        print(f"Error: {args.input} is not UTF-8 text: {e.reason}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except AssemblerError as e:
        print(f"Assembler error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Internal assembler error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
