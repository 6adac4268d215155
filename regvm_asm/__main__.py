#!/usr/bin/env python3
"""
regvm Assembler - Command Line Interface

Usage:
    python3 -m regvm_asm input.asm -o output.txt
    python3 -m regvm_asm input.asm -o output.bin -f binary -t target.yaml
    python3 -m regvm_asm input.asm --listing
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .assembler import OUTPUT_FORMATS, Assembler
from .errors import AssemblerError
from .target import TargetError, default_target, load_target


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="regvm-asm",
        description="regvm two-pass assembler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s programs/hello.asm -o programs/hello.txt
  %(prog)s programs/loop.asm -f numeric -v
  %(prog)s programs/loop.asm -o loop.bin -f binary -t targets/vm32.yaml
  %(prog)s programs/loop.asm --listing
        """,
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input assembly file (.asm)",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Output file. If not specified, prints to stdout.",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "-t",
        "--target",
        type=str,
        help="Target profile (.yaml) with opcode numbering and word layout",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-l",
        "--listing",
        action="store_true",
        help="Print assembly listing",
    )

    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the parsed program",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    # Validate input file
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    if args.format == "binary" and not args.output:
        print("Error: Binary output requires -o/--output", file=sys.stderr)
        sys.exit(1)

    try:
        target = load_target(args.target) if args.target else default_target()

        asm = Assembler(verbose=args.verbose, target=target)
        asm.assemble_file(str(input_path), args.output, args.format)

        if args.dump:
            print(asm.get_program_dump())

        # Print listing if requested
        if args.listing:
            print(asm.get_listing())

        # If no output file, print the stream to stdout
        if not args.output and not (args.listing or args.dump):
            sys.stdout.write(asm.render(args.format))

        if args.verbose or args.output:
            print(
                f"\nAssembly successful: {len(asm.encoded)} instructions",
                file=sys.stderr,
            )

    except (AssemblerError, TargetError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
