#!/usr/bin/env python3
"""
ABOUTME: Command-line front end for xml_utils.sanitize
ABOUTME: Reads text from --input, --file or stdin and writes XML-safe text
"""

import argparse
import os
import sys
from pathlib import Path

from xml_utils import DEFAULT_MODE, SANITIZE_MODES, sanitize


def get_default_mode() -> str:
    """
    Resolve the sanitize mode from the XML_SANITIZE_MODE environment variable.

    Returns:
        The configured mode, or DEFAULT_MODE when the variable is unset or empty

    Raises:
        ValueError: If the variable names an unknown mode
    """
    mode = os.getenv("XML_SANITIZE_MODE", "").strip().lower()
    if not mode:
        return DEFAULT_MODE
    if mode not in SANITIZE_MODES:
        raise ValueError(
            f"XML_SANITIZE_MODE={mode!r} is not valid. Expected one of: {', '.join(SANITIZE_MODES)}"
        )
    return mode


def read_input_text(args) -> str:
    """Return the raw text selected by --input, --file or stdin, in that order."""
    if args.input is not None:
        return args.input
    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            sys.exit(1)
        try:
            return file_path.read_text(encoding=args.encoding)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Failed to read {args.file}: {e}", file=sys.stderr)
            sys.exit(1)
    return sys.stdin.read()


def main():
    parser = argparse.ArgumentParser(
        description="Sanitize text for safe embedding inside XML content"
    )
    parser.add_argument(
        "--input", "-i",
        type=str,
        help="Text to sanitize"
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        help="File containing text to sanitize (stdin is used when neither --input nor --file is given)"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path (default: write to stdout)"
    )
    parser.add_argument(
        "--mode", "-m",
        choices=SANITIZE_MODES,
        default=None,
        help=f"Sanitize mode (default: $XML_SANITIZE_MODE or {DEFAULT_MODE})"
    )
    parser.add_argument(
        "--encoding",
        type=str,
        default="utf-8",
        help="Encoding for --file and --output (default: utf-8)"
    )

    args = parser.parse_args()

    mode = args.mode
    if mode is None:
        try:
            mode = get_default_mode()
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    raw_text = read_input_text(args)
    result = sanitize(raw_text, mode=mode)

    if raw_text and not result:
        print("Warning: Input contained no allowed characters; output is empty.", file=sys.stderr)

    if args.output:
        output_path = Path(args.output)
        try:
            output_path.write_text(result, encoding=args.encoding)
        except (OSError, UnicodeEncodeError) as e:
            print(f"Error: Failed to write {args.output}: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Sanitized {len(raw_text)} -> {len(result)} characters ({mode} mode)")
        print(f"Saved to: {output_path}")
    else:
        sys.stdout.write(result)


if __name__ == "__main__":
    main()
