"""Command-line interface for batch caption conversion and cleanup.

WHY: Many caption jobs need no timeline at all: convert an SRT to WebVTT,
shift everything by two seconds to match a re-cut, or scrub profanity
before delivery. The CLI runs the same CaptionStore operations as the
HTTP API on a single file, so results match what the editor would produce.

HOW: Uses argparse to accept an input file, optional input/output format
overrides, and a set of bulk operations. The file is imported into a
fresh CaptionStore, operations run in a fixed order (shift, stretch,
auto-punctuate, profanity filter, find/replace), and the result is
exported to --output or stdout. Status messages go to stderr.

RULES:
- Positional argument: input caption file path
- --from defaults to the input extension; --to defaults to the --output
  extension, then CAPTION_EDITOR_DEFAULT_FORMAT
- --replace requires --find
- --check prints reading-speed warnings and overlaps to stderr
- Caption output goes to stdout only when --output is not given
- Returns 0 on success, 1 on any editor or file error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from caption_editor.config import DEFAULT_EXPORT_FORMAT, LOG_LEVEL, format_for_path
from caption_editor.core.errors import CaptionEditorError
from caption_editor.core.store import CaptionStore
from caption_editor.formats import CODECS

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _resolve_formats(args: argparse.Namespace) -> tuple:
    """Work out (input_format, output_format) from flags and file extensions.

    Raises:
        ValueError: If the input format cannot be inferred.
    """
    input_format = args.from_format or format_for_path(args.input_file)
    if input_format is None:
        raise ValueError(
            "Cannot infer input format from '{}'; pass --from".format(args.input_file)
        )

    output_format = args.to_format
    if output_format is None and args.output:
        output_format = format_for_path(args.output)
    if output_format is None:
        output_format = DEFAULT_EXPORT_FORMAT
    return input_format, output_format


def _apply_operations(store: CaptionStore, args: argparse.Namespace) -> None:
    """Run the requested bulk operations in their fixed order."""
    if args.shift:
        store.shift_all(args.shift)
        _status("  Shifted by {} ms".format(args.shift))

    if args.stretch is not None:
        store.stretch_all(args.stretch)
        _status("  Stretched by factor {}".format(args.stretch))

    if args.auto_punctuate:
        store.auto_punctuate()
        _status("  Auto-punctuated")

    if args.profanity_filter:
        store.apply_profanity_filter(bleep=args.profanity_filter == "bleep")
        _status("  Profanity filter applied ({})".format(args.profanity_filter))

    if args.find is not None:
        changed = store.find_replace(args.find, args.replace or "", args.case_sensitive)
        _status("  Replaced '{}' in {} caption(s)".format(args.find, changed))


def _report_check(store: CaptionStore) -> None:
    warnings = store.analyze_reading_speed()
    conflicts = store.detect_conflicts()
    if not warnings and not conflicts:
        _status("Check: no reading-speed warnings or overlaps")
        return
    for warning in warnings:
        _status("Warning: {}".format(warning))
    for first, second in conflicts:
        _status("Overlap: caption {} and caption {}".format(first + 1, second + 1))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without touching files.
    """
    format_keys = ", ".join(fmt.value for fmt in CODECS)

    parser = argparse.ArgumentParser(
        prog="caption-editor",
        description="Convert caption files between formats and apply bulk edits "
                    "(shift, stretch, punctuation, profanity, find/replace).",
    )

    parser.add_argument(
        "input_file",
        help="Path to the caption file to read.",
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Path to write the result (default: stdout).",
    )

    parser.add_argument(
        "--from",
        dest="from_format",
        default=None,
        help="Input format key ({}). Default: inferred from the input extension.".format(format_keys),
    )

    parser.add_argument(
        "--to",
        dest="to_format",
        default=None,
        help="Output format key. Default: inferred from --output, else {}.".format(
            DEFAULT_EXPORT_FORMAT
        ),
    )

    parser.add_argument(
        "--shift",
        type=int,
        default=0,
        metavar="MS",
        help="Add MS milliseconds to every start and end time (may be negative).",
    )

    parser.add_argument(
        "--stretch",
        type=float,
        default=None,
        metavar="FACTOR",
        help="Multiply every start and end time by FACTOR.",
    )

    parser.add_argument(
        "--auto-punctuate",
        action="store_true",
        help="Capitalise sentence starts and add a final period where missing.",
    )

    parser.add_argument(
        "--profanity-filter",
        choices=["bleep", "stars"],
        default=None,
        help="Mask listed profanity with [bleep] or with asterisks.",
    )

    parser.add_argument(
        "--find",
        default=None,
        help="Literal text to find in every caption.",
    )

    parser.add_argument(
        "--replace",
        default=None,
        help="Replacement for --find (default: empty string).",
    )

    parser.add_argument(
        "--case-sensitive",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Match --find case exactly (default: %(default)s).",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Print reading-speed warnings and overlapping captions to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    WHY: This is the function that __main__.py calls and that users
    invoke via ``python -m caption_editor`` or ``caption-editor``.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.replace is not None and args.find is None:
        parser.error("--replace requires --find")

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    input_path = Path(args.input_file)
    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        return 1

    try:
        input_format, output_format = _resolve_formats(args)
    except ValueError as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        return 1

    store = CaptionStore()
    try:
        content = input_path.read_text(encoding="utf-8")
        count = store.import_captions(input_format, content)
        _status("Loaded {} caption(s) from {} ({})".format(count, input_path.name, input_format))

        _apply_operations(store, args)
        if args.check:
            _report_check(store)

        result = store.export_captions(output_format)
    except CaptionEditorError as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print("Error: Cannot read {}: {}".format(input_path, exc), file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
        try:
            output_path.write_text(result, encoding="utf-8")
        except OSError as exc:
            print("Error: Cannot write {}: {}".format(output_path, exc), file=sys.stderr)
            return 1
        _status("Saved {} caption(s) as {} to {}".format(len(store), output_format, output_path))
    else:
        sys.stdout.write(result)
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
