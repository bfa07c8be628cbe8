"""Command-line option parsing for docs2bbcode."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Sequence

from .formatter import FormatterOptions, IndentationMode, SpacingMode
from .sourceclassifier import SourceMatch, classify_source

STDIN_SOURCE = "-"


@dataclass(slots=True)
class ImportOptions:
    """Structured representation of CLI arguments."""

    source: str
    heading: str | None = None
    list_headings: bool = False
    output: str | None = None
    indentation: IndentationMode = IndentationMode.AS_IS
    spacing: SpacingMode = SpacingMode.DOUBLE
    custom_captions: bool = False
    size_auto_scale: bool = False
    source_match: SourceMatch | None = None
    verbose: bool = False
    quiet: bool = False

    def formatter_options(self) -> FormatterOptions:
        """Return the formatter settings selected on the command line."""

        return FormatterOptions(
            indentation=self.indentation,
            spacing=self.spacing,
            custom_captions=self.custom_captions,
            size_auto_scale=self.size_auto_scale,
        )

    def effective_location(self) -> str:
        """Return the path or URL the document is actually read from."""

        if self.source_match is not None:
            return self.source_match.download_url
        return self.source


def parse_cli_args(argv: Sequence[str] | None = None) -> ImportOptions:
    """Parse CLI arguments into a dataclass."""

    parser = argparse.ArgumentParser(
        prog="docs2bbcode",
        description="Convert an exported Google Docs document to BBCode.",
    )
    parser.add_argument(
        "--heading",
        help="Only convert the section below the heading with this exact text.",
    )
    parser.add_argument(
        "--list-headings",
        action="store_true",
        help="Print the document's headings and exit.",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the BBCode to this file instead of stdout.",
    )
    parser.add_argument(
        "--indentation",
        choices=[mode.value for mode in IndentationMode],
        default=IndentationMode.AS_IS.value,
        help='First-line indentation handling (default: "as-is").',
    )
    parser.add_argument(
        "--spacing",
        choices=[mode.value for mode in SpacingMode],
        default=SpacingMode.DOUBLE.value,
        help='Blank lines between paragraphs (default: "double").',
    )
    parser.add_argument(
        "--custom-captions",
        action="store_true",
        help="Keep caption/subcaption pairs at the top of a section together.",
    )
    parser.add_argument(
        "--size-auto-scale",
        action="store_true",
        help="Measure font sizes against the document's dominant size instead of 12pt.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output (errors only).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show details about the document being converted.",
    )
    parser.add_argument(
        "source",
        help=f"HTML file, Google Docs URL, or '{STDIN_SOURCE}' for stdin.",
    )

    args = parser.parse_args(argv)

    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose cannot be combined.")
    if args.list_headings and args.heading:
        parser.error("--list-headings and --heading cannot be combined.")

    source_match = None if args.source == STDIN_SOURCE else classify_source(args.source)

    return ImportOptions(
        source=args.source,
        heading=args.heading,
        list_headings=args.list_headings,
        output=args.output,
        indentation=IndentationMode(args.indentation),
        spacing=SpacingMode(args.spacing),
        custom_captions=args.custom_captions,
        size_auto_scale=args.size_auto_scale,
        source_match=source_match,
        verbose=args.verbose,
        quiet=args.quiet,
    )
