"""Command-line interface for docs2bbcode."""

from __future__ import annotations

import sys
import warnings
from typing import Callable

from .document import Heading
from .formatter import Formatter
from .load import load_document_html, write_output
from .options import ImportOptions, parse_cli_args


def main(argv: list[str] | None = None) -> int:
    """Entry-point invoked by the `docs2bbcode` console script."""

    options = parse_cli_args(argv)
    logger = _build_logger(options.quiet)
    verbose = options.verbose and not options.quiet

    logger(f"Load: reading {options.effective_location()}")
    with warnings.catch_warnings(record=True) as load_warnings:
        warnings.simplefilter("always")
        html = load_document_html(options)
        formatter = Formatter(html, options=options.formatter_options())
    _log_warning_records(load_warnings, logger)

    headings = list(formatter.get_headings())
    if verbose:
        logger(f"Load: found {len(headings)} heading(s)")

    if options.list_headings:
        for heading in headings:
            print(_describe_heading(heading))
        return 0

    with warnings.catch_warnings(record=True) as format_warnings:
        warnings.simplefilter("always")
        _select_heading(formatter, options)
        if verbose and options.size_auto_scale:
            logger(f"Format: base font size {formatter.find_base_scale():g}pt")
        text = formatter.format()
    _log_warning_records(format_warnings, logger)

    write_output(text, options.output)
    selected = formatter.get_selected_heading()
    scope = f"'{selected.text}'" if selected is not None else "whole document"
    logger(f"Format: wrote {len(text)} character(s) of BBCode for {scope}")
    return 0


def _select_heading(formatter: Formatter, options: ImportOptions) -> None:
    if not options.heading:
        formatter.set_selected_heading(None)
        return

    heading = formatter.get_heading_with_name(options.heading)
    if heading is None:
        warnings.warn(
            f"Heading '{options.heading}' not found; converting the whole document.",
            stacklevel=2,
        )
    formatter.set_selected_heading(heading)


def _describe_heading(heading: Heading) -> str:
    return "  " * (heading.level - 1) + heading.text


def _build_logger(quiet: bool) -> Callable[[str], None]:
    def _log(message: str) -> None:
        if not quiet:
            print(message, file=sys.stderr)

    return _log


def _log_warning_records(
    records: list[warnings.WarningMessage], log: Callable[[str], None]
) -> None:
    for record in records:
        message = str(record.message)
        if message:
            log(f"Warning: {message}")
