"""Load the HTML export a conversion starts from."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from .http import fetch_text as http_fetch_text
from .options import STDIN_SOURCE, ImportOptions


def load_document_html(
    options: ImportOptions,
    *,
    stdin: TextIO | None = None,
) -> str:
    """Return the HTML named by the options' source."""

    if options.source == STDIN_SOURCE:
        stream = stdin if stdin is not None else sys.stdin
        return stream.read()

    if options.source_match is not None:
        return http_fetch_text(options.effective_location())

    path = Path(options.source)
    if not path.is_file():
        raise FileNotFoundError(f"Missing document at {path}.")
    return path.read_text(encoding="utf-8")


def write_output(text: str, destination: str | None, *, stdout: TextIO | None = None) -> None:
    """Write converted text to a file, or to stdout without a destination."""

    if destination is None:
        stream = stdout if stdout is not None else sys.stdout
        stream.write(text + "\n")
        return

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
