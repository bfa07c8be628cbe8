"""Work out where a document's HTML export can be downloaded from.

The classifier keeps a registry of known document hosts. Each registry
entry defines:
1. A regex that matches eligible URLs, capturing the document id.
2. Friendly source metadata (display name, optional documentation).
3. A template that turns the document id into a download URL.

Sources are matched in order and the first hit wins. Anything that is not
an http(s) URL is treated as a local file and yields no match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Pattern


@dataclass(frozen=True, slots=True)
class SourceRule:
    """Configuration for a single document host."""

    pattern: Pattern[str]
    name: str
    full_name: str
    download_template: str | None = None
    documentation: str | None = None


@dataclass(frozen=True, slots=True)
class SourceMatch:
    """Result of classifying a source."""

    name: str
    full_name: str
    download_url: str
    document_id: str | None = None
    documentation: str | None = None


def classify_source(source: str) -> SourceMatch | None:
    """Return download metadata for the first matching rule, if any."""

    for rule in _iter_rules():
        match = rule.pattern.search(source)
        if match is None:
            continue
        document_id = match.groupdict().get("id")
        if rule.download_template and document_id:
            download_url = rule.download_template.format(id=document_id)
        else:
            download_url = source
        return SourceMatch(
            name=rule.name,
            full_name=rule.full_name,
            download_url=download_url,
            document_id=document_id,
            documentation=rule.documentation,
        )
    return None


def _iter_rules() -> Iterable[SourceRule]:
    """Yield all source rules in priority order."""

    return (
        SourceRule(
            pattern=re.compile(
                r"^https?://docs\.google\.com/document/d/e/(?P<id>[\w-]+)/pub",
                re.IGNORECASE,
            ),
            name="gdocs-published",
            full_name="Published Google Docs document",
            documentation="Documents published to the web; fetched as-is.",
        ),
        SourceRule(
            pattern=re.compile(
                r"^https?://docs\.google\.com/document/(?:u/\d+/)?d/(?P<id>[\w-]+)",
                re.IGNORECASE,
            ),
            name="gdocs",
            full_name="Google Docs",
            download_template="https://docs.google.com/document/d/{id}/export?format=html",
            documentation="Documents shared via link; downloaded through the HTML export.",
        ),
        SourceRule(
            pattern=re.compile(r"^https?://", re.IGNORECASE),
            name="web",
            full_name="Web page",
            documentation="Any other URL, fetched verbatim.",
        ),
    )
