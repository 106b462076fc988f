"""Entity highlighting for a single line of text.

The output is a :class:`markupsafe.Markup` assembled from escaped pieces
only: the line, every matched occurrence and every type label pass through
``markupsafe.escape`` before they reach the result, so no caller can emit
markup-significant characters from its input unescaped.
"""

import re
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from markupsafe import Markup, escape

from textrazor_fastapi.app.models import Entity
from textrazor_fastapi.app.services.aggregator import UNKNOWN_TYPE, primary_type

HIGHLIGHT_CLASS = "entity-badge"

_WRAPPER = Markup('<span class="{css}" data-entity-type="{type}">{text}</span>')


class Highlight(NamedTuple):
    """Text to mark inside a line and the label to mark it with."""

    matched_text: str
    type: str | None = None


def entity_highlights(entities: Iterable[Entity]) -> list[Highlight]:
    """Re-map provider entities to highlights labelled with their primary type."""
    return [Highlight(entity.matched_text, primary_type(entity)) for entity in entities]


def _whole_word_pattern(matched_text: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<!\w){re.escape(matched_text)}(?!\w)",
        re.IGNORECASE,
    )


def _wrap(occurrence: str, label: str) -> Markup:
    return _WRAPPER.format(css=HIGHLIGHT_CLASS, type=label, text=occurrence)


def highlight_entities(text: str, entities: Sequence[Highlight]) -> Markup:
    """Wrap every whole-word occurrence of each entity in a typed span.

    Entities are applied in order. Each pass only searches the parts of the
    line that earlier passes left unwrapped, so a later entity never matches
    inside a generated span. Matching is case-insensitive and the occurrence
    is wrapped as it appears in the line.

    Args:
        text: The line to annotate.
        entities: Highlights to apply; a missing type is labelled "Unknown".

    Returns:
        Markup safe to embed verbatim in an HTML document.
    """
    segments: list[str] = [str(text)]

    for highlight in entities:
        if not highlight.matched_text:
            continue
        pattern = _whole_word_pattern(highlight.matched_text)
        label = highlight.type or UNKNOWN_TYPE

        updated: list[str] = []
        for segment in segments:
            if isinstance(segment, Markup):
                updated.append(segment)
                continue
            position = 0
            for match in pattern.finditer(segment):
                if match.start() > position:
                    updated.append(segment[position : match.start()])
                updated.append(_wrap(match.group(0), label))
                position = match.end()
            if position < len(segment):
                updated.append(segment[position:])
        segments = updated

    return Markup("").join(escape(segment) for segment in segments)
