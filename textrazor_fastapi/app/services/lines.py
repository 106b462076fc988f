"""Splitting submitted documents into analysable lines."""

import re

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(raw: str) -> list[str]:
    """Split text on any line break, trim each line and drop empty ones."""
    return [line.strip() for line in _LINE_BREAK.split(raw) if line.strip()]
