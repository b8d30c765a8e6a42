import re
from typing import List, Optional, Pattern, Union

from contentcheck.settings import settings


def compile_separator(separator: Union[str, Pattern, None] = None) -> Pattern:
    """Compile the separator sentinel; falls back to the configured pattern."""
    if separator is None:
        separator = settings.SEPARATOR_PATTERN
    if isinstance(separator, str):
        return re.compile(separator)
    return separator


def split_segments(text: str, separator: Union[str, Pattern, None] = None) -> List[str]:
    """Split a physical file into the logical posts bundled inside it.

    Blank segments (a leading or trailing separator) are dropped and every
    kept segment is stripped, so ``---`` is the first line of a well-formed one.
    """
    pattern = compile_separator(separator)
    return [part.strip() for part in pattern.split(text) if part.strip()]
