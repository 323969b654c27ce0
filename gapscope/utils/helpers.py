"""
Common utility functions and helpers.
"""
import math
import re
import unicodedata


def slugify(name: str) -> str:
    """
    Turn a human-readable name into a stable identifier fragment.

    Args:
        name: Raw name, e.g. "Homo sapiens" or "Genomics & Omics"

    Returns:
        Lower-case, hyphen-separated slug, e.g. "homo-sapiens"
    """
    # Fold accents so "Säugetier" and "Saugetier" produce the same id
    name = unicodedata.normalize('NFKD', name).encode('ascii', 'ignore').decode('ascii')
    name = name.lower().strip()
    name = re.sub(r'[^a-z0-9]+', '-', name)
    return name.strip('-')


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with .5 always rounding up
    (built-in round() gives round(2.5) == 2).

    Args:
        value: Number to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
