"""String case helpers used when deriving slugs and file names."""

from __future__ import annotations

import re

# Runs of letters or digits in any script.
_WORD_PATTERN = re.compile(r"[^\W_]+")


def split_words(value: str) -> list[str]:
    """Split ``value`` into lowercase words, dropping punctuation."""
    return [word.lower() for word in _WORD_PATTERN.findall(value)]


def snake_case(value: str) -> str:
    return "_".join(split_words(value))


def kebab_case(value: str) -> str:
    return "-".join(split_words(value))


__all__ = ["kebab_case", "snake_case", "split_words"]
