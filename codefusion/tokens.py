"""Approximate BPE token counting for exported text."""

from __future__ import annotations

import re

TOKEN_PATTERN = re.compile(r"\w+|[^\x00-\x7F]+|\S")


def token_cost(token: str) -> int:
    """Return the estimated cost of one token; runs longer than 4 chars cost more."""
    length = len(token)
    if length > 4:
        return length // 4 + 1
    return 1


def approximate_bpe_token_count(text: str) -> int:
    """Return the raw token estimate for ``text`` (stripped first)."""
    return sum(token_cost(match.group(0)) for match in TOKEN_PATTERN.finditer(text.strip()))


def round_token_count(count: int) -> int:
    """Round to the nearest hundred with halves going up: 49 -> 0, 50 -> 100, 150 -> 200."""
    return ((count + 50) // 100) * 100


def estimate_tokens(text: str) -> int:
    return round_token_count(approximate_bpe_token_count(text))


__all__ = [
    "TOKEN_PATTERN",
    "approximate_bpe_token_count",
    "estimate_tokens",
    "round_token_count",
    "token_cost",
]
