"""Small text helpers shared by the analyzer, chunker and parser."""

from __future__ import annotations

import math
import re

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def split_sentences(text: str) -> list[str]:
    """Split on runs of . ! ? and drop blank pieces (pieces are not stripped)."""
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines and drop blank pieces."""
    return [p for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)
