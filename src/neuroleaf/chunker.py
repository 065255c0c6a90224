"""Paragraph-aware chunking of long documents for neuroleaf.

Splits text larger than the long-document threshold into chunks near the
target size, carrying the last two sentences of each chunk into the next
one as overlap. Also decides how many cards each chunk should ask for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from neuroleaf.config import AppConfig
from neuroleaf.schemas import Complexity, ContentAnalysis
from neuroleaf.textutil import round_half_up, split_paragraphs, split_sentences

logger = logging.getLogger(__name__)

_MIN_CHUNK_CARDS = 3
_MAX_CHUNK_CARDS = 12
_LAST_CHUNK_BOOST = 2
_LAST_CHUNK_CAP = 8
_OVERLAP_SENTENCES = 2


@dataclass(frozen=True, slots=True)
class Chunk:
    """A contiguous piece of a long document."""

    content: str
    index: int  # 0-based position in the document
    char_count: int  # len(content), precomputed


def _overlap_text(chunk_text: str) -> str:
    # Text without . ! or ? is one "sentence", so the whole chunk carries over.
    sentences = split_sentences(chunk_text)
    tail = ". ".join(sentences[-_OVERLAP_SENTENCES:])
    if len(sentences) > _OVERLAP_SENTENCES:
        tail += "."
    return tail


def is_long_document(text: str, config: AppConfig | None = None) -> bool:
    """True if text should go through chunked generation."""
    cfg = config if config is not None else AppConfig()
    return len(text) > cfg.long_document_threshold


def chunk_content(text: str, config: AppConfig | None = None) -> list[Chunk]:
    """Split text into overlapping chunks at paragraph boundaries.

    A chunk is closed when adding the next paragraph (plus the overlap
    allowance) would exceed the target size and the chunk has already
    reached the minimum size. Chunks below the minimum are dropped.

    Args:
        text: Full document text.
        config: Supplies chunk_target_size, chunk_overlap, chunk_min_size.

    Returns:
        Chunks in document order, indexed from 0.
    """
    cfg = config if config is not None else AppConfig()
    target = cfg.chunk_target_size
    overlap = cfg.chunk_overlap
    min_size = cfg.chunk_min_size

    pieces: list[str] = []
    current = ""

    for paragraph in split_paragraphs(text):
        would_exceed = len(current) + len(paragraph) + overlap > target
        if would_exceed and len(current) >= min_size:
            pieces.append(current.strip())
            current = _overlap_text(current) + "\n\n" + paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph

    if len(current.strip()) >= min_size:
        pieces.append(current.strip())

    chunks = [
        Chunk(content=piece, index=i, char_count=len(piece))
        for i, piece in enumerate(p for p in pieces if len(p) >= min_size)
    ]

    logger.info(
        "Split %d chars into %d chunks (target=%d, overlap=%d, min=%d)",
        len(text),
        len(chunks),
        target,
        overlap,
        min_size,
    )
    return chunks


def calculate_chunk_card_count(
    analysis: ContentAnalysis,
    base_count: int,
    *,
    is_last_chunk: bool = False,
) -> int:
    """Number of cards to request for one chunk.

    Scales the per-chunk base by word density (capped at 1.5x), boosts
    complex chunks by 1.2x, clamps to [3, 12], and gives a short last
    chunk two extra cards (capped at 8).
    """
    count = max(base_count, _MIN_CHUNK_CARDS)

    density = min(1.5, analysis.word_count / 300)
    count = round_half_up(count * density)

    if analysis.complexity == Complexity.COMPLEX:
        count = round_half_up(count * 1.2)

    count = max(_MIN_CHUNK_CARDS, min(_MAX_CHUNK_CARDS, count))

    if is_last_chunk and count < 5:
        count = min(count + _LAST_CHUNK_BOOST, _LAST_CHUNK_CAP)

    return count
