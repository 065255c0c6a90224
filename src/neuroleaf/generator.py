"""Flashcard generation pipeline for neuroleaf.

Routes a request to one of three paths:

- image: vision prompt over a base64 image
- long document: chunk, prompt per chunk, then validate and deduplicate
- standard: one prompt sized by the content analysis

Token usage and cost are accumulated in an immutable CostTracker.
"""

from __future__ import annotations

import logging
import time

from neuroleaf.analyzer import analyze_content
from neuroleaf.chunker import calculate_chunk_card_count, chunk_content, is_long_document
from neuroleaf.config import AppConfig
from neuroleaf.cost import CostRecord, CostTracker
from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient, LLMResponse
from neuroleaf.parser import parse_flashcards_response
from neuroleaf.prompts import build_chunk_prompt, build_flashcard_prompt, build_image_prompt
from neuroleaf.quality import deduplicate_and_optimize, validate_flashcard_quality
from neuroleaf.schemas import (
    Flashcard,
    GenerateFlashcardsRequest,
    GenerationMetadata,
    GenerationResult,
)

logger = logging.getLogger(__name__)

_IMAGE_MAX_TOKENS = 2000
_FALLBACK_MAX_CARDS = 10
_MIN_CARDS_PER_CHUNK = 5


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _record(tracker: CostTracker, response: LLMResponse) -> CostTracker:
    return tracker.add(
        CostRecord(
            model=response.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            cost_usd=response.estimated_cost,
        )
    )


def _metadata(
    tracker: CostTracker,
    *,
    baseline: int,
    start: float,
    model: str,
    chunks_processed: int = 0,
    vision: bool = False,
) -> GenerationMetadata:
    # Only records added during this run count toward its metadata
    records = tracker.records[baseline:]
    return GenerationMetadata(
        tokens_used=sum(r.input_tokens + r.output_tokens for r in records),
        estimated_cost=sum(r.cost_usd for r in records),
        processing_time=_elapsed_ms(start),
        model=model,
        chunks_processed=chunks_processed,
        vision=vision,
    )


def generate_flashcards(
    request: GenerateFlashcardsRequest,
    *,
    config: AppConfig | None = None,
    client: LLMClient | None = None,
    cost_tracker: CostTracker | None = None,
) -> tuple[GenerationResult, CostTracker]:
    """Generate flashcards for a request.

    Args:
        request: Validated generation request.
        config: Application configuration (defaults if None).
        client: LLM client; built from config if None.
        cost_tracker: Existing tracker to accumulate costs into.

    Returns:
        Tuple of (GenerationResult, updated CostTracker).

    Raises:
        AIServiceError: If the single call of the standard or image path fails.
        RuntimeError: If the cost budget is already exhausted.
    """
    cfg = config if config is not None else AppConfig()
    llm = client if client is not None else LLMClient(cfg)
    tracker = cost_tracker if cost_tracker is not None else CostTracker(
        budget_limit=cfg.cost_budget_limit
    )

    if not tracker.is_within_budget:
        raise RuntimeError(
            f"Cost budget exceeded: ${tracker.total_cost:.4f} / "
            f"${tracker.budget_limit:.2f}"
        )

    if request.is_image and request.image_data:
        logger.info("Image detected, using vision processing")
        return generate_from_image(request, client=llm, cost_tracker=tracker)

    if is_long_document(request.content, cfg):
        logger.info(
            "Long document detected (%d chars), using chunked processing",
            len(request.content),
        )
        return generate_from_long_document(
            request, config=cfg, client=llm, cost_tracker=tracker
        )

    return generate_standard(request, client=llm, cost_tracker=tracker)


def generate_standard(
    request: GenerateFlashcardsRequest,
    *,
    client: LLMClient,
    cost_tracker: CostTracker,
) -> tuple[GenerationResult, CostTracker]:
    """Single-prompt generation; the analysis decides the card count."""
    start = time.monotonic()
    analysis = analyze_content(request.content)

    sized = request.model_copy(
        update={"number_of_cards": analysis.recommended_card_count}
    )
    logger.info(
        "Standard processing: requested %d cards, using recommended %d",
        request.number_of_cards,
        sized.number_of_cards,
    )

    response = client.generate(build_flashcard_prompt(sized, analysis))
    tracker = _record(cost_tracker, response)

    cards = parse_flashcards_response(response.text)
    validated = validate_flashcard_quality(cards, analysis)

    result = GenerationResult(
        flashcards=validated,
        content_analysis=analysis,
        metadata=_metadata(
            tracker,
            baseline=len(cost_tracker.records),
            start=start,
            model=response.model,
        ),
    )
    return result, tracker


def generate_from_long_document(
    request: GenerateFlashcardsRequest,
    *,
    config: AppConfig,
    client: LLMClient,
    cost_tracker: CostTracker,
) -> tuple[GenerationResult, CostTracker]:
    """Chunked generation for documents above the long-document threshold.

    A failing chunk is logged and skipped. If no card survives validation
    and deduplication, one fallback prompt over the whole content is tried.
    """
    start = time.monotonic()
    tracker = cost_tracker
    analysis = analyze_content(request.content)
    chunks = chunk_content(request.content, config)

    target_total = min(
        max(analysis.recommended_card_count, request.number_of_cards),
        config.max_document_cards,
    )
    base_per_chunk = max(_MIN_CARDS_PER_CHUNK, target_total // max(len(chunks), 1))

    logger.info(
        "Long document: %d chars, %d chunks, target %d cards (%d per chunk)",
        len(request.content),
        len(chunks),
        target_total,
        base_per_chunk,
    )

    all_cards: list[Flashcard] = []
    for i, chunk in enumerate(chunks):
        if not tracker.is_within_budget:
            logger.warning("Budget exceeded, stopping chunk processing")
            break

        try:
            chunk_analysis = analyze_content(chunk.content)
            card_count = calculate_chunk_card_count(
                chunk_analysis,
                base_per_chunk,
                is_last_chunk=i == len(chunks) - 1,
            )
            chunk_request = request.model_copy(
                update={"content": chunk.content, "number_of_cards": card_count}
            )
            prompt = build_chunk_prompt(
                chunk_request, chunk_analysis, chunk, i + 1, len(chunks)
            )
            response = client.generate(prompt)
        except (AIServiceError, ValueError) as e:
            logger.warning("Error processing chunk %d/%d: %s", i + 1, len(chunks), e)
            continue

        tracker = _record(tracker, response)
        chunk_cards = parse_flashcards_response(response.text)
        all_cards.extend(chunk_cards)
        logger.info(
            "Chunk %d/%d completed: %d cards", i + 1, len(chunks), len(chunk_cards)
        )

        if i < len(chunks) - 1 and config.chunk_delay > 0:
            time.sleep(config.chunk_delay)

    validated = validate_flashcard_quality(all_cards, analysis)
    optimized = deduplicate_and_optimize(validated, target_total)

    logger.info(
        "Long document completed: %d generated, %d validated, %d final",
        len(all_cards),
        len(validated),
        len(optimized),
    )

    if not optimized:
        logger.warning("No flashcards generated from chunks, attempting fallback")
        fallback_request = request.model_copy(
            update={
                "number_of_cards": min(_FALLBACK_MAX_CARDS, request.number_of_cards)
            }
        )
        try:
            response = client.generate(
                build_flashcard_prompt(fallback_request, analysis)
            )
        except AIServiceError as e:
            logger.error("Fallback processing also failed: %s", e)
        else:
            tracker = _record(tracker, response)
            optimized = parse_flashcards_response(response.text)
            logger.info("Fallback processing generated %d cards", len(optimized))

    result = GenerationResult(
        flashcards=optimized,
        content_analysis=analysis,
        metadata=_metadata(
            tracker,
            baseline=len(cost_tracker.records),
            start=start,
            model=client.model,
            chunks_processed=len(chunks),
        ),
    )
    return result, tracker


def generate_from_image(
    request: GenerateFlashcardsRequest,
    *,
    client: LLMClient,
    cost_tracker: CostTracker,
) -> tuple[GenerationResult, CostTracker]:
    """Vision generation from a base64 image. No content analysis is done."""
    start = time.monotonic()
    if not request.image_data:
        raise ValueError("image_data is required for image generation")

    response = client.generate_with_image(
        build_image_prompt(request),
        request.image_data,
        media_type=request.image_media_type,
        max_tokens=_IMAGE_MAX_TOKENS,
    )
    tracker = _record(cost_tracker, response)

    cards = parse_flashcards_response(response.text)
    validated = validate_flashcard_quality(cards)

    logger.info(
        "Image processing completed: %d raw cards, %d validated",
        len(cards),
        len(validated),
    )

    result = GenerationResult(
        flashcards=validated,
        metadata=_metadata(
            tracker,
            baseline=len(cost_tracker.records),
            start=start,
            model=response.model,
            vision=True,
        ),
    )
    return result, tracker
