"""Heuristic content analysis for neuroleaf.

Scores raw text to recommend a flashcard count and difficulty:
word/sentence/paragraph counts, regex-based educational concept
extraction, metadata detection, and content type classification.
All functions are pure.
"""

from __future__ import annotations

import logging
import re

from neuroleaf.schemas import (
    Complexity,
    ConceptImportance,
    ConceptType,
    ContentAnalysis,
    ContentMetadata,
    ContentStructure,
    ContentType,
    Difficulty,
    EducationalConcept,
)
from neuroleaf.textutil import round_half_up, split_paragraphs, split_sentences

logger = logging.getLogger(__name__)

_TECHNICAL_TERM_RE = re.compile(r"[A-Z][a-z]+(?:[A-Z][a-z]+)+|[a-z]+(?:-[a-z]+)+")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?%?|\$\d+")
_BULLET_LINE_RE = re.compile(r"^\s*[-*•]\s+", re.MULTILINE)

_DEFINITION_PATTERNS = [
    re.compile(
        r"(?:^|\n)\s*(.+?)\s+(?:is|are|means|refers to|defined as)\s+(.+?)(?:\.|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(r"(?:^|\n)\s*(.+?):\s*(.+?)(?:\n|$)", re.MULTILINE),
    re.compile(r"Definition of (.+?):\s*(.+?)(?:\n|$)", re.MULTILINE | re.IGNORECASE),
    re.compile(r"(.+?)\s+can be defined as\s+(.+?)(?:\.|$)", re.MULTILINE | re.IGNORECASE),
]

_PROCESS_PATTERNS = [
    re.compile(
        r"(?:steps?|process|procedure|method|algorithm)(?:\s+(?:to|for|of))?\s+(.+?):"
        r"\s*\n((?:\d+\.|[-*]\s).+?)(?:\n\n|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(
        r"How to (.+?):\s*\n((?:\d+\.|[-*]\s).+?)(?:\n\n|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
]

_RELATIONSHIP_PATTERNS = [
    re.compile(
        r"(.+?)\s+(?:causes?|leads? to|results? in|affects?)\s+(.+?)(?:\.|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(
        r"(.+?)\s+(?:depends on|relies on|requires?)\s+(.+?)(?:\.|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(
        r"The relationship between (.+?) and (.+?) is (.+?)(?:\.|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
]

_EXAMPLE_PATTERNS = [
    re.compile(
        r"(?:for example|such as|including|like)\s+(.+?)(?:\.|,|$)",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(r"Examples?:\s*(.+?)(?:\n|$)", re.MULTILINE | re.IGNORECASE),
]

_METADATA_PATTERNS = [
    re.compile(r"^page\s*\d+", re.IGNORECASE),
    re.compile(r"^(?:lecture|slide)\s*\d+", re.IGNORECASE),
    re.compile(r"main topics covered", re.IGNORECASE),
    re.compile(r"overview of", re.IGNORECASE),
    re.compile(r"introduction to", re.IGNORECASE),
    re.compile(r"^topics?$", re.IGNORECASE),
    re.compile(r"^outline$", re.IGNORECASE),
    re.compile(r"^agenda$", re.IGNORECASE),
    re.compile(r"learning objectives", re.IGNORECASE),
    re.compile(r"what (?:are|is) the main", re.IGNORECASE),
    re.compile(r"(?:next|previous|back)", re.IGNORECASE),
]

_HIGH_IMPORTANCE_PATTERNS = [
    re.compile(r"(?:key|important|critical|essential|fundamental|core|primary)", re.IGNORECASE),
    re.compile(r"definition|principle|law|theory|concept", re.IGNORECASE),
    re.compile(r"formula|equation|theorem", re.IGNORECASE),
]

_GENERIC_TERMS = (
    "introduction",
    "overview",
    "summary",
    "conclusion",
    "definition",
    "concept",
    "topic",
    "subject",
)

_IMPORTANCE_ORDER = {
    ConceptImportance.HIGH: 3,
    ConceptImportance.MEDIUM: 2,
    ConceptImportance.LOW: 1,
}

_MAX_CONCEPTS = 30
_MIN_CARDS = 8
_MAX_CARDS = 25


# ============================================================
# Concept extraction
# ============================================================


def is_metadata(text: str) -> bool:
    """Check if text is a structural/navigational element, not content."""
    return any(p.search(text) for p in _METADATA_PATTERNS)


def assess_concept_importance(
    concept: str,
    definition: str,
    full_text: str,
) -> ConceptImportance:
    """Rate a concept by keyword cues, then by how often it recurs."""
    if any(
        p.search(concept) or p.search(definition)
        for p in _HIGH_IMPORTANCE_PATTERNS
    ):
        return ConceptImportance.HIGH

    frequency = full_text.lower().count(concept.lower()) if concept else 0
    if frequency > 3:
        return ConceptImportance.HIGH
    if frequency > 1:
        return ConceptImportance.MEDIUM
    return ConceptImportance.LOW


def _is_quality_concept(concept: EducationalConcept) -> bool:
    if concept.type == ConceptType.DEFINITION and (
        not concept.definition or len(concept.definition) < 15
    ):
        return False

    if len(concept.concept.split(" ")) < 2 and len(concept.concept) < 8:
        return False

    lowered = concept.concept.lower()
    return not any(term in lowered for term in _GENERIC_TERMS)


def extract_educational_concepts(text: str) -> list[EducationalConcept]:
    """Extract definitions, processes, relationships and examples.

    Metadata-like candidates are skipped, duplicates (case-insensitive)
    collapse to the first occurrence, low-importance and generic concepts
    are dropped, and the result is ordered high before medium, top 30.
    """
    concepts: list[EducationalConcept] = []

    for pattern in _DEFINITION_PATTERNS:
        for match in pattern.finditer(text):
            concept = (match.group(1) or "").strip()
            definition = (match.group(2) or "").strip()
            if (
                concept
                and definition
                and not is_metadata(concept)
                and len(concept) > 2
                and len(definition) > 10
            ):
                concepts.append(
                    EducationalConcept(
                        concept=concept,
                        definition=definition,
                        context=match.group(0).strip(),
                        importance=assess_concept_importance(concept, definition, text),
                        type=ConceptType.DEFINITION,
                    )
                )

    for pattern in _PROCESS_PATTERNS:
        for match in pattern.finditer(text):
            concept = (match.group(1) or "").strip()
            steps = (match.group(2) or "").strip()
            if concept and steps and not is_metadata(concept):
                concepts.append(
                    EducationalConcept(
                        concept=f"How to {concept}",
                        context=match.group(0).strip(),
                        importance=ConceptImportance.MEDIUM,
                        type=ConceptType.PROCESS,
                    )
                )

    for pattern in _RELATIONSHIP_PATTERNS:
        for match in pattern.finditer(text):
            first = (match.group(1) or "").strip()
            second = (match.group(2) or "").strip()
            if first and second and not is_metadata(first) and not is_metadata(second):
                concepts.append(
                    EducationalConcept(
                        concept=f"{first} and {second} relationship",
                        context=match.group(0).strip(),
                        importance=assess_concept_importance(first, second, text),
                        type=ConceptType.RELATIONSHIP,
                    )
                )

    for pattern in _EXAMPLE_PATTERNS:
        for match in pattern.finditer(text):
            example = (match.group(1) or "").strip()
            if example and not is_metadata(example) and len(example) > 5:
                concepts.append(
                    EducationalConcept(
                        concept=f"Example: {example}",
                        context=match.group(0).strip(),
                        importance=ConceptImportance.LOW,
                        type=ConceptType.EXAMPLE,
                    )
                )

    seen: set[str] = set()
    unique: list[EducationalConcept] = []
    for concept in concepts:
        key = concept.concept.lower()
        if key not in seen:
            seen.add(key)
            unique.append(concept)

    kept = [
        c for c in unique
        if c.importance in (ConceptImportance.HIGH, ConceptImportance.MEDIUM)
        and _is_quality_concept(c)
    ]
    kept.sort(key=lambda c: _IMPORTANCE_ORDER[c.importance], reverse=True)
    return kept[:_MAX_CONCEPTS]


# ============================================================
# Content type detection
# ============================================================


def analyze_content_structure(text: str) -> ContentStructure:
    """Count structural features (bullets, headings, short lines, ...)."""
    lines = text.split("\n")
    return ContentStructure(
        bullet_points=len(re.findall(r"^\s*[-*•]\s", text, re.MULTILINE)),
        numbered_lists=len(re.findall(r"^\s*\d+[.)]\s", text, re.MULTILINE)),
        headings=len(
            re.findall(r"^#{1,6}\s|^[A-Z][^\n]*\n[=-]{3,}", text, re.MULTILINE)
        ),
        short_lines=sum(1 for line in lines if 0 < len(line.strip()) < 50),
        long_paragraphs=len(re.findall(r"[^\n]{200,}", text)),
        code_blocks=len(re.findall(r"```[\s\S]*?```|`[^`]+`", text)),
        citations=len(re.findall(r"\[[0-9]+\]|\([0-9]{4}\)|et al\.", text)),
    )


def _score_lecture_slides(text: str, s: ContentStructure) -> int:
    score = 0
    if "slide" in text:
        score += 3
    if "lecture" in text:
        score += 2
    if re.search(r"\b(?:slide|page)\s+\d+", text):
        score += 2
    if s.short_lines > s.long_paragraphs * 2:
        score += 2
    if s.bullet_points > 5:
        score += 1
    if s.headings > 3:
        score += 1
    if "objectives" in text or "overview" in text:
        score += 1
    return score


def _score_academic_paper(text: str, s: ContentStructure) -> int:
    score = 0
    if "abstract" in text:
        score += 3
    if "methodology" in text or "methods" in text:
        score += 2
    if "references" in text or "bibliography" in text:
        score += 2
    if "conclusion" in text and "introduction" in text:
        score += 2
    academic = re.findall(r"\b(?:hypothesis|research|study|analysis|findings|results)\b", text)
    if len(academic) > 3:
        score += 2
    if s.citations > 5:
        score += 2
    if s.long_paragraphs > s.short_lines:
        score += 1
    if re.search(r"\b(?:figure|table)\s+\d+", text, re.IGNORECASE):
        score += 1
    return score


def _score_textbook(text: str, s: ContentStructure) -> int:
    score = 0
    if "exercises" in text or "problems" in text:
        score += 3
    if "unit" in text:
        score += 1
    if "example" in text and "solution" in text:
        score += 2
    educational = re.findall(r"\b(?:definition|theorem|principle|law)\b", text, re.IGNORECASE)
    if len(educational) > 2:
        score += 2
    reminders = re.findall(r"\b(?:recall|remember|note that|important)\b", text, re.IGNORECASE)
    if len(reminders) > 1:
        score += 1
    if s.numbered_lists > 2:
        score += 1
    if s.headings > 2 and s.bullet_points > 3:
        score += 1
    return score


def _score_documentation(text: str, s: ContentStructure) -> int:
    score = 0
    if "api" in text or "function" in text:
        score += 3
    if "parameter" in text or "returns" in text:
        score += 2
    if "usage" in text or "example" in text:
        score += 1
    if s.code_blocks > 2:
        score += 2
    if len(re.findall(r"\b(?:class|method|property|attribute)\b", text)) > 3:
        score += 1
    tech = re.findall(
        r"\b(?:syntax|implementation|configuration|install)\b", text, re.IGNORECASE
    )
    if len(tech) > 1:
        score += 1
    return score


def _score_notes(text: str, s: ContentStructure) -> int:
    score = 0
    if "notes" in text and len(text) < 2000:
        score += 2
    if s.bullet_points > s.long_paragraphs * 2:
        score += 2
    informal = re.findall(
        r"\b(?:remember|todo|note|important|key point)\b", text, re.IGNORECASE
    )
    if len(informal) > 2:
        score += 1
    abbreviations = re.findall(r"\b(?:i\.e\.|e\.g\.|etc\.)", text, re.IGNORECASE)
    if len(abbreviations) > 1:
        score += 1
    if s.short_lines > 10 and s.long_paragraphs < 3:
        score += 1
    return score


def score_content_types(text: str) -> dict[ContentType, int]:
    """Score every candidate content type. general_text always scores 1."""
    lowered = text.lower()
    structure = analyze_content_structure(text)
    return {
        ContentType.LECTURE_SLIDES: _score_lecture_slides(lowered, structure),
        ContentType.ACADEMIC_PAPER: _score_academic_paper(lowered, structure),
        ContentType.TEXTBOOK_CHAPTER: _score_textbook(lowered, structure),
        ContentType.DOCUMENTATION: _score_documentation(lowered, structure),
        ContentType.NOTES: _score_notes(lowered, structure),
        ContentType.GENERAL_TEXT: 1,
    }


def detect_content_type(text: str) -> ContentType:
    """Return the highest-scoring content type (first wins on ties)."""
    scores = score_content_types(text)
    detected = max(scores, key=lambda t: scores[t])
    logger.debug("Detected content type %s, scores: %s", detected, scores)
    return detected


# ============================================================
# Metadata
# ============================================================


def extract_content_metadata(text: str) -> ContentMetadata:
    """Collect page numbers, TOC lines, authors, citations, navigation."""
    return ContentMetadata(
        page_numbers=[
            m.group(0)
            for m in re.finditer(r"(?:page|p\.)\s*\d+", text, re.MULTILINE | re.IGNORECASE)
        ],
        table_of_contents=[
            m.group(0).strip()
            for m in re.finditer(r"^\s*\d+\.\s+[^.]+$", text, re.MULTILINE)
        ],
        author_info=[
            m.group(1).strip()
            for m in re.finditer(
                r"(?:author|by|written by):\s*(.+?)(?:\n|$)",
                text,
                re.MULTILINE | re.IGNORECASE,
            )
            if m.group(1) and m.group(1).strip()
        ],
        citations=[m.group(0) for m in re.finditer(r"\[\d+\]|\(\d{4}\)|et al\.", text)],
        navigation_elements=[
            m.group(0)
            for m in re.finditer(
                r"(?:next|previous|back to|continue to|see also)",
                text,
                re.MULTILINE | re.IGNORECASE,
            )
        ],
    )


# ============================================================
# Card count
# ============================================================


def apply_length_limits(base_count: float, word_count: int) -> float:
    """Cap a card count by the length band of the source text."""
    if word_count > 2000:
        return min(base_count, 25)
    if word_count > 1000:
        return min(base_count, 20)
    if word_count > 500:
        return min(base_count, 15)
    return min(base_count, 12)


def calculate_optimal_card_count(
    word_count: int,
    sentence_count: int,
    paragraph_count: int,
    concepts: list[EducationalConcept],
) -> int:
    """Recommend a card count in [8, 25] from concepts and text size."""
    high = sum(1 for c in concepts if c.importance == ConceptImportance.HIGH)
    medium = sum(1 for c in concepts if c.importance == ConceptImportance.MEDIUM)

    concept_based = high * 1.5 + medium * 0.8
    fallback = max(
        word_count // 200,
        sentence_count // 5,
        int(paragraph_count * 0.8),
    )

    recommended = apply_length_limits(max(concept_based, fallback), word_count)
    return max(_MIN_CARDS, min(_MAX_CARDS, round_half_up(recommended)))


# ============================================================
# analyze_content
# ============================================================


def _complexity_for(
    *,
    word_count: int,
    technical_terms: int,
    numbers_and_stats: int,
    paragraph_count: int,
    high_concepts: int,
) -> Complexity:
    score = (
        (word_count > 500)
        + (technical_terms > 10)
        + (numbers_and_stats > 5)
        + (paragraph_count > 5)
        + (high_concepts > 3)
    )
    if score >= 4:
        return Complexity.COMPLEX
    if score >= 2:
        return Complexity.MODERATE
    return Complexity.SIMPLE


_DIFFICULTY_BY_COMPLEXITY = {
    Complexity.COMPLEX: Difficulty.HARD,
    Complexity.MODERATE: Difficulty.MEDIUM,
    Complexity.SIMPLE: Difficulty.EASY,
}


def analyze_content(text: str) -> ContentAnalysis:
    """Run the full heuristic analysis over source text.

    Args:
        text: Raw source text.

    Returns:
        Immutable ContentAnalysis with counts, concepts, content type,
        metadata, complexity and a recommended card count.
    """
    word_count = len(text.split())
    sentences = split_sentences(text)
    paragraphs = split_paragraphs(text)

    technical_terms = len(_TECHNICAL_TERM_RE.findall(text))
    numbers_and_stats = len(_NUMBER_RE.findall(text))
    lists = len(_BULLET_LINE_RE.findall(text))

    concepts = extract_educational_concepts(text)
    content_type = detect_content_type(text)
    metadata = extract_content_metadata(text)

    high_concepts = sum(1 for c in concepts if c.importance == ConceptImportance.HIGH)
    complexity = _complexity_for(
        word_count=word_count,
        technical_terms=technical_terms,
        numbers_and_stats=numbers_and_stats,
        paragraph_count=len(paragraphs),
        high_concepts=high_concepts,
    )

    recommended = calculate_optimal_card_count(
        word_count, len(sentences), len(paragraphs), concepts
    )

    logger.info(
        "Content analysis: %d words, %d sentences, %d paragraphs, %s, %s, "
        "%d concepts (%d high), %d metadata elements, %d cards recommended",
        word_count,
        len(sentences),
        len(paragraphs),
        complexity.value,
        content_type.value,
        len(concepts),
        high_concepts,
        metadata.element_count,
        recommended,
    )

    return ContentAnalysis(
        word_count=word_count,
        char_count=len(text),
        sentence_count=len(sentences),
        paragraph_count=len(paragraphs),
        complexity=complexity,
        technical_terms=technical_terms,
        numbers_and_stats=numbers_and_stats,
        lists=lists,
        recommended_card_count=recommended,
        estimated_difficulty=_DIFFICULTY_BY_COMPLEXITY[complexity],
        educational_concepts=concepts,
        content_type=content_type,
        metadata=metadata,
    )
