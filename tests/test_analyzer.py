"""Tests for neuroleaf.analyzer.

Tests cover:
- is_metadata() / assess_concept_importance()
- extract_educational_concepts(): filtering, dedup, ordering
- Content structure counts and content type detection
- Metadata extraction
- Card count recommendation and length limits
- analyze_content() end to end
"""

from __future__ import annotations

import pytest

from neuroleaf.analyzer import (
    analyze_content,
    analyze_content_structure,
    apply_length_limits,
    assess_concept_importance,
    calculate_optimal_card_count,
    detect_content_type,
    extract_content_metadata,
    extract_educational_concepts,
    is_metadata,
    score_content_types,
)
from neuroleaf.schemas import (
    Complexity,
    ConceptImportance,
    ConceptType,
    ContentType,
    Difficulty,
    EducationalConcept,
)

PLAIN_LINE = (
    "The quick brown fox jumps over the lazy dog while the farmer watches from a distance."
)


def _concept(importance: ConceptImportance) -> EducationalConcept:
    return EducationalConcept(
        concept="Some long concept name",
        definition="A definition that is long enough",
        context="context",
        importance=importance,
        type=ConceptType.DEFINITION,
    )


# ============================================================
# Concept helpers
# ============================================================


class TestIsMetadata:
    @pytest.mark.parametrize(
        "text",
        ["Page 3", "Lecture 5", "slide 2", "Agenda", "Outline", "Learning Objectives", "next"],
    )
    def test_metadata(self, text: str) -> None:
        assert is_metadata(text) is True

    @pytest.mark.parametrize("text", ["Photosynthesis", "Calvin cycle", "Mitochondria"])
    def test_content(self, text: str) -> None:
        assert is_metadata(text) is False


class TestAssessConceptImportance:
    def test_keyword_in_concept_is_high(self) -> None:
        assert (
            assess_concept_importance("Key enzyme", "speeds reactions", "text")
            == ConceptImportance.HIGH
        )

    def test_keyword_in_definition_is_high(self) -> None:
        assert (
            assess_concept_importance("Newton", "a fundamental unit of force", "text")
            == ConceptImportance.HIGH
        )

    def test_frequent_concept_is_high(self) -> None:
        text = "Mitosis. mitosis. MITOSIS. Mitosis again."
        assert assess_concept_importance("mitosis", "cell split", text) == ConceptImportance.HIGH

    def test_repeated_concept_is_medium(self) -> None:
        text = "Mitosis happens. Mitosis ends."
        assert assess_concept_importance("mitosis", "cell split", text) == ConceptImportance.MEDIUM

    def test_single_mention_is_low(self) -> None:
        text = "Mitosis happens once."
        assert assess_concept_importance("mitosis", "cell split", text) == ConceptImportance.LOW


# ============================================================
# extract_educational_concepts Tests
# ============================================================


class TestExtractEducationalConcepts:
    def test_extracts_high_importance_definition(self) -> None:
        text = "Photosynthesis is the key process that converts light energy into sugar."
        concepts = extract_educational_concepts(text)
        match = [c for c in concepts if c.concept == "Photosynthesis"]
        assert len(match) == 1
        assert match[0].type == ConceptType.DEFINITION
        assert match[0].importance == ConceptImportance.HIGH
        assert match[0].definition is not None

    def test_short_single_word_concept_dropped(self) -> None:
        text = "ATP is a molecule storing important energy for cells."
        assert all(c.concept != "ATP" for c in extract_educational_concepts(text))

    def test_metadata_candidates_skipped(self) -> None:
        text = "Page 4: an important overview of the principal topics"
        assert all(not c.concept.startswith("Page") for c in extract_educational_concepts(text))

    def test_process_concept_is_medium(self) -> None:
        text = "Steps to brew coffee:\n1. Boil water\n2. Pour slowly\n\n"
        concepts = extract_educational_concepts(text)
        process = [c for c in concepts if c.type == ConceptType.PROCESS]
        assert [c.concept for c in process] == ["How to brew coffee"]
        assert process[0].importance == ConceptImportance.MEDIUM

    def test_high_sorted_before_medium(self) -> None:
        text = (
            "Steps to brew coffee:\n1. Boil water\n2. Pour slowly\n\n"
            "Photosynthesis is the key process that converts light energy into sugar.\n"
        )
        concepts = extract_educational_concepts(text)
        importances = [c.importance for c in concepts]
        assert importances == sorted(
            importances, key=lambda i: i == ConceptImportance.MEDIUM
        )
        assert importances[0] == ConceptImportance.HIGH

    def test_duplicates_collapse_case_insensitively(self) -> None:
        text = (
            "Photosynthesis is the key process that converts light energy.\n"
            "photosynthesis is a fundamental reaction in green plants.\n"
        )
        concepts = extract_educational_concepts(text)
        names = [c.concept.lower() for c in concepts]
        assert names.count("photosynthesis") == 1

    def test_no_low_importance_concepts(self) -> None:
        text = "For example, enzymes such as amylase. Examples: pepsin and lipase"
        concepts = extract_educational_concepts(text)
        assert all(c.importance != ConceptImportance.LOW for c in concepts)

    def test_at_most_thirty(self) -> None:
        lines = [
            f"Compound{i} alpha is an essential molecule number {i} in biology."
            for i in range(40)
        ]
        assert len(extract_educational_concepts("\n".join(lines))) <= 30


# ============================================================
# Structure and content type Tests
# ============================================================


class TestContentStructure:
    def test_counts(self) -> None:
        text = "# Title\n- first\n- second\n1. one\n```code```\n"
        s = analyze_content_structure(text)
        assert s.headings == 1
        assert s.bullet_points == 2
        assert s.numbered_lists == 1
        assert s.code_blocks == 1
        assert s.short_lines == 5


class TestDetectContentType:
    def test_general_text_when_nothing_scores(self) -> None:
        scores = score_content_types(PLAIN_LINE)
        assert scores[ContentType.GENERAL_TEXT] == 1
        assert all(v == 0 for t, v in scores.items() if t != ContentType.GENERAL_TEXT)
        assert detect_content_type(PLAIN_LINE) == ContentType.GENERAL_TEXT

    def test_documentation(self) -> None:
        text = (
            "The API function takes a parameter and returns a value for each call. "
            "```x``` `y` `z`"
        )
        assert detect_content_type(text) == ContentType.DOCUMENTATION

    def test_lecture_slides(self) -> None:
        text = "Lecture 3\nSlide 1\n- cells\n- tissues\n- organs\nSlide 2\n- overview"
        assert detect_content_type(text) == ContentType.LECTURE_SLIDES

    def test_academic_paper(self) -> None:
        text = (
            "Abstract. This study uses a new methodology. Our research analysis shows "
            "findings and results [1] [2] [3] [4] [5] [6]. Introduction and conclusion "
            "follow. References."
        )
        assert detect_content_type(text) == ContentType.ACADEMIC_PAPER


# ============================================================
# Metadata Tests
# ============================================================


class TestExtractContentMetadata:
    def test_collects_elements(self) -> None:
        text = "See page 12 and p. 4. Smith et al. (2020) [3]\nAuthor: Jane Doe\nNext"
        meta = extract_content_metadata(text)
        assert meta.page_numbers == ["page 12", "p. 4"]
        assert meta.citations == ["et al.", "(2020)", "[3]"]
        assert meta.author_info == ["Jane Doe"]
        assert meta.navigation_elements == ["Next"]
        assert meta.element_count == 7

    def test_table_of_contents_lines(self) -> None:
        meta = extract_content_metadata("1. Cells\n2. Tissues\n")
        assert meta.table_of_contents == ["1. Cells", "2. Tissues"]


# ============================================================
# Card count Tests
# ============================================================


class TestCardCount:
    @pytest.mark.parametrize(
        ("base", "words", "expected"),
        [(30, 2500, 25), (30, 1500, 20), (30, 600, 15), (30, 100, 12), (5, 100, 5)],
    )
    def test_length_limits(self, base: float, words: int, expected: float) -> None:
        assert apply_length_limits(base, words) == expected

    def test_minimum_is_eight(self) -> None:
        assert calculate_optimal_card_count(100, 5, 1, []) == 8

    def test_maximum_is_twenty_five(self) -> None:
        assert calculate_optimal_card_count(5000, 500, 50, []) == 25

    def test_concept_based_count(self) -> None:
        concepts = [_concept(ConceptImportance.HIGH) for _ in range(10)]
        assert calculate_optimal_card_count(600, 10, 2, concepts) == 15

    def test_half_rounds_up(self) -> None:
        concepts = [_concept(ConceptImportance.HIGH) for _ in range(7)]
        assert calculate_optimal_card_count(600, 10, 2, concepts) == 11


# ============================================================
# analyze_content Tests
# ============================================================


class TestAnalyzeContent:
    def test_counts(self, biology_text: str) -> None:
        analysis = analyze_content(biology_text)
        assert analysis.word_count == len(biology_text.split())
        assert analysis.char_count == len(biology_text)
        assert analysis.paragraph_count == 1
        assert analysis.sentence_count == 8

    def test_short_text_is_simple_and_easy(self, biology_text: str) -> None:
        analysis = analyze_content(biology_text)
        assert analysis.complexity == Complexity.SIMPLE
        assert analysis.estimated_difficulty == Difficulty.EASY
        assert 8 <= analysis.recommended_card_count <= 25

    def test_finds_concepts(self, biology_text: str) -> None:
        analysis = analyze_content(biology_text)
        assert analysis.educational_concepts
        assert analysis.high_importance_concepts
