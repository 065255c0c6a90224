"""Pydantic schemas for neuroleaf flashcard generation.

Defines the core data models: Flashcard, ContentAnalysis and its parts,
the generation request, and GenerationResult.
All models use frozen=True for immutability.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class Difficulty(StrEnum):
    """Flashcard difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Complexity(StrEnum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ContentType(StrEnum):
    """Detected kind of source document (declaration order breaks score ties)."""

    LECTURE_SLIDES = "lecture_slides"
    ACADEMIC_PAPER = "academic_paper"
    TEXTBOOK_CHAPTER = "textbook_chapter"
    DOCUMENTATION = "documentation"
    NOTES = "notes"
    GENERAL_TEXT = "general_text"
    UNKNOWN = "unknown"


class ConceptImportance(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConceptType(StrEnum):
    DEFINITION = "definition"
    PROCESS = "process"
    RELATIONSHIP = "relationship"
    EXAMPLE = "example"
    PRINCIPLE = "principle"


class Flashcard(BaseModel, frozen=True):
    """A single front/back flashcard. Immutable."""

    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM


class EducationalConcept(BaseModel, frozen=True):
    """A concept extracted from source text that is worth a flashcard."""

    concept: str
    definition: str | None = None
    context: str
    importance: ConceptImportance
    type: ConceptType
    prerequisites: list[str] = Field(default_factory=list)


class ContentMetadata(BaseModel, frozen=True):
    """Structural elements of a document that should NOT become flashcards."""

    titles: list[str] = Field(default_factory=list)
    headings: list[str] = Field(default_factory=list)
    page_numbers: list[str] = Field(default_factory=list)
    chapter_references: list[str] = Field(default_factory=list)
    table_of_contents: list[str] = Field(default_factory=list)
    author_info: list[str] = Field(default_factory=list)
    citations: list[str] = Field(default_factory=list)
    navigation_elements: list[str] = Field(default_factory=list)

    @property
    def element_count(self) -> int:
        """Total number of metadata elements across all categories."""
        return (
            len(self.titles)
            + len(self.headings)
            + len(self.page_numbers)
            + len(self.chapter_references)
            + len(self.table_of_contents)
            + len(self.author_info)
            + len(self.citations)
            + len(self.navigation_elements)
        )


class ContentStructure(BaseModel, frozen=True):
    """Line-level structural counts used for content type detection."""

    bullet_points: int = 0
    numbered_lists: int = 0
    headings: int = 0
    short_lines: int = 0
    long_paragraphs: int = 0
    code_blocks: int = 0
    citations: int = 0


class ContentAnalysis(BaseModel, frozen=True):
    """Heuristic analysis of source text."""

    word_count: int
    char_count: int
    sentence_count: int
    paragraph_count: int
    complexity: Complexity
    technical_terms: int
    numbers_and_stats: int
    lists: int
    recommended_card_count: int
    estimated_difficulty: Difficulty
    educational_concepts: list[EducationalConcept] = Field(default_factory=list)
    content_type: ContentType = ContentType.GENERAL_TEXT
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)

    @property
    def high_importance_concepts(self) -> list[EducationalConcept]:
        return [
            c for c in self.educational_concepts
            if c.importance == ConceptImportance.HIGH
        ]

    @property
    def medium_importance_concepts(self) -> list[EducationalConcept]:
        return [
            c for c in self.educational_concepts
            if c.importance == ConceptImportance.MEDIUM
        ]


class GenerateFlashcardsRequest(BaseModel, frozen=True):
    """Input to flashcard generation."""

    content: str = Field(min_length=1)
    number_of_cards: int = Field(default=100, ge=1, le=1000)
    difficulty: Difficulty | None = None
    language: str = "en"
    subject: str | None = None
    image_data: str | None = None
    is_image: bool = False
    image_media_type: str = "image/png"


class GenerationMetadata(BaseModel, frozen=True):
    """Usage and timing information for one generation run."""

    tokens_used: int = 0
    estimated_cost: float = 0.0
    processing_time: int = 0
    model: str
    chunks_processed: int = 0
    vision: bool = False


class GenerationResult(BaseModel, frozen=True):
    """Result of generating flashcards from a request."""

    flashcards: list[Flashcard] = Field(default_factory=list)
    content_analysis: ContentAnalysis | None = None
    metadata: GenerationMetadata

    @property
    def card_count(self) -> int:
        """Return the number of generated flashcards."""
        return len(self.flashcards)

    def cards_by_difficulty(self, difficulty: Difficulty) -> list[Flashcard]:
        """Filter cards by difficulty."""
        return [c for c in self.flashcards if c.difficulty == difficulty]


class EnhancementType(StrEnum):
    EXPLANATION = "explanation"
    EXAMPLES = "examples"
    SIMPLIFY = "simplify"
    ELABORATE = "elaborate"


class Audience(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContentEnhancementRequest(BaseModel, frozen=True):
    """Input to content enhancement."""

    content: str = Field(min_length=1)
    enhancement_type: EnhancementType
    target_audience: Audience | None = None
    language: str = "en"


class EnhancementResult(BaseModel, frozen=True):
    enhanced_content: str
    metadata: GenerationMetadata


class SampleAnswer(BaseModel, frozen=True):
    """Model answer for an open question, with key points and structure."""

    sample_answer: str
    key_points: list[str] = Field(default_factory=list)
    structure: str
