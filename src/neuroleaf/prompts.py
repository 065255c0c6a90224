"""Prompt templates for neuroleaf flashcard generation.

Contains the shared anti-meta-question rules and response format, the
per-content-type guidance blocks, and builders for the standard, chunked
and image prompts.
"""

from __future__ import annotations

from neuroleaf.chunker import Chunk
from neuroleaf.schemas import (
    ConceptType,
    ContentAnalysis,
    ContentType,
    GenerateFlashcardsRequest,
)

RESPONSE_FORMAT = """\
RESPONSE FORMAT:
Respond ONLY with a JSON array in this exact format:
[{"q":"question text","a":"answer text","difficulty":"easy|medium|hard"}]"""

_CONTENT_TYPE_GUIDANCE: dict[ContentType, str] = {
    ContentType.LECTURE_SLIDES: """\
LECTURE SLIDES OPTIMIZATION:
- Focus on key points from each slide, not slide numbers or navigation
- Extract main concepts, definitions, and examples presented
- Convert bullet points into question-answer pairs
- Prioritize formulas, diagrams, and key takeaways
- Avoid questions about "what slide covers X" - focus on the actual content""",
    ContentType.ACADEMIC_PAPER: """\
ACADEMIC PAPER OPTIMIZATION:
- Extract key findings, methodologies, and conclusions
- Focus on research results, not paper structure
- Create cards for important statistics, dates, and figures
- Include key terminology and theoretical concepts
- Focus on scientific content and avoid meta-questions""",
    ContentType.TEXTBOOK_CHAPTER: """\
TEXTBOOK OPTIMIZATION:
- Extract definitions, principles, and laws presented
- Focus on examples and problem-solving methods
- Create cards for formulas, equations, and key concepts
- Include historical context and important figures
- Convert exercises into learning questions about the concepts""",
    ContentType.DOCUMENTATION: """\
DOCUMENTATION OPTIMIZATION:
- Focus on functionality, syntax, and usage patterns
- Extract parameter definitions and return values
- Create cards for code examples and implementation details
- Include configuration options and best practices
- Avoid meta-questions about documentation structure""",
    ContentType.NOTES: """\
NOTES OPTIMIZATION:
- Extract key facts and important points highlighted
- Focus on definitions and concepts noted
- Convert informal explanations into formal Q&A
- Prioritize actionable information and key insights
- Include examples and clarifications provided""",
}

_DOCUMENT_RULES = """\
CRITICAL: AVOID META-QUESTIONS
NEVER create flashcards about:
- Document structure questions
- Navigation elements
- Page numbers or organizational elements
- Table of contents information
- Learning objectives or course outlines
- "Overview" or "introduction" concepts

ONLY create flashcards about EDUCATIONAL CONTENT:
- Specific facts, definitions, and concepts
- Formulas, equations, and calculations
- Processes, procedures, and methods
- Examples and applications
- Historical facts, dates, and figures
- Cause-and-effect relationships
- Technical terminology and their meanings

FLASHCARD CREATION STRATEGY:

1. CONTENT-FIRST APPROACH:
   - Extract factual knowledge that students need to memorize
   - Focus on "what", "how", "when", "where" about actual subject matter
   - Prioritize definitions, principles, formulas, and key facts
   - Include specific examples and applications

2. QUESTION TYPES (focus on substance):
   - Definition: "What is photosynthesis?" (NOT "What is covered in this document?")
   - Factual: "What year was the Declaration of Independence signed?"
   - Process: "What are the steps of cellular respiration?"
   - Application: "What is an example of a renewable energy source?"
   - Calculation: "How do you calculate acceleration?"

3. ACADEMIC RIGOR:
   - Extract ALL numerical values, formulas, and equations
   - Create cards for key terminology and technical vocabulary
   - Include historical context, dates, and important figures
   - Focus on cause-and-effect relationships between concepts
   - Cover both theoretical knowledge and practical applications

4. QUALITY OVER QUANTITY:
   - Each flashcard should test specific, actionable knowledge
   - Avoid vague or meta-level questions
   - Ensure answers are concrete and verifiable
   - Create cards that build understanding, not just awareness

GOOD EXAMPLES:
BAD: {"q":"What topics are covered in Lecture 3?","a":"Various biology concepts","difficulty":"easy"}
GOOD: {"q":"What is the primary function of mitochondria?","a":"To produce ATP (energy) for cellular processes","difficulty":"medium"}

BAD: {"q":"What is the main focus of this document?","a":"Economics principles","difficulty":"easy"}
GOOD: {"q":"What is the law of supply and demand?","a":"When supply increases and demand stays constant, prices decrease; when demand increases and supply stays constant, prices increase","difficulty":"medium"}"""

_CHUNK_RULES = """\
CRITICAL: AVOID META-QUESTIONS
NEVER create flashcards about:
- Document structure ("What topics are covered?")
- Document navigation ("What comes next?")
- Chapter or part references
- Overview or summary questions about the document itself
- Organizational elements or learning objectives

ONLY create flashcards about EDUCATIONAL CONTENT:
- Specific facts, definitions, and concepts explained here
- Formulas, equations, and calculations presented
- Processes and procedures described
- Examples and applications mentioned
- Historical facts, dates, and figures cited
- Technical terminology introduced
- Cause-and-effect relationships explained

CONTENT-FOCUSED CREATION STRATEGY:

1. CONTENT-FIRST EXTRACTION:
   - Extract factual knowledge that students need to learn from this content
   - Focus on "what", "how", "when", "where" about actual subject matter
   - Prioritize definitions, principles, and key facts presented
   - Include specific examples and applications mentioned

2. SPECIFIC QUESTIONS:
   - Definition: "What is [concept] as defined in this content?"
   - Factual: "According to this content, what [specific fact]?"
   - Process: "What are the steps for [process] described?"
   - Application: "What example of [concept] is given?"
   - Calculation: "How do you calculate [formula]?"

3. QUALITY STANDARDS:
   - Each card must test specific, actionable knowledge from this content
   - Questions should be answerable entirely from the provided content
   - Avoid vague or meta-level questions about the document structure
   - Ensure answers are concrete and verifiable from the text

GOOD CONTENT-SPECIFIC EXAMPLES:
BAD: {"q":"What is the main focus of this content?","a":"Various concepts","difficulty":"easy"}
GOOD: {"q":"What is the definition of mitochondria given in this text?","a":"The powerhouse of the cell that produces ATP through cellular respiration","difficulty":"medium"}

BAD: {"q":"What topics are discussed here?","a":"Economic principles","difficulty":"easy"}
GOOD: {"q":"According to this content, what factors affect market price?","a":"Supply, demand, production costs, and consumer preferences","difficulty":"medium"}"""

_MAX_PRIORITY_CONCEPTS = 5
_MAX_CHUNK_CONCEPTS = 3


def content_type_guidance(content_type: ContentType) -> str:
    """Return the guidance block for a content type ("" if none applies)."""
    return _CONTENT_TYPE_GUIDANCE.get(content_type, "")


def _request_context(request: GenerateFlashcardsRequest) -> list[str]:
    lines: list[str] = []
    if request.subject:
        lines.append(f"Subject: {request.subject}")
    if request.language and request.language != "en":
        lines.append(f"Write all questions and answers in language: {request.language}")
    return lines


def _require_content(text: str) -> str:
    stripped = text.strip()
    if not stripped:
        raise ValueError("content must not be empty or whitespace-only")
    return stripped


def build_flashcard_prompt(
    request: GenerateFlashcardsRequest,
    analysis: ContentAnalysis | None = None,
) -> str:
    """Build the single-call prompt for a standard-size document.

    Args:
        request: Generation request. number_of_cards is the exact count asked for.
        analysis: Optional content analysis to summarize in the prompt.

    Returns:
        Stripped prompt string.

    Raises:
        ValueError: If request content is empty or whitespace-only.
    """
    content = _require_content(request.content)
    sections: list[str] = [
        "You are an expert educator creating high-quality flashcards for optimal "
        f"learning. Create exactly {request.number_of_cards} flashcards from the "
        "provided educational content."
    ]

    if analysis is not None:
        concepts = analysis.educational_concepts
        summary = [
            "Content Analysis:",
            f"- {analysis.word_count} words, {analysis.complexity} complexity, "
            f"{analysis.estimated_difficulty} difficulty",
            f"- Content type: {analysis.content_type}",
            f"- Educational concepts found: {len(concepts)} "
            f"({len(analysis.high_importance_concepts)} high-priority)",
        ]
        sections.append("\n".join(summary))

        priority = [
            f"- {c.concept}{' (definition)' if c.type == ConceptType.DEFINITION else ''}"
            for c in analysis.high_importance_concepts[:_MAX_PRIORITY_CONCEPTS]
        ]
        if priority:
            sections.append(
                "PRIORITY EDUCATIONAL CONCEPTS IDENTIFIED:\n"
                + "\n".join(priority)
                + "\n\nFocus primarily on these concepts when creating flashcards."
            )

        guidance = content_type_guidance(analysis.content_type)
        if guidance:
            sections.append(guidance)

    context = _request_context(request)
    if context:
        sections.append("\n".join(context))

    sections.append(f"CONTENT TO ANALYZE:\n{content}")
    sections.append(_DOCUMENT_RULES)
    sections.append(RESPONSE_FORMAT)
    sections.append(
        f"Generate exactly {request.number_of_cards} high-quality, content-focused "
        "flashcards. Start your response with [ and end with ]"
    )

    return "\n\n".join(sections).strip()


def build_chunk_prompt(
    request: GenerateFlashcardsRequest,
    analysis: ContentAnalysis,
    chunk: Chunk,
    chunk_index: int,
    total_chunks: int,
) -> str:
    """Build the prompt for one chunk of a long document.

    Args:
        request: Generation request carrying the per-chunk card count.
        analysis: Analysis of this chunk.
        chunk: The chunk being processed.
        chunk_index: 1-based position of the chunk.
        total_chunks: Number of chunks in the document.

    Raises:
        ValueError: If the chunk content is empty or whitespace-only.
    """
    content = _require_content(chunk.content)
    lowered = content.lower()

    header = [
        f"Processing part {chunk_index} of {total_chunks} from a larger document",
        f"Content Analysis: {analysis.word_count} words, {analysis.complexity} complexity",
    ]
    relevant = [
        f"- {c.concept}"
        for c in analysis.educational_concepts
        if c.concept.lower() in lowered
    ][:_MAX_CHUNK_CONCEPTS]
    if relevant:
        header.append("KEY CONCEPTS IN THIS CONTENT:\n" + "\n".join(relevant))

    sections = [
        "You are an expert educator creating high-quality flashcards for optimal "
        "learning. You are processing educational content.",
        "\n".join(header),
    ]

    context = _request_context(request)
    if context:
        sections.append("\n".join(context))

    sections.append(f"CONTENT:\n{content}")
    sections.append(_CHUNK_RULES)
    sections.append(RESPONSE_FORMAT)
    sections.append(
        f"Generate exactly {request.number_of_cards} high-quality, content-focused "
        "flashcards from this content. Start your response with [ and end with ]"
    )

    return "\n\n".join(sections).strip()


def build_image_prompt(request: GenerateFlashcardsRequest) -> str:
    """Build the vision prompt for generating flashcards from an image."""
    if request.difficulty is not None:
        difficulty_instruction = f"Target difficulty: {request.difficulty}."
    else:
        difficulty_instruction = "Mix easy, medium, and hard questions appropriately."

    subject_line = (
        f"\n   - Subject context: {request.subject}." if request.subject else ""
    )
    count = request.number_of_cards

    prompt = f"""\
You are an expert educational content creator. Analyze this image and extract \
text content to create high-quality flashcards for learning.

TASK: Extract all text from this image and create exactly {count} educational flashcards.

INSTRUCTIONS:
1. CONTENT EXTRACTION:
   - Read ALL text visible in the image (handwritten notes, printed text, diagrams, formulas, etc.)
   - Pay attention to headings, bullet points, definitions, examples, and key concepts
   - Include any mathematical formulas, equations, or scientific notation
   - Note any diagrams, charts, or visual elements that contain educational content

2. FLASHCARD CREATION:
   - Create questions that test understanding of the extracted content
   - Focus on key concepts, definitions, facts, and relationships
   - Make questions specific and directly answerable from the image content
   - {difficulty_instruction}{subject_line}

3. QUESTION TYPES TO USE:
   - Definition: "What is [concept] as shown in this image?"
   - Factual: "According to this content, what [specific fact]?"
   - Process: "What steps are shown for [process]?"
   - Formula: "What is the formula shown for [calculation]?"
   - Application: "What example of [concept] is given?"

4. QUALITY STANDARDS:
   - Each card must test specific knowledge from the image
   - Questions should be answerable entirely from the visible content
   - Avoid vague questions about document structure
   - Ensure answers are concrete and verifiable from the image
   - Language: {request.language}

{RESPONSE_FORMAT}

Extract content from the image and generate exactly {count} high-quality \
flashcards. Start your response with [ and end with ]"""

    return prompt.strip()
