"""Content enhancement and sample answers for neuroleaf.

enhance_content() rewrites study material (explain, add examples,
simplify, elaborate). generate_sample_answer() produces a model answer
with key points for an open question, falling back to a generic answer
when the model output is unusable.
"""

from __future__ import annotations

import logging
import re
import time

from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient
from neuroleaf.parser import parse_json_object
from neuroleaf.schemas import (
    Audience,
    ContentEnhancementRequest,
    Difficulty,
    EnhancementResult,
    EnhancementType,
    GenerationMetadata,
    SampleAnswer,
)

logger = logging.getLogger(__name__)

_INSTRUCTIONS: dict[EnhancementType, str] = {
    EnhancementType.EXPLANATION: (
        "Provide a clear, comprehensive explanation of the following content{audience}. "
        "Break down complex concepts and ensure understanding."
    ),
    EnhancementType.EXAMPLES: (
        "Enhance the following content by adding relevant, practical examples and "
        "analogies{audience}. Make abstract concepts concrete and relatable."
    ),
    EnhancementType.SIMPLIFY: (
        "Simplify the following content{audience}. Use plain language, shorter "
        "sentences, and avoid jargon while preserving the key information."
    ),
    EnhancementType.ELABORATE: (
        "Elaborate on the following content{audience}. Add depth, context, and "
        "additional relevant information while maintaining clarity."
    ),
}

_PREAMBLE_RES = [
    re.compile(r"^(?:Here's|Here is).*?:\s*", re.IGNORECASE),
    re.compile(r"^Enhanced content:\s*", re.IGNORECASE),
    re.compile(r"^\*\*.*?\*\*:\s*", re.IGNORECASE),
]

FALLBACK_SAMPLE_ANSWER = SampleAnswer(
    sample_answer=(
        "A comprehensive answer to this question would address the main concepts "
        "presented, provide specific examples to illustrate key points, and "
        "demonstrate clear understanding of the topic. The response should be "
        "well-organized, starting with an introduction to the topic, followed by "
        "detailed explanations of relevant concepts, and concluding with a summary "
        "that ties the ideas together."
    ),
    key_points=[
        "Address all main concepts mentioned in the question",
        "Provide specific examples and evidence",
        "Use clear, logical organization",
        "Demonstrate deep understanding of the topic",
        "Connect ideas coherently",
    ],
    structure="Introduction -> Main Points with Examples -> Conclusion",
)

FAILED_SAMPLE_ANSWER = SampleAnswer(
    sample_answer=(
        "Sample answer generation failed. Please review the question and provide "
        "a comprehensive response."
    ),
    key_points=[
        "Address the main topic",
        "Provide supporting details",
        "Use clear explanations",
    ],
    structure="Introduction -> Main Content -> Conclusion",
)


# ============================================================
# Content enhancement
# ============================================================


def build_enhancement_prompt(request: ContentEnhancementRequest) -> str:
    audience = request.target_audience
    audience_text = f" for a {audience} audience" if audience else ""
    instruction = _INSTRUCTIONS[request.enhancement_type].format(audience=audience_text)

    requirements = [
        "- Maintain accuracy and factual correctness",
        "- Preserve the core meaning and intent",
        "- Use clear, engaging language",
        "- Structure the content logically",
    ]
    if request.language != "en":
        requirements.append(f"- Respond in {request.language}")
    if audience:
        requirements.append(f"- Tailor complexity for {audience} level")

    return (
        f"{instruction}\n\n"
        f"ORIGINAL CONTENT:\n{request.content}\n\n"
        "REQUIREMENTS:\n"
        + "\n".join(requirements)
        + "\n\nPlease provide the enhanced content:"
    ).strip()


def clean_enhanced_content(text: str) -> str:
    """Strip introductory phrases and bold header prefixes from model output."""
    cleaned = text
    for pattern in _PREAMBLE_RES:
        cleaned = pattern.sub("", cleaned, count=1)
    return cleaned.strip()


def enhance_content(
    request: ContentEnhancementRequest,
    *,
    client: LLMClient,
) -> EnhancementResult:
    """Rewrite content according to the requested enhancement type.

    Raises:
        AIServiceError: If the LLM call fails.
    """
    start = time.monotonic()
    response = client.generate(build_enhancement_prompt(request))

    logger.info(
        "Enhanced %d chars (%s) into %d chars",
        len(request.content),
        request.enhancement_type,
        len(response.text),
    )

    return EnhancementResult(
        enhanced_content=clean_enhanced_content(response.text),
        metadata=GenerationMetadata(
            tokens_used=response.tokens_used,
            estimated_cost=response.estimated_cost,
            processing_time=int((time.monotonic() - start) * 1000),
            model=response.model,
        ),
    )


def explain_concept(
    concept: str,
    *,
    client: LLMClient,
    target_audience: Audience = Audience.INTERMEDIATE,
    language: str = "en",
) -> EnhancementResult:
    return enhance_content(
        ContentEnhancementRequest(
            content=concept,
            enhancement_type=EnhancementType.EXPLANATION,
            target_audience=target_audience,
            language=language,
        ),
        client=client,
    )


def add_examples(
    content: str,
    *,
    client: LLMClient,
    target_audience: Audience = Audience.INTERMEDIATE,
    language: str = "en",
) -> EnhancementResult:
    return enhance_content(
        ContentEnhancementRequest(
            content=content,
            enhancement_type=EnhancementType.EXAMPLES,
            target_audience=target_audience,
            language=language,
        ),
        client=client,
    )


def simplify_text(
    content: str,
    *,
    client: LLMClient,
    language: str = "en",
) -> EnhancementResult:
    """Simplify content for a beginner audience."""
    return enhance_content(
        ContentEnhancementRequest(
            content=content,
            enhancement_type=EnhancementType.SIMPLIFY,
            target_audience=Audience.BEGINNER,
            language=language,
        ),
        client=client,
    )


def elaborate_content(
    content: str,
    *,
    client: LLMClient,
    target_audience: Audience = Audience.ADVANCED,
    language: str = "en",
) -> EnhancementResult:
    return enhance_content(
        ContentEnhancementRequest(
            content=content,
            enhancement_type=EnhancementType.ELABORATE,
            target_audience=target_audience,
            language=language,
        ),
        client=client,
    )


# ============================================================
# Sample answers
# ============================================================


def build_sample_answer_prompt(
    question: str,
    *,
    context: str = "",
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> str:
    context_line = f"Context: {context}\n" if context else ""
    return f"""\
As an educational AI assistant, generate a comprehensive sample answer for the following question:

Question: {question}
{context_line}Difficulty Level: {difficulty}

Please provide:
1. A well-structured sample answer that demonstrates what a good response should look like
2. Key points that should be covered in a complete answer
3. The recommended structure for answering this type of question

Requirements:
- The sample answer should be detailed but concise
- Include specific examples where relevant
- Use clear, educational language appropriate for the difficulty level
- Focus on demonstrating proper reasoning and explanation techniques

Format your response as JSON with the following structure:
{{
  "sampleAnswer": "The comprehensive sample answer here...",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
  "structure": "Recommended structure for answering this question..."
}}"""


def generate_sample_answer(
    question: str,
    *,
    client: LLMClient,
    context: str = "",
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> SampleAnswer:
    """Generate a model answer for a question.

    Returns FALLBACK_SAMPLE_ANSWER if the call fails or the response lacks
    sampleAnswer, keyPoints or structure.
    """
    prompt = build_sample_answer_prompt(question, context=context, difficulty=difficulty)
    try:
        response = client.generate(prompt)
        data = parse_json_object(response.text)
    except (AIServiceError, ValueError) as e:
        logger.warning("Failed to generate sample answer: %s", e)
        return FALLBACK_SAMPLE_ANSWER

    sample = data.get("sampleAnswer")
    key_points = data.get("keyPoints")
    structure = data.get("structure")
    if not sample or not key_points or not structure:
        logger.warning("Invalid sample answer structure: keys %s", sorted(data))
        return FALLBACK_SAMPLE_ANSWER

    if not isinstance(key_points, list):
        key_points = [key_points]

    return SampleAnswer(
        sample_answer=str(sample),
        key_points=[str(p) for p in key_points],
        structure=str(structure),
    )


def generate_bulk_sample_answers(
    questions: list[str],
    *,
    client: LLMClient,
) -> list[SampleAnswer]:
    """Generate sample answers for many questions, one result per question."""
    answers: list[SampleAnswer] = []
    for i, question in enumerate(questions):
        try:
            answers.append(generate_sample_answer(question, client=client))
        except Exception as e:  # noqa: BLE001
            logger.error("Sample answer for question %d failed: %s", i, e)
            answers.append(FAILED_SAMPLE_ANSWER)
    return answers
