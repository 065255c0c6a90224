"""Shared test fixtures for neuroleaf tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from neuroleaf.cost import MODEL_HAIKU
from neuroleaf.llm import LLMClient, LLMResponse
from neuroleaf.schemas import Difficulty, Flashcard

BIOLOGY_TEXT = (
    "Photosynthesis is the process by which green plants convert light energy "
    "into chemical energy. Chlorophyll is defined as the green pigment that "
    "absorbs light in the chloroplast. The light reactions produce ATP and NADPH. "
    "The Calvin cycle uses ATP to fix carbon dioxide into glucose. "
    "Photosynthesis releases oxygen as a byproduct. Cellular respiration is the "
    "process that breaks down glucose to release energy. Photosynthesis and "
    "cellular respiration are complementary processes. For example, plants "
    "perform both photosynthesis and respiration during the day."
)


def make_llm_response(
    text: str,
    *,
    model: str = MODEL_HAIKU,
    input_tokens: int = 500,
    output_tokens: int = 300,
    estimated_cost: float = 0.0016,
) -> LLMResponse:
    """Build an LLMResponse as returned by LLMClient.generate()."""
    return LLMResponse(
        text=text,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        estimated_cost=estimated_cost,
    )


def make_mock_client(*texts: str) -> MagicMock:
    """Mock LLMClient whose generate() returns the given texts in order."""
    client = MagicMock(spec=LLMClient)
    client.model = MODEL_HAIKU
    responses = [make_llm_response(t) for t in texts]
    client.generate.side_effect = responses
    client.generate_with_image.side_effect = responses
    return client


@pytest.fixture
def biology_text() -> str:
    return BIOLOGY_TEXT


@pytest.fixture
def sample_cards() -> list[Flashcard]:
    """A small deck with one card per difficulty."""
    return [
        Flashcard(
            front="What is photosynthesis?",
            back="The process that converts light energy into chemical energy in plants.",
            tags=["biology"],
            difficulty=Difficulty.EASY,
        ),
        Flashcard(
            front="How does the Calvin cycle use ATP?",
            back="It spends ATP and NADPH to fix carbon dioxide into glucose.",
            tags=["biology", "photosynthesis"],
            difficulty=Difficulty.MEDIUM,
        ),
        Flashcard(
            front="Why are photosynthesis and respiration complementary?",
            back="Each consumes the products of the other: glucose, oxygen and CO2.",
            tags=["biology"],
            difficulty=Difficulty.HARD,
        ),
    ]


@pytest.fixture
def sample_txt(tmp_path: Path) -> Path:
    p = tmp_path / "notes.txt"
    p.write_text(BIOLOGY_TEXT, encoding="utf-8")
    return p


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    d = tmp_path / "docs"
    d.mkdir()
    (d / "a.txt").write_text("Document A covers the cell membrane.", encoding="utf-8")
    (d / "b.md").write_text("# Document B\nMitochondria produce ATP.", encoding="utf-8")
    (d / "ignore.csv").write_text("col1,col2\n1,2", encoding="utf-8")
    return d
