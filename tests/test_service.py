"""Tests for neuroleaf service layer (service.py).

Covers:
- collect_files: file/directory collection with validation
- read_content: UTF-8 reading and empty-file rejection
- resolve_output_path: output path determination
- write_output: TSV/CSV/JSON/all output writing
- process_file: single file processing pipeline
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from neuroleaf.config import AppConfig
from neuroleaf.cost import MODEL_HAIKU, CostTracker
from neuroleaf.schemas import Difficulty, Flashcard, GenerationMetadata, GenerationResult
from neuroleaf.service import (
    collect_files,
    process_file,
    read_content,
    resolve_output_path,
    write_output,
)

# ============================================================
# Fixtures
# ============================================================


@pytest.fixture
def result(sample_cards: list[Flashcard]) -> GenerationResult:
    return GenerationResult(
        flashcards=sample_cards,
        metadata=GenerationMetadata(model=MODEL_HAIKU),
    )


# ============================================================
# collect_files Tests
# ============================================================


class TestCollectFiles:
    def test_single_txt(self, sample_txt: Path) -> None:
        assert collect_files(sample_txt) == [sample_txt]

    def test_directory_filters_and_sorts(self, sample_dir: Path) -> None:
        files = collect_files(sample_dir)
        assert [f.name for f in files] == ["a.txt", "b.md"]

    def test_unsupported_file(self, sample_dir: Path) -> None:
        with pytest.raises(ValueError, match="Unsupported file type"):
            collect_files(sample_dir / "ignore.csv")

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="No supported files"):
            collect_files(tmp_path)

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Path not found"):
            collect_files(tmp_path / "missing.txt")


class TestReadContent:
    def test_reads_text(self, sample_txt: Path) -> None:
        assert read_content(sample_txt).startswith("Photosynthesis")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.md"
        path.write_text(" \n\t", encoding="utf-8")
        with pytest.raises(ValueError, match="File is empty"):
            read_content(path)


# ============================================================
# resolve_output_path Tests
# ============================================================


class TestResolveOutputPath:
    def test_explicit_output(self, sample_txt: Path) -> None:
        assert resolve_output_path(sample_txt, "out/deck.csv", "csv", False) == Path("out/deck.csv")

    @pytest.mark.parametrize("fmt", ["tsv", "csv", "json"])
    def test_single_format_uses_input_stem(self, sample_txt: Path, fmt: str) -> None:
        assert resolve_output_path(sample_txt, None, fmt, False) == sample_txt.with_suffix(f".{fmt}")

    def test_all_uses_parent(self, sample_txt: Path) -> None:
        assert resolve_output_path(sample_txt, None, "all", False) == sample_txt.parent

    def test_directory_input(self, sample_dir: Path) -> None:
        assert resolve_output_path(sample_dir, None, "tsv", True) == sample_dir.parent / "output"


# ============================================================
# write_output Tests
# ============================================================


class TestWriteOutput:
    def test_tsv_to_file(self, tmp_path: Path, result: GenerationResult) -> None:
        path = tmp_path / "deck.tsv"
        written = write_output(
            result=result, output_path=path, fmt="tsv", source_stem="notes", additional_tags=["x"]
        )
        assert written == [path]
        assert "difficulty::easy x" in path.read_text(encoding="utf-8")

    def test_all_into_directory(self, tmp_path: Path, result: GenerationResult) -> None:
        out_dir = tmp_path / "output"
        written = write_output(result=result, output_path=out_dir, fmt="all", source_stem="notes")
        assert [p.name for p in written] == ["notes.tsv", "notes.csv", "notes.json"]
        assert all(p.parent == out_dir and p.exists() for p in written)

    def test_json_deck_name_is_stem(self, tmp_path: Path, result: GenerationResult) -> None:
        written = write_output(result=result, output_path=tmp_path, fmt="json", source_stem="bio")
        assert '"deck_name": "bio"' in written[0].read_text(encoding="utf-8")

    def test_unknown_format(self, tmp_path: Path, result: GenerationResult) -> None:
        with pytest.raises(ValueError, match="Unsupported output format"):
            write_output(result=result, output_path=tmp_path, fmt="xml", source_stem="x")


# ============================================================
# process_file Tests
# ============================================================


class TestProcessFile:
    @patch("neuroleaf.service.generate_flashcards")
    def test_builds_request(self, mock_generate, sample_txt: Path, result: GenerationResult) -> None:
        tracker = CostTracker()
        mock_generate.return_value = (result, tracker)
        config = AppConfig()

        out_result, out_tracker = process_file(
            file_path=sample_txt,
            config=config,
            cost_tracker=tracker,
            number_of_cards=12,
            difficulty=Difficulty.HARD,
            subject="Biology",
            language="es",
        )

        assert out_result is result
        assert out_tracker is tracker
        request = mock_generate.call_args.args[0]
        assert request.content.startswith("Photosynthesis")
        assert request.number_of_cards == 12
        assert request.difficulty == Difficulty.HARD
        assert request.subject == "Biology"
        assert request.language == "es"
        assert mock_generate.call_args.kwargs["config"] is config
        assert mock_generate.call_args.kwargs["cost_tracker"] is tracker

    def test_empty_file_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.txt"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="File is empty"):
            process_file(file_path=path, config=AppConfig(), cost_tracker=CostTracker())
