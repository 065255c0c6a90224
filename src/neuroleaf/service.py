"""Service layer for neuroleaf business logic.

Separates orchestration logic from CLI concerns.
Functions here are independent of Typer/Rich and can be
called from any interface (CLI, tests).
"""

from __future__ import annotations

import logging
from pathlib import Path

from neuroleaf.config import AppConfig
from neuroleaf.convert import write_csv, write_json, write_tsv
from neuroleaf.cost import CostTracker
from neuroleaf.generator import generate_flashcards
from neuroleaf.llm import LLMClient
from neuroleaf.schemas import Difficulty, GenerateFlashcardsRequest, GenerationResult

logger = logging.getLogger(__name__)

_SUPPORTED_EXTENSIONS = {".txt", ".md"}

OUTPUT_FORMATS = ("tsv", "csv", "json", "all")


def collect_files(input_path: Path) -> list[Path]:
    """Collect supported files from a path (file or directory).

    Raises:
        ValueError: If path doesn't exist, file type is unsupported,
                    or directory contains no supported files.
    """
    if input_path.is_file():
        if input_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
            raise ValueError(
                f"Unsupported file type: {input_path.suffix}. "
                f"Supported: {', '.join(sorted(_SUPPORTED_EXTENSIONS))}"
            )
        return [input_path]

    if input_path.is_dir():
        files = [
            f
            for f in sorted(input_path.iterdir())
            if f.is_file() and f.suffix.lower() in _SUPPORTED_EXTENSIONS
        ]
        if not files:
            raise ValueError(f"No supported files found in {input_path}")
        return files

    raise ValueError(f"Path not found: {input_path}")


def read_content(file_path: Path) -> str:
    """Read a text or markdown file as UTF-8.

    Raises:
        ValueError: If the file holds no non-whitespace text.
    """
    text = file_path.read_text(encoding="utf-8")
    if not text.strip():
        raise ValueError(f"File is empty: {file_path}")
    return text


def resolve_output_path(
    input_path: Path,
    output: str | None,
    fmt: str,
    is_directory_input: bool,
) -> Path:
    """Determine the output path.

    Args:
        input_path: The original input file/directory path.
        output: Explicit output path from user, or None.
        fmt: Output format string ("tsv", "csv", "json", "all").
        is_directory_input: Whether the input was a directory.
    """
    if output is not None:
        return Path(output)

    if is_directory_input:
        return input_path.parent / "output"

    if fmt == "all":
        return input_path.parent

    return input_path.with_suffix(f".{fmt}")


def _target_path(output_path: Path, suffix: str, source_stem: str) -> Path:
    if output_path.suffix == suffix:
        return output_path
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path / f"{source_stem}{suffix}"


def write_output(
    *,
    result: GenerationResult,
    output_path: Path,
    fmt: str,
    source_stem: str,
    additional_tags: list[str] | None = None,
) -> list[Path]:
    """Write cards to the requested format(s). Returns list of written files.

    Args:
        fmt: Output format string ("tsv", "csv", "json", "all").
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: {fmt}. Supported: {', '.join(OUTPUT_FORMATS)}"
        )

    cards = list(result.flashcards)
    written: list[Path] = []

    if fmt in ("tsv", "all"):
        tsv_path = _target_path(output_path, ".tsv", source_stem)
        write_tsv(cards, tsv_path, additional_tags)
        written.append(tsv_path)

    if fmt in ("csv", "all"):
        csv_path = _target_path(output_path, ".csv", source_stem)
        write_csv(cards, csv_path)
        written.append(csv_path)

    if fmt in ("json", "all"):
        json_path = _target_path(output_path, ".json", source_stem)
        write_json(result, json_path, deck_name=source_stem)
        written.append(json_path)

    return written


def process_file(
    *,
    file_path: Path,
    config: AppConfig,
    cost_tracker: CostTracker,
    client: LLMClient | None = None,
    number_of_cards: int = 20,
    difficulty: Difficulty | None = None,
    subject: str | None = None,
    language: str = "en",
) -> tuple[GenerationResult, CostTracker]:
    """Process a single file: read -> build request -> generate cards."""
    content = read_content(file_path)
    request = GenerateFlashcardsRequest(
        content=content,
        number_of_cards=number_of_cards,
        difficulty=difficulty,
        subject=subject,
        language=language,
    )
    logger.info("Processing %s (%d chars)", file_path.name, len(content))
    return generate_flashcards(
        request, config=config, client=client, cost_tracker=cost_tracker
    )
