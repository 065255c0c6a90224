"""CSV, TSV and JSON export for neuroleaf flashcards.

CSV format:
  - Header: Position,Front,Back,Difficulty,Tags
  - Position is 1-based; tags joined with "; "
  - HTML tags stripped and entities unescaped from front/back

TSV format (Anki import):
  - Header: #separator:tab, #html:true, #tags column:3
  - Rows: front<TAB>back<TAB>tags
  - Tabs -> spaces, newlines -> <br>
  - Tags include difficulty::<level>
"""

from __future__ import annotations

import csv
import html
import io
import json
import re
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from neuroleaf.schemas import Flashcard, GenerationResult

_SCHEMA_VERSION = "1.0"

_TSV_HEADER = "#separator:tab\n#html:true\n#tags column:3\n"

_CSV_COLUMNS = ["Position", "Front", "Back", "Difficulty", "Tags"]

_HTML_TAG_RE = re.compile(r"<[^>]*>")


# ============================================================
# Internal helpers
# ============================================================


def _clean_text(text: str) -> str:
    """Strip HTML tags and unescape entities for plain-text export."""
    return html.unescape(_HTML_TAG_RE.sub("", text)).replace("\xa0", " ").strip()


def _escape_tsv_field(text: str) -> str:
    """Tabs become spaces, newlines become <br> (Anki HTML mode)."""
    return text.replace("\t", " ").replace("\n", "<br>")


def _build_tags(card: Flashcard, additional_tags: list[str] | None = None) -> str:
    tags = [tag.replace(" ", "_") for tag in card.tags]
    tags.append(f"difficulty::{card.difficulty.value}")
    if additional_tags:
        tags.extend(additional_tags)
    return " ".join(tags)


def _write_text(content: str, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ============================================================
# Public API
# ============================================================


def cards_to_csv(cards: list[Flashcard]) -> str:
    """Convert cards to a spreadsheet-friendly CSV string."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(_CSV_COLUMNS)
    for position, card in enumerate(cards, start=1):
        writer.writerow(
            [
                position,
                _clean_text(card.front),
                _clean_text(card.back),
                card.difficulty.value,
                "; ".join(card.tags),
            ]
        )
    return buffer.getvalue()


def cards_to_tsv(
    cards: list[Flashcard],
    additional_tags: list[str] | None = None,
) -> str:
    """Convert cards to Anki-importable TSV string.

    Args:
        cards: Flashcards to convert.
        additional_tags: Extra tags to add to every card.

    Returns:
        TSV string with header directives and data rows.
    """
    rows = [
        f"{_escape_tsv_field(card.front)}\t{_escape_tsv_field(card.back)}\t"
        f"{_build_tags(card, additional_tags)}"
        for card in cards
    ]
    return _TSV_HEADER + "\n".join(rows)


def cards_to_json(
    result: GenerationResult,
    deck_name: str | None = None,
) -> str:
    """Convert a GenerationResult to JSON with a metadata summary.

    Args:
        result: Generated flashcards with analysis and cost metadata.
        deck_name: Optional name recorded in the metadata block.

    Returns:
        Pretty-printed JSON string with metadata and _meta blocks.
    """
    data = result.model_dump(mode="json")
    data["metadata"] = {
        "deck_name": deck_name,
        "total_cards": len(result.flashcards),
        "difficulties": dict(Counter(card.difficulty.value for card in result.flashcards)),
        "generation": data.pop("metadata"),
    }
    data["_meta"] = {
        "schema_version": _SCHEMA_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
    }
    return json.dumps(data, ensure_ascii=False, indent=2)


def write_csv(cards: list[Flashcard], path: Path) -> None:
    """Write cards to a CSV file (UTF-8), creating parent directories."""
    _write_text(cards_to_csv(cards), path)


def write_tsv(
    cards: list[Flashcard],
    path: Path,
    additional_tags: list[str] | None = None,
) -> None:
    """Write cards to a TSV file (UTF-8, no BOM), creating parent directories."""
    _write_text(cards_to_tsv(cards, additional_tags), path)


def write_json(
    result: GenerationResult,
    path: Path,
    deck_name: str | None = None,
) -> None:
    """Write a GenerationResult to a JSON file (UTF-8), creating parent directories."""
    _write_text(cards_to_json(result, deck_name), path)
