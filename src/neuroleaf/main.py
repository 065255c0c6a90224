"""CLI entry point for neuroleaf.

Provides five subcommands:
  - generate: Text/Markdown -> flashcards -> TSV/CSV/JSON
  - analyze: Dry-run content analysis and chunk plan (no API calls)
  - enhance: Rewrite study material (explain, examples, simplify, elaborate)
  - grade: Grade one answer to an open question
  - limits: Show subscription tier quotas against current usage
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from neuroleaf.analyzer import analyze_content
from neuroleaf.chunker import chunk_content, is_long_document
from neuroleaf.config import AppConfig, load_config
from neuroleaf.cost import CostTracker, estimate_cost, estimate_tokens
from neuroleaf.enhance import enhance_content
from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient
from neuroleaf.schemas import (
    Audience,
    ContentEnhancementRequest,
    Difficulty,
    EnhancementType,
)
from neuroleaf.service import (
    collect_files,
    process_file,
    read_content,
    resolve_output_path,
    write_output,
)
from neuroleaf.testmode import (
    ComprehensiveGradingResult,
    grade_response,
    grade_response_comprehensive,
)
from neuroleaf.tiers import (
    DEFAULT_MONTHLY_TOKEN_LIMIT,
    LimitCheck,
    Tier,
    check_ai_generation_limit,
    check_deck_limit,
    check_flashcard_limit,
    check_test_session_limit,
    is_unlimited,
    token_usage,
)

app = typer.Typer(
    name="neuroleaf",
    help="Generate study flashcards from text and Markdown using Claude AI.",
    no_args_is_help=True,
)

console = Console()

_LOG_FORMAT = "%(name)s %(levelname)s: %(message)s"


class OutputFormat(StrEnum):
    TSV = "tsv"
    CSV = "csv"
    JSON = "json"
    ALL = "all"


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT)


def _fail(message: object) -> typer.Exit:
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code=1)


def _build_config(
    *,
    config_path: str | None,
    model: str | None,
    budget_limit: float | None,
) -> AppConfig:
    """Build AppConfig from base config + CLI overrides."""
    base = load_config(config_path)

    overrides: dict[str, Any] = {}
    if model is not None:
        overrides["model"] = model
    if budget_limit is not None:
        overrides["cost_budget_limit"] = budget_limit

    if not overrides:
        return base

    return base.model_copy(update=overrides)


def _parse_csv_option(value: str | None) -> list[str] | None:
    """Parse a comma-separated CLI option into a list, or None."""
    if value is None:
        return None
    return [item.strip() for item in value.split(",")]


def _print_summary(
    *,
    card_count: int,
    cost_tracker: CostTracker,
    written_files: list[Path],
) -> None:
    """Print a rich summary table to console."""
    table = Table(title="neuroleaf Summary", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Cards generated", str(card_count))
    table.add_row("API calls", str(cost_tracker.request_count))
    table.add_row("Total tokens", f"{cost_tracker.total_tokens:,}")
    table.add_row("Total cost", f"${cost_tracker.total_cost:.4f}")

    for f in written_files:
        table.add_row("Output", str(f))

    console.print(table)


@app.command()
def generate(
    input_path: str = typer.Argument(
        ..., help="Input file or directory (TXT/MD)"
    ),
    output: str | None = typer.Option(
        None, "-o", "--output", help="Output file or directory"
    ),
    fmt: OutputFormat | None = typer.Option(  # noqa: B008
        None, "--format", help="Output format [default: config output_format]"
    ),
    cards: int = typer.Option(
        20, "--cards", min=1, max=1000, help="Requested number of cards"
    ),
    difficulty: Difficulty | None = typer.Option(  # noqa: B008
        None, "--difficulty", help="Target difficulty"
    ),
    subject: str | None = typer.Option(
        None, "--subject", help="Subject of the material"
    ),
    language: str = typer.Option(
        "en", "--language", help="Language of the generated cards"
    ),
    tags: str | None = typer.Option(
        None, "--tags", help="Additional tags (comma-separated)"
    ),
    model: str | None = typer.Option(
        None, "--model", help="Claude model name"
    ),
    budget_limit: float | None = typer.Option(
        None, "--budget-limit", help="Budget limit in USD"
    ),
    config_path: str | None = typer.Option(
        None, "--config", help="Path to config YAML file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Enable debug logging"
    ),
) -> None:
    """Generate flashcards from TXT/MD study material."""
    _setup_logging(verbose)

    try:
        config = _build_config(
            config_path=config_path, model=model, budget_limit=budget_limit
        )
    except (FileNotFoundError, ValueError) as e:
        raise _fail(e) from e

    path = Path(input_path)
    try:
        files = collect_files(path)
    except ValueError as e:
        raise _fail(e) from e

    if fmt is None:
        fmt = OutputFormat(config.output_format)
    output_path = resolve_output_path(path, output, fmt.value, path.is_dir())
    additional_tags = _parse_csv_option(tags)

    client = LLMClient(config)
    cost_tracker = CostTracker(budget_limit=config.cost_budget_limit)
    all_written: list[Path] = []
    total_cards = 0

    for file_path in files:
        console.print(f"Processing: [cyan]{file_path.name}[/cyan]")
        try:
            result, cost_tracker = process_file(
                file_path=file_path,
                config=config,
                cost_tracker=cost_tracker,
                client=client,
                number_of_cards=cards,
                difficulty=difficulty,
                subject=subject,
                language=language,
            )
        except (AIServiceError, RuntimeError, ValueError) as e:
            console.print(f"[red]Error processing {file_path.name}:[/red] {e}")
            continue

        written = write_output(
            result=result,
            output_path=output_path,
            fmt=fmt.value,
            source_stem=file_path.stem,
            additional_tags=additional_tags,
        )
        all_written.extend(written)
        total_cards += len(result.flashcards)

    _print_summary(
        card_count=total_cards, cost_tracker=cost_tracker, written_files=all_written
    )


@app.command()
def analyze(
    input_path: str = typer.Argument(..., help="Input file (TXT/MD)"),
    config_path: str | None = typer.Option(
        None, "--config", help="Path to config YAML file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Enable debug logging"
    ),
) -> None:
    """Analyze content without generating cards (dry-run)."""
    _setup_logging(verbose)

    path = Path(input_path)
    if not path.is_file():
        raise _fail(f"File not found: {input_path}")

    try:
        config = load_config(config_path)
        text = read_content(path)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(e) from e

    analysis = analyze_content(text)
    tokens = estimate_tokens(text)
    chunks = chunk_content(text, config) if is_long_document(text, config) else []

    table = Table(title="Analysis: Content", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Source", str(path))
    table.add_row("Content type", str(analysis.content_type))
    table.add_row("Words", str(analysis.word_count))
    table.add_row("Sentences", str(analysis.sentence_count))
    table.add_row("Paragraphs", str(analysis.paragraph_count))
    table.add_row("Complexity", str(analysis.complexity))
    table.add_row("Est. difficulty", str(analysis.estimated_difficulty))
    table.add_row("Concepts", str(len(analysis.educational_concepts)))
    table.add_row("Recommended cards", str(analysis.recommended_card_count))
    table.add_row("Est. tokens", f"{tokens:,}")
    cost = estimate_cost(config.model, tokens, tokens // 4)
    table.add_row("Est. cost", f"${cost:.4f}")
    table.add_row("Chunks", str(len(chunks)) if chunks else "1 (single prompt)")

    console.print(table)

    if analysis.educational_concepts:
        console.print("\n[bold]Top concepts:[/bold]")
        for concept in analysis.educational_concepts[:10]:
            console.print(f"  {concept.concept} [dim]({concept.importance}, {concept.type})[/dim]")


@app.command()
def enhance(
    input_path: str = typer.Argument(..., help="Input file (TXT/MD)"),
    enhancement: EnhancementType = typer.Option(  # noqa: B008
        EnhancementType.EXPLANATION, "--type", help="Enhancement type"
    ),
    audience: Audience | None = typer.Option(  # noqa: B008
        None, "--audience", help="Target audience"
    ),
    language: str = typer.Option(
        "en", "--language", help="Language of the enhanced content"
    ),
    output: str | None = typer.Option(
        None, "-o", "--output", help="Write enhanced content to this file"
    ),
    model: str | None = typer.Option(
        None, "--model", help="Claude model name"
    ),
    config_path: str | None = typer.Option(
        None, "--config", help="Path to config YAML file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Enable debug logging"
    ),
) -> None:
    """Rewrite study material to explain, add examples, simplify, or elaborate."""
    _setup_logging(verbose)

    try:
        config = _build_config(config_path=config_path, model=model, budget_limit=None)
        text = read_content(Path(input_path))
        result = enhance_content(
            ContentEnhancementRequest(
                content=text,
                enhancement_type=enhancement,
                target_audience=audience,
                language=language,
            ),
            client=LLMClient(config),
        )
    except (AIServiceError, FileNotFoundError, ValueError) as e:
        raise _fail(e) from e

    if output is not None:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.enhanced_content, encoding="utf-8")
        console.print(f"Wrote: [cyan]{out}[/cyan]")
    else:
        console.print(result.enhanced_content)

    console.print(
        f"[dim]{result.metadata.tokens_used:,} tokens, "
        f"${result.metadata.estimated_cost:.4f}[/dim]"
    )


@app.command()
def grade(
    question: str = typer.Option(..., "--question", help="Question text"),
    answer: str = typer.Option(..., "--answer", help="Answer to grade"),
    expected: str = typer.Option(
        "", "--expected", help="Expected answer, if known"
    ),
    comprehensive: bool = typer.Option(
        False, "--comprehensive", help="Include topic analysis and suggestions"
    ),
    model: str | None = typer.Option(
        None, "--model", help="Claude model name"
    ),
    config_path: str | None = typer.Option(
        None, "--config", help="Path to config YAML file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Enable debug logging"
    ),
) -> None:
    """Grade one answer to an open-ended question."""
    _setup_logging(verbose)

    try:
        config = _build_config(config_path=config_path, model=model, budget_limit=None)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(e) from e

    client = LLMClient(config)
    if comprehensive:
        result = grade_response_comprehensive(
            question, answer, client=client, expected_answer=expected
        )
    else:
        result = grade_response(question, answer, client=client, expected_answer=expected)

    table = Table(title="Grading Result", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Score", f"{result.score}/100")
    table.add_row("Correct", "yes" if result.is_correct else "no")
    table.add_row("Model", result.model_used)
    table.add_row("Feedback", result.feedback)

    if isinstance(result, ComprehensiveGradingResult):
        for topic in result.topic_analysis:
            table.add_row(
                "Topic", f"{topic.topic} ({topic.performance}, {topic.understanding_level})"
            )
        for suggestion in result.improvement_suggestions:
            table.add_row("Suggestion", suggestion)

    console.print(table)


def _limit_text(limit: int) -> str:
    return "unlimited" if is_unlimited(limit) else f"{limit:,}"


@app.command()
def limits(
    tier: Tier = typer.Option(  # noqa: B008
        Tier.FREE, "--tier", help="Subscription tier"
    ),
    decks: int = typer.Option(0, "--decks", min=0, help="Decks owned"),
    cards: int = typer.Option(
        0, "--cards", min=0, help="Cards in the fullest deck"
    ),
    generations: int = typer.Option(
        0, "--generations", min=0, help="AI generations this month"
    ),
    tests: int = typer.Option(
        0, "--tests", min=0, help="Test sessions this month"
    ),
    tokens: int = typer.Option(0, "--tokens", min=0, help="Tokens used this month"),
    token_limit: int = typer.Option(
        DEFAULT_MONTHLY_TOKEN_LIMIT,
        "--token-limit",
        min=-1,
        help="Monthly token limit (-1 for unlimited)",
    ),
) -> None:
    """Show tier quotas and whether each one has room left."""
    checks: list[tuple[str, LimitCheck]] = [
        ("Decks", check_deck_limit(tier, decks)),
        ("Cards per deck", check_flashcard_limit(tier, cards)),
        ("AI generations", check_ai_generation_limit(tier, generations)),
        ("Test sessions", check_test_session_limit(tier, tests)),
    ]

    table = Table(title=f"Tier: {tier}")
    table.add_column("Resource", style="bold")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Status")

    for name, check in checks:
        status = "ok" if check.allowed else "[red]limit reached[/red]"
        table.add_row(name, f"{check.current:,}", _limit_text(check.limit), status)

    usage = token_usage(tier, tokens, monthly_limit=token_limit)
    if usage.is_unlimited:
        token_status = "ok"
    elif usage.remaining > 0:
        token_status = f"{usage.percentage}% used"
    else:
        token_status = "[red]limit reached[/red]"
    table.add_row(
        "Tokens", f"{usage.current_usage:,}", _limit_text(usage.limit), token_status
    )

    console.print(table)
