#!/usr/bin/env python3
"""Patent Rank - score a batch of patents against a problem statement.

Reads a BatchRequest JSON file (camelCase, as the engine receives it),
scores it with the LLM (or deterministic mock scores when no API key is
configured), and prints the patents ranked by weighted total.

Usage:
    patent-rank request.json                      # Score and print ranking
    patent-rank request.json --output out.json    # Also save the BatchResponse
    patent-rank request.json --chunk-size 1       # One patent per LLM call
    patent-rank request.json --mock               # Force mock scores
    patent-rank request.json -v                   # Show rationales and debug logs

Exit codes: 0 success, 1 scoring error, 2 unreadable input.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from patent_ranker.config import load_settings
from patent_ranker.errors import PatentRankerError
from patent_ranker.llm.schemas import BatchResponse, Category
from patent_ranker.scorers.weighting import SCORING_WEIGHTS, rank_results
from patent_ranker.services.scoring_orchestrator import ScoringOrchestrator, ScoringProgress
from patent_ranker.utils.logger import configure_global_logging

console = Console()
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SCORING_ERROR = 1
EXIT_BAD_INPUT = 2


def load_request(path: Path) -> dict:
    """Read a request file. Raises OSError or ValueError if unreadable."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def show_progress(update: ScoringProgress) -> None:
    console.print(f"[dim][{update.current}/{update.total}] {update.stage}[/dim]")


def display_results(response: BatchResponse, verbose: bool = False) -> None:
    """Display ranked results in a table."""
    console.print()

    if response.using_real_ai:
        mode = "[green]Real AI analysis[/green]"
    else:
        mode = "[yellow]Mock scores (no API key)[/yellow]"
    weights = ", ".join(f"{c.display_name} {SCORING_WEIGHTS[c]:.0%}" for c in Category)
    summary = f"Mode: {mode}\nPatents scored: {len(response.results)}\nWeights: {weights}"
    console.print(Panel(summary, title="Patent Ranking", border_style="blue"))

    if not response.results:
        console.print("[yellow]No patents with metadata to score[/yellow]")
        return

    table = Table(title="Ranked Patents")
    table.add_column("Rank", justify="right")
    table.add_column("Patent", style="cyan")
    for category in Category:
        table.add_column(category.display_name, justify="right")
    table.add_column("Total", justify="right", style="bold")

    for rank, record in enumerate(rank_results(response.results), start=1):
        table.add_row(
            str(rank),
            record.id,
            *(f"{score.score:.0f}" for _, score in record.per_category.items()),
            f"{record.weighted_total:.0f}",
        )
    console.print(table)

    if verbose:
        for record in response.results:
            console.print()
            console.print(f"[bold]Patent {record.id}[/bold] (total {record.weighted_total:.1f})")
            for category, score in record.per_category.items():
                console.print(f"  [{category.display_name}] {score.score}: {escape(score.rationale)}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Rank patents against a problem statement")
    parser.add_argument("request", type=Path, help="BatchRequest JSON file")
    parser.add_argument("--output", type=Path, help="Save the BatchResponse to a JSON file")
    parser.add_argument("--chunk-size", type=int, help="Patents per LLM call (default: 2)")
    parser.add_argument("--mock", action="store_true", help="Use deterministic mock scores even if an API key is set")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show rationales and debug logging")
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        settings = load_settings().with_overrides(chunk_size=args.chunk_size)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return EXIT_BAD_INPUT
    if args.mock:
        settings = replace(settings, api_key=None)

    configure_global_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        request = load_request(args.request)
    except (OSError, ValueError) as e:
        console.print(f"[red]Cannot read request:[/red] {escape(str(e))}")
        return EXIT_BAD_INPUT

    console.print("[bold]Patent Ranking[/bold]")
    orchestrator = ScoringOrchestrator(settings)
    try:
        response = orchestrator.score_batch(request, progress=show_progress)
    except PatentRankerError as e:
        logger.debug(f"Scoring failed: {e.to_dict()}")
        console.print(f"[red]{type(e).__name__}:[/red] {escape(e.message)}")
        return EXIT_SCORING_ERROR

    display_results(response, verbose=args.verbose)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(response.to_json_dict(), indent=2))
        console.print(f"\nResults saved to: {args.output}")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
