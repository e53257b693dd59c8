"""CLI entry point for the talent funnel candidate search."""

import argparse
import asyncio
import json
import logging
import sys

from talent_funnel.core.config import Settings
from talent_funnel.core.db import count_candidates, fetch_candidates, init_db, upsert_candidate
from talent_funnel.core.schemas import Candidate, ResultSnapshot
from talent_funnel.pipeline.search import run_search
from talent_funnel.store.loader import load_candidates_file
from talent_funnel.store.seeder import generate_candidates


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Talent funnel - rank a candidate pool against a free-text query",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- search subcommand ---
    search_parser = subparsers.add_parser("search", help="Search candidates for a query")
    search_parser.add_argument("query", help="Free-text search query")
    source = search_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--candidates",
        help="Path to a YAML or JSON file of candidate records",
    )
    source.add_argument(
        "--project",
        help="Project id to load candidates from the SQLite store",
    )
    search_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in settings)",
    )
    search_parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Use rule-based extraction and scoring only",
    )
    search_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export final results to format (json)",
    )
    search_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- seed subcommand ---
    seed_parser = subparsers.add_parser(
        "seed",
        help="Fill the SQLite store with synthetic healthcare candidates",
    )
    seed_parser.add_argument("--project", required=True, help="Project id to seed")
    seed_parser.add_argument(
        "--count",
        type=int,
        default=100,
        help="Number of candidates to generate (default: 100)",
    )
    seed_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible pool",
    )
    seed_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in settings)",
    )
    seed_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    if path is None:
        return Settings()
    return Settings.from_yaml(path)


def export_results_json(snapshot: ResultSnapshot) -> str:
    """Export a result snapshot as a JSON string."""
    data = []
    for position, match in enumerate(snapshot.matches, start=1):
        c = match.candidate
        data.append({
            "position": position,
            "id": c.id,
            "name": c.name,
            "job_title": c.job_title,
            "location": c.location,
            "experience": c.experience,
            "availability": c.availability.value,
            "score": match.explanation.score,
            "category": match.explanation.category.value,
            "source": match.explanation.source,
            "reasons": match.explanation.reasons,
        })
    return json.dumps(data, indent=2)


def print_snapshot(snapshot: ResultSnapshot) -> None:
    """Print one progress line per emitted snapshot."""
    if snapshot.exhausted_stage is not None:
        return
    top = snapshot.matches[0] if snapshot.matches else None
    leader = f", top: {top.candidate.name or top.candidate.id} ({top.score:.0f})" if top else ""
    print(f"[{snapshot.batches_completed}/{snapshot.total_batches}] "
          f"{len(snapshot)} matches{leader}")


def load_pool(args: argparse.Namespace, settings: Settings) -> list[Candidate]:
    if args.candidates:
        return load_candidates_file(args.candidates)
    conn = init_db(settings.database.path)
    try:
        return fetch_candidates(conn, args.project)
    finally:
        conn.close()


def cmd_search(args: argparse.Namespace) -> None:
    """Handle search subcommand."""
    settings = load_settings(args.config)
    if args.no_llm:
        settings = settings.model_copy(
            update={"llm": settings.llm.model_copy(update={"enabled": False})},
        )
    pool = load_pool(args, settings)
    print(f"Searching {len(pool)} candidates for: {args.query}")

    outcome = asyncio.run(run_search(
        args.query,
        pool,
        settings=settings,
        on_snapshot=print_snapshot,
    ))

    snapshot = outcome.snapshot
    stats = outcome.stats
    print(f"\nSearch complete: {stats.pool_count} in pool, {stats.filtered_count} filtered, "
          f"{stats.forwarded_count} scored ({stats.deep_scored_count} deep, "
          f"{stats.fallback_count} fallback), {stats.final_count} matches.")

    if snapshot.no_matches:
        reason = f" (nothing left after {snapshot.exhausted_stage})" if snapshot.exhausted_stage else ""
        print(f"No matches{reason}")
        return

    for position, match in enumerate(snapshot.matches, start=1):
        c = match.candidate
        print(f"  {position:2d}. {match.score:5.1f} [{match.explanation.category.value}] "
              f"{c.name or c.id}, {c.job_title}, {c.location}")

    if args.export == "json":
        print(f"\n{export_results_json(snapshot)}")


def cmd_seed(args: argparse.Namespace) -> None:
    """Handle seed subcommand."""
    settings = load_settings(args.config)
    candidates = generate_candidates(args.count, args.seed)

    conn = init_db(settings.database.path)
    try:
        new_count = sum(upsert_candidate(conn, c, args.project) for c in candidates)
        total = count_candidates(conn, args.project)
    finally:
        conn.close()

    print(f"Seeded {new_count} new candidates into project '{args.project}' "
          f"({total} total) at {settings.database.path}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "seed":
        try:
            cmd_seed(args)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        try:
            cmd_search(args)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
