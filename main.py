"""CLI entry point for the pillar matching engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from pillar_match.core.config import MethodologyConfig, load_methodology
from pillar_match.core.errors import MatchingError
from pillar_match.core.pillars import Vocabulary
from pillar_match.core.schemas import CandidateProfile, JobProfile, MatchResult
from pillar_match.pipeline.aggregator import aggregate_candidate_pillars, aggregate_job_pillars
from pillar_match.pipeline.archetype import describe_archetype
from pillar_match.pipeline.assembler import assemble_match, match_many

SAMPLES_DIR = Path(__file__).parent / "config" / "samples"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Pillar matching engine - score candidates against jobs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Score one candidate against one job")
    match_parser.add_argument("--candidate", help="Path to candidate YAML record")
    match_parser.add_argument("--job", help="Path to job YAML record")
    match_parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the sample records in config/samples/ and flag the result as a demo",
    )
    _add_common(match_parser)

    # --- shortlist subcommand ---
    shortlist_parser = subparsers.add_parser(
        "shortlist",
        help="Score one candidate against a list of jobs, best first",
    )
    shortlist_parser.add_argument("--candidate", required=True, help="Path to candidate YAML record")
    shortlist_parser.add_argument(
        "--jobs",
        required=True,
        help="Path to YAML list of jobs (top-level 'jobs:' key or a bare list)",
    )
    shortlist_parser.add_argument(
        "--top",
        type=int,
        default=None,
        help="Only print the N best matches",
    )
    _add_common(shortlist_parser)

    # --- classify subcommand ---
    classify_parser = subparsers.add_parser(
        "classify",
        help="Aggregate assessment answers into pillars and an archetype",
    )
    classify_parser.add_argument(
        "--responses",
        required=True,
        help="Path to YAML mapping of question id -> score (1-5)",
    )
    classify_parser.add_argument(
        "--side",
        required=True,
        choices=[v.value for v in Vocabulary],
        help="Which assessment the answers belong to",
    )
    _add_common(classify_parser)

    args = parser.parse_args(argv)

    if args.command == "match" and not args.demo and not (args.candidate and args.job):
        parser.error("match requires --candidate and --job (or --demo)")

    return args


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to methodology YAML (default: built-in methodology)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def print_match(result: MatchResult) -> None:
    """Print a human-readable summary of one match."""
    demo = " [demo]" if result.is_demo_match else ""
    print(f"{result.candidate_id} -> {result.job_id}: {result.match_percentage}%{demo}")
    if result.compatibility_score is not None:
        print(
            f"  Pillar compatibility: {result.compatibility_score}% "
            f"({result.candidate_archetype} / {result.job_archetype}, "
            f"boost +{result.archetype_boost})",
        )
        for pair in result.pillar_breakdown:
            print(
                f"    {pair.candidate_pillar} {pair.candidate_value:.2f} vs "
                f"{pair.job_pillar} {pair.job_value:.2f}: {pair.similarity:.0f}%",
            )
    if result.qualification_score is not None:
        print(f"  Qualification: {result.qualification_score}%")
        for name, factor in result.factors_analyzed.items():
            print(f"    {name}: {factor['score']:.0f}% (weight {factor['weight']:.2f})")
    print(f"  {result.explanation}")


def cmd_match(args: argparse.Namespace, config: MethodologyConfig) -> None:
    """Handle match subcommand."""
    if args.demo:
        candidate_path = args.candidate or SAMPLES_DIR / "candidate.yaml"
        job_path = args.job or SAMPLES_DIR / "job.yaml"
    else:
        candidate_path, job_path = args.candidate, args.job

    candidate = CandidateProfile.from_yaml(candidate_path)
    job = JobProfile.from_yaml(job_path)
    result = assemble_match(candidate, job, config, is_demo_match=args.demo)

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print_match(result)


def cmd_shortlist(args: argparse.Namespace, config: MethodologyConfig) -> None:
    """Handle shortlist subcommand."""
    candidate = CandidateProfile.from_yaml(args.candidate)
    jobs = JobProfile.list_from_yaml(args.jobs)
    print(f"Scoring {candidate.id} against {len(jobs)} jobs...", file=sys.stderr)

    results = match_many(candidate, jobs, config)
    ranked = sorted(results, key=lambda r: r.match_percentage, reverse=True)
    if args.top is not None:
        ranked = ranked[: args.top]

    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in ranked], indent=2, ensure_ascii=False))
        return

    titles = {job.id: job.title for job in jobs}
    for position, result in enumerate(ranked, start=1):
        print(f"{position:>2}. {result.match_percentage:>3}%  {result.job_id}  {titles.get(result.job_id, '')}")


def cmd_classify(args: argparse.Namespace, config: MethodologyConfig) -> None:
    """Handle classify subcommand."""
    path = Path(args.responses)
    if not path.exists():
        msg = f"Responses file not found: {path}"
        raise FileNotFoundError(msg)
    raw: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        msg = f"{path} must contain a mapping of question id -> score"
        raise ValueError(msg)
    responses = {str(qid): score for qid, score in raw.items()}

    vocabulary = Vocabulary(args.side)
    if vocabulary is Vocabulary.CANDIDATE:
        pillars = aggregate_candidate_pillars(responses, config)
    else:
        pillars = aggregate_job_pillars(responses, config)
    described = describe_archetype(pillars, vocabulary, config)

    if args.json:
        payload = {"pillar_scores": pillars, **described.model_dump(mode="json")}
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for pillar, score in pillars.items():
        print(f"  {pillar}: {score:.2f}")
    print(f"Archetype: {described.archetype} (confidence: {described.confidence})")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    handlers = {
        "match": cmd_match,
        "shortlist": cmd_shortlist,
        "classify": cmd_classify,
    }
    try:
        config = load_methodology(args.config)
        handlers[args.command](args, config)
    except (FileNotFoundError, ValueError, MatchingError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
