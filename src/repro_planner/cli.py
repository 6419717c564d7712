"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from repro_planner import __version__
from repro_planner.config import get_settings
from repro_planner.engine.projection import project_upcoming_cycle_starts
from repro_planner.engine.timeline import SeedType, build_timeline_from_birth, build_timeline_from_seed, flatten_timeline
from repro_planner.flows.retry_overrides import retry_pending_overrides
from repro_planner.schemas import ReproSummary
from repro_planner.services.settings_store import load_validation_config
from repro_planner.validation import (
    PlanActualDates,
    ValidationContext,
    merge_validation_config,
    validate_breeding_dates,
)

logger = logging.getLogger(__name__)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        msg = f"not a YYYY-MM-DD date: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="repro-planner",
        description="Reproductive-cycle projection and breeding-plan date validation",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'project' command - upcoming cycle starts for one female
    project_parser = subparsers.add_parser("project", help="Project upcoming cycle starts")
    project_parser.add_argument("--species", default="DOG", help="Species code (default: DOG)")
    project_parser.add_argument("--animal-id", default="cli", help="Animal identifier for output")
    project_parser.add_argument(
        "--cycle-start",
        type=_iso_date,
        action="append",
        default=[],
        dest="cycle_starts",
        help="Recorded cycle start (repeatable)",
    )
    project_parser.add_argument("--dob", type=_iso_date, default=None, help="Date of birth")
    project_parser.add_argument("--last-birth", type=_iso_date, default=None, help="Most recent birth")
    project_parser.add_argument("--override", type=float, default=None, help="Cycle length override in days")
    project_parser.add_argument("--today", type=_iso_date, default=None, help="Reference date (default: today)")
    project_parser.add_argument("--horizon", type=int, default=None, help="Horizon in months")
    project_parser.add_argument("--max-count", type=int, default=None, help="Maximum dates returned")

    # 'timeline' command - phase windows from a seed
    timeline_parser = subparsers.add_parser("timeline", help="Build the phase timeline from a seed date")
    timeline_parser.add_argument("seed", type=str, help="Seed cycle start (or birth with --from-birth)")
    timeline_parser.add_argument("--species", default="DOG", help="Species code (default: DOG)")
    timeline_parser.add_argument(
        "--seed-type",
        choices=[SeedType.ACTUAL.value, SeedType.PROJECTED.value],
        default=SeedType.ACTUAL.value,
        help="Whether the seed is a locked or a projected cycle start",
    )
    timeline_parser.add_argument("--from-birth", action="store_true", help="Treat the seed as an actual birth")
    timeline_parser.add_argument("--today", type=_iso_date, default=None, help="Reference date (default: today)")

    # 'validate' command - plan dates from a JSON file
    validate_parser = subparsers.add_parser("validate", help="Validate a JSON file of plan dates")
    validate_parser.add_argument("file", type=Path, help='JSON with "dates" and "context" objects')
    validate_parser.add_argument("--tenant", default=None, help="Load this tenant's config from the settings store")
    validate_parser.add_argument("--today", type=_iso_date, default=None, help="Reference date (default: today)")

    # 'retry-overrides' command - drain the pending-override queue
    retry_parser = subparsers.add_parser("retry-overrides", help="Retry override-log writes that failed")
    retry_parser.add_argument("--data-dir", type=Path, default=None, help="Queue location (default: data_dir)")

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"API: {settings.api_base_url}")
    print(f"Data dir: {settings.data_dir}")
    return 0


def cmd_project(args: argparse.Namespace) -> int:
    """Handle the 'project' command."""
    settings = get_settings()
    summary = ReproSummary(
        animal_id=args.animal_id,
        species=args.species,
        dob=args.dob,
        last_birth=args.last_birth,
        cycle_starts_asc=args.cycle_starts,
        cycle_len_override_days=args.override,
        today=args.today or date.today(),
    )
    result = project_upcoming_cycle_starts(
        summary,
        horizon_months=settings.projection_horizon_months if args.horizon is None else args.horizon,
        max_count=settings.projection_max_count if args.max_count is None else args.max_count,
    )
    _print_json(
        {
            "animalId": summary.animal_id,
            "species": summary.species,
            "effective": asdict(result.effective),
            "stepDays": result.step_days,
            "horizonEnd": result.horizon_end,
            "projected": [asdict(p) for p in result.projected],
        }
    )
    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    """Handle the 'timeline' command."""
    summary = ReproSummary(animal_id="cli", species=args.species, today=args.today or date.today())
    try:
        if args.from_birth:
            timeline = build_timeline_from_birth(summary, args.seed)
        else:
            timeline = build_timeline_from_seed(summary, args.seed, SeedType(args.seed_type))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_json({"seedCycleStart": timeline.seed_cycle_start, "explain": timeline.explain, **flatten_timeline(timeline)})
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the 'validate' command. Exits 1 when the plan has errors."""
    try:
        payload = json.loads(args.file.read_text())
    except (OSError, ValueError) as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 2
    if not isinstance(payload, dict):
        print(f"Error: {args.file} must hold a JSON object", file=sys.stderr)
        return 2

    context = dict(payload.get("context") or {})
    if args.today is not None:
        context["today"] = args.today
    context.setdefault("today", date.today())
    try:
        if args.tenant is not None:
            context["config"] = load_validation_config(args.tenant)
        else:
            context["config"] = merge_validation_config(context.get("config"))
        dates = PlanActualDates.model_validate(payload.get("dates") or {})
        ctx = ValidationContext.model_validate(context)
    except PydanticValidationError as e:
        print(f"Error: invalid input: {e}", file=sys.stderr)
        return 2

    result = validate_breeding_dates(dates, ctx)
    logger.debug("Validated %s: %d errors, %d warnings", args.file, len(result.errors), len(result.warnings))
    _print_json(result.to_json_dict())
    return 0 if result.valid else 1


def cmd_retry_overrides(args: argparse.Namespace) -> int:
    """Handle the 'retry-overrides' command."""
    data_dir = str(args.data_dir) if args.data_dir is not None else None
    summary = retry_pending_overrides(data_dir=data_dir)
    _print_json(summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    level = logging.DEBUG if args.debug or settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "project": cmd_project,
        "timeline": cmd_timeline,
        "validate": cmd_validate,
        "retry-overrides": cmd_retry_overrides,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1
