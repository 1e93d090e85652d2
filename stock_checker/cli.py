"""Command-line entrypoint for stock reconciliation."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stock_checker.application.use_cases import ReconcileStockUseCase, ReconciliationContext
from stock_checker.config import SETTINGS, configure_logging
from stock_checker.domain.models import Tier
from stock_checker.presentation.report import render_csv, render_details, render_xlsx

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rate reported stock on hand against the movement history, without a count"
    )
    parser.add_argument("movements", type=Path, help="Movement log export (xlsx, xls or csv)")
    parser.add_argument("snapshot", type=Path, help="Stock report export in block format (xlsx, xls or csv)")
    parser.add_argument("--material-pad", type=int, help=f"Zero-pad material numbers (default {SETTINGS.material_pad_width})")
    parser.add_argument(
        "--sloc-pad", type=int, help=f"Zero-pad storage locations (default {SETTINGS.storage_location_pad_width})"
    )
    parser.add_argument("--tolerance", type=float, help=f"Allowed |delta| for a match (default {SETTINGS.tolerance})")
    parser.add_argument("--output", type=Path, help="Write results to .xlsx or .csv")
    parser.add_argument("--details", metavar="KEY", help="Print the explanation for one PLANT|MATERIAL|SLOC key")
    parser.add_argument("--log-level", default=SETTINGS.log_level, help="Logging level (default INFO)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.log_level.upper())

    try:
        settings = SETTINGS.override(
            material_pad_width=args.material_pad,
            storage_location_pad_width=args.sloc_pad,
            tolerance=args.tolerance,
        )
        context = ReconciliationContext.from_sources(args.movements, args.snapshot, settings)
        response = ReconcileStockUseCase(context).execute()
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    report = response.report
    summary = report.summary
    print("Reconciliation Summary")
    print("======================")
    print(f"Movement rows: {summary.total_movements}")
    print(f"Snapshot records: {summary.total_snapshot}")
    print(f"Keys matched: {summary.matched_keys}")
    for tier in Tier:
        print(f"{tier.label}: {summary.count(tier)}")

    if args.details:
        row = report.find(args.details)
        if row is None:
            print(f"\nNo result for key {args.details}")
        else:
            print()
            print(render_details(row))

    if args.output:
        if args.output.suffix.lower() == ".csv":
            args.output.write_bytes(render_csv(report.rows))
        else:
            args.output.write_bytes(render_xlsx(report.rows))
        print(f"\nResults written to {args.output}")

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
