from pathlib import Path
import sys
from typing import Any, Dict

from shelfwise.errors import PartialBatchFailure, ValidationError
from shelfwise.execute.journaling import get_journal
from shelfwise.execute.orchestrator import BatchOrchestrator
from shelfwise.schemas import ShelfConfig
from shelfwise.state.io import (
    ensure_state_dir,
    load_directives,
    load_directives_csv,
    write_report_csv,
)
from .common import commit_store, open_store


def run(args, config: ShelfConfig) -> Dict[str, Any]:
    """
    classify-batch command entry point.

    Args:
        args: argparse namespace with:
            - input: JSON array, path to a JSON file, or "-" for stdin
            - csv: path to a directive CSV (alternative to --input)
            - strict: report success=false when any directive failed
            - report_csv: optional path for a per-directive CSV report
        config: loaded ShelfConfig
    """
    if bool(args.input) == bool(args.csv):
        raise ValidationError("Provide exactly one of --input or --csv")

    if args.csv:
        directives = load_directives_csv(Path(args.csv), config.create_missing)
        source = args.csv
    else:
        directives = load_directives(args.input)
        source = "stdin" if args.input == "-" else "input"

    print(f"[shelf] classify-batch: {len(directives)} directive(s) from {source}", file=sys.stderr)

    store = open_store(config)
    journal = get_journal(ensure_state_dir(config)) if config.journal else None

    orchestrator = BatchOrchestrator(
        store,
        journal=journal,
        create_missing_default=config.create_missing,
    )
    try:
        report = orchestrator.classify_batch(directives)
    finally:
        # Directives that ran are committed even if a later one aborted the batch
        commit_store(store, config)

    if args.report_csv:
        write_report_csv(report, Path(args.report_csv))

    out = report.to_dict()
    if args.strict:
        try:
            report.raise_for_partial_failure()
        except PartialBatchFailure as e:
            out["success"] = False
            out["error"] = str(e)
    return out
