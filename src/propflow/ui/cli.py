# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from propflow.adapters.trace import (
    events_to_json,
    parse_signal,
    parse_suppressions,
    report_to_json,
    trace_to_json,
)
from propflow.app import evaluate_property, list_property_events
from propflow.config import configure_logging
from propflow.domain.orchestration import EvaluationRequest, system_suppressions_from_signal

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate property orchestration rules")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate = subparsers.add_parser("evaluate", help="Evaluate a property signal snapshot")
    evaluate.add_argument("--property-id", type=str, required=True, help="Property identifier")
    evaluate.add_argument(
        "--signals",
        type=Path,
        required=True,
        help="Path to a JSON object holding the property's signal snapshot",
    )
    evaluate.add_argument(
        "--suppressions",
        type=Path,
        help="Path to a JSON array of caller-supplied suppressions",
    )
    evaluate.add_argument(
        "--bucket",
        type=str,
        help="Time bucket label (derived from the evaluation time when omitted)",
    )
    evaluate.add_argument(
        "--evaluated-at",
        type=str,
        help="ISO-8601 timestamp (UTC if no offset) to evaluate at (defaults to now)",
    )
    evaluate.add_argument(
        "--execute",
        action="store_true",
        help="Persist the planned actions after evaluation",
    )
    evaluate.add_argument(
        "--created-by",
        type=str,
        help="User id recorded on events created by this run",
    )

    events = subparsers.add_parser("events", help="List stored orchestration events")
    events.add_argument("--property-id", type=str, required=True, help="Property identifier")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _load_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _build_request(args: argparse.Namespace) -> EvaluationRequest:
    signal_payload = parse_signal(_load_json(args.signals))
    supplied = parse_suppressions(_load_json(args.suppressions)) if args.suppressions else ()
    return EvaluationRequest(
        property_id=args.property_id,
        signal=signal_payload,
        suppressions=(*supplied, *system_suppressions_from_signal(signal_payload)),
        bucket=args.bucket,
        evaluated_at=_parse_iso_datetime(args.evaluated_at) if args.evaluated_at else None,
    )


def _emit(document: object) -> None:
    print(json.dumps(document, indent=2, sort_keys=False))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    request: EvaluationRequest | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "evaluate":
            request = _build_request(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "evaluate" and request is not None:
            trace, report = evaluate_property(
                request,
                execute=parsed_args.execute,
                created_by=parsed_args.created_by,
            )
            document: dict[str, Any] = {"trace": trace_to_json(trace)}
            if report is not None:
                document["execution"] = report_to_json(report)
            _emit(document)
        elif parsed_args.command == "events":
            _emit(events_to_json(list_property_events(parsed_args.property_id)))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during orchestration")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
