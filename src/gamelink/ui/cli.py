# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from gamelink.app import (
    cancel_import,
    decide,
    handle_action,
    import_status,
    load_catalog,
    pause_import,
    purge_imports,
    resume_import,
    show_prompt,
    start_import,
)
from gamelink.config import configure_logging
from gamelink.domain.errors import ReconciliationError, StaleOrForeignDecision
from gamelink.domain.importing import DecisionKind
from gamelink.domain.model import ImportKind
from gamelink.ui.prompt import decision_for, render_progress, render_prompt

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from gamelink.domain.importing import DecisionResult, PromptView

log = logging.getLogger(__name__)


def _add_identity(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--owner", required=True, help="Operator id owning the import")
    parser.add_argument(
        "--kind",
        type=ImportKind,
        choices=list(ImportKind),
        default=ImportKind.COMPLETIONATOR,
        help="Source format (default: %(default)s)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile game CSV exports with the catalog")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    start = subparsers.add_parser("start", help="Start a new import session")
    _add_identity(start)
    source = start.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="CSV file to import")
    source.add_argument("--url", type=str, help="URL of the CSV export to import")
    start.add_argument(
        "--auto",
        action="store_true",
        help="Commit leading rows with an unambiguous catalog match right away",
    )

    status = subparsers.add_parser("status", help="Show progress of the newest import")
    _add_identity(status)
    status.add_argument("--session", type=int, help="Import session id (default: newest)")

    for name, text in (
        ("resume", "Resume a paused import"),
        ("pause", "Pause the active import"),
        ("cancel", "Cancel the open import for good"),
    ):
        _add_identity(subparsers.add_parser(name, help=text))

    prompt = subparsers.add_parser("prompt", help="Show the current row of an import")
    prompt.add_argument("--owner", required=True, help="Operator id owning the import")
    prompt.add_argument("--session", type=int, required=True, help="Import session id")

    decision = subparsers.add_parser("decide", help="Decide the current row of an import")
    decision.add_argument("--owner", required=True, help="Operator id owning the import")
    decision.add_argument("--session", type=int, required=True, help="Import session id")
    decision.add_argument(
        "--item",
        type=int,
        required=True,
        help="Item number as shown in the prompt (1-based)",
    )
    decision.add_argument("action", type=DecisionKind, choices=list(DecisionKind))
    decision.add_argument(
        "value",
        nargs="?",
        help="Catalog id for select/manual, search text for query",
    )

    action = subparsers.add_parser("action", help="Apply an encoded transport action id")
    action.add_argument("--owner", required=True, help="Operator id submitting the action")
    action.add_argument("action_id", help="Action id as produced for the prompt")
    action.add_argument("value", nargs="?", help="Selected value or entered text")

    purge = subparsers.add_parser("purge", help="Delete import sessions past retention")
    purge.add_argument(
        "--older-than-days",
        type=int,
        help="Retention window in days (defaults to GAMELINK_RETENTION_DAYS)",
    )

    catalog = subparsers.add_parser("catalog-load", help="Load catalog entries from CSV")
    catalog.add_argument("--file", type=Path, required=True, help="Catalog CSV file")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "decide" and args.item < 1:
        raise ValueError("--item must be 1 or greater")
    if args.command == "purge" and args.older_than_days is not None and args.older_than_days < 0:
        raise ValueError("--older-than-days must be non-negative")


def _show_prompt(view: PromptView | None) -> None:
    if view is None:
        print("Nothing left to decide.")
        return
    print(render_prompt(view))


def _show_decision(result: DecisionResult | None) -> None:
    if result is None:
        print("Action ignored; it no longer applies.")
        return
    print(render_progress(result.progress))
    if result.prompt is not None:
        print(render_prompt(result.prompt))


def _run(args: argparse.Namespace) -> None:  # noqa: C901
    command = args.command
    if command == "start":
        result = start_import(
            owner_id=args.owner,
            kind=args.kind,
            path=args.file,
            url=args.url,
            auto_resolve=args.auto,
        )
        print(render_progress(result.progress))
        _show_prompt(result.prompt)
    elif command == "resume":
        _show_prompt(resume_import(owner_id=args.owner, kind=args.kind))
    elif command == "status":
        print(
            render_progress(
                import_status(owner_id=args.owner, kind=args.kind, session_id=args.session)
            )
        )
    elif command == "pause":
        print(render_progress(pause_import(owner_id=args.owner, kind=args.kind)))
    elif command == "cancel":
        print(render_progress(cancel_import(owner_id=args.owner, kind=args.kind)))
    elif command == "prompt":
        _show_prompt(show_prompt(owner_id=args.owner, session_id=args.session))
    elif command == "decide":
        _show_decision(
            decide(
                owner_id=args.owner,
                session_id=args.session,
                item_index=args.item - 1,
                decision=decision_for(args.action, args.value),
            )
        )
    elif command == "action":
        _show_decision(
            handle_action(operator_id=args.owner, action_id=args.action_id, value=args.value)
        )
    elif command == "purge":
        older_than = (
            timedelta(days=args.older_than_days) if args.older_than_days is not None else None
        )
        removed = purge_imports(older_than=older_than)
        print(f"Purged {removed} import session(s).")
    elif command == "catalog-load":
        loaded = load_catalog(path=args.file)
        print(f"Loaded {loaded} catalog entries.")
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(verbose=parsed_args.verbose)
    try:
        _run(parsed_args)
    except StaleOrForeignDecision as exc:
        log.info("Ignored: %s", exc)
    except ReconciliationError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except ValueError as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
