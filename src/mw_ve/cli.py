"""CLI for running edit checks outside the editor.

Commands:
    mw-ve editcheck   Check whether added content needs a reference
    mw-ve squash      Print the squashed transaction of a session history

Inputs:
    --before/--after  Two wikitext files; the edit is their diff
    --history         JSON session: {"namespace", "data" | "wikitext", "transactions"}

Examples:
    # Compare two revisions of an article
    mw-ve editcheck --before old.wiki --after new.wiki

    # Replay a recorded editing session
    mw-ve editcheck --history session.json --json

    # Inspect the squashed history
    mw-ve squash --history session.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

from mw_ve.config import config

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Module-level logger
logger = logging.getLogger("mw_ve")


def _setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path:
    """Configure logging with file and console handlers.

    Args:
        log_dir: Directory for log files (default: ./logs/)
        verbose: If True, set console to DEBUG level

    Returns:
        Path to the log file
    """
    if log_dir is None:
        log_dir = Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create timestamped log file
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"mw_ve_{timestamp}.log"

    logger.setLevel(logging.DEBUG)

    # File handler - captures everything with full detail
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose unless --verbose flag
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    # Clear existing handlers and add new ones
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info(f"Logging initialized - log file: {log_file}")
    return log_file


def _log_exception(msg: str, exc: Exception) -> None:
    """Log an exception with full traceback to file.

    Args:
        msg: Context message describing what failed
        exc: The exception that was raised
    """
    logger.error(f"{msg}: {type(exc).__name__}: {exc}")
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Integer expected, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1, got {number}")
    return number


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--before",
        type=Path,
        help="Wikitext file before the edit",
    )
    parser.add_argument(
        "--after",
        type=Path,
        help="Wikitext file after the edit",
    )
    parser.add_argument(
        "--history",
        type=Path,
        help="JSON file with the document and its transaction history",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        help="Directory for log files (default: logs/)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output on the console",
    )


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="mw-ve",
        description="VisualEditor edit checks for MediaWiki content",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================================================
    # EDITCHECK SUBCOMMAND
    # =========================================================================
    editcheck_parser = subparsers.add_parser(
        "editcheck",
        help="Check whether added content needs a reference",
        description=(
            "Replay an edit and report whether it inserted a long run of content "
            "without a citation."
        ),
    )
    _add_input_arguments(editcheck_parser)
    editcheck_parser.add_argument(
        "--namespace",
        type=int,
        default=None,
        help=f"Namespace of the edited page (default: from history, else {config.main_namespace})",
    )
    editcheck_parser.add_argument(
        "--min-chars",
        type=_positive_int,
        default=config.minimum_characters,
        help=f"Shortest insertion that needs a reference (default: {config.minimum_characters})",
    )
    editcheck_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )

    # =========================================================================
    # SQUASH SUBCOMMAND
    # =========================================================================
    squash_parser = subparsers.add_parser(
        "squash",
        help="Print the squashed transaction of an editing session",
    )
    _add_input_arguments(squash_parser)

    return parser


# =============================================================================
# INPUT LOADING
# =============================================================================


def _load_session(args: argparse.Namespace) -> tuple[Any, int | None]:
    """Build a Document with its history from the command line inputs.

    Returns:
        (document, namespace from the history file or None)

    Raises:
        ValueError: If the inputs are missing or invalid
        OSError: If an input file can't be read
        TransactionError: If a transaction doesn't fit the document
    """
    from mw_ve.editcheck import Document, LinearData, Transaction, from_wikitext

    if args.history is not None:
        if args.before is not None or args.after is not None:
            raise ValueError("--history cannot be combined with --before/--after")
        session: dict[str, Any] = json.loads(args.history.read_text(encoding="utf-8"))
        if "data" in session:
            document = Document(LinearData(session["data"]))
        elif "wikitext" in session:
            document = Document(from_wikitext(session["wikitext"]))
        else:
            raise ValueError("History must contain 'data' or 'wikitext'")
        for raw in session.get("transactions", []):
            document.commit(Transaction.from_dict(raw))
        namespace = session.get("namespace")
        return document, int(namespace) if namespace is not None else None

    if args.before is None or args.after is None:
        raise ValueError("Either --history or both --before and --after are required")

    before = from_wikitext(args.before.read_text(encoding="utf-8"))
    after = from_wikitext(args.after.read_text(encoding="utf-8"))
    document = Document(before)
    document.commit(Transaction.new_from_diff(before.items(), after.items()))
    return document, None


# =============================================================================
# COMMANDS
# =============================================================================


def _run_editcheck(args: argparse.Namespace) -> int:
    """Run the reference check.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    from mw_ve.editcheck import ContentRange, find_unreferenced_insertions
    from mw_ve.editcheck.transactions import TransactionError

    try:
        document, history_namespace = _load_session(args)
    except (OSError, ValueError, TransactionError) as e:
        _log_exception("Could not load editing session", e)
        print(f"Error: {e}")
        return 1

    namespace = args.namespace
    if namespace is None:
        namespace = history_namespace if history_namespace is not None else config.main_namespace

    # Only articles are checked; the history is squashed once
    squash_errors: list[Exception] = []
    insertions: list[ContentRange] = []
    if namespace == config.main_namespace:
        insertions = find_unreferenced_insertions(
            document,
            minimum_characters=args.min_chars,
            on_squash_error=squash_errors.append,
        )
    needs_reference = bool(insertions)

    if args.json:
        result = {
            "namespace": namespace,
            "needs_reference": needs_reference,
            "insertions": [[r.start, r.end] for r in insertions],
            "squash_error": str(squash_errors[0]) if squash_errors else None,
        }
        print(json.dumps(result, indent=2))
        return 0

    print("Edit Check")
    print("=" * 40)
    print(f"Namespace:  {namespace}")
    print(f"Document:   {document.content_length()} items")
    if squash_errors:
        print(f"Squash:     failed ({squash_errors[0]})")
    for r in insertions:
        text = document.data.get_text(r.start, r.end)
        print(f"Insertion:  [{r.start}, {r.end}) {r.length} items: {text[:60]!r}")
    print(f"Result:     {'needs reference' if needs_reference else 'ok'}")
    return 0


def _run_squash(args: argparse.Namespace) -> int:
    """Print the squashed transaction as JSON.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    from mw_ve.editcheck import SquashError
    from mw_ve.editcheck.transactions import TransactionError

    try:
        document, _ = _load_session(args)
        squashed = document.squash_history()
    except (OSError, ValueError, TransactionError, SquashError) as e:
        _log_exception("Could not squash editing session", e)
        print(f"Error: {e}")
        return 1

    print(json.dumps(squashed.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Run the mw-ve command line."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _setup_logging(args.log_dir, args.verbose)

    if args.command == "editcheck":
        exit_code = _run_editcheck(args)
        sys.exit(exit_code)
    elif args.command == "squash":
        exit_code = _run_squash(args)
        sys.exit(exit_code)
    else:
        # Unknown subcommand (shouldn't happen with argparse)
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
