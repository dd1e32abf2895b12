"""Command-line replay of ledger operations for water_credit."""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import sys
from pathlib import Path

from .config_loader import load_config
from .dispatch import LedgerDispatcher
from .ledger import TokenLedger
from .logging_pipeline import (
    PACKAGE_LOGGER_NAME,
    configure_plain_logging,
    configure_structured_logging,
    shutdown_listeners,
)


def _read_stdin() -> str | None:
    """Read the operation batch from stdin if available."""
    try:
        if sys.stdin and not sys.stdin.isatty():
            return sys.stdin.read()
    except IOError as e:
        print(f"Error reading stdin: {e}", file=sys.stderr)
    return None


def _load_operations(
    path: str | None, stdin_payload: str | None
) -> list[dict[str, object]]:
    """Load the JSON operation list from file or stdin."""
    if path:
        return _parse_operations(Path(path).read_text(encoding="utf-8"))
    if stdin_payload:
        return _parse_operations(stdin_payload)
    raise ValueError("No input provided. Use --input or pipe JSON via stdin.")


def _parse_operations(payload: str) -> list[dict[str, object]]:
    """Parse a JSON string and ensure it is a list of objects."""

    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("Input JSON must be an array of operations.")
    operations: list[dict[str, object]] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Operation {index} must be a JSON object.")
        operations.append({str(key): value for key, value in item.items()})
    return operations


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="water-credit",
        description="Replay water credit ledger operations against a fresh ledger.",
    )
    parser.add_argument(
        "--input",
        "-i",
        help="Path to a JSON array of operations. If omitted, reads from stdin.",
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to a JSON or YAML configuration file.",
    )
    parser.add_argument(
        "--admin",
        help="Initial admin identity. Overrides configuration and environment.",
    )
    parser.add_argument(
        "--authority",
        action="append",
        default=None,
        help="Genesis minting authority. May be repeated.",
    )
    parser.add_argument(
        "--no-enforce-sender",
        action="store_true",
        help="Trust the declared transfer sender instead of the caller.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit structured JSON logs on stderr.",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Quiet mode: suppress output, just return exit code.",
    )
    return parser


def _configure_logging(
    level_name: str, json_output: bool
) -> list[logging.handlers.QueueListener]:
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    if json_output:
        return [configure_structured_logging(logger, level=level)]
    configure_plain_logging(logger, level=level)
    return []


def main(argv: list[str] | None = None) -> int:
    """Replay operations and print results plus the final ledger state."""
    parser = _build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    original_handlers = list(package_logger.handlers)
    listeners: list[logging.handlers.QueueListener] = []
    try:
        config = load_config(args.config)
        listeners = _configure_logging(
            config.logging.level, args.log_json or config.logging.json
        )

        ledger = TokenLedger(
            args.admin or config.genesis.admin,
            authorities=(
                args.authority
                if args.authority is not None
                else config.genesis.authorities
            ),
            max_amount=config.limits.max_amount,
        )
        dispatcher = LedgerDispatcher(
            ledger,
            enforce_sender_match=(
                config.dispatch.enforce_sender_match and not args.no_enforce_sender
            ),
        )

        operations = _load_operations(
            args.input, None if args.input else _read_stdin()
        )
        results = dispatcher.dispatch_batch(operations)
        snapshot = ledger.snapshot()

        if not args.quiet:
            print(
                json.dumps(
                    {
                        "results": [result.to_wire() for result in results],
                        "balances": dict(sorted(snapshot.balances.items())),
                        "total_supply": snapshot.total_supply,
                        "admin": snapshot.admin,
                        "authorities": sorted(snapshot.authorities),
                    },
                    separators=(",", ":"),
                )
            )

        return 0 if all(result.is_ok for result in results) else 1

    except Exception as exc:
        if not args.quiet:
            print(str(exc), file=sys.stderr)
        return 1
    finally:
        shutdown_listeners(listeners)
        for handler in list(package_logger.handlers):
            if handler not in original_handlers:
                package_logger.removeHandler(handler)


if __name__ == "__main__":
    raise SystemExit(main())
