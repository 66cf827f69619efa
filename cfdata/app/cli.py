"""Command-line interface for generating and removing Contentful test data."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Mapping, Sequence

from .. import __version__
from ..platforms.contentful import (
    ContentfulAccess,
    ContentfulApiError,
    ContentfulCredentialStore,
    ContentfulManagementClient,
    CredentialsError,
    ErrorKind,
)
from ..services import SetupWorkflow, TeardownWorkflow
from ..settings import MAX_SETUP_COUNT, AppConfig, ConfigError, load_config
from ..utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

DEFAULT_TAG = "generated"
DEFAULT_LOCALE = "en-US"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_AUTH = 3
EXIT_NOT_FOUND = 4
EXIT_TRANSPORT = 5
EXIT_VALIDATION = 6

_EXIT_CODES = {
    ErrorKind.AUTH: EXIT_AUTH,
    ErrorKind.NOT_FOUND: EXIT_NOT_FOUND,
    ErrorKind.CONFLICT: EXIT_NOT_FOUND,
    ErrorKind.TRANSPORT: EXIT_TRANSPORT,
    ErrorKind.RATE_LIMIT: EXIT_TRANSPORT,
    ErrorKind.VALIDATION: EXIT_VALIDATION,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"cfdata: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        console_level=config.logging.console_level,
        structured=not args.log_plain,
    )

    handler: Callable[[argparse.Namespace, AppConfig], int] | None = getattr(
        args, "handler", None
    )
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_FAILURE

    try:
        return handler(args, config)
    except CredentialsError as exc:
        LOGGER.error(str(exc), extra={"event": "cli.error", "command": args.command})
        print(f"cfdata: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except ContentfulApiError as exc:
        LOGGER.error(
            "Contentful request failed",
            extra={
                "event": "cli.error",
                "command": args.command,
                "kind": exc.kind.value,
                "status": exc.status,
                "details": exc.details,
            },
        )
        print(f"cfdata: {args.command} failed ({exc.kind.value}): {exc}", file=sys.stderr)
        return exit_code_for(exc)


def exit_code_for(exc: ContentfulApiError) -> int:
    return _EXIT_CODES.get(exc.kind, EXIT_FAILURE)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cfdata", description="Manage Contentful test data")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text console logs instead of JSON",
    )

    subparsers = parser.add_subparsers(dest="command")

    teardown_parser = subparsers.add_parser(
        "teardown", help="Remove all previously generated test data"
    )
    teardown_parser.add_argument(
        "-t",
        "--tag",
        default=DEFAULT_TAG,
        help="id of the pre-existing tag used to find items to delete",
    )
    teardown_parser.set_defaults(handler=_handle_teardown)

    setup_parser = subparsers.add_parser("setup", help="Add new generated test data")
    setup_parser.add_argument(
        "-l",
        "--locale",
        default=DEFAULT_LOCALE,
        help="locale to generate test data for",
    )
    setup_parser.add_argument(
        "-t",
        "--tag",
        default=DEFAULT_TAG,
        help="id of the pre-existing tag to apply to created items",
    )
    setup_parser.add_argument(
        "-n",
        "--count",
        type=_count,
        default=None,
        help=f"number of article/address/image triples to create, 1 to {MAX_SETUP_COUNT} "
        "(default from config)",
    )
    setup_parser.set_defaults(handler=_handle_setup)

    return parser


def _count(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"count must be at least 1, got {number}")
    if number > MAX_SETUP_COUNT:
        raise argparse.ArgumentTypeError(
            f"count must be at most {MAX_SETUP_COUNT}, got {number}"
        )
    return number


def _build_access(config: AppConfig, env: Mapping[str, str] | None = None) -> ContentfulAccess:
    credentials = ContentfulCredentialStore(env=env).load()
    client = ContentfulManagementClient.from_config(config, credentials)
    return ContentfulAccess.from_config(client, config)


def _handle_setup(args: argparse.Namespace, config: AppConfig) -> int:
    access = _build_access(config)
    workflow = SetupWorkflow.from_settings(access, config.setup, count=args.count)
    LOGGER.info(
        "Running setup",
        extra={"event": "cli.command", "command": "setup", "tag": args.tag, "locale": args.locale},
    )
    result = workflow.run(args.tag, args.locale)
    print(
        f"Published {len(result.entries)} entries and {len(result.assets)} assets "
        f"tagged '{result.tag}'"
    )
    return EXIT_OK


def _handle_teardown(args: argparse.Namespace, config: AppConfig) -> int:
    access = _build_access(config)
    workflow = TeardownWorkflow(access)
    LOGGER.info(
        "Running teardown",
        extra={"event": "cli.command", "command": "teardown", "tag": args.tag},
    )
    result = workflow.run(args.tag)
    print(
        f"Removed {len(result.entry_ids)} entries and {len(result.asset_ids)} assets "
        f"tagged '{result.tag}'"
    )
    return EXIT_OK


__all__ = ["main", "exit_code_for"]
