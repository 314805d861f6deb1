"""
Command-line entry point.

    astool get  -set NAMESPACE.SET [-file FILE | KEY ...]
    astool del  [-set NAMESPACE.SET] [-file FILE | KEY]
    astool scan -set NAMESPACE.SET

Records go to stdout as JSON lines, diagnostics to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from astool import __version__
from astool.batch import BatchProcessor, CommandContext
from astool.commands import delete_record, delete_records, get_records, scan_records
from astool.config import DEFAULT_DELETE_SET, DEFAULT_HOST, DEFAULT_PORT, split_namespace_set
from astool.exceptions import AstoolError, ConfigError, StoreConnectionError
from astool.metrics import InstrumentedStore, MetricsRecorder
from astool.store import connect

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

LOGGER_NAME = "astool"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Bare one-line messages on stderr. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


def _add_store_flags(p: argparse.ArgumentParser, set_default: str = "") -> None:
    p.add_argument("-set", "--set", dest="set", default=set_default, help="Aerospike NAMESPACE.SET")
    p.add_argument("-host", "--host", dest="host", default=DEFAULT_HOST, help="Aerospike hostname")
    p.add_argument("-port", "--port", dest="port", type=int, default=DEFAULT_PORT, help="Aerospike port number")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="astool", description="Bulk operations on Aerospike records")
    parser.add_argument("--version", action="store_true", help="show version")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    common.add_argument("--stats", action="store_true", help="log operation latencies on exit")

    sub = parser.add_subparsers(dest="command")

    get_p = sub.add_parser(
        "get",
        parents=[common],
        help="get Aerospike record",
        usage="%(prog)s -set NAMESPACE.SET [-file FILE | KEY ...]",
    )
    _add_store_flags(get_p)
    get_p.add_argument("-file", "--file", dest="file", default="", help="read keys of Records from file")
    get_p.add_argument("keys", nargs="*")
    get_p.set_defaults(handler=_run_get, subparser=get_p)

    del_p = sub.add_parser(
        "del",
        parents=[common],
        help="delete Aerospike record",
        usage="%(prog)s -set NAMESPACE.SET [-file FILE] [KEY]",
    )
    _add_store_flags(del_p, set_default=DEFAULT_DELETE_SET)
    del_p.add_argument("-file", "--file", dest="file", default="", help="read keys for deleting from file")
    del_p.add_argument("keys", nargs="*")
    del_p.set_defaults(handler=_run_del, subparser=del_p)

    scan_p = sub.add_parser(
        "scan",
        parents=[common],
        help="scan Aerospike record",
        usage="%(prog)s -set NAMESPACE.SET",
    )
    _add_store_flags(scan_p)
    scan_p.set_defaults(handler=_run_scan, subparser=scan_p)

    return parser


def _usage(args: argparse.Namespace, ctx: CommandContext, msg: Optional[str] = None) -> int:
    if msg:
        ctx.logger.error(msg)
    args.subparser.print_usage(sys.stderr)
    return EXIT_USAGE


def _check_flags(args: argparse.Namespace):
    if not args.set or not args.host or not args.port:
        raise ConfigError("-set, -host and -port must not be empty")
    return split_namespace_set(args.set)


def _open_store(args: argparse.Namespace, ctx: CommandContext, ns_set):
    store = connect(args.host, args.port, ns_set)
    if ctx.metrics is not None:
        return InstrumentedStore(store, ctx.metrics)
    return store


def _run(args: argparse.Namespace, ctx: CommandContext, work, has_source: bool, failure_msg: str) -> int:
    try:
        ns_set = _check_flags(args)
    except ConfigError as e:
        return _usage(args, ctx, str(e))
    if not has_source:
        return _usage(args, ctx)

    try:
        store = _open_store(args, ctx, ns_set)
    except StoreConnectionError as e:
        ctx.logger.error("%s", e)
        return EXIT_FAILURE

    try:
        work(BatchProcessor(ctx), store)
    except AstoolError as e:
        ctx.logger.error(failure_msg, e)
        return EXIT_FAILURE
    finally:
        store.close()
        if ctx.metrics is not None:
            ctx.metrics.log_summary(ctx.logger)
    return EXIT_SUCCESS


def _run_get(args: argparse.Namespace, ctx: CommandContext) -> int:
    def work(proc, store):
        get_records(proc, store, keys=args.keys, file=args.file).raise_for_status()

    return _run(args, ctx, work, bool(args.file or args.keys), "could not get aerospike records: %s")


def _run_del(args: argparse.Namespace, ctx: CommandContext) -> int:
    def work(proc, store):
        if args.file:
            delete_records(proc, store, args.file).raise_for_status()
        else:
            delete_record(proc, store, args.keys[0])

    return _run(args, ctx, work, bool(args.file or args.keys), "%s")


def _run_scan(args: argparse.Namespace, ctx: CommandContext) -> int:
    def work(proc, store):
        scan_records(proc, store).raise_for_status()

    return _run(args, ctx, work, True, "could not get aerospike records: %s")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"astool {__version__}")
        return EXIT_SUCCESS
    if not args.command:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    logger = configure_logging(args.verbose)
    ctx = CommandContext(
        output=sys.stdout,
        logger=logger,
        metrics=MetricsRecorder() if args.stats else None,
    )
    return args.handler(args, ctx)


if __name__ == "__main__":
    sys.exit(main())
