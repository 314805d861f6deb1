"""
Batch Key Processor.

Runs one store operation per key (or per scanned record), in order, and
tallies outcomes. A failing key is logged and counted; it never stops the
batch. Only the caller turns a BatchResult into an exit status.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, TextIO, Tuple

from astool.exceptions import AstoolError, BatchError, InputError
from astool.metrics import MetricsRecorder
from astool.render import write_record
from astool.store import Record


@dataclass
class CommandContext:
    """Per-invocation output, logger and optional metrics."""

    output: TextIO = field(default_factory=lambda: sys.stdout)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("astool"))
    metrics: Optional[MetricsRecorder] = None


@dataclass
class KeyOperation:
    """
    How to process one raw key:
      - resolve: raw input string -> store key
      - perform: store key -> Record to render (or None)
    """

    name: str
    resolve: Callable[[str], str]
    perform: Callable[[str], Optional[Record]]
    render: bool = True


@dataclass
class Failure:
    key: str
    cause: BaseException


@dataclass
class BatchResult:
    successes: List[str] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)
    read_error: Optional[BaseException] = None

    @property
    def total(self) -> int:
        return len(self.successes) + len(self.failures)

    @property
    def ok(self) -> bool:
        return self.read_error is None and not self.failures

    def summary(self) -> str:
        return f"success={len(self.successes)} failure={len(self.failures)}"

    def raise_for_status(self) -> None:
        if self.read_error is not None:
            msg = f"could not read keys: {self.read_error}"
            if self.failures:
                msg += f" (there are {len(self.failures)} errors)"
            raise InputError(msg) from self.read_error
        if self.failures:
            raise BatchError(len(self.failures))


class BatchProcessor:
    def __init__(self, ctx: CommandContext) -> None:
        self.ctx = ctx

    def _fail(self, result: BatchResult, op_name: str, key: str, err: BaseException) -> None:
        result.failures.append(Failure(key, err))
        self.ctx.logger.error("fail to %s %s: %s", op_name, key, err)

    def process(self, op: KeyOperation, raw: str) -> Optional[Record]:
        """Resolve, perform and render a single key. Errors propagate."""
        rec = op.perform(op.resolve(raw))
        if op.render and rec is not None:
            write_record(self.ctx.output, rec)
        return rec

    def _process_into(self, result: BatchResult, op: KeyOperation, raw: str) -> None:
        try:
            self.process(op, raw)
        except AstoolError as e:
            self._fail(result, op.name, raw, e)
            return
        result.successes.append(raw)

    def run(self, op: KeyOperation, keys: Iterable[str]) -> BatchResult:
        """Process an explicit, ordered sequence of keys."""
        result = BatchResult()
        for raw in keys:
            self._process_into(result, op, raw)
        self.ctx.logger.info(result.summary())
        return result

    def run_lines(self, op: KeyOperation, stream: Iterable[str]) -> BatchResult:
        """
        Process one key per line. A read error stops the loop and is kept on
        the result; keys read before it stay processed.
        """
        result = BatchResult()
        lines = iter(stream)
        while True:
            try:
                line = next(lines)
            except StopIteration:
                break
            except (OSError, UnicodeDecodeError) as e:
                result.read_error = e
                self.ctx.logger.error("could not read keys: %s", e)
                break
            self._process_into(result, op, line.rstrip("\r\n"))
        self.ctx.logger.info(result.summary())
        return result

    def run_file(self, op: KeyOperation, path: str) -> BatchResult:
        try:
            f = open(path, encoding="utf-8")
        except OSError as e:
            raise InputError(f"could not open {path}: {e}") from e
        with f:
            return self.run_lines(op, f)

    def run_records(self, scan: Callable[[Callable[[Tuple], Any]], None]) -> BatchResult:
        """
        Consume records pushed by a scan cursor; there is no key resolution.
        Errors raised by scan itself propagate.
        """
        result = BatchResult()

        def on_record(rec: Tuple) -> None:
            label = "<unknown>"
            try:
                record = Record.from_tuple(rec)
                label = record.key
                write_record(self.ctx.output, record)
            except AstoolError as e:
                self._fail(result, "scan", label, e)
                return
            result.successes.append(record.key)

        scan(on_record)
        self.ctx.logger.info(result.summary())
        return result
