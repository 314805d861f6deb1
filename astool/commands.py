from __future__ import annotations

from typing import Optional, Sequence

from astool import urls
from astool.batch import BatchProcessor, BatchResult, KeyOperation
from astool.store import RecordStore


def fetch_operation(store: RecordStore) -> KeyOperation:
    return KeyOperation("get", resolve=str, perform=store.get)


def delete_operation(store: RecordStore) -> KeyOperation:
    """Keys are URLs; the record key is their normalized form."""

    def perform(pk: str) -> None:
        store.delete(pk)

    return KeyOperation("delete", resolve=urls.normalize, perform=perform, render=False)


def get_records(
    proc: BatchProcessor,
    store: RecordStore,
    keys: Sequence[str] = (),
    file: Optional[str] = None,
) -> BatchResult:
    op = fetch_operation(store)
    if file:
        return proc.run_file(op, file)
    return proc.run(op, keys)


def delete_records(proc: BatchProcessor, store: RecordStore, file: str) -> BatchResult:
    return proc.run_file(delete_operation(store), file)


def delete_record(proc: BatchProcessor, store: RecordStore, raw: str) -> None:
    """Delete one key. No tally: the first error is raised as-is."""
    proc.process(delete_operation(store), raw)


def scan_records(proc: BatchProcessor, store: RecordStore) -> BatchResult:
    return proc.run_records(store.scan)
