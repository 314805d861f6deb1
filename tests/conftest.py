"""Pytest configuration and fixtures."""

import io
import logging

import aerospike
import pytest

from astool.batch import BatchProcessor, CommandContext
from astool.config import NamespaceSet
from astool.store import RecordStore

NS = "test"
SET = "demo"


class FakeScan:
    def __init__(self, records, error=None):
        self.records = records
        self.error = error
        self.options = None
        self.policy = None

    def foreach(self, callback, policy=None, options=None):
        self.policy = policy
        self.options = options
        if self.error is not None:
            raise self.error
        for rec in self.records:
            if callback(rec) is False:
                break


class FakeClient:
    """In-memory stand-in for the parts of aerospike.Client astool uses."""

    def __init__(self):
        self.records = {}
        self.scan_records = []
        self.scan_error = None
        self.broken = set()
        self.calls = []
        self.scans = []
        self.closed = False

    def put(self, key, bins, meta=None):
        meta = meta or {}
        self.records[key] = ({"ttl": meta.get("ttl", 3600), "gen": meta.get("gen", 1)}, bins)

    def get(self, key):
        self.calls.append(("get", key))
        if key[2] in self.broken:
            raise aerospike.exception.AerospikeError("connection reset")
        if key not in self.records:
            raise aerospike.exception.RecordNotFound("record not found")
        meta, bins = self.records[key]
        return key, meta, bins

    def remove(self, key):
        self.calls.append(("remove", key))
        if key[2] in self.broken:
            raise aerospike.exception.AerospikeError("connection reset")
        if key not in self.records:
            raise aerospike.exception.RecordNotFound("record not found")
        del self.records[key]

    def scan(self, namespace, set_name):
        scan = FakeScan(self.scan_records, self.scan_error)
        self.scans.append((namespace, set_name, scan))
        return scan

    def close(self):
        self.closed = True


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def store(client):
    return RecordStore(client, NamespaceSet(NS, SET))


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def ctx(output, caplog):
    caplog.set_level(logging.INFO, logger="tests")
    return CommandContext(output=output, logger=logging.getLogger("tests"))


@pytest.fixture
def proc(ctx):
    return BatchProcessor(ctx)


@pytest.fixture
def key_file(tmp_path):
    def _write(text: str):
        path = tmp_path / "keys.txt"
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
