from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

import aerospike

from astool.config import SCAN_RECORDS_PER_SECOND, NamespaceSet, client_config
from astool.exceptions import RecordNotFoundError, StoreConnectionError, StoreError

log = logging.getLogger(__name__)

DIGEST_PREFIX = "digest:"

SCAN_OPTIONS: Dict[str, Any] = {"concurrent": False}
SCAN_POLICY: Dict[str, Any] = {"records_per_second": SCAN_RECORDS_PER_SECOND}


def key_label(key: Tuple) -> str:
    """
    Printable identifier of an aerospike key tuple (ns, set, pk[, digest]).

    Scanned records only carry the primary key when it was stored with
    POLICY_KEY_SEND, so fall back to the base64 digest.
    """
    pk = key[2] if len(key) > 2 else None
    if pk is not None:
        if isinstance(pk, (bytes, bytearray)):
            return base64.b64encode(bytes(pk)).decode("ascii")
        return str(pk)
    digest = key[3] if len(key) > 3 else None
    if digest is None:
        raise StoreError(f"record has neither key nor digest: {key!r}")
    return DIGEST_PREFIX + base64.b64encode(bytes(digest)).decode("ascii")


@dataclass
class Record:
    key: str
    ttl: int
    gen: int
    bins: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tuple(cls, rec: Tuple, key: Optional[str] = None) -> "Record":
        """Build from the client's (key, meta, bins) tuple."""
        as_key, meta, bins = rec
        meta = meta or {}
        return cls(
            key=key if key is not None else key_label(as_key),
            ttl=meta.get("ttl", 0),
            gen=meta.get("gen", 0),
            bins=bins or {},
        )


class RecordStore:
    """
    Record access for one namespace/set over an aerospike client.

    Every client error is re-raised as StoreError; callers decide whether it
    is fatal (scan) or a per-key failure (get, delete).
    """

    def __init__(self, client: aerospike.Client, ns_set: NamespaceSet) -> None:
        self.client = client
        self.ns = ns_set.namespace
        self.set_name = ns_set.set_name

    def key(self, pk: str) -> Tuple[str, str, str]:
        return (self.ns, self.set_name, pk)

    def get(self, pk: str) -> Record:
        key = self.key(pk)
        try:
            rec = self.client.get(key)
        except aerospike.exception.RecordNotFound as e:
            raise RecordNotFoundError(f"record not found: {pk}") from e
        except aerospike.exception.AerospikeError as e:
            raise StoreError(f"Aerospike get failed for {key}: {e}") from e
        return Record.from_tuple(rec, key=pk)

    def delete(self, pk: str) -> bool:
        """Remove a record. Returns False if it didn't exist."""
        key = self.key(pk)
        try:
            self.client.remove(key)
        except aerospike.exception.RecordNotFound:
            return False
        except aerospike.exception.AerospikeError as e:
            raise StoreError(f"Aerospike remove failed for {key}: {e}") from e
        return True

    def scan(self, callback: Callable[[Tuple], Any]) -> None:
        """
        Stream every record of the set into callback as (key, meta, bins).

        The callback runs once per record, in delivery order.
        """
        scan = self.client.scan(self.ns, self.set_name)
        try:
            scan.foreach(callback, policy=dict(SCAN_POLICY), options=dict(SCAN_OPTIONS))
        except aerospike.exception.AerospikeError as e:
            raise StoreError(f"Aerospike scan failed for {self.ns}.{self.set_name}: {e}") from e

    def close(self) -> None:
        self.client.close()


def connect(host: str, port: int, ns_set: NamespaceSet) -> RecordStore:
    try:
        client = aerospike.client(client_config(host, port)).connect()
    except aerospike.exception.AerospikeError as e:
        raise StoreConnectionError(f"could not get aerospike client: {e}") from e
    log.debug("connected to %s:%s", host, port)
    return RecordStore(client, ns_set)
