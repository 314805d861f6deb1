from __future__ import annotations

import os
from typing import Any, Dict, NamedTuple

from astool.exceptions import ConfigError

DEFAULT_HOST = os.environ.get("AEROSPIKE_HOST", "localhost")
# parsed by argparse along with -port
DEFAULT_PORT = os.environ.get("AEROSPIKE_PORT", "3000")
DEFAULT_DELETE_SET = "swan.page"

# scans read one node at a time, capped at this many records per second
SCAN_RECORDS_PER_SECOND = 1000

SEP = "."


class NamespaceSet(NamedTuple):
    namespace: str
    set_name: str

    def __str__(self) -> str:
        return f"{self.namespace}{SEP}{self.set_name}"


def split_namespace_set(src: str) -> NamespaceSet:
    """
    Parse "namespace.set" into its two components.

    Anything other than exactly two non-empty parts is a configuration error.
    """
    parts = (src or "").split(SEP)
    if len(parts) != 2 or not all(parts):
        raise ConfigError(f"invalid set name: {src}")
    return NamespaceSet(parts[0], parts[1])


def client_config(host: str, port: int) -> Dict[str, Any]:
    if not host or not port:
        raise ConfigError("host and port are required")
    return {"hosts": [(host, int(port))]}
