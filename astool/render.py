from __future__ import annotations

import base64
import json
from typing import Any, Dict, TextIO

import aerospike

from astool.exceptions import RenderError
from astool.store import Record


def to_json(v: Any) -> Any:
    """
    Make a bin value JSON-encodable.

    Maps at any depth get string keys, lists are walked, bytes become
    base64 and geo values become their GeoJSON object. Bin values are
    assumed acyclic.
    """
    if isinstance(v, dict):
        return {_key_str(k): to_json(vv) for k, vv in v.items()}
    if isinstance(v, (list, tuple)):
        return [to_json(vv) for vv in v]
    if isinstance(v, (bytes, bytearray)):
        return base64.b64encode(bytes(v)).decode("ascii")
    if isinstance(v, aerospike.GeoJSON):
        return json.loads(v.dumps())
    return v


def _key_str(k: Any) -> str:
    if isinstance(k, (bytes, bytearray)):
        return base64.b64encode(bytes(k)).decode("ascii")
    return str(k)


def record_dict(rec: Record) -> Dict[str, Any]:
    return {
        "key": rec.key,
        "ttl": rec.ttl,
        "gen": rec.gen,
        "bins": {str(k): to_json(v) for k, v in rec.bins.items()},
    }


def write_record(out: TextIO, rec: Record) -> None:
    # encode before writing so a failing record leaves no partial line
    try:
        line = json.dumps(record_dict(rec), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise RenderError(f"could not encode {rec.key}: {e}") from e
    out.write(line + "\n")
    out.flush()
