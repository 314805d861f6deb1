"""Tests for bin normalization and JSON line rendering."""

import io
import json

import aerospike
import pytest

from astool.exceptions import RenderError
from astool.render import record_dict, to_json, write_record
from astool.store import Record


def test_scalars_pass_through():
    for v in (1, 1.5, "s", None, True):
        assert to_json(v) == v


def test_nested_maps_get_string_keys_at_every_depth():
    value = {1: {2.5: {(3, 4): "leaf", 5: [1, 2]}}, "x": 7}
    assert to_json(value) == {
        "1": {"2.5": {"(3, 4)": "leaf", "5": [1, 2]}},
        "x": 7,
    }


def test_maps_inside_lists_are_converted():
    assert to_json([{1: "a"}, [{2: "b"}]]) == [{"1": "a"}, [{"2": "b"}]]


def test_bytes_become_base64():
    assert to_json(bytearray(b"\x00\x01")) == "AAE="
    assert to_json({b"k": b"v"}) == {"aw==": "dg=="}


def test_record_dict_shape():
    rec = Record(key="k1", ttl=100, gen=3, bins={"m": {1: {2: "x"}}})
    assert record_dict(rec) == {"key": "k1", "ttl": 100, "gen": 3, "bins": {"m": {"1": {"2": "x"}}}}


def test_write_record_emits_one_json_line():
    out = io.StringIO()
    write_record(out, Record(key="k1", ttl=1, gen=2, bins={"name": "ü"}))
    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0]) == {"key": "k1", "ttl": 1, "gen": 2, "bins": {"name": "ü"}}


def test_geojson_bin_becomes_geojson_object():
    point = {"type": "Point", "coordinates": [1.0, 2.0]}
    assert to_json({"loc": aerospike.GeoJSON(point)}) == {"loc": point}


def test_unencodable_value_raises_render_error():
    with pytest.raises(RenderError, match="k1"):
        write_record(io.StringIO(), Record(key="k1", ttl=0, gen=1, bins={"s": {1, 2}}))
