"""
Interval file and locator map loading tests.
"""

from __future__ import annotations

import json

import pytest

from hlsmask.domain.segments import BlackoutInterval
from hlsmask.infra.exceptions import ConfigurationError
from hlsmask.providers import load_intervals, load_locator_map, parse_interval_spec
from hlsmask.providers.files import parse_intervals


def test_load_yaml_list(tmp_path):
    path = tmp_path / "blackouts.yaml"
    path.write_text("- {start: 3, end: 5}\n- {start: 8.5, end: 9}\n", encoding="utf-8")
    assert load_intervals(path) == [BlackoutInterval(3, 5), BlackoutInterval(8.5, 9)]


def test_load_json_lock_records(tmp_path):
    path = tmp_path / "locks.json"
    path.write_text(
        json.dumps(
            {
                "blackout-locks": [
                    {"id": "a1", "startTime": 12, "endTime": 30, "reason": "rights"},
                    {"starttime": 40, "endtime": 41.5},
                ]
            }
        ),
        encoding="utf-8",
    )
    assert load_intervals(path) == [BlackoutInterval(12, 30), BlackoutInterval(40, 41.5)]


@pytest.mark.parametrize("key", ["blackouts", "intervals"])
def test_mapping_list_keys(key):
    assert parse_intervals({key: [{"start": 1, "end": 2}]}) == [BlackoutInterval(1, 2)]


def test_empty_document_means_no_intervals(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_intervals(path) == []


@pytest.mark.parametrize(
    "data",
    [
        {"other": []},
        "3-5",
        [{"start": 3}],
        [{"start": "soon", "end": 5}],
        [{"start": 5, "end": 3}],
        [{"start": -1, "end": 3}],
    ],
)
def test_invalid_interval_documents(data):
    with pytest.raises(ConfigurationError):
        parse_intervals(data, origin="blackouts.yaml")


def test_unreadable_and_malformed_files(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_intervals(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("- {start: 3, end: [\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Cannot parse"):
        load_intervals(broken)


@pytest.mark.parametrize(
    "spec,expected",
    [("3:5", BlackoutInterval(3, 5)), ("0.5:1.25", BlackoutInterval(0.5, 1.25))],
)
def test_parse_interval_spec(spec, expected):
    assert parse_interval_spec(spec) == expected


@pytest.mark.parametrize("spec", ["3-5", "a:5", "5:3", ":"])
def test_parse_interval_spec_rejects(spec):
    with pytest.raises(ConfigurationError):
        parse_interval_spec(spec)


def test_load_locator_map(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(
        json.dumps({"segment_000.ts": " https://cdn.example.com/a/segment_000.ts "}), encoding="utf-8"
    )
    assert load_locator_map(path) == {"segment_000.ts": "https://cdn.example.com/a/segment_000.ts"}


@pytest.mark.parametrize("content", ["[1, 2]", '{"segment_000.ts": ""}', '{"segment_000.ts": 7}'])
def test_load_locator_map_rejects(tmp_path, content):
    path = tmp_path / "map.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_locator_map(path)
