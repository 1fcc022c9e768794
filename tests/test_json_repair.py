"""Tests for tolerant JSON extraction from generation replies."""
import json

import pytest

from app.services.json_repair import (
    SKELETON_IDEA_SUMMARY,
    SKELETON_STARTUP_NAME,
    extract_json,
    is_skeleton,
    locate_json_candidates,
    locate_json_object,
    parse_json_object,
    repair_json,
)
from tests.conftest import sample_prd_json


def test_plain_json_parses_directly():
    assert parse_json_object('{"a": 1, "b": "two"}') == {"a": 1, "b": "two"}


def test_fenced_block_with_surrounding_prose():
    doc = sample_prd_json("FencedCo")
    reply = (
        "Sure! Here is the PRD you asked for:\n\n"
        f"```json\n{json.dumps(doc, indent=2)}\n```\n\n"
        "Let me know if you want any changes."
    )
    assert parse_json_object(reply) == doc


def test_fence_is_preferred_over_earlier_braces():
    reply = 'Format is {like this}.\n```json\n{"startup_name": "Inside"}\n```'
    assert locate_json_candidates(reply)[0] == '{"startup_name": "Inside"}'
    assert parse_json_object(reply) == {"startup_name": "Inside"}


def test_trailing_commas_are_removed():
    assert parse_json_object('{"a": [1, 2,], "b": {"c": 3,},}') == {"a": [1, 2], "b": {"c": 3}}


def test_unquoted_keys_are_quoted():
    assert parse_json_object('{name: "x", count: 2}') == {"name": "x", "count": 2}


def test_missing_comma_between_properties_on_separate_lines():
    text = '{\n  "a": "x"\n  "b": "y"\n}'
    assert parse_json_object(text) == {"a": "x", "b": "y"}


def test_missing_comma_after_nested_object():
    text = '{"a": {"x": 1}\n "b": [1, 2]\n "c": 3}'
    assert parse_json_object(text) == {"a": {"x": 1}, "b": [1, 2], "c": 3}


def test_repairs_leave_string_contents_alone():
    text = '{"note": "keep [1, 2,] and {a: b,} as written", "n": 1,}'
    assert parse_json_object(text) == {"note": "keep [1, 2,] and {a: b,} as written", "n": 1}


def test_comments_and_python_literals():
    text = '{\n  "ok": True, // flag\n  "missing": None\n}'
    assert parse_json_object(text) == {"ok": True, "missing": None}


def test_truncated_reply_is_closed():
    text = 'Here you go: {"startup_name": "Cut", "overview": {"idea_summary": "Half a sen'
    result = parse_json_object(text)
    assert result is not None
    assert result["startup_name"] == "Cut"
    assert result["overview"]["idea_summary"] == "Half a sen"


def test_repair_json_returns_text():
    assert json.loads(repair_json("{a: 1,}")) == {"a": 1}


@pytest.mark.parametrize(
    "text",
    [None, "", "   ", "no json here", "[1, 2, 3]", '"just a string"', "{{{"],
)
def test_non_objects_yield_none(text):
    assert parse_json_object(text) is None


@pytest.mark.parametrize("text", ["}{", "{" * 500, "{\"a\": [}", "```json\n```", '{"a": "\\"}'])
def test_parse_json_object_never_raises(text):
    result = parse_json_object(text)
    assert result is None or isinstance(result, dict)


def test_extract_json_falls_back_to_skeleton():
    result = extract_json("I cannot help with that.")
    assert result == {
        "startup_name": SKELETON_STARTUP_NAME,
        "overview": {"idea_summary": SKELETON_IDEA_SUMMARY},
    }
    assert is_skeleton(result)


def test_skeleton_recovers_fields_by_pattern():
    raw = 'garbage "startup_name": "Rescued", {{{ "idea_summary": "Still here" ]]'
    result = extract_json(raw)
    assert is_skeleton(result)
    assert result["startup_name"] == "Rescued"
    assert result["overview"]["idea_summary"] == "Still here"


def test_full_document_is_not_a_skeleton():
    assert not is_skeleton(sample_prd_json())
    assert not is_skeleton({"startup_name": "x", "overview": {"idea_summary": "y", "solution": "z"}})


@pytest.mark.parametrize("text", ['{"a":1,"b":2,}', "{a:1,b:2}"])
def test_extract_recovers_near_miss_objects(text):
    assert extract_json(text) == {"a": 1, "b": 2}


def test_locate_json_object_picks_balanced_span():
    text = 'Result: {"a": {"b": "}"}} trailing {"c": 1}'
    assert locate_json_object(text) == '{"a": {"b": "}"}}'


@pytest.mark.parametrize("text", [None, "", "no braces at all"])
def test_locate_json_object_without_object(text):
    assert locate_json_object(text) is None
