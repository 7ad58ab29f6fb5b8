"""Tests for the declarative property validator."""

from __future__ import annotations

import re

import pytest

from followgraph.domain.validation import (
    USER_SCHEMA,
    FieldRule,
    ValidationMode,
    validate_props,
)

_REQ = "2-16 characters; letters, numbers, and underscores only."


class TestFullMode:
    def test_valid_username(self) -> None:
        vr = validate_props({"username": "valid_name"}, USER_SCHEMA, ValidationMode.FULL)
        assert vr.valid
        assert vr.sanitized == {"username": "valid_name"}
        assert vr.errors == []
        assert vr.field is None

    def test_missing_required(self) -> None:
        vr = validate_props({}, USER_SCHEMA, ValidationMode.FULL)
        assert not vr.valid
        assert vr.errors == ["Missing username (required)."]
        assert vr.field == "username"
        assert vr.sanitized == {}

    @pytest.mark.parametrize("empty", ["", None, 0])
    def test_falsy_required_value_counts_as_missing(self, empty: object) -> None:
        vr = validate_props({"username": empty}, USER_SCHEMA, ValidationMode.FULL)
        assert not vr.valid
        assert vr.errors == ["Missing username (required)."]

    def test_too_short(self) -> None:
        vr = validate_props({"username": "a"}, USER_SCHEMA, ValidationMode.FULL)
        assert not vr.valid
        assert vr.errors == [f"Invalid username (too short). Requirements: {_REQ}"]

    def test_too_long(self) -> None:
        vr = validate_props({"username": "a" * 17}, USER_SCHEMA, ValidationMode.FULL)
        assert not vr.valid
        assert vr.errors == [f"Invalid username (too long). Requirements: {_REQ}"]

    @pytest.mark.parametrize("username", ["bad name!", "alice\n", "alice\r\n", "\nalice", "al-ice"])
    def test_bad_format(self, username: str) -> None:
        vr = validate_props({"username": username}, USER_SCHEMA, ValidationMode.FULL)
        assert not vr.valid
        assert vr.errors == [f"Invalid username (format). Requirements: {_REQ}"]

    def test_length_bounds_inclusive(self) -> None:
        assert validate_props({"username": "ab"}, USER_SCHEMA).valid
        assert validate_props({"username": "a" * 16}, USER_SCHEMA).valid

    def test_length_checked_before_pattern(self) -> None:
        # "!" fails both min length and pattern; min length wins.
        vr = validate_props({"username": "!"}, USER_SCHEMA, ValidationMode.FULL)
        assert "(too short)" in vr.errors[0]


class TestPartialMode:
    def test_absent_required_field_is_fine(self) -> None:
        vr = validate_props({}, USER_SCHEMA, ValidationMode.PARTIAL)
        assert vr.valid
        assert vr.sanitized == {}

    def test_empty_value_is_skipped(self) -> None:
        vr = validate_props({"username": ""}, USER_SCHEMA, ValidationMode.PARTIAL)
        assert vr.valid
        assert vr.sanitized == {}

    def test_present_value_is_still_checked(self) -> None:
        vr = validate_props({"username": "x"}, USER_SCHEMA, ValidationMode.PARTIAL)
        assert not vr.valid
        assert vr.field == "username"


class TestSanitizing:
    def test_unknown_fields_dropped_with_warning(self) -> None:
        vr = validate_props(
            {"username": "alice", "is_admin": True},
            USER_SCHEMA,
            ValidationMode.FULL,
        )
        assert vr.valid
        assert vr.sanitized == {"username": "alice"}
        assert vr.warnings == ["Ignored unknown field: is_admin"]

    def test_values_coerced_to_str(self) -> None:
        vr = validate_props({"username": 12345}, USER_SCHEMA, ValidationMode.FULL)
        assert vr.valid
        assert vr.sanitized == {"username": "12345"}

    def test_input_not_mutated(self) -> None:
        props = {"username": "alice", "extra": 1}
        validate_props(props, USER_SCHEMA)
        assert props == {"username": "alice", "extra": 1}


class TestCustomSchema:
    def test_first_failing_field_reported(self) -> None:
        schema = {
            "handle": FieldRule(name="handle", required=True, min_length=3),
            "bio": FieldRule(name="bio", max_length=5, requirements="short"),
        }
        vr = validate_props({"handle": "abc", "bio": "far too long"}, schema)
        assert not vr.valid
        assert vr.field == "bio"
        assert vr.errors == ["Invalid bio (too long). Requirements: short"]

    def test_optional_field_absent_in_full_mode(self) -> None:
        schema = {
            "handle": FieldRule(name="handle", required=True),
            "bio": FieldRule(name="bio", pattern=re.compile(r"^\w+$")),
        }
        vr = validate_props({"handle": "abc"}, schema, ValidationMode.FULL)
        assert vr.valid
        assert vr.sanitized == {"handle": "abc"}
