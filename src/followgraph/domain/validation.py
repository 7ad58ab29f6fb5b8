"""Declarative per-field validation for property bags.

A schema is a mapping of field name to :class:`FieldRule`. Validation is a
pure function of ``(props, schema, mode)``: it never touches the store and
never mutates its input.

Two modes:

- ``PARTIAL``: only fields present in the input are checked (patches).
- ``FULL``: required fields must also be present (creation).

Checks run in a fixed order once a value is present:
min length → max length → pattern. The first failing check wins. Patterns
must match the whole value.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ValidationMode(StrEnum):
    """Which fields a validation pass must see."""

    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class FieldRule:
    """Rules for one recognised field."""

    name: str
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    requirements: str = ""


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a property bag.

    ``sanitized`` holds only recognised fields and is empty when
    ``valid`` is False. ``field`` names the field that failed, if any.
    """

    valid: bool
    sanitized: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    field: str | None = None


USERNAME_RULE = FieldRule(
    name="username",
    required=True,
    min_length=2,
    max_length=16,
    pattern=re.compile(r"[A-Za-z0-9_]+"),
    requirements="2-16 characters; letters, numbers, and underscores only.",
)

USER_SCHEMA: dict[str, FieldRule] = {USERNAME_RULE.name: USERNAME_RULE}


def _check_value(rule: FieldRule, value: str) -> str | None:
    """Return an error message for *value*, or None if it satisfies *rule*."""
    if rule.min_length is not None and len(value) < rule.min_length:
        return f"Invalid {rule.name} (too short). Requirements: {rule.requirements}"
    if rule.max_length is not None and len(value) > rule.max_length:
        return f"Invalid {rule.name} (too long). Requirements: {rule.requirements}"
    if rule.pattern is not None and rule.pattern.fullmatch(value) is None:
        return f"Invalid {rule.name} (format). Requirements: {rule.requirements}"
    return None


def validate_props(
    props: Mapping[str, Any],
    schema: Mapping[str, FieldRule],
    mode: ValidationMode = ValidationMode.FULL,
) -> ValidationResult:
    """Validate *props* against *schema* and return the sanitized subset.

    Unrecognised keys are dropped with a warning. Empty or falsy values
    count as absent: they are skipped, unless the field is required and
    *mode* is ``FULL``, in which case they fail as missing.
    """
    warnings = [f"Ignored unknown field: {key}" for key in props if key not in schema]
    sanitized: dict[str, Any] = {}

    for name, rule in schema.items():
        value = props.get(name)
        if not value:
            if rule.required and mode is ValidationMode.FULL:
                return ValidationResult(
                    valid=False,
                    errors=[f"Missing {name} (required)."],
                    warnings=warnings,
                    field=name,
                )
            continue

        text = str(value)
        message = _check_value(rule, text)
        if message is not None:
            return ValidationResult(
                valid=False,
                errors=[message],
                warnings=warnings,
                field=name,
            )
        sanitized[name] = text

    return ValidationResult(valid=True, sanitized=sanitized, warnings=warnings)
