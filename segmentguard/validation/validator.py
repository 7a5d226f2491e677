"""Segment validator — runs one Schema against one segment's data.

Per field the rules stop at the first failure; across fields every failure is
collected. The result keeps all failing keys and the message of the first one.

Validation is pure: the input mapping is never mutated, defaults are copied
per call, so the same (schema, data) pair always yields the same result.
"""

import copy
import math
import re
from functools import lru_cache
from typing import Any, Mapping, Optional

from segmentguard.validation.models import (
    PRESENCE_KINDS,
    Rule,
    RuleKind,
    Schema,
    Segment,
    ValidationResult,
    ValueType,
)

# Message templates keyed by error code (type.rule)
MESSAGES = {
    "any.required": '"{label}" is required',
    "any.only": '"{label}" must be one of [{allowed}]',
    "any.ref": '"{label}" must be [ref:{ref}]',
    "object.base": '"{label}" must be of type object',
    "object.unknown": '"{label}" is not allowed',
    "string.base": '"{label}" must be a string',
    "string.empty": '"{label}" is not allowed to be empty',
    "string.min": '"{label}" length must be at least {limit} characters long',
    "string.max": '"{label}" length must be less than or equal to {limit} characters long',
    "string.length": '"{label}" length must be {limit} characters long',
    "string.alphanum": '"{label}" must only contain alpha-numeric characters',
    "string.token": '"{label}" must only contain alpha-numeric and underscore characters',
    "string.email": '"{label}" must be a valid email',
    "string.pattern.base": '"{label}" with value "{value}" fails to match the required pattern: /{pattern}/',
    "string.pattern.name": '"{label}" with value "{value}" fails to match the {name} pattern',
    "number.base": '"{label}" must be a number',
    "number.integer": '"{label}" must be an integer',
    "number.min": '"{label}" must be greater than or equal to {limit}',
    "number.max": '"{label}" must be less than or equal to {limit}',
    "boolean.base": '"{label}" must be a boolean',
}

# Built-in named patterns with their own message; other names use string.pattern.name
NAMED_PATTERN_CODES = {
    "alphanum": "string.alphanum",
    "token": "string.token",
    "email": "string.email",
}

_NUMERIC = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")


def _message(code: str, label: str, **context: Any) -> str:
    return MESSAGES[code].format(label=label, **context)


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _same(left: Any, right: Any) -> bool:
    """Strict equality: booleans never equal numbers."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


class Validator:
    """Executes a Schema against one segment's already-decoded data."""

    def validate(self, data: Any, schema: Schema, segment: Segment) -> ValidationResult:
        """Validate ``data`` for ``segment``.

        Args:
            data: Decoded segment data (normally a mapping)
            schema: Schema registered for the segment
            segment: Segment the data was read from

        Returns:
            ValidationResult — valid with the converted data, or invalid with
            the failing keys in declaration order (unknown keys last)
        """
        if not isinstance(data, Mapping):
            return ValidationResult.fail(segment, [], _message("object.base", "value"))

        values = dict(data)
        failures: dict[str, str] = {}

        # Referenced fields are resolved before the fields that point at them
        for name in schema.resolution_order():
            message = self._validate_field(name, schema, values, failures)
            if message is not None:
                failures[name] = message

        keys = [name for name in schema.fields if name in failures]

        if not schema.allow_unknown:
            for key in data:
                if key not in schema.fields:
                    label = str(key)
                    failures[label] = _message("object.unknown", label)
                    keys.append(label)

        if not keys:
            return ValidationResult.ok(segment, values)
        return ValidationResult.fail(segment, keys, failures[keys[0]])

    def _validate_field(
        self,
        name: str,
        schema: Schema,
        values: dict,
        failures: dict[str, str],
    ) -> Optional[str]:
        rules = schema.fields[name]

        if name not in values:
            for rule in rules:
                if rule.kind == RuleKind.DEFAULT:
                    values[name] = copy.deepcopy(rule.default)
                    return None
            if any(rule.kind == RuleKind.REQUIRED for rule in rules):
                return _message("any.required", name)
            return None

        value = values[name]
        field_type = schema.field_type(name)

        # Type comes first whatever its position; a mismatch ends the field
        if field_type is not None:
            value, message = self._check_type(name, value, field_type)
            if message is not None:
                return message
            values[name] = value

        for rule in rules:
            if rule.kind in PRESENCE_KINDS or rule.kind == RuleKind.TYPE:
                continue
            message = self._check_rule(name, value, rule, field_type, values, failures)
            if message is not None:
                return message
        return None

    def _check_type(self, name: str, value: Any, field_type: ValueType) -> tuple[Any, Optional[str]]:
        """Check (and convert) a value against its declared type."""
        if field_type == ValueType.STRING:
            if not isinstance(value, str):
                return value, _message("string.base", name)
            if value == "":
                return value, _message("string.empty", name)
            return value, None

        if field_type == ValueType.NUMBER:
            if isinstance(value, str) and _NUMERIC.match(value.strip()):
                text = value.strip()
                try:
                    value = int(text)
                except ValueError:
                    value = float(text)
            if not _is_number(value) or not math.isfinite(value):
                return value, _message("number.base", name)
            return value, None

        if field_type == ValueType.BOOLEAN:
            if isinstance(value, str) and value.lower() in ("true", "false"):
                value = value.lower() == "true"
            if not isinstance(value, bool):
                return value, _message("boolean.base", name)
            return value, None

        if not isinstance(value, Mapping):
            return value, _message("object.base", name)
        return value, None

    def _check_rule(
        self,
        name: str,
        value: Any,
        rule: Rule,
        field_type: Optional[ValueType],
        values: dict,
        failures: dict[str, str],
    ) -> Optional[str]:
        kind = rule.kind

        if kind == RuleKind.INTEGER:
            if isinstance(value, float) and not value.is_integer():
                return _message("number.integer", name)
            return None

        if kind in (RuleKind.MIN, RuleKind.MAX, RuleKind.LENGTH):
            if field_type == ValueType.STRING:
                size = len(value)
                if kind == RuleKind.MIN and size < rule.limit:
                    return _message("string.min", name, limit=rule.limit)
                if kind == RuleKind.MAX and size > rule.limit:
                    return _message("string.max", name, limit=rule.limit)
                if kind == RuleKind.LENGTH and size != rule.limit:
                    return _message("string.length", name, limit=rule.limit)
                return None
            if kind == RuleKind.MIN and value < rule.limit:
                return _message("number.min", name, limit=rule.limit)
            if kind == RuleKind.MAX and value > rule.limit:
                return _message("number.max", name, limit=rule.limit)
            return None

        if kind == RuleKind.PATTERN:
            if _compiled(rule.pattern).search(value) is None:
                code = NAMED_PATTERN_CODES.get(rule.pattern_name or "")
                if code is not None:
                    return _message(code, name)
                if rule.pattern_name:
                    return _message("string.pattern.name", name, value=value, name=rule.pattern_name)
                return _message("string.pattern.base", name, value=value, pattern=rule.pattern)
            return None

        if kind == RuleKind.VALID:
            if not any(_same(value, allowed) for allowed in rule.allowed or ()):
                allowed = ", ".join(str(a) for a in rule.allowed or ())
                return _message("any.only", name, allowed=allowed)
            return None

        if kind == RuleKind.REFERENCE:
            target = rule.reference
            if target in failures or target not in values or not _same(values[target], value):
                return _message("any.ref", name, ref=target)
            return None

        return None


# Module-level singleton
validator = Validator()
