"""Rule builders — chained sugar over the fixed Rule data structure.

Usage:
    from segmentguard.validation.rules import keys, number, ref, string

    body = keys({
        "name": string().alphanum().min(2).max(30).required(),
        "password": string().min(8).required(),
        "repeat_password": ref("password"),
        "age": number().integer().min(18).required(),
    })

Every call returns a new builder; builders are safe to share between routes.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from segmentguard.validation.errors import SchemaDefinitionError
from segmentguard.validation.models import Rule, RuleKind, Schema, ValueType

# Named patterns and the message fragment each one reports.
NAMED_PATTERNS: dict[str, str] = {
    "alphanum": r"^[a-zA-Z0-9]+$",
    "token": r"^[a-zA-Z0-9_]+$",
    "email": r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
}


class FieldBuilder:
    """Immutable chain of rules for one field."""

    def __init__(self, rules: Sequence[Rule] = ()):
        self._rules = tuple(rules)

    def _with(self, rule: Rule) -> "FieldBuilder":
        return type(self)(self._rules + (rule,))

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def required(self) -> "FieldBuilder":
        return self._with(Rule(kind=RuleKind.REQUIRED))

    def default(self, value: Any) -> "FieldBuilder":
        return self._with(Rule(kind=RuleKind.DEFAULT, default=value))

    def valid(self, *values: Any) -> "FieldBuilder":
        return self._with(Rule(kind=RuleKind.VALID, allowed=tuple(values)))

    def __repr__(self) -> str:
        kinds = ", ".join(rule.kind.value for rule in self._rules)
        return f"{type(self).__name__}({kinds})"


class _BoundedBuilder(FieldBuilder):
    def min(self, limit: Union[int, float]) -> "FieldBuilder":
        return self._with(Rule(kind=RuleKind.MIN, limit=limit))

    def max(self, limit: Union[int, float]) -> "FieldBuilder":
        return self._with(Rule(kind=RuleKind.MAX, limit=limit))


class StringBuilder(_BoundedBuilder):
    def length(self, limit: int) -> "StringBuilder":
        return self._with(Rule(kind=RuleKind.LENGTH, limit=limit))

    def pattern(self, regex: str, name: Optional[str] = None) -> "StringBuilder":
        return self._with(Rule(kind=RuleKind.PATTERN, pattern=regex, pattern_name=name))

    def alphanum(self) -> "StringBuilder":
        return self.pattern(NAMED_PATTERNS["alphanum"], name="alphanum")

    def token(self) -> "StringBuilder":
        return self.pattern(NAMED_PATTERNS["token"], name="token")

    def email(self) -> "StringBuilder":
        return self.pattern(NAMED_PATTERNS["email"], name="email")


class NumberBuilder(_BoundedBuilder):
    def integer(self) -> "NumberBuilder":
        return self._with(Rule(kind=RuleKind.INTEGER))


def string() -> StringBuilder:
    return StringBuilder((Rule(kind=RuleKind.TYPE, value_type=ValueType.STRING),))


def number() -> NumberBuilder:
    return NumberBuilder((Rule(kind=RuleKind.TYPE, value_type=ValueType.NUMBER),))


def boolean() -> FieldBuilder:
    return FieldBuilder((Rule(kind=RuleKind.TYPE, value_type=ValueType.BOOLEAN),))


def object_() -> FieldBuilder:
    return FieldBuilder((Rule(kind=RuleKind.TYPE, value_type=ValueType.OBJECT),))


def ref(field: str) -> FieldBuilder:
    """Field whose value must equal the resolved value of ``field``."""
    return FieldBuilder((Rule(kind=RuleKind.REFERENCE, reference=field),))


FieldSpec = Union[FieldBuilder, Sequence[Rule]]


def keys(fields: Mapping[str, FieldSpec], allow_unknown: bool = False) -> Schema:
    """Build a Schema from builders (or raw rule sequences), keeping key order."""
    compiled: dict[str, tuple[Rule, ...]] = {}
    for name, spec in fields.items():
        if isinstance(spec, FieldBuilder):
            compiled[name] = spec.rules
        elif isinstance(spec, (list, tuple)) and all(isinstance(r, Rule) for r in spec):
            compiled[name] = tuple(spec)
        else:
            raise SchemaDefinitionError(
                f'Field "{name}" must be declared with a rule builder, got {type(spec).__name__}'
            )
    return Schema(fields=compiled, allow_unknown=allow_unknown)


def as_schema(value: Union[Schema, Mapping[str, FieldSpec]]) -> Schema:
    """Accept a ready Schema or a plain mapping of field builders (strict)."""
    if isinstance(value, Schema):
        return value
    if isinstance(value, Mapping):
        return keys(value)
    raise SchemaDefinitionError(f"Cannot build a schema from {type(value).__name__}")
