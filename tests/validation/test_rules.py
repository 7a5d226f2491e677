"""Tests for the rule builders."""

import pytest

from segmentguard.validation import Rule, RuleKind, Schema, SchemaDefinitionError, ValueType
from segmentguard.validation.rules import (
    NAMED_PATTERNS,
    as_schema,
    boolean,
    keys,
    number,
    object_,
    ref,
    string,
)


class TestFieldBuilders:
    def test_type_rule_comes_first(self):
        rules = string().required().min(2).rules
        assert rules[0] == Rule(kind=RuleKind.TYPE, value_type=ValueType.STRING)
        assert [r.kind for r in rules] == [RuleKind.TYPE, RuleKind.REQUIRED, RuleKind.MIN]

    def test_builders_are_immutable(self):
        base = string()
        longer = base.min(3)
        assert len(base.rules) == 1
        assert len(longer.rules) == 2

    def test_chain_keeps_builder_type(self):
        rules = number().required().integer().max(10).rules
        assert [r.kind for r in rules] == [
            RuleKind.TYPE, RuleKind.REQUIRED, RuleKind.INTEGER, RuleKind.MAX,
        ]

    def test_named_patterns(self):
        rule = string().alphanum().rules[-1]
        assert rule.kind == RuleKind.PATTERN
        assert rule.pattern == NAMED_PATTERNS["alphanum"]
        assert rule.pattern_name == "alphanum"
        assert string().token().rules[-1].pattern_name == "token"
        assert string().email().rules[-1].pattern_name == "email"

    def test_default_and_valid(self):
        rules = string().valid("admin", "user").default("admin").rules
        assert rules[1].allowed == ("admin", "user")
        assert rules[2].default == "admin"

    def test_ref_has_no_type(self):
        rules = ref("password").rules
        assert rules == (Rule(kind=RuleKind.REFERENCE, reference="password"),)

    def test_boolean_and_object(self):
        assert boolean().rules[0].value_type == ValueType.BOOLEAN
        assert object_().rules[0].value_type == ValueType.OBJECT


class TestKeys:
    def test_preserves_declaration_order(self):
        schema = keys({"b": string(), "a": number(), "c": ref("a")})
        assert list(schema.fields) == ["b", "a", "c"]
        assert schema.allow_unknown is False

    def test_allow_unknown(self):
        assert keys({}, allow_unknown=True).allow_unknown is True

    def test_accepts_raw_rule_sequences(self):
        schema = keys({"flag": [Rule(kind=RuleKind.TYPE, value_type=ValueType.BOOLEAN)]})
        assert schema.field_type("flag") == ValueType.BOOLEAN

    def test_rejects_other_values(self):
        with pytest.raises(SchemaDefinitionError, match='"name"'):
            keys({"name": "string"})

    def test_as_schema(self):
        schema = keys({"a": string()})
        assert as_schema(schema) is schema
        assert isinstance(as_schema({"a": string()}), Schema)
        with pytest.raises(SchemaDefinitionError):
            as_schema(["a"])

    def test_schema_fields_are_read_only(self):
        source = {"a": (Rule(kind=RuleKind.TYPE, value_type=ValueType.STRING),)}
        schema = Schema(fields=source)
        source["b"] = ()
        assert list(schema.fields) == ["a"]
        with pytest.raises(TypeError):
            schema.fields["c"] = ()
