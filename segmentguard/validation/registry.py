"""Schema registry — binds one Schema per Segment for a single route.

Registration is the only mutation point. Once frozen the registry is only read,
so request handlers share it without locking.
"""

import re
from typing import Iterator, Mapping, Optional, Union

import structlog

from segmentguard.validation.errors import SchemaDefinitionError
from segmentguard.validation.models import (
    BOUND_KINDS,
    SEGMENT_ORDER,
    RuleKind,
    Schema,
    Segment,
    ValueType,
)
from segmentguard.validation.rules import FieldSpec, as_schema

logger = structlog.get_logger()

# Which value types accept which type-dependent rules
_RULE_TYPES = {
    RuleKind.MIN: {ValueType.STRING, ValueType.NUMBER},
    RuleKind.MAX: {ValueType.STRING, ValueType.NUMBER},
    RuleKind.LENGTH: {ValueType.STRING},
    RuleKind.PATTERN: {ValueType.STRING},
    RuleKind.INTEGER: {ValueType.NUMBER},
}


class SchemaRegistry:
    """Segment → Schema mapping for one route."""

    def __init__(self, route: str = "anonymous"):
        self.route = route
        self._schemas: dict[Segment, Schema] = {}
        self._frozen = False

    @classmethod
    def from_mapping(
        cls,
        schema_map: Mapping[Union[Segment, str], Union[Schema, Mapping[str, FieldSpec]]],
        route: str = "anonymous",
    ) -> "SchemaRegistry":
        """Register every entry of ``schema_map`` and freeze the result."""
        registry = cls(route)
        for segment, schema in schema_map.items():
            registry.register(segment, schema)
        return registry.freeze()

    def register(
        self,
        segment: Union[Segment, str],
        schema: Union[Schema, Mapping[str, FieldSpec]],
    ) -> None:
        """Bind ``schema`` to ``segment``.

        Raises:
            SchemaDefinitionError: if the registry is frozen, the segment is
                unknown or already bound, or the schema contradicts itself.
        """
        if self._frozen:
            raise SchemaDefinitionError(
                f"Schema registry for route '{self.route}' is frozen"
            )

        try:
            segment = Segment(segment)
        except ValueError:
            raise SchemaDefinitionError(
                f"Unknown segment '{segment}' on route '{self.route}'. "
                f"Use one of: {', '.join(s.value for s in SEGMENT_ORDER)}"
            ) from None

        if segment in self._schemas:
            raise SchemaDefinitionError(
                f"Segment '{segment.value}' already has a schema on route '{self.route}'"
            )

        schema = as_schema(schema)
        check_schema(schema)
        self._schemas[segment] = schema

        logger.debug(
            "schema_registered",
            route=self.route,
            segment=segment.value,
            fields=list(schema.fields),
            allow_unknown=schema.allow_unknown,
        )

    def freeze(self) -> "SchemaRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def segments(self) -> list[Segment]:
        """Registered segments in processing order."""
        return [segment for segment in SEGMENT_ORDER if segment in self._schemas]

    def get(self, segment: Segment) -> Optional[Schema]:
        return self._schemas.get(segment)

    def items(self) -> Iterator[tuple[Segment, Schema]]:
        for segment in self.segments:
            yield segment, self._schemas[segment]

    def __contains__(self, segment: object) -> bool:
        return segment in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


def check_schema(schema: Schema) -> None:
    """Reject schemas that no request could ever satisfy consistently."""
    for name, rules in schema.fields.items():
        types = [rule for rule in rules if rule.kind == RuleKind.TYPE]
        if any(rule.value_type is None for rule in types):
            raise SchemaDefinitionError(f'Field "{name}" has a type rule without a type')
        if len(types) > 1:
            raise SchemaDefinitionError(f'Field "{name}" declares more than one type')
        field_type = types[0].value_type if types else None

        for rule in rules:
            accepted = _RULE_TYPES.get(rule.kind)
            if accepted is not None and field_type not in accepted:
                raise SchemaDefinitionError(
                    f'Field "{name}" uses a {rule.kind.value} rule, '
                    f"which needs a {' or '.join(sorted(t.value for t in accepted))} type"
                )
            if rule.kind in BOUND_KINDS and (rule.limit is None or rule.limit < 0):
                raise SchemaDefinitionError(
                    f'Field "{name}" has an invalid {rule.kind.value} bound: {rule.limit}'
                )
            if rule.kind == RuleKind.PATTERN:
                if rule.pattern is None:
                    raise SchemaDefinitionError(f'Field "{name}" has a pattern rule without a pattern')
                try:
                    re.compile(rule.pattern)
                except re.error as e:
                    raise SchemaDefinitionError(
                        f'Field "{name}" has an invalid pattern {rule.pattern!r}: {e}'
                    ) from e
            if rule.kind == RuleKind.VALID and rule.allowed is None:
                raise SchemaDefinitionError(f'Field "{name}" has a valid rule without allowed values')
            if rule.kind == RuleKind.REFERENCE:
                if rule.reference == name:
                    raise SchemaDefinitionError(f'Field "{name}" references itself')
                if rule.reference not in schema.fields:
                    raise SchemaDefinitionError(
                        f'Field "{name}" references unknown field "{rule.reference}"'
                    )

        lower = [rule.limit for rule in rules if rule.kind == RuleKind.MIN]
        upper = [rule.limit for rule in rules if rule.kind == RuleKind.MAX]
        if lower and upper and max(lower) > min(upper):
            raise SchemaDefinitionError(
                f'Field "{name}" has min {max(lower)} greater than max {min(upper)}'
            )

    # Raises on reference cycles
    schema.resolution_order()
