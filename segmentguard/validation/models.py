"""Validation models — segments, rules, schemas, results and the wire format.

Schemas are built once when routes are defined and only read afterwards.
Results are created per request and thrown away with the response.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from segmentguard.validation.errors import SchemaDefinitionError


class Segment(str, Enum):
    """Parts of a request that carry their own schema.

    Declaration order is the processing order and the output order.
    """

    BODY = "body"
    QUERY = "query"
    PARAMS = "params"
    HEADERS = "headers"
    COOKIES = "cookies"
    SIGNED_COOKIES = "signedCookies"


SEGMENT_ORDER: tuple[Segment, ...] = tuple(Segment)


class ValueType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"


class RuleKind(str, Enum):
    """Tag of a single field constraint."""

    TYPE = "type"
    INTEGER = "integer"
    MIN = "min"
    MAX = "max"
    LENGTH = "length"
    PATTERN = "pattern"
    VALID = "valid"
    REQUIRED = "required"
    DEFAULT = "default"
    REFERENCE = "reference"


# Rules that decide what happens when a field is absent; never run on a value.
PRESENCE_KINDS = frozenset({RuleKind.REQUIRED, RuleKind.DEFAULT})

# Rules that only make sense for some value types.
BOUND_KINDS = frozenset({RuleKind.MIN, RuleKind.MAX, RuleKind.LENGTH})


class Rule(BaseModel):
    """One constraint on a field. Only the attributes of its kind are set."""

    model_config = {"frozen": True}

    kind: RuleKind
    value_type: Optional[ValueType] = None         # TYPE
    limit: Optional[Union[int, float]] = None      # MIN, MAX, LENGTH
    pattern: Optional[str] = None                  # PATTERN
    pattern_name: Optional[str] = None             # PATTERN (alphanum, token, email)
    allowed: Optional[tuple[Any, ...]] = None      # VALID
    default: Any = None                            # DEFAULT
    reference: Optional[str] = None                # REFERENCE


class Schema(BaseModel):
    """Ordered field rules for one segment plus the unknown-field policy."""

    model_config = {"frozen": True}

    fields: dict[str, tuple[Rule, ...]] = Field(default_factory=dict)
    allow_unknown: bool = False

    @field_validator("fields")
    @classmethod
    def _read_only_fields(cls, value: dict[str, tuple[Rule, ...]]):
        return MappingProxyType(dict(value))

    def rules_of(self, name: str, kind: RuleKind) -> list[Rule]:
        return [rule for rule in self.fields.get(name, ()) if rule.kind == kind]

    def field_type(self, name: str) -> Optional[ValueType]:
        types = self.rules_of(name, RuleKind.TYPE)
        return types[0].value_type if types else None

    def references(self, name: str) -> list[str]:
        return [rule.reference for rule in self.rules_of(name, RuleKind.REFERENCE)]

    def resolution_order(self) -> list[str]:
        """Field names ordered so every referenced field precedes its referrers.

        Ties keep declaration order. References to undeclared fields are
        ignored here; the registry rejects them.

        Raises:
            SchemaDefinitionError: if references form a cycle.
        """
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = visiting[visiting.index(name):] + [name]
                raise SchemaDefinitionError(
                    f"Reference cycle between fields: {' -> '.join(cycle)}"
                )
            visiting.append(name)
            for target in self.references(name):
                if target in self.fields:
                    visit(target)
            visiting.pop()
            done.add(name)
            order.append(name)

        for name in self.fields:
            visit(name)
        return order


class ValidationResult(BaseModel):
    """Outcome of validating one segment.

    A valid result carries the converted, default-augmented segment data in
    ``value``. An invalid one names every failing key and keeps the message of
    the first failure.
    """

    source: Segment
    valid: bool
    keys: list[str] = Field(default_factory=list)
    message: Optional[str] = None
    value: Any = None

    @classmethod
    def ok(cls, source: Segment, value: Any) -> "ValidationResult":
        return cls(source=source, valid=True, value=value)

    @classmethod
    def fail(cls, source: Segment, keys: list[str], message: str) -> "ValidationResult":
        return cls(source=source, valid=False, keys=keys, message=message)

    def to_wire(self) -> dict:
        return {"source": self.source.value, "keys": list(self.keys), "message": self.message}


class AggregatedError(BaseModel):
    """Every invalid segment of one request, in fixed segment order."""

    failures: dict[Segment, ValidationResult]

    @field_validator("failures")
    @classmethod
    def _ordered_invalid_only(cls, value: dict[Segment, ValidationResult]):
        if not value:
            raise ValueError("an aggregated error needs at least one invalid segment")
        for segment, result in value.items():
            if result.valid:
                raise ValueError(f"segment '{segment.value}' is valid and cannot be reported")
        return {segment: value[segment] for segment in SEGMENT_ORDER if segment in value}

    @property
    def segments(self) -> list[Segment]:
        return list(self.failures)

    def __getitem__(self, segment: Segment) -> ValidationResult:
        return self.failures[segment]

    def __contains__(self, segment: object) -> bool:
        return segment in self.failures

    def __len__(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        return "; ".join(
            f"{segment.value}: {result.message}" for segment, result in self.failures.items()
        )

    def to_wire(self) -> dict:
        return {segment.value: result.to_wire() for segment, result in self.failures.items()}


# ── Wire format ──


class SegmentFailureDetail(BaseModel):
    """Per-segment entry of the ``validation`` object."""

    source: str
    keys: list[str]
    message: str


class ValidationErrorResponse(BaseModel):
    """Body of the 400 response rendered for a tagged failure."""

    model_config = {"populate_by_name": True}

    status_code: int = Field(default=400, alias="statusCode")
    error: str = "Bad Request"
    message: str = "Validation failed"
    validation: dict[str, SegmentFailureDetail]

    @classmethod
    def from_error(cls, error: AggregatedError) -> "ValidationErrorResponse":
        return cls(
            validation={
                name: SegmentFailureDetail(**detail)
                for name, detail in error.to_wire().items()
            }
        )
