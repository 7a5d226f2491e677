"""Request validation engine — schema-driven checks per request segment.

Usage:
    from segmentguard.validation import Segment, build_middleware, error_responder_middleware
    from segmentguard.validation.rules import string

    @router.post("/signup", dependencies=[build_middleware({
        Segment.QUERY: {"token": string().token().required()},
    })])
    async def signup(request: Request): ...

    error_responder_middleware().install(app)
"""

from segmentguard.validation.aggregator import AggregationOutcome, ErrorAggregator, error_aggregator
from segmentguard.validation.errors import (
    VALIDATION_TAG,
    PipelineDefinitionError,
    SchemaDefinitionError,
    ValidationFailure,
    is_validation_failure,
)
from segmentguard.validation.middleware import ValidationMiddleware, ValidationState, build_middleware
from segmentguard.validation.models import (
    SEGMENT_ORDER,
    AggregatedError,
    Rule,
    RuleKind,
    Schema,
    Segment,
    ValidationErrorResponse,
    ValidationResult,
    ValueType,
)
from segmentguard.validation.registry import SchemaRegistry
from segmentguard.validation.responder import ErrorResponder, error_responder_middleware, verify_pipeline
from segmentguard.validation.segments import validated
from segmentguard.validation.validator import Validator, validator

__all__ = [
    "AggregatedError",
    "AggregationOutcome",
    "ErrorAggregator",
    "ErrorResponder",
    "PipelineDefinitionError",
    "Rule",
    "RuleKind",
    "SEGMENT_ORDER",
    "Schema",
    "SchemaDefinitionError",
    "SchemaRegistry",
    "Segment",
    "VALIDATION_TAG",
    "ValidationErrorResponse",
    "ValidationFailure",
    "ValidationMiddleware",
    "ValidationResult",
    "ValidationState",
    "Validator",
    "ValueType",
    "build_middleware",
    "error_aggregator",
    "error_responder_middleware",
    "is_validation_failure",
    "validated",
    "validator",
    "verify_pipeline",
]
