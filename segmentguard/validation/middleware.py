"""Validation middleware — per-route entry point of the engine.

Usage:
    from segmentguard.validation import Segment, build_middleware
    from segmentguard.validation.rules import string

    @router.get(
        "/notes/{noteId}",
        dependencies=[build_middleware({Segment.PARAMS: {"noteId": string().length(12)}})],
    )
    async def get_note(request: Request): ...

Each request moves INIT → AGGREGATING → PASS | FAIL, tracked on
``request.state.validation_state``. On PASS the validated
data is stored on ``request.state.validated`` and the handler runs. On FAIL a
tagged ValidationFailure goes down the error path and the handler never runs.
"""

from enum import Enum
from typing import Any, Mapping, Optional, Union

import structlog
from fastapi import Depends, Request

from segmentguard.validation.aggregator import ErrorAggregator, error_aggregator
from segmentguard.validation.errors import ValidationFailure
from segmentguard.validation.models import Schema, Segment
from segmentguard.validation.registry import SchemaRegistry
from segmentguard.validation.rules import FieldSpec
from segmentguard.validation.segments import read_segments

logger = structlog.get_logger()


class ValidationState(str, Enum):
    INIT = "init"
    AGGREGATING = "aggregating"
    PASS = "pass"
    FAIL = "fail"


class ValidationMiddleware:
    """FastAPI dependency bound to one route's SchemaRegistry."""

    def __init__(self, registry: SchemaRegistry, aggregator: Optional[ErrorAggregator] = None):
        self.registry = registry.freeze()
        self.aggregator = aggregator or error_aggregator

    async def __call__(self, request: Request) -> None:
        request.state.validation_state = ValidationState.INIT
        signer = getattr(request.app.state, "cookie_signer", None)
        segments = await read_segments(request, self.registry.segments, signer)

        request.state.validation_state = ValidationState.AGGREGATING
        outcome = self.aggregator.aggregate(segments, self.registry)

        if outcome.error is not None:
            request.state.validation_state = ValidationState.FAIL
            logger.info(
                "request_validation_failed",
                route=self.registry.route,
                path=request.url.path,
                method=request.method,
                state=ValidationState.FAIL.value,
                segments=[segment.value for segment in outcome.error.segments],
                keys={s.value: r.keys for s, r in outcome.error.failures.items()},
            )
            raise ValidationFailure(outcome.error)

        request.state.validation_state = ValidationState.PASS
        # Several validators may guard one route; later ones add their segments
        store = getattr(request.state, "validated", None) or {}
        store.update({segment.value: value for segment, value in outcome.values.items()})
        request.state.validated = store

        logger.debug(
            "request_validation_passed",
            route=self.registry.route,
            path=request.url.path,
            state=ValidationState.PASS.value,
        )


def build_middleware(
    schema_map: Mapping[Union[Segment, str], Union[Schema, Mapping[str, FieldSpec]]],
    route: str = "anonymous",
) -> Any:
    """Build the route dependency for ``schema_map``.

    Raises:
        SchemaDefinitionError: at route definition time, for any broken schema.
    """
    registry = SchemaRegistry.from_mapping(schema_map, route=route)
    return Depends(ValidationMiddleware(registry))
