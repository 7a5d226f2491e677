"""Error aggregator — validates every registered segment of a request.

All segments are visited even after one fails, so a client sees every
problem with its request in a single response.
"""

import time
from typing import Any, Mapping, Optional

import structlog
from pydantic import BaseModel, Field

from segmentguard.validation.models import AggregatedError, Segment, ValidationResult
from segmentguard.validation.registry import SchemaRegistry
from segmentguard.validation.validator import Validator, validator as default_validator

logger = structlog.get_logger()


class AggregationOutcome(BaseModel):
    """Validated data for every registered segment, or the aggregated error."""

    values: dict[Segment, Any] = Field(default_factory=dict)
    error: Optional[AggregatedError] = None

    @property
    def passed(self) -> bool:
        return self.error is None


class ErrorAggregator:
    """Runs the Validator over each registered segment in fixed order."""

    def __init__(self, validator: Optional[Validator] = None):
        self.validator = validator or default_validator

    def aggregate(
        self,
        segments: Mapping[Segment, Any],
        registry: SchemaRegistry,
    ) -> AggregationOutcome:
        """Validate the decoded ``segments`` against ``registry``.

        Args:
            segments: Host-provided data view per segment. A registered segment
                missing here is validated as empty.
            registry: Schemas of the route being served

        Returns:
            AggregationOutcome — ``error`` is set when any segment is invalid
        """
        values: dict[Segment, Any] = {}
        failures: dict[Segment, ValidationResult] = {}

        for segment, schema in registry.items():
            start = time.perf_counter()
            result = self.validator.validate(segments.get(segment, {}), schema, segment)
            duration = (time.perf_counter() - start) * 1000

            logger.debug(
                "segment_validated",
                route=registry.route,
                segment=segment.value,
                valid=result.valid,
                keys=result.keys,
                duration_ms=round(duration, 3),
            )

            if result.valid:
                values[segment] = result.value
            else:
                failures[segment] = result

        if failures:
            return AggregationOutcome(values=values, error=AggregatedError(failures=failures))
        return AggregationOutcome(values=values)


# Module-level singleton
error_aggregator = ErrorAggregator()
