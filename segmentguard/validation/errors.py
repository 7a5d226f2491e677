"""Error types raised by the validation engine.

Two very different kinds of failure live here:

    - SchemaDefinitionError: a route was declared with a broken schema. Raised
      while routes are being defined (or at startup) and never per request.
    - ValidationFailure: a request did not satisfy its schemas. Travels down the
      error path and is rendered by the ErrorResponder as a 400.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from segmentguard.validation.models import AggregatedError


# Marker shared by every failure this engine produces. Downstream stages
# compare against it instead of inspecting exception classes.
VALIDATION_TAG = "segmentguard.validation"


class SchemaDefinitionError(ValueError):
    """A schema or registry is self-contradictory. Fatal at route setup."""


class PipelineDefinitionError(SchemaDefinitionError):
    """The application pipeline is missing a stage the validated routes need."""


class ValidationFailure(Exception):
    """Tagged failure carrying every invalid segment of one request."""

    tag = VALIDATION_TAG

    def __init__(self, error: "AggregatedError"):
        self.error = error
        super().__init__(error.summary())


def is_validation_failure(err: object) -> bool:
    """True only for failures produced by this engine."""
    return getattr(err, "tag", None) == VALIDATION_TAG and hasattr(err, "error")
