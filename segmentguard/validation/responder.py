"""Error responder — renders this engine's failures as 400 responses.

Install exactly once, after the routes:

    app.include_router(api_router)
    error_responder_middleware().install(app)

Errors the engine did not produce are re-raised untouched so the regular
500 path handles them.
"""

from typing import Any, Iterable, Iterator, Optional, Sequence

import structlog
from fastapi import FastAPI, Request
from fastapi.dependencies.models import Dependant
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from segmentguard.validation.errors import (
    PipelineDefinitionError,
    ValidationFailure,
    is_validation_failure,
)
from segmentguard.validation.middleware import ValidationMiddleware
from segmentguard.validation.models import ValidationErrorResponse

logger = structlog.get_logger()

STATE_KEY = "segment_error_responder"


class ErrorResponder:
    """Exception handler for tagged ValidationFailure values."""

    status_code = 400

    async def __call__(self, request: Request, exc: Exception) -> JSONResponse:
        if not is_validation_failure(exc):
            raise exc
        return JSONResponse(status_code=self.status_code, content=self.render(exc))

    def render(self, failure: ValidationFailure) -> dict:
        return ValidationErrorResponse.from_error(failure.error).model_dump(by_alias=True)

    def install(self, app: FastAPI) -> "ErrorResponder":
        """Register on ``app``; a second install returns the first responder."""
        existing = getattr(app.state, STATE_KEY, None)
        if existing is not None:
            logger.debug("error_responder_already_installed")
            return existing

        app.add_exception_handler(ValidationFailure, self)
        setattr(app.state, STATE_KEY, self)
        return self


def error_responder_middleware() -> ErrorResponder:
    return ErrorResponder()


def _uses_validation(dependant: Dependant) -> bool:
    return any(
        isinstance(dep.call, ValidationMiddleware) or _uses_validation(dep)
        for dep in dependant.dependencies
    )


def _declares_validation(dependencies: Optional[Sequence[Any]]) -> bool:
    return any(
        isinstance(getattr(dep, "dependency", None), ValidationMiddleware)
        for dep in dependencies or ()
    )


def _validated_routes(
    routes: Iterable[Any],
    prefix: str = "",
    inherited: bool = False,
) -> Iterator[str]:
    """Yield ``METHODS path`` for every validated APIRoute, nested routers included.

    Included routers may stay nested (with their own dependencies) instead of
    being flattened into the parent, so the walk descends into any entry that
    carries ``routes`` or a ``router``.
    """
    for route in routes:
        if isinstance(route, APIRoute):
            if (
                inherited
                or _declares_validation(route.dependencies)
                or _uses_validation(route.dependant)
            ):
                yield f"{','.join(sorted(route.methods or ()))} {prefix}{route.path}"
            continue

        router = getattr(route, "router", None)
        children = getattr(route, "routes", None)
        if children is None and router is not None:
            children = getattr(router, "routes", None)
        if not children:
            continue

        nested = inherited or _declares_validation(getattr(route, "dependencies", None))
        if router is not None:
            nested = nested or _declares_validation(getattr(router, "dependencies", None))
        yield from _validated_routes(
            children,
            prefix + (getattr(route, "prefix", None) or ""),
            nested,
        )


def verify_pipeline(app: FastAPI) -> int:
    """Check that validated routes have a responder to render their failures.

    Returns:
        Number of routes guarded by a ValidationMiddleware

    Raises:
        PipelineDefinitionError: if validated routes exist without a responder
    """
    validated_routes = list(_validated_routes(app.routes))

    if validated_routes and getattr(app.state, STATE_KEY, None) is None:
        raise PipelineDefinitionError(
            "Validated routes have no error responder installed: "
            + ", ".join(validated_routes)
        )

    logger.info("validation_pipeline_ready", validated_routes=len(validated_routes))
    return len(validated_routes)
