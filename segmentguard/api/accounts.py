"""Accounts API — signup."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

import structlog

from segmentguard.models.requests import SIGNUP_SCHEMAS
from segmentguard.validation import Segment, build_middleware, validated

logger = structlog.get_logger()

router = APIRouter()


@router.post(
    "/signup",
    status_code=201,
    response_class=PlainTextResponse,
    dependencies=[build_middleware(SIGNUP_SCHEMAS, route="POST /signup")],
)
async def signup(request: Request):
    """Register a new account. Responds with the invitation token."""
    account = validated(request, Segment.BODY)
    token = validated(request, Segment.QUERY)["token"]

    logger.info("signup_accepted", name=account["name"], age=account["age"])

    return PlainTextResponse(token, status_code=201)
