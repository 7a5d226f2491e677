"""Client identity endpoints — headers and cookies."""

from fastapi import APIRouter, Request

from segmentguard.models.requests import PROFILE_SCHEMAS, WHOAMI_SCHEMAS
from segmentguard.models.responses import ProfileResponse, WhoAmIResponse
from segmentguard.validation import Segment, build_middleware, validated

router = APIRouter()


@router.get(
    "/whoami",
    response_model=WhoAmIResponse,
    dependencies=[build_middleware(WHOAMI_SCHEMAS, route="GET /whoami")],
)
async def whoami(request: Request):
    headers = validated(request, Segment.HEADERS)
    return WhoAmIResponse(client_id=headers["x-client-id"])


@router.get(
    "/profile",
    response_model=ProfileResponse,
    dependencies=[build_middleware(PROFILE_SCHEMAS, route="GET /profile")],
)
async def profile(request: Request):
    """Echo the plain ``name`` cookie and the signed ``jwt`` cookie."""
    return ProfileResponse(
        name=validated(request, Segment.COOKIES)["name"],
        jwt=validated(request, Segment.SIGNED_COOKIES)["jwt"],
    )
