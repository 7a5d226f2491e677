"""Host data accessors — read-only views of each request segment.

Decoding (JSON bodies, cookie signatures) happens here, before the engine
runs. The engine itself never touches raw bytes.
"""

import json
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import unquote

from fastapi import HTTPException, Request

from segmentguard.validation.cookies import SIGNED_PREFIX, CookieSigner
from segmentguard.validation.models import Segment


async def read_body(request: Request) -> Any:
    """Decoded JSON body; ``{}`` when there is no JSON body at all."""
    body = await request.body()
    if not body:
        return {}
    if "json" not in request.headers.get("content-type", "").lower():
        return {}
    try:
        return json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Malformed JSON body") from None


def read_query(request: Request) -> dict[str, Any]:
    """Query map; repeated keys become lists."""
    query: dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        query[key] = values[0] if len(values) == 1 else values
    return query


def split_cookies(
    raw: Mapping[str, str],
    signer: Optional[CookieSigner],
) -> tuple[dict[str, str], dict[str, Any]]:
    """Separate plain cookies from signed ones.

    A signed cookie with a bad signature maps to ``False``. Without a signer
    every cookie stays plain.
    """
    cookies: dict[str, str] = {}
    signed: dict[str, Any] = {}
    for name, value in raw.items():
        value = unquote(value)
        if signer is not None and value.startswith(SIGNED_PREFIX):
            unsigned = signer.unsign(value)
            signed[name] = unsigned if unsigned is not None else False
        else:
            cookies[name] = value
    return cookies, signed


async def read_segments(
    request: Request,
    segments: Iterable[Segment],
    signer: Optional[CookieSigner] = None,
) -> dict[Segment, Any]:
    """Read every requested segment from ``request``."""
    data: dict[Segment, Any] = {}
    cookies: Optional[tuple[dict, dict]] = None

    for segment in segments:
        if segment == Segment.BODY:
            data[segment] = await read_body(request)
        elif segment == Segment.QUERY:
            data[segment] = read_query(request)
        elif segment == Segment.PARAMS:
            data[segment] = dict(request.path_params)
        elif segment == Segment.HEADERS:
            data[segment] = dict(request.headers)
        else:
            if cookies is None:
                cookies = split_cookies(request.cookies, signer)
            data[segment] = cookies[0] if segment == Segment.COOKIES else cookies[1]

    return data


def validated(request: Request, segment: Segment) -> Any:
    """Validated (converted, default-augmented) data of ``segment``.

    Falls back to an empty mapping when the route did not validate it.
    """
    store = getattr(request.state, "validated", None) or {}
    return store.get(segment.value, {})
