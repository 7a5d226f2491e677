"""Request schemas for the API routes."""

from segmentguard.validation import Segment
from segmentguard.validation.rules import keys, number, ref, string

SIGNUP_SCHEMAS = {
    Segment.BODY: keys({
        "name": string().alphanum().min(2).max(30).required(),
        "email": string().required().email(),
        "password": string().pattern(r"^[a-zA-Z0-9]{3,30}$").required().min(8),
        "repeat_password": ref("password"),
        "age": number().integer().required().min(18),
        "about": string().min(2).max(30),
    }),
    Segment.QUERY: {
        "token": string().token().required(),
    },
}

NOTE_SCHEMAS = {
    Segment.PARAMS: {
        "noteId": string().alphanum().length(12),
    },
}

# Clients send plenty of headers we do not care about
WHOAMI_SCHEMAS = {
    Segment.HEADERS: keys(
        {"x-client-id": string().token().required()},
        allow_unknown=True,
    ),
}

PROFILE_SCHEMAS = {
    Segment.COOKIES: {
        "name": string().min(2).required(),
    },
    Segment.SIGNED_COOKIES: {
        "jwt": string().length(32).required(),
    },
}
