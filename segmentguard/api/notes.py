"""Notes API."""

from fastapi import APIRouter, Request

from segmentguard.models.requests import NOTE_SCHEMAS
from segmentguard.models.responses import NoteResponse
from segmentguard.validation import Segment, build_middleware, validated

router = APIRouter()


@router.get(
    "/notes/{noteId}",
    response_model=NoteResponse,
    dependencies=[build_middleware(NOTE_SCHEMAS, route="GET /notes/{noteId}")],
)
async def get_note(request: Request):
    """Look up a note by its 12 character id."""
    return NoteResponse(note_id=validated(request, Segment.PARAMS)["noteId"])
