from typing import List

from fastapi import APIRouter, Depends, Response, status

from podboard.components.segmenter.schemas import Segment
from podboard.pipeline.schemas import ProcessingResult
from podboard.session.schemas import Identity
from podboard.timeline.formatting import format_time
from podboard.timeline.schemas import Note, NoteKind, TimelineEntry
from podboard_api.core.services import Services, get_identity, get_services
from podboard_api.schemas.v1.requests import NoteCreateRequest, NoteUpdateRequest
from podboard_api.schemas.v1.responses import ErrorResponse, JumpTargetResponse

router = APIRouter(tags=["timeline"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("/media/{media_id}", response_model=ProcessingResult, responses=_NOT_FOUND)
async def get_media(
    media_id: str, services: Services = Depends(get_services)
) -> ProcessingResult:
    return services.timeline.get_media(media_id)


@router.get(
    "/media/{media_id}/segments", response_model=List[Segment], responses=_NOT_FOUND
)
async def list_segments(
    media_id: str, services: Services = Depends(get_services)
) -> List[Segment]:
    return services.timeline.list_segments(media_id)


@router.get(
    "/media/{media_id}/timeline",
    response_model=List[TimelineEntry],
    responses=_NOT_FOUND,
)
async def get_timeline(
    media_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> List[TimelineEntry]:
    """Segments plus the caller's notes and sketches, in timeline order."""
    return services.timeline.entries(media_id, owner=identity.key)


@router.post(
    "/media/{media_id}/notes",
    response_model=Note,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **_NOT_FOUND},
)
async def add_note(
    media_id: str,
    request: NoteCreateRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Note:
    note_id = services.timeline.add_note(
        media_id,
        request.timestamp,
        request.content,
        request.kind,
        owner=identity.key,
    )
    return services.timeline.get_note(note_id)


@router.get(
    "/media/{media_id}/notes", response_model=List[Note], responses=_NOT_FOUND
)
async def list_notes(
    media_id: str,
    kind: NoteKind | None = None,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> List[Note]:
    return services.timeline.list_notes(media_id, kind, owner=identity.key)


@router.get("/notes/{note_id}", response_model=Note, responses=_NOT_FOUND)
async def get_note(
    note_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Note:
    return services.timeline.get_note(note_id, owner=identity.key)


@router.get(
    "/notes/{note_id}/jump", response_model=JumpTargetResponse, responses=_NOT_FOUND
)
async def jump_to_note(
    note_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> JumpTargetResponse:
    """Timestamp a player should seek to for this note."""
    timestamp = services.timeline.jump_target(note_id, owner=identity.key)
    return JumpTargetResponse(
        note_id=note_id, timestamp=timestamp, display=format_time(timestamp)
    )


@router.patch(
    "/notes/{note_id}",
    response_model=Note,
    responses={400: {"model": ErrorResponse}, **_NOT_FOUND},
)
async def update_note(
    note_id: str,
    request: NoteUpdateRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Note:
    return services.timeline.update_note(note_id, request.content, owner=identity.key)


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
)
async def delete_note(
    note_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Response:
    services.timeline.delete_note(note_id, owner=identity.key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
