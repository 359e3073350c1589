from typing import List

from fastapi import APIRouter, Depends, status

from podboard.boards.schemas import Board, BoardItem
from podboard.session.schemas import Identity
from podboard_api.core.services import Services, get_identity, get_services
from podboard_api.schemas.v1.requests import BoardCreateRequest, BoardItemCreateRequest
from podboard_api.schemas.v1.responses import ErrorResponse

router = APIRouter(tags=["boards"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("/boards", response_model=List[Board])
async def list_boards(
    q: str | None = None,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> List[Board]:
    """Boards of the caller, newest first, optionally filtered by ``q``."""
    return services.boards.list_boards(identity, q)


@router.post(
    "/boards",
    response_model=Board,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_board(
    request: BoardCreateRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Board:
    board_id = services.boards.create_board(
        identity, request.title, request.description, request.color
    )
    return services.boards.get_board(identity, board_id)


@router.get("/boards/{board_id}", response_model=Board, responses=_NOT_FOUND)
async def get_board(
    board_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> Board:
    return services.boards.get_board(identity, board_id)


@router.get(
    "/boards/{board_id}/items", response_model=List[BoardItem], responses=_NOT_FOUND
)
async def search_board_items(
    board_id: str,
    q: str = "",
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> List[BoardItem]:
    """Items whose content or media title contains ``q`` (case-insensitive)."""
    return services.boards.search(identity, board_id, q)


@router.post(
    "/boards/{board_id}/items",
    response_model=BoardItem,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **_NOT_FOUND},
)
async def save_to_board(
    board_id: str,
    request: BoardItemCreateRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> BoardItem:
    """Save a snapshot of a note, sketch or segment to a board."""
    # Resolve the board first so an unknown board fails before any lookup.
    services.boards.get_board(identity, board_id)
    timeline = services.timeline
    media = timeline.get_media(request.media_id)

    if request.note_id is not None:
        note = timeline.get_note(request.note_id, owner=identity.key)
        return services.boards.save_note(identity, board_id, note, media)

    segment = timeline.get_segment(request.media_id, request.segment_id or "")
    return services.boards.save_segment(identity, board_id, segment, media)
