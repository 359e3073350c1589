import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Optional

from podboard.boards.schemas import Board, BoardItem
from podboard.components.segmenter.schemas import Segment
from podboard.errors import InvalidInputError, NotFoundError
from podboard.pipeline.schemas import ProcessingResult
from podboard.session.schemas import Identity
from podboard.timeline.schemas import Note

_logger = logging.getLogger(__name__)

BOARD_COLORS = [
    "from-blue-500 to-purple-600",
    "from-green-500 to-teal-600",
    "from-pink-500 to-rose-600",
    "from-orange-500 to-red-600",
    "from-indigo-500 to-blue-600",
    "from-yellow-500 to-orange-600",
]


def _matches(query: str, *fields: str) -> bool:
    needle = query.lower()
    return any(needle in field.lower() for field in fields)


class BoardService:
    """Stores boards per identity and answers search queries over them."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._boards: dict[str, Board] = {}
        self._rng = rng or random.Random()

    def create_board(
        self,
        owner: Identity,
        title: str,
        description: str = "",
        color: Optional[str] = None,
    ) -> str:
        if not title or not title.strip():
            raise InvalidInputError("Board title is required")

        now = datetime.now(timezone.utc)
        board = Board(
            id=uuid.uuid4().hex,
            owner=owner.key,
            title=title.strip(),
            description=description.strip(),
            color=color or self._rng.choice(BOARD_COLORS),
            created_at=now,
            updated_at=now,
        )
        self._boards[board.id] = board
        _logger.info(f"Created board {board.id} ({board.title}) for {owner.key}")
        return board.id

    def get_board(self, owner: Identity, board_id: str) -> Board:
        board = self._boards.get(board_id)
        if board is None or board.owner != owner.key:
            raise NotFoundError("board", board_id)
        return board

    def list_boards(self, owner: Identity, query: Optional[str] = None) -> list[Board]:
        """Boards of ``owner``, newest first, filtered on title/description."""
        boards = [board for board in self._boards.values() if board.owner == owner.key]
        boards.reverse()
        if query:
            boards = [
                board
                for board in boards
                if _matches(query, board.title, board.description)
            ]
        return boards

    def add_item(self, owner: Identity, board_id: str, item: BoardItem) -> Board:
        board = self.get_board(owner, board_id)
        board.items.append(item)
        board.updated_at = max(datetime.now(timezone.utc), board.updated_at)
        _logger.debug(f"Added {item.kind} item {item.id} to board {board_id}")
        return board

    def save_note(
        self, owner: Identity, board_id: str, note: Note, media: ProcessingResult
    ) -> BoardItem:
        if note.media_id != media.id:
            raise InvalidInputError(
                f"Note {note.id} belongs to media {note.media_id}, not {media.id}"
            )
        item = BoardItem.from_note(note, media)
        self.add_item(owner, board_id, item)
        return item

    def save_segment(
        self,
        owner: Identity,
        board_id: str,
        segment: Segment,
        media: ProcessingResult,
    ) -> BoardItem:
        item = BoardItem.from_segment(segment, media)
        self.add_item(owner, board_id, item)
        return item

    def search(self, owner: Identity, board_id: str, query: str) -> list[BoardItem]:
        """Items whose content or media title contains ``query``, in insertion order."""
        items = self.get_board(owner, board_id).items
        if not query:
            return list(items)
        return [item for item in items if _matches(query, item.content, item.media_title)]
