import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from podboard.components.segmenter.schemas import Segment
from podboard.errors import InvalidInputError, NotFoundError, OutOfRangeError
from podboard.pipeline.schemas import ProcessingResult
from podboard.timeline.schemas import Note, NoteKind, TimelineEntry

_logger = logging.getLogger(__name__)


class Timeline:
    """
    Media timelines and the notes, sketches and segments anchored to them.

    Media become addressable once their processing job completes
    (``register_media`` is installed as a pipeline result handler). Segments
    are read-only; notes and sketches are created, edited and deleted by
    the user. A media duration of 0 means the length is unknown, in which
    case only the lower bound of a timestamp is checked.
    """

    def __init__(self):
        self._media: dict[str, ProcessingResult] = {}
        self._notes: dict[str, Note] = {}
        self._notes_by_media: dict[str, list[str]] = {}

    def register_media(self, result: ProcessingResult) -> None:
        if result.metadata is None:
            raise InvalidInputError(f"Media {result.id} has no metadata")
        self._media[result.id] = result
        self._notes_by_media.setdefault(result.id, [])
        _logger.info(
            f"Registered media {result.id} ({result.metadata.title}) "
            f"with {len(result.segments)} segments"
        )

    def get_media(self, media_id: str) -> ProcessingResult:
        media = self._media.get(media_id)
        if media is None:
            raise NotFoundError("media", media_id)
        return media

    def duration(self, media_id: str) -> int:
        metadata = self.get_media(media_id).metadata
        return metadata.duration if metadata else 0

    def list_segments(self, media_id: str) -> list[Segment]:
        segments = self.get_media(media_id).segments
        return sorted(segments, key=lambda segment: segment.start_time)

    def get_segment(self, media_id: str, segment_id: str) -> Segment:
        for segment in self.get_media(media_id).segments:
            if segment.id == segment_id:
                return segment
        raise NotFoundError("segment", f"{media_id}/{segment_id}")

    def segment_at(self, media_id: str, timestamp: float) -> Optional[Segment]:
        """Return the first segment covering ``timestamp``, if any."""
        for segment in self.list_segments(media_id):
            if segment.contains(timestamp):
                return segment
        return None

    def add_note(
        self,
        media_id: str,
        timestamp: float,
        content: str,
        kind: NoteKind | str = NoteKind.TEXT,
        owner: Optional[str] = None,
    ) -> str:
        self._check_timestamp(media_id, timestamp)
        if not content or not content.strip():
            raise InvalidInputError("Note content is required")

        now = datetime.now(timezone.utc)
        note = Note(
            id=uuid.uuid4().hex,
            media_id=media_id,
            owner=owner,
            timestamp=timestamp,
            content=content,
            kind=_note_kind(kind),
            created_at=now,
            updated_at=now,
        )
        self._notes[note.id] = note
        self._notes_by_media[media_id].append(note.id)
        _logger.debug(f"Added {note.kind.value} note {note.id} at {timestamp}s")
        return note.id

    def get_note(self, note_id: str, owner: Optional[str] = None) -> Note:
        """Look up a note; with ``owner`` set, notes of other owners are hidden."""
        note = self._notes.get(note_id)
        if note is None or (owner is not None and note.owner != owner):
            raise NotFoundError("note", note_id)
        return note

    def list_notes(
        self,
        media_id: str,
        kind: NoteKind | str | None = None,
        owner: Optional[str] = None,
    ) -> list[Note]:
        """Notes of a media item by timestamp; ties keep creation order."""
        self.get_media(media_id)
        notes = [self._notes[note_id] for note_id in self._notes_by_media[media_id]]
        if owner is not None:
            notes = [note for note in notes if note.owner == owner]
        if kind is not None:
            notes = [note for note in notes if note.kind == _note_kind(kind)]
        return sorted(notes, key=lambda note: note.timestamp)

    def jump_target(self, note_id: str, owner: Optional[str] = None) -> float:
        return self.get_note(note_id, owner).timestamp

    def update_note(
        self, note_id: str, content: str, owner: Optional[str] = None
    ) -> Note:
        if not content or not content.strip():
            raise InvalidInputError("Note content is required")
        note = self.get_note(note_id, owner).model_copy(
            update={"content": content, "updated_at": datetime.now(timezone.utc)}
        )
        self._notes[note_id] = note
        return note

    def delete_note(self, note_id: str, owner: Optional[str] = None) -> None:
        note = self.get_note(note_id, owner)
        del self._notes[note_id]
        self._notes_by_media[note.media_id].remove(note_id)

    def entries(
        self, media_id: str, owner: Optional[str] = None
    ) -> list[TimelineEntry]:
        """Segments and notes merged into one list ordered by start time."""
        entries = [
            TimelineEntry(
                kind="segment",
                ref_id=segment.id,
                start=segment.start_time,
                end=segment.end_time,
                title=segment.title,
                content=segment.description or segment.title,
            )
            for segment in self.list_segments(media_id)
        ]
        entries.extend(
            TimelineEntry(
                kind="note" if note.kind is NoteKind.TEXT else "sketch",
                ref_id=note.id,
                start=note.timestamp,
                content=note.content,
            )
            for note in self.list_notes(media_id, owner=owner)
        )
        # Segments sort before notes at the same instant.
        return sorted(entries, key=lambda entry: (entry.start, entry.kind != "segment"))

    def _check_timestamp(self, media_id: str, timestamp: float) -> None:
        duration = self.duration(media_id)
        if timestamp < 0:
            raise OutOfRangeError(f"Timestamp must not be negative: {timestamp}")
        if duration > 0 and timestamp > duration:
            raise OutOfRangeError(
                f"Timestamp {timestamp}s is beyond the media duration of {duration}s"
            )


def _note_kind(kind: NoteKind | str) -> NoteKind:
    try:
        return NoteKind(kind)
    except ValueError:
        raise InvalidInputError(f"Unknown note kind: {kind}") from None
