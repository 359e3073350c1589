"""Tests for media timelines, notes and time formatting."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from podboard.errors import InvalidInputError, NotFoundError, OutOfRangeError
from podboard.pipeline.schemas import ProcessingResult
from podboard.timeline.formatting import format_duration, format_time
from podboard.timeline.schemas import NoteKind
from podboard.timeline.timeline import Timeline


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0:00"), (5, "0:05"), (65, "1:05"), (599.9, "9:59"), (3600, "60:00")],
    )
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected

    @pytest.mark.parametrize(
        "seconds,expected",
        [(59, "0:59"), (3600, "1:00:00"), (3725, "1:02:05")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestMedia:
    def test_unknown_media(self, timeline):
        with pytest.raises(NotFoundError, match="media not found: nope"):
            timeline.get_media("nope")

    def test_register_requires_metadata(self):
        with pytest.raises(InvalidInputError):
            Timeline().register_media(
                ProcessingResult(id="m", url="https://x.test", status="completed")
            )

    def test_segments_are_ordered(self, timeline):
        starts = [segment.start_time for segment in timeline.list_segments("media-1")]

        assert starts == sorted(starts)

    def test_get_segment(self, timeline):
        assert timeline.get_segment("media-1", "2").title == "Tools"
        with pytest.raises(NotFoundError):
            timeline.get_segment("media-1", "99")

    @pytest.mark.parametrize(
        "timestamp,segment_id", [(0, "1"), (299, "1"), (300, "2"), (3599, "3")]
    )
    def test_segment_at(self, timeline, timestamp, segment_id):
        assert timeline.segment_at("media-1", timestamp).id == segment_id

    def test_segment_at_past_the_end(self, timeline):
        assert timeline.segment_at("media-1", 3600) is None


class TestNotes:
    def test_add_and_jump(self, timeline):
        note_id = timeline.add_note("media-1", 125, "Great point about AI tools")

        note = timeline.get_note(note_id)
        assert note.timestamp == 125
        assert note.kind is NoteKind.TEXT
        assert timeline.jump_target(note_id) == 125

    @pytest.mark.parametrize("timestamp", [0, 3600])
    def test_bounds_are_inclusive(self, timeline, timestamp):
        note_id = timeline.add_note("media-1", timestamp, "edge")

        assert timeline.get_note(note_id).timestamp == timestamp

    @pytest.mark.parametrize("timestamp", [-1, 3600.5, 7200])
    def test_out_of_range(self, timeline, timestamp):
        with pytest.raises(OutOfRangeError):
            timeline.add_note("media-1", timestamp, "nope")

    def test_out_of_range_is_invalid_input(self, timeline):
        with pytest.raises(InvalidInputError):
            timeline.add_note("media-1", -5, "nope")

    def test_unknown_duration_checks_lower_bound_only(self, sample_media):
        live = sample_media.model_copy(
            update={
                "id": "live",
                "metadata": sample_media.metadata.model_copy(update={"duration": 0}),
            }
        )
        timeline = Timeline()
        timeline.register_media(live)

        assert timeline.add_note("live", 99999, "late")
        with pytest.raises(OutOfRangeError):
            timeline.add_note("live", -1, "early")

    @pytest.mark.parametrize("content", ["", "   "])
    def test_blank_content(self, timeline, content):
        with pytest.raises(InvalidInputError):
            timeline.add_note("media-1", 10, content)

    def test_unknown_media_reported_before_range(self, timeline):
        with pytest.raises(NotFoundError):
            timeline.add_note("nope", -1, "")

    def test_unknown_kind(self, timeline):
        with pytest.raises(InvalidInputError, match="Unknown note kind"):
            timeline.add_note("media-1", 10, "x", kind="voice")

    def test_list_notes_ordered_with_stable_ties(self, timeline):
        late = timeline.add_note("media-1", 900, "late")
        first = timeline.add_note("media-1", 60, "first")
        second = timeline.add_note("media-1", 60, "second")

        notes = timeline.list_notes("media-1")

        assert [note.id for note in notes] == [first, second, late]

    def test_list_notes_by_kind(self, timeline):
        timeline.add_note("media-1", 10, "text")
        sketch = timeline.add_note("media-1", 20, "data:image/png;base64,AAA", "sketch")

        sketches = timeline.list_notes("media-1", kind=NoteKind.SKETCH)

        assert [note.id for note in sketches] == [sketch]

    def test_notes_are_owner_scoped(self, timeline):
        mine = timeline.add_note("media-1", 10, "mine", owner="guest:a")
        timeline.add_note("media-1", 20, "theirs", owner="guest:b")

        assert [n.id for n in timeline.list_notes("media-1", owner="guest:a")] == [mine]
        with pytest.raises(NotFoundError):
            timeline.get_note(mine, owner="guest:b")
        with pytest.raises(NotFoundError):
            timeline.delete_note(mine, owner="guest:b")

    def test_update_note(self, timeline):
        note_id = timeline.add_note("media-1", 10, "draft")

        updated = timeline.update_note(note_id, "final")

        assert updated.content == "final"
        assert updated.updated_at >= updated.created_at
        assert timeline.get_note(note_id).content == "final"

    def test_update_requires_content(self, timeline):
        note_id = timeline.add_note("media-1", 10, "draft")

        with pytest.raises(InvalidInputError):
            timeline.update_note(note_id, " ")

    def test_delete_note(self, timeline):
        note_id = timeline.add_note("media-1", 10, "gone soon")

        timeline.delete_note(note_id)

        assert timeline.list_notes("media-1") == []
        with pytest.raises(NotFoundError):
            timeline.jump_target(note_id)


class TestEntries:
    def test_segments_and_notes_merged_by_start(self, timeline):
        at_boundary = timeline.add_note("media-1", 300, "boundary")
        sketch = timeline.add_note("media-1", 100, "data:image/png;base64,AAA", "sketch")

        entries = timeline.entries("media-1")

        assert [(entry.kind, entry.ref_id) for entry in entries] == [
            ("segment", "1"),
            ("sketch", sketch),
            ("segment", "2"),
            ("note", at_boundary),
            ("segment", "3"),
        ]
        assert entries[0].end == 300
        assert entries[1].end is None


@given(
    timestamps=st.lists(
        st.floats(min_value=0, max_value=3600, allow_nan=False), max_size=20
    )
)
def test_notes_always_listed_in_timestamp_order(timestamps):
    timeline = Timeline()
    timeline.register_media(
        ProcessingResult(
            id="m",
            url="https://example.com/ep1",
            metadata={"title": "Episode", "duration": 3600},
            status="completed",
        )
    )
    for index, timestamp in enumerate(timestamps):
        timeline.add_note("m", timestamp, f"note {index}")

    listed = [note.timestamp for note in timeline.list_notes("m")]

    assert listed == sorted(timestamps)
