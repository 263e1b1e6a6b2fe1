"""Tests for StreamingTypewriter driven by the ManualScheduler virtual clock."""

import pytest

from flowtext.config import StreamConfig
from flowtext.exceptions import EngineClosedError
from flowtext.scheduler import ManualScheduler
from flowtext.streaming import StreamingTypewriter, chunk_size

TEXT = "The quick brown fox jumps over the lazy dog. " * 100


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def writer(scheduler):
    return StreamingTypewriter(StreamConfig(frame_interval=0.032), scheduler=scheduler)


@pytest.fixture
def snapshots(writer):
    seen = []
    writer.subscribe(seen.append)
    return seen


class TestChunkSize:
    """Tests for the catch-up acceleration table."""

    @pytest.mark.parametrize(
        "backlog,expected",
        [
            (0, 3),
            (1, 3),
            (20, 3),
            (21, 4),
            (50, 4),
            (51, 8),
            (100, 8),
            (101, 15),
            (200, 15),
            (201, 40),
            (500, 40),
            (501, 100),
            (1000, 100),
            (1001, 250),
            (2000, 250),
            (2001, 500),
            (50_000, 500),
        ],
    )
    def test_table(self, backlog, expected):
        assert chunk_size(backlog) == expected


class TestCatchUp:
    """Tests for frame-by-frame progress."""

    def test_first_frame_is_immediate(self, writer, scheduler, snapshots):
        writer.set_target("x" * 30)
        assert writer.snapshot.text == ""
        scheduler.advance(0)
        assert writer.snapshot.text == "x" * 4
        scheduler.advance(0.032)
        assert writer.snapshot.text == "x" * 8

    def test_large_backlog_accelerates_then_slows(self, writer, scheduler, snapshots):
        """Chunks shrink as the display closes in on the target."""
        text = TEXT[:3000]
        writer.set_target(text)
        scheduler.run_until_idle()

        lengths = [len(s.text) for s in snapshots]
        assert lengths[:3] == [500, 1000, 1250]
        chunks = [b - a for a, b in zip([0] + lengths, lengths)]
        assert chunks == sorted(chunks, reverse=True)
        assert chunks[-1] == 3
        assert snapshots[-1].text == text
        assert snapshots[-1].caught_up is True
        assert scheduler.pending == []

    def test_frames_are_throttled(self, writer, scheduler, snapshots):
        writer.set_target(TEXT[:300])
        scheduler.run_until_idle()
        stamps = [s.at for s in snapshots]
        gaps = [b - a for a, b in zip(stamps, stamps[1:])]
        assert gaps
        for gap in gaps:
            assert gap == pytest.approx(0.032)

    def test_growing_target_keeps_single_timer(self, writer, scheduler):
        writer.set_target("a" * 10)
        scheduler.advance(0)
        assert writer.snapshot.text == "aaa"
        writer.set_target("a" * 40)
        writer.set_target("a" * 80)
        assert len(scheduler.pending) == 1
        assert writer.snapshot.target_length == 80

    def test_throttle_holds_after_catching_up(self, writer, scheduler):
        """New text right after a frame waits for the frame interval."""
        writer.set_target("abc")
        scheduler.advance(0)
        assert writer.snapshot.caught_up is True
        assert scheduler.pending == []

        scheduler.advance(0.010)
        writer.set_target("abcdef")
        assert scheduler.pending[0].when == pytest.approx(0.032)

    def test_empty_target_schedules_nothing(self, writer, scheduler, snapshots):
        writer.set_target("")
        assert scheduler.pending == []
        assert snapshots == []
        assert writer.snapshot.caught_up is True


class TestSnapping:
    """Tests for the two snap paths."""

    def test_finished_stream_snaps_to_full_text(self, writer, scheduler, snapshots):
        writer.set_target(TEXT)
        scheduler.advance(0)
        before = scheduler.cancelled_count

        writer.set_target(TEXT, streaming=False)
        assert writer.snapshot.text == TEXT
        assert writer.snapshot.streaming is False
        assert snapshots[-1].text == TEXT
        assert scheduler.cancelled_count == before + 1
        assert scheduler.pending == []

    def test_history_load_shows_text_at_once(self, writer, scheduler, snapshots):
        """A first update that is not streaming never animates."""
        writer.set_target("Loaded from history", streaming=False)
        assert [s.text for s in snapshots] == ["Loaded from history"]
        assert scheduler.pending == []

    def test_shrinking_target_snaps_down(self, writer, scheduler, snapshots):
        writer.set_target("abcdefghij" * 3)
        scheduler.advance(0)
        assert writer.snapshot.text == "abcd"

        writer.set_target("ab")
        assert writer.snapshot.text == "ab"
        assert snapshots[-1].text == "ab"

        scheduler.advance(0.1)
        assert writer.snapshot.text == "ab"
        assert scheduler.pending == []

    def test_regeneration_restarts_from_shorter_text(self, writer, scheduler):
        writer.set_target("first answer that is long enough")
        scheduler.run_until_idle()
        writer.set_target("")
        assert writer.snapshot.text == ""
        writer.set_target("second")
        scheduler.run_until_idle()
        assert writer.snapshot.text == "second"


class TestTeardown:
    """Tests for close() and re-entrant updates."""

    def test_close_cancels_frame_timer(self, writer, scheduler):
        writer.set_target(TEXT)
        scheduler.advance(0)
        shown = writer.snapshot.text
        writer.close()
        assert scheduler.pending == []
        scheduler.advance(5)
        assert writer.snapshot.text == shown

    def test_set_target_after_close_raises(self, writer):
        writer.close()
        writer.close()
        with pytest.raises(EngineClosedError):
            writer.set_target("late")

    def test_context_manager_closes(self, scheduler):
        with StreamingTypewriter(scheduler=scheduler) as writer:
            writer.set_target(TEXT)
        assert writer.closed is True
        assert scheduler.pending == []

    def test_update_from_subscriber_keeps_single_timer(self, writer, scheduler):
        """A subscriber that pushes more text mid-frame must not fork the loop."""
        pushed = []

        def push_more(snap):
            if not pushed:
                pushed.append(True)
                writer.set_target(TEXT[:600])

        writer.subscribe(push_more)
        writer.set_target(TEXT[:100])
        for _ in range(500):
            assert len(scheduler.pending) <= 1
            if not scheduler.pending:
                break
            scheduler.advance(0.01)
        assert writer.snapshot.text == TEXT[:600]

    def test_close_from_subscriber_stops_loop(self, writer, scheduler):
        writer.subscribe(lambda snap: writer.close())
        writer.set_target(TEXT[:100])
        scheduler.advance(0)
        assert scheduler.pending == []
