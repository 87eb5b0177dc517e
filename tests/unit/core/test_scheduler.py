"""Tests for the virtual-time timer queue."""

from __future__ import annotations

from callgraph_viz.core.scheduler import TimerQueue


class TestTimerQueue:
    def test_fires_in_due_order(self):
        queue = TimerQueue()
        fired = []
        queue.call_later(30, lambda: fired.append("late"))
        queue.call_later(10, lambda: fired.append("early"))
        assert queue.advance(20) == 1
        assert fired == ["early"]
        assert queue.advance(20) == 1
        assert fired == ["early", "late"]
        assert queue.now_ms == 40

    def test_not_due_yet(self):
        queue = TimerQueue()
        fired = []
        queue.call_later(100, lambda: fired.append(1), name="t")
        queue.advance(99)
        assert fired == []
        assert queue.pending("t")
        queue.advance(1)
        assert fired == [1]
        assert not queue.pending("t")

    def test_cancel_by_name(self):
        queue = TimerQueue()
        fired = []
        queue.call_later(5, lambda: fired.append(1), name="overlay:1")
        assert queue.cancel("overlay:1")
        assert not queue.cancel("overlay:1")
        queue.advance(10)
        assert fired == []
        assert len(queue) == 0

    def test_same_name_replaces_pending_timer(self):
        queue = TimerQueue()
        fired = []
        queue.call_later(5, lambda: fired.append("old"), name="fallback")
        queue.call_later(50, lambda: fired.append("new"), name="fallback")
        queue.advance(60)
        assert fired == ["new"]

    def test_cancel_all(self):
        queue = TimerQueue()
        fired = []
        for delay in (1, 2, 3):
            queue.call_later(delay, lambda: fired.append(1), name=f"t{delay}")
        queue.cancel_all()
        assert queue.advance(10) == 0
        assert fired == []

    def test_callback_can_schedule_follow_up(self):
        queue = TimerQueue()
        fired = []

        def first():
            fired.append("first")
            queue.call_later(0, lambda: fired.append("second"))

        queue.call_later(10, first)
        queue.advance(10)
        assert fired == ["first", "second"]
