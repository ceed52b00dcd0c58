"""Tests for the request tracker."""

import asyncio

import pytest

from askflow.core.tracker import RequestTracker
from askflow.models.request_record import RequestKind, RequestStatus


class TestRequestLifecycle:
    """start/complete per request id."""

    def test_start_opens_pending_record(self):
        tracker = RequestTracker()
        request_id = tracker.start(RequestKind.ask_ai)

        record = tracker.get(request_id)
        assert record.kind == RequestKind.ask_ai
        assert record.status == RequestStatus.pending
        assert request_id.startswith("ask_ai_")
        assert tracker.is_pending(RequestKind.ask_ai)
        assert not tracker.is_pending(RequestKind.save)

    def test_ids_are_unique_per_call(self):
        tracker = RequestTracker()
        ids = {tracker.start(RequestKind.save) for _ in range(50)}
        assert len(ids) == 50

    def test_success_removes_record(self):
        tracker = RequestTracker()
        request_id = tracker.start(RequestKind.save)
        tracker.complete(request_id)

        assert tracker.get(request_id) is None
        assert not tracker.is_pending(RequestKind.save)

    def test_failure_keeps_record_with_error(self):
        tracker = RequestTracker()
        request_id = tracker.start(RequestKind.delete)
        tracker.complete(request_id, error="boom")

        record = tracker.get(request_id)
        assert record.status == RequestStatus.failed
        assert record.error == "boom"
        assert not tracker.is_pending(RequestKind.delete)
        assert tracker.failures(RequestKind.delete) == [record]

    def test_complete_unknown_id_is_noop(self):
        tracker = RequestTracker()
        tracker.complete("nope")
        assert tracker.records == []


class TestConcurrentSameKind:
    """Records of one kind are independent."""

    def test_loading_until_all_resolve(self):
        """Two concurrent AskAI calls keep the kind pending until both finish."""
        tracker = RequestTracker()
        first = tracker.start(RequestKind.ask_ai)
        second = tracker.start(RequestKind.ask_ai)

        tracker.complete(second)
        assert tracker.is_pending(RequestKind.ask_ai)

        tracker.complete(first)
        assert not tracker.is_pending(RequestKind.ask_ai)

    def test_completion_does_not_cross_cancel(self):
        tracker = RequestTracker()
        first = tracker.start(RequestKind.save)
        second = tracker.start(RequestKind.save)

        tracker.complete(first, error="failed")

        assert tracker.get(second).status == RequestStatus.pending
        assert tracker.is_pending(RequestKind.save)

    def test_failure_does_not_block_new_start(self):
        tracker = RequestTracker()
        failed = tracker.start(RequestKind.fetch_saved)
        tracker.complete(failed, error="down")

        again = tracker.start(RequestKind.fetch_saved)
        assert tracker.is_pending(RequestKind.fetch_saved)
        assert again != failed

    def test_success_supersedes_earlier_failures_of_same_kind(self):
        tracker = RequestTracker()
        failed = tracker.start(RequestKind.fetch_saved)
        other_kind = tracker.start(RequestKind.save)
        tracker.complete(failed, error="down")
        tracker.complete(other_kind, error="bad")

        ok = tracker.start(RequestKind.fetch_saved)
        tracker.complete(ok)

        assert tracker.get(failed) is None
        assert tracker.get(other_kind).error == "bad"


class TestClearing:
    """Explicit clearing of failed records."""

    def test_clear_failed_record(self):
        tracker = RequestTracker()
        request_id = tracker.start(RequestKind.save)
        tracker.complete(request_id, error="x")
        tracker.clear(request_id)

        assert tracker.get(request_id) is None

    def test_clear_does_not_drop_pending(self):
        tracker = RequestTracker()
        request_id = tracker.start(RequestKind.save)
        tracker.clear(request_id)

        assert tracker.is_pending(RequestKind.save)

    def test_clear_failures_by_kind(self):
        tracker = RequestTracker()
        a = tracker.start(RequestKind.save)
        b = tracker.start(RequestKind.delete)
        tracker.complete(a, error="x")
        tracker.complete(b, error="y")

        tracker.clear_failures(RequestKind.save)

        assert [r.request_id for r in tracker.failures()] == [b]


class TestTrackContext:
    """track() wraps a body as one request."""

    def test_track_success(self):
        tracker = RequestTracker()
        with tracker.track(RequestKind.ask_ai) as request_id:
            assert tracker.is_pending(RequestKind.ask_ai)
        assert tracker.get(request_id) is None

    def test_track_failure_records_and_reraises(self):
        tracker = RequestTracker()
        with pytest.raises(RuntimeError):
            with tracker.track(RequestKind.ask_ai) as request_id:
                raise RuntimeError("upstream down")

        assert tracker.get(request_id).error == "upstream down"

    def test_listeners_notified_on_start_and_complete(self):
        tracker = RequestTracker()
        events = []
        tracker.subscribe(lambda: events.append(tracker.is_pending(RequestKind.save)))

        with tracker.track(RequestKind.save):
            pass

        assert events == [True, False]

    def test_cancelled_body_does_not_stay_pending(self):
        """A task cancelled mid-call closes its record as failed."""
        tracker = RequestTracker()

        async def run():
            never = asyncio.get_running_loop().create_future()

            async def call():
                with tracker.track(RequestKind.ask_ai):
                    await never

            task = asyncio.create_task(call())
            await asyncio.sleep(0)
            assert tracker.is_pending(RequestKind.ask_ai)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())

        assert not tracker.is_pending(RequestKind.ask_ai)
        [failure] = tracker.failures(RequestKind.ask_ai)
        assert failure.error == "CancelledError"
