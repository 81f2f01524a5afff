"""
SummerEase - View Timer Unit Tests
==================================
"""

import asyncio

import pytest

from summerease.session import SessionContext
from summerease.shared.exceptions import DeleteFailedError
from summerease.ui.detail import COPIED_MESSAGE, DetailView
from summerease.ui.timers import DASHBOARD_TIPS, TipRotator, ToastNotifier, ViewTimers


class TestViewTimers:
    """Tests for ViewTimers."""

    @pytest.mark.asyncio
    async def test_call_later_runs_once(self):
        hits = []
        async with ViewTimers("test") as timers:
            timers.call_later(0.01, lambda: hits.append(1))
            await asyncio.sleep(0.05)
        assert hits == [1]

    @pytest.mark.asyncio
    async def test_async_callbacks(self):
        hits = []

        async def callback():
            hits.append("async")

        async with ViewTimers("test") as timers:
            timers.call_later(0.01, callback)
            await asyncio.sleep(0.05)
        assert hits == ["async"]

    @pytest.mark.asyncio
    async def test_teardown_cancels_pending(self):
        hits = []
        timers = ViewTimers("test")
        timers.call_later(10, lambda: hits.append(1))
        timers.call_every(10, lambda: hits.append(2))
        assert timers.active == 2

        await timers.cancel_all()

        assert timers.active == 0
        assert hits == []

    @pytest.mark.asyncio
    async def test_no_scheduling_after_teardown(self):
        timers = ViewTimers("test")
        await timers.cancel_all()
        with pytest.raises(RuntimeError):
            timers.call_later(1, lambda: None)

    @pytest.mark.asyncio
    async def test_periodic_survives_callback_error(self):
        hits = []

        def flaky():
            hits.append(1)
            raise ValueError("bad tick")

        async with ViewTimers("test") as timers:
            timers.call_every(0.01, flaky)
            await asyncio.sleep(0.08)
        assert len(hits) >= 2


class TestTipRotator:
    """Tests for TipRotator."""

    @pytest.mark.asyncio
    async def test_advance_wraps(self):
        async with ViewTimers("dashboard") as timers:
            tips = TipRotator(timers, tips=["a", "b"])
            assert tips.current == "a"
            assert tips.advance() == "b"
            assert tips.advance() == "a"

    @pytest.mark.asyncio
    async def test_rotates_on_interval(self):
        async with ViewTimers("dashboard") as timers:
            tips = TipRotator(timers, interval=0.01)
            tips.start()
            await asyncio.sleep(0.035)
            assert tips.current != DASHBOARD_TIPS[0]

    def test_empty_tips(self):
        with pytest.raises(ValueError):
            TipRotator(ViewTimers(), tips=[])


class TestToastNotifier:
    """Tests for ToastNotifier."""

    @pytest.mark.asyncio
    async def test_auto_dismiss(self):
        async with ViewTimers("detail") as timers:
            toasts = ToastNotifier(timers, duration=0.01)
            toasts.show("Saved")
            assert toasts.current.message == "Saved"
            await asyncio.sleep(0.05)
            assert toasts.current is None

    @pytest.mark.asyncio
    async def test_new_toast_restarts_timer(self):
        async with ViewTimers("detail") as timers:
            toasts = ToastNotifier(timers, duration=0.05)
            toasts.show("first")
            await asyncio.sleep(0.03)
            toasts.show("second", "error")
            await asyncio.sleep(0.03)
            assert toasts.current.message == "second"
            assert toasts.current.kind == "error"


class TestDetailView:
    """Tests for DetailView."""

    @pytest.mark.asyncio
    async def test_typography_and_copy(self, make_record):
        async with ViewTimers("detail") as timers:
            detail = DetailView(make_record(summary="- **Risk**: high"), timers)
            detail.set_font_scale(2)
            line = detail.lines()[0]
            assert line.font_class == "text-lg"
            assert detail.copy_text() == "- Risk: high"
            assert detail.toasts.current.message == COPIED_MESSAGE

    @pytest.mark.asyncio
    async def test_delete_failure_shows_error_toast(self, user, store, make_record):
        record = store.seed(make_record("kept"))
        context = SessionContext(user, store)
        await context.refresh_library()
        store.fail_delete = ConnectionError("offline")

        async with ViewTimers("detail") as timers:
            detail = DetailView(record, timers)
            assert await detail.delete(context) is False
            assert detail.toasts.current.message == DeleteFailedError.user_message
            assert "retry" in detail.toasts.current.message
            assert detail.toasts.current.kind == "error"
            assert context.get_record(record.id) == record

    @pytest.mark.asyncio
    async def test_delete_success(self, user, store, make_record):
        record = store.seed(make_record("gone"))
        context = SessionContext(user, store)
        await context.refresh_library()

        async with ViewTimers("detail") as timers:
            assert await DetailView(record, timers).delete(context) is True
        assert context.records == []

    @pytest.mark.asyncio
    async def test_typography_resets_per_view(self, make_record):
        record = make_record()
        async with ViewTimers("detail") as timers:
            DetailView(record, timers).set_line_spacing(0)
            assert DetailView(record, timers).preference.spacing_class == "leading-relaxed"
