"""
SummerEase - View Timers
========================

Cancellable scheduled callbacks tied to the lifetime of one view.

Every task started through ViewTimers is cancelled on teardown, so no
callback can act on a view that has been disposed.

Usage:
    async with ViewTimers("dashboard") as timers:
        tips = TipRotator(timers)
        tips.start()
        ...
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Set

logger = logging.getLogger(__name__)

DASHBOARD_TIPS: List[str] = [
    "Forward your long emails to yourself and paste them here for a quick briefing.",
    "Gemini Flash can analyze complex PDF tables and charts. Try uploading data-heavy reports.",
    "Use the 'Typography' feature in the summary detail to customize reading density.",
    "Summaries are encrypted at rest. Your vault is private and secure.",
    "Click 'Browse Full Library' to search through your entire history of summarized intelligence.",
]

TIP_INTERVAL_SECONDS = 8.0
TOAST_DURATION_SECONDS = 6.0


async def _invoke(callback: Callable[[], Any]) -> None:
    result = callback()
    if inspect.isawaitable(result):
        await result


class ViewTimers:
    """Owner of the delayed and periodic tasks of one view."""

    def __init__(self, name: str = "view"):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    def _spawn(self, coro) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError(f"Timers of view '{self.name}' are torn down")
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.Task:
        """Run ``callback`` once after ``delay`` seconds."""
        async def runner():
            await asyncio.sleep(delay)
            try:
                await _invoke(callback)
            except Exception as e:
                logger.warning(f"Timer callback failed in view '{self.name}': {e}")

        return self._spawn(runner())

    def call_every(self, interval: float, callback: Callable[[], Any]) -> asyncio.Task:
        """Run ``callback`` every ``interval`` seconds until cancelled."""
        async def runner():
            while True:
                await asyncio.sleep(interval)
                try:
                    await _invoke(callback)
                except Exception as e:
                    logger.warning(f"Periodic callback failed in view '{self.name}': {e}")

        return self._spawn(runner())

    async def cancel_all(self) -> None:
        """Cancel every pending task and wait for them to finish."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.debug(f"View '{self.name}' timers cancelled: {len(tasks)}")

    async def __aenter__(self) -> "ViewTimers":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cancel_all()
        return False


class TipRotator:
    """Cycles dashboard tips at a fixed interval."""

    def __init__(
        self,
        timers: ViewTimers,
        tips: Sequence[str] = tuple(DASHBOARD_TIPS),
        interval: float = TIP_INTERVAL_SECONDS
    ):
        if not tips:
            raise ValueError("tips must not be empty")
        self.timers = timers
        self.tips = list(tips)
        self.interval = interval
        self.index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def current(self) -> str:
        return self.tips[self.index]

    def advance(self) -> str:
        self.index = (self.index + 1) % len(self.tips)
        return self.current

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = self.timers.call_every(self.interval, self.advance)


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str = "success"


class ToastNotifier:
    """Single toast slot with auto-dismiss."""

    def __init__(self, timers: ViewTimers, duration: float = TOAST_DURATION_SECONDS):
        self.timers = timers
        self.duration = duration
        self.current: Optional[Toast] = None
        self._dismiss_task: Optional[asyncio.Task] = None

    def show(self, message: str, kind: str = "success") -> Toast:
        """Replace the current toast and restart the dismiss timer."""
        if self._dismiss_task is not None and not self._dismiss_task.done():
            self._dismiss_task.cancel()
        toast = Toast(message, kind)
        self.current = toast
        self._dismiss_task = self.timers.call_later(self.duration, self.dismiss)
        return toast

    def dismiss(self) -> None:
        self.current = None
