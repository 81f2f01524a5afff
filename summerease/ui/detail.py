"""Detail view of one briefing: typography, copy, delete and toasts."""

import logging
from typing import List

from summerease.library.renderer import render, render_plain
from summerease.session import SessionContext
from summerease.shared.exceptions import DeleteFailedError
from summerease.shared.models import RenderLine, SummaryRecord, TypographyPreference
from summerease.ui.timers import ToastNotifier, ViewTimers

logger = logging.getLogger(__name__)

COPIED_MESSAGE = "Briefing copied to secure clipboard."


class DetailView:
    """
    One open briefing. Typography starts at the defaults for every view.

    Usage:
        async with ViewTimers("detail") as timers:
            detail = DetailView(record, timers)
            lines = detail.lines()
    """

    def __init__(self, record: SummaryRecord, timers: ViewTimers):
        self.record = record
        self.preference = TypographyPreference()
        self.toasts = ToastNotifier(timers)
        self.deleting = False

    def lines(self) -> List[RenderLine]:
        return render(self.record.summary, self.preference)

    def set_font_scale(self, step: int) -> TypographyPreference:
        self.preference = self.preference.with_font_scale(step)
        return self.preference

    def set_line_spacing(self, step: int) -> TypographyPreference:
        self.preference = self.preference.with_line_spacing(step)
        return self.preference

    def copy_text(self) -> str:
        """Clipboard text of the briefing."""
        self.toasts.show(COPIED_MESSAGE, "success")
        return render_plain(self.record.summary)

    async def delete(self, session: SessionContext) -> bool:
        """Delete the record. On failure the view stays open and shows an error toast."""
        self.deleting = True
        try:
            await session.delete_record(self.record.id)
        except DeleteFailedError as e:
            logger.warning(f"Delete from detail view failed: {e}")
            self.toasts.show(e.user_message, "error")
            return False
        finally:
            self.deleting = False
        return True
