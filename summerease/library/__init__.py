"""Record assembly, library view and briefing rendering."""

from summerease.library.assembler import RecordAssembler, SummaryStore
from summerease.library.renderer import BULLET_GLYPH, render, render_line, render_plain
from summerease.library.view import dashboard_preview, view

__all__ = [
    'RecordAssembler',
    'SummaryStore',
    'BULLET_GLYPH',
    'render',
    'render_line',
    'render_plain',
    'view',
    'dashboard_preview',
]
