"""View-scoped state: detail view, tip rotation and toast auto-dismiss."""

from summerease.ui.timers import (
    DASHBOARD_TIPS,
    TipRotator,
    Toast,
    ToastNotifier,
    ViewTimers,
)
from summerease.ui.detail import DetailView

__all__ = [
    'DASHBOARD_TIPS',
    'DetailView',
    'TipRotator',
    'Toast',
    'ToastNotifier',
    'ViewTimers',
]
