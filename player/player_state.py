"""
Composite PlayerState assembled from smaller mixins.

One instance backs one mounted video player. ``BaseState`` owns the fields
and the lock; each mixin adds one group of operations.
"""

from .base_state import BaseState
from .logging_mixin import LoggingMixin
from .control_mixin import ControlMixin
from .panel_mixin import IdleMixin, PanelMixin
from .display_mixin import DisplayMixin
from .media_events_mixin import MediaEventsMixin
from .source_mixin import SourceMixin


class PlayerState(
    BaseState,
    LoggingMixin,
    ControlMixin,
    PanelMixin,
    IdleMixin,
    DisplayMixin,
    MediaEventsMixin,
    SourceMixin,
):
    """Playback and control-overlay state of a single player."""
