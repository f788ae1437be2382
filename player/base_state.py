import threading
from typing import List, Optional, Tuple

from .config import IDLE_TIMEOUT_SEC, PLAYER_LOG_MAX
from .panels import Panel
from .surface import Display, MediaOutput
from .timers import IdleTimer, TimerFactory


class BaseState:
    def __init__(
        self,
        media: MediaOutput,
        display: Display,
        source: Optional[str] = None,
        viewport_width: int = 1024,
        idle_timeout: float = IDLE_TIMEOUT_SEC,
        timer_factory: Optional[TimerFactory] = None,
        name: str = "player",
    ) -> None:
        self.name = name
        self.media = media
        self.display = display

        # sync primitives (RLock: future callbacks may run inside a locked call)
        self.lock = threading.RLock()

        # log buffer
        self._logs: List[Tuple[int, str]] = []
        self._log_max = PLAYER_LOG_MAX

        # page geometry and fullscreen mirror; these outlive a source change
        self.viewport_width: int = int(viewport_width)
        self.is_fullscreen: bool = False
        self.fullscreen_pending: bool = False

        self.idle_timer = IdleTimer(idle_timeout, self._on_idle_timeout, timer_factory)

        self.source: Optional[str] = None
        self._reset_playback_unlocked()
        self.source = source or None

    def _reset_playback_unlocked(self) -> None:
        """
        Put every per-source field back to its default.
        Caller must hold self.lock (or be the constructor).
        """
        self.is_playing: bool = False

        # seconds; duration stays 0 until the media reports its metadata
        self.current_time: float = 0.0
        self.duration: float = 0.0

        self.volume: float = 1.0
        self.brightness: float = 1.0
        self.playback_speed: float = 1.0
        self.subtitle: str = "None"

        self.controls_visible: bool = True
        self.open_panel: Optional[Panel] = None

    @property
    def disabled(self) -> bool:
        return not self.source
