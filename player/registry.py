import secrets
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from .config import IDLE_TIMEOUT_SEC, PLAYER_STALE_SEC
from .player_state import PlayerState
from .surface import RemoteSurface
from .timers import TimerFactory


class UnknownPlayer(KeyError):
    pass


class PlayerRegistry:
    """
    Mounted players keyed by a random id; one RemoteSurface each.
    Every lookup marks the player as seen. Players unseen for
    ``stale_after`` seconds are reaped when the next player mounts.
    """

    def __init__(
        self,
        idle_timeout: float = IDLE_TIMEOUT_SEC,
        timer_factory: Optional[TimerFactory] = None,
        stale_after: float = PLAYER_STALE_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.idle_timeout = idle_timeout
        self.timer_factory = timer_factory
        self.stale_after = stale_after
        self.clock = clock
        self._players: Dict[str, Tuple[PlayerState, RemoteSurface]] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def mount(self, source: Optional[str], viewport_width: int = 1024) -> Tuple[str, PlayerState]:
        self.reap_stale()
        player_id = secrets.token_urlsafe(9)
        surface = RemoteSurface()
        player = PlayerState(
            media=surface,
            display=surface,
            viewport_width=viewport_width,
            idle_timeout=self.idle_timeout,
            timer_factory=self.timer_factory,
            name=player_id,
        )
        player.load_source(source)
        with self._lock:
            self._players[player_id] = (player, surface)
            self._last_seen[player_id] = self.clock()
        return player_id, player

    def get(self, player_id: str) -> PlayerState:
        return self._entry(player_id)[0]

    def surface(self, player_id: str) -> RemoteSurface:
        return self._entry(player_id)[1]

    def _entry(self, player_id: str) -> Tuple[PlayerState, RemoteSurface]:
        with self._lock:
            entry = self._players.get(player_id)
            if entry is not None:
                self._last_seen[player_id] = self.clock()
        if entry is None:
            raise UnknownPlayer(player_id)
        return entry

    def reap_stale(self) -> List[str]:
        """Unmount players not seen for ``stale_after`` seconds; returns their ids."""
        cutoff = self.clock() - self.stale_after
        with self._lock:
            stale = [pid for pid, seen in self._last_seen.items() if seen <= cutoff]
            entries = [self._pop_unlocked(pid) for pid in stale]
        for player, surface in entries:
            player.shutdown()
            surface.close()
        if stale:
            print(f"[Players] Reaped {len(stale)} stale player(s)")
        return stale

    def _pop_unlocked(self, player_id: str) -> Optional[Tuple[PlayerState, RemoteSurface]]:
        self._last_seen.pop(player_id, None)
        return self._players.pop(player_id, None)

    def unmount(self, player_id: str) -> None:
        with self._lock:
            entry = self._pop_unlocked(player_id)
        if entry is None:
            raise UnknownPlayer(player_id)
        player, surface = entry
        player.shutdown()
        surface.close()

    def shutdown(self) -> None:
        with self._lock:
            entries = list(self._players.values())
            self._players.clear()
            self._last_seen.clear()
        for player, surface in entries:
            player.shutdown()
            surface.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)
