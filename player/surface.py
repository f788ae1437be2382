"""
Output ports of the playback controller and the HTTP-backed implementation.

The controller never talks to a browser directly. It issues commands to a
``MediaOutput`` (the video element) and a ``Display`` (fullscreen, screen
orientation, render filter). ``RemoteSurface`` implements both for a page
that polls the service:

- plain commands (play, pause, set_time, ...) are appended to a sequenced
  outbox that the page drains with ``commands(after=seq)``
- platform requests that complete asynchronously in the browser
  (fullscreen enter/exit, orientation lock) are queued the same way, but
  also return a ``Future`` that stays pending until the page reports the
  outcome through ``resolve(request_id, ok, error)``
"""
import itertools
import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional, Protocol


class PlatformRejected(Exception):
    """The platform refused a fullscreen or orientation request."""


class MediaOutput(Protocol):
    paused: bool

    def load(self, src: Optional[str]) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def set_time(self, seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_rate(self, rate: float) -> None: ...


class Display(Protocol):
    def request_fullscreen(self) -> Future: ...

    def exit_fullscreen(self) -> Future: ...

    def lock_orientation(self, kind: str) -> Future: ...

    def unlock_orientation(self) -> None: ...

    def apply_filter(self, css: str) -> None: ...


class RemoteSurface:
    def __init__(self, outbox_max: int = 500) -> None:
        self.lock = threading.RLock()
        self._seq = itertools.count(1)
        self._outbox: List[Dict[str, Any]] = []
        self._outbox_max = outbox_max
        self._pending: Dict[str, Future] = {}

        # mirror of the media element, updated from reported events
        self.src: Optional[str] = None
        self.paused: bool = True

    # ---------- outbox ----------

    def _push(self, command: str, **payload: Any) -> Dict[str, Any]:
        with self.lock:
            entry = {"seq": next(self._seq), "command": command}
            entry.update(payload)
            self._outbox.append(entry)
            if len(self._outbox) > self._outbox_max:
                self._outbox = self._outbox[-self._outbox_max :]
            return entry

    def commands(self, after: int = 0) -> List[Dict[str, Any]]:
        with self.lock:
            return [dict(c) for c in self._outbox if c["seq"] > after]

    # ---------- MediaOutput ----------

    def load(self, src: Optional[str]) -> None:
        with self.lock:
            self.src = src
            self.paused = True
            self._push("load", src=src)

    def play(self) -> None:
        with self.lock:
            self.paused = False
            self._push("play")

    def pause(self) -> None:
        with self.lock:
            self.paused = True
            self._push("pause")

    def set_time(self, seconds: float) -> None:
        self._push("set_time", value=seconds)

    def set_volume(self, volume: float) -> None:
        self._push("set_volume", value=volume)

    def set_rate(self, rate: float) -> None:
        self._push("set_rate", value=rate)

    # ---------- Display ----------

    def _request(self, command: str, **payload: Any) -> Future:
        fut: Future = Future()
        with self.lock:
            entry = self._push(command, **payload)
            request_id = str(entry["seq"])
            entry["request_id"] = request_id
            self._pending[request_id] = fut
        return fut

    def request_fullscreen(self) -> Future:
        return self._request("request_fullscreen")

    def exit_fullscreen(self) -> Future:
        return self._request("exit_fullscreen")

    def lock_orientation(self, kind: str) -> Future:
        return self._request("lock_orientation", value=kind)

    def unlock_orientation(self) -> None:
        self._push("unlock_orientation")

    def apply_filter(self, css: str) -> None:
        self._push("filter", value=css)

    # ---------- reports from the page ----------

    def pending_requests(self) -> List[str]:
        with self.lock:
            return sorted(self._pending, key=int)

    def resolve(self, request_id: str, ok: bool, error: Optional[str] = None) -> bool:
        """
        Complete a pending platform request.
        Returns False when the id is unknown or was already resolved.
        Callbacks attached to the future run in the caller's thread, after
        the surface lock has been released.
        """
        with self.lock:
            fut = self._pending.pop(str(request_id), None)
        if fut is None:
            return False
        if ok:
            fut.set_result(None)
        else:
            fut.set_exception(PlatformRejected(error or "request rejected"))
        return True

    def apply_event(self, event: str) -> None:
        """Update the element mirror before the controller sees the event."""
        with self.lock:
            if event in ("ended", "pause"):
                self.paused = True
            elif event == "play":
                self.paused = False

    def close(self) -> None:
        """Cancel whatever is still pending (player unmounted)."""
        with self.lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for fut in pending:
            fut.cancel()
