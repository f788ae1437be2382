import math


class MediaEventsMixin:
    """Bridge from media element events to the playback state."""

    def on_loaded_metadata(self, duration: float) -> None:
        try:
            dur = float(duration)
        except (TypeError, ValueError):
            dur = 0.0
        # live streams report Infinity, broken files NaN
        if not math.isfinite(dur) or dur < 0:
            dur = 0.0
        with self.lock:
            self.duration = dur
            if self.duration > 0 and self.current_time > self.duration:
                self.current_time = self.duration
            self._append_log(f"Metadata loaded: duration={self.duration:.1f}s")

    def on_time_update(self, current_time: float) -> None:
        try:
            pos = float(current_time)
        except (TypeError, ValueError):
            return
        if not math.isfinite(pos):
            self._append_log(f"Ignored non-finite timeupdate: {current_time!r}", "warning")
            return
        pos = max(0.0, pos)
        with self.lock:
            if self.duration > 0:
                pos = min(pos, self.duration)
            self.current_time = pos

    def on_ended(self) -> None:
        with self.lock:
            self.is_playing = False
            self._append_log("Playback ended")

    def sync_play_state(self) -> None:
        """Re-read the element's paused flag after a native play/pause event."""
        with self.lock:
            self.is_playing = not self.media.paused
