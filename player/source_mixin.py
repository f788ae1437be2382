from typing import Optional


class SourceMixin:
    def load_source(self, source: Optional[str]) -> None:
        """
        Switch the player to another media source (episode, mirror, ...).
        Every per-source field goes back to its default; an empty source
        leaves the player disabled.
        """
        with self.lock:
            self.idle_timer.cancel()
            self._reset_playback_unlocked()
            self.source = source or None
            self.media.load(self.source)
            self.display.apply_filter(self.brightness_filter)
            if self.disabled:
                self._append_log("No playable source; player disabled", "warning")
            else:
                self._append_log(f"Source loaded: {self.source}")

    def shutdown(self) -> None:
        """Unmount: stop the idle countdown and pause the element."""
        with self.lock:
            self.idle_timer.cancel()
            if not self.disabled and not self.media.paused:
                self.media.pause()
            self.is_playing = False
            self._append_log("Player unmounted")
