from concurrent.futures import CancelledError, Future

from .config import MOBILE_MAX_WIDTH


class DisplayMixin:
    def toggle_fullscreen(self) -> None:
        """
        Ask the display to enter or leave fullscreen.

        The request completes asynchronously; ``is_fullscreen`` only changes
        in the completion callback, and only when the platform accepted it.
        While a request is in flight further toggles are ignored.
        """
        with self.lock:
            if self.fullscreen_pending:
                self._append_log("Fullscreen toggle ignored: request in flight", "debug")
                return
            entering = not self.is_fullscreen
            self.fullscreen_pending = True
            self._append_log("Fullscreen enter requested" if entering else "Fullscreen exit requested")
            try:
                fut = self.display.request_fullscreen() if entering else self.display.exit_fullscreen()
            except Exception as e:
                self.fullscreen_pending = False
                self._append_log(f"Fullscreen request failed: {e!r}", "warning")
                return
        fut.add_done_callback(lambda f: self._on_fullscreen_done(f, entering))

    def _on_fullscreen_done(self, fut: Future, entering: bool) -> None:
        with self.lock:
            self.fullscreen_pending = False
            try:
                fut.result()
            except CancelledError:
                self._append_log("Fullscreen request cancelled", "warning")
                return
            except Exception as e:
                self._append_log(f"Fullscreen request rejected: {e}", "warning")
                return

            self.is_fullscreen = entering
            self._append_log("Entered fullscreen" if entering else "Left fullscreen")
            if self.viewport_width < MOBILE_MAX_WIDTH:
                if entering:
                    self._lock_orientation_unlocked()
                else:
                    self._unlock_orientation_unlocked()

    def _lock_orientation_unlocked(self) -> None:
        """Caller must hold self.lock."""
        try:
            fut = self.display.lock_orientation("landscape")
        except Exception as e:
            self._append_log(f"Orientation lock unavailable: {e!r}", "warning")
            return
        fut.add_done_callback(self._on_orientation_done)

    def _on_orientation_done(self, fut: Future) -> None:
        try:
            fut.result()
        except CancelledError:
            self._append_log("Orientation lock cancelled", "warning")
        except Exception as e:
            self._append_log(f"Orientation lock rejected: {e}", "warning")
        else:
            self._append_log("Orientation locked to landscape")

    def _unlock_orientation_unlocked(self) -> None:
        try:
            self.display.unlock_orientation()
        except Exception as e:
            self._append_log(f"Orientation unlock failed: {e!r}", "warning")

    def on_fullscreen_change(self, is_fullscreen: bool) -> None:
        """The platform left or entered fullscreen on its own (e.g. Escape key)."""
        with self.lock:
            # anything but a real True counts as exited
            entered = is_fullscreen is True
            if self.is_fullscreen == entered:
                return
            self.is_fullscreen = entered
            self._append_log(f"Platform fullscreen change: {self.is_fullscreen}")
            if not self.is_fullscreen and self.viewport_width < MOBILE_MAX_WIDTH:
                self._unlock_orientation_unlocked()

    def set_viewport_width(self, width: int) -> None:
        width = int(width)
        if width <= 0:
            raise ValueError("viewport width must be positive")
        with self.lock:
            self.viewport_width = width
