from typing import Optional, Union

from .panels import Panel


class PanelMixin:
    def toggle_panel(self, which: Union[Panel, str]) -> Optional[Panel]:
        """
        Open ``which``, replacing any other open panel, or close it when it is
        already the open one. Returns the panel left open (or None).
        Ignored while the controls are hidden.
        """
        panel = which if isinstance(which, Panel) else Panel.parse(which)
        with self.lock:
            if not self.controls_visible:
                self._append_log(f"Panel {panel.value} ignored: controls hidden", "debug")
                return self.open_panel
            if self.open_panel is panel:
                self.open_panel = None
            else:
                self.open_panel = panel
            return self.open_panel


class IdleMixin:
    def notify_interaction(self) -> None:
        """Pointer-move / touch-start: show controls and restart the idle countdown."""
        with self.lock:
            self.controls_visible = True
            self.idle_timer.restart()

    def _on_idle_timeout(self, gen: int) -> None:
        with self.lock:
            # an interaction may have rescheduled while this timer was firing
            if not self.idle_timer.is_current(gen):
                return
            self.hide_all()
            self._append_log("Controls hidden after idle timeout", "debug")

    def hide_all(self) -> None:
        """Idle timeout or background click: hide controls and every panel."""
        with self.lock:
            self.controls_visible = False
            self.open_panel = None
            self.idle_timer.cancel()
