import math

from .config import (
    BRIGHTNESS_RANGE,
    PLAYBACK_SPEEDS,
    SUBTITLE_OPTIONS,
    VOLUME_RANGE,
)
from .panels import SUBMENUS, visibility_name


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _finite(value, what: str) -> float:
    try:
        val = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a number") from None
    if not math.isfinite(val):
        raise ValueError(f"{what} must be finite")
    return val


def format_time(seconds: float) -> str:
    """Format seconds as m:ss for the progress bar labels."""
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


class ControlMixin:
    def toggle_play_pause(self) -> None:
        with self.lock:
            if self.disabled:
                self._append_log("Play/pause ignored: no source loaded")
                return
            # decide from the element itself so repeated clicks can't desync
            if self.media.paused:
                self.media.play()
                self.is_playing = True
                self._append_log("Play requested")
            else:
                self.media.pause()
                self.is_playing = False
                self._append_log("Pause requested")

    def seek_to(self, fraction: float) -> None:
        """
        Seek to a fraction of the progress bar track (0 = start, 1 = end).
        Silently ignored until the duration is known.
        """
        fraction = _clamp(_finite(fraction, "fraction"), 0.0, 1.0)
        with self.lock:
            if self.duration <= 0:
                return
            target = fraction * self.duration
            self._set_time_unlocked(target)
            self._append_log(f"Seek to {target:.1f}s ({fraction:.0%})")

    def skip(self, delta: float) -> None:
        delta = _finite(delta, "seconds")
        with self.lock:
            if self.duration <= 0:
                return
            target = _clamp(self.current_time + delta, 0.0, self.duration)
            self._set_time_unlocked(target)
            self._append_log(f"Skip {delta:+g}s -> {target:.1f}s")

    def _set_time_unlocked(self, seconds: float) -> None:
        self.media.set_time(seconds)
        self.current_time = seconds

    def set_volume(self, value: float) -> float:
        volume = _clamp(_finite(value, "volume"), *VOLUME_RANGE)
        with self.lock:
            self.volume = volume
            self.media.set_volume(volume)
        return volume

    def set_brightness(self, value: float) -> float:
        # render filter only; audio is untouched
        brightness = _clamp(_finite(value, "brightness"), *BRIGHTNESS_RANGE)
        with self.lock:
            self.brightness = brightness
            self.display.apply_filter(self.brightness_filter)
        return brightness

    @property
    def brightness_filter(self) -> str:
        return f"brightness({self.brightness:g})"

    def select_subtitle(self, option: str) -> None:
        if option not in SUBTITLE_OPTIONS:
            raise ValueError(f"unknown subtitle option: {option!r}")
        with self.lock:
            self.subtitle = option
            self._close_submenu_unlocked()
            self._append_log(f"Subtitle set to {option}")

    def select_playback_speed(self, speed: float) -> None:
        speed = _finite(speed, "speed")
        if speed not in PLAYBACK_SPEEDS:
            raise ValueError(f"unsupported playback speed: {speed:g}")
        with self.lock:
            self.playback_speed = speed
            self.media.set_rate(speed)
            self._close_submenu_unlocked()
            self._append_log(f"Playback speed set to {speed:g}x")

    def _close_submenu_unlocked(self) -> None:
        if self.open_panel in SUBMENUS:
            self.open_panel = None

    def get_state(self) -> dict:
        with self.lock:
            return {
                "source": self.source,
                "disabled": self.disabled,
                "is_playing": self.is_playing,
                "current_time": self.current_time,
                "duration": self.duration,
                "current_time_label": format_time(self.current_time),
                "duration_label": format_time(self.duration),
                "progress": (self.current_time / self.duration) if self.duration else 0.0,
                "volume": self.volume,
                "brightness": self.brightness,
                "brightness_filter": self.brightness_filter,
                "playback_speed": self.playback_speed,
                "subtitle": self.subtitle,
                "controls_visible": self.controls_visible,
                "open_panel": self.open_panel.value if self.open_panel else None,
                "visibility": visibility_name(self.controls_visible, self.open_panel),
                "is_fullscreen": self.is_fullscreen,
                "fullscreen_pending": self.fullscreen_pending,
                "viewport_width": self.viewport_width,
                "subtitle_options": list(SUBTITLE_OPTIONS),
                "playback_speeds": list(PLAYBACK_SPEEDS),
            }
