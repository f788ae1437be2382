from enum import Enum
from typing import Optional


class Panel(str, Enum):
    """Overlay surfaces of the player. At most one is open at a time."""

    SETTINGS = "settings"
    SUBTITLE = "subtitle"
    PLAYBACK = "playback"
    VOLUME = "volume"
    BRIGHTNESS = "brightness"

    @classmethod
    def parse(cls, value: str) -> "Panel":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown panel: {value!r}") from None


# submenus closed by a selection inside them
SUBMENUS = (Panel.SUBTITLE, Panel.PLAYBACK)


def visibility_name(controls_visible: bool, open_panel: Optional[Panel]) -> str:
    if not controls_visible:
        return "hidden"
    if open_panel is None:
        return "visible-idle"
    return "visible-panel"
