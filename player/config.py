import os

# Seconds of pointer/touch inactivity before the controls hide
IDLE_TIMEOUT_SEC = float(os.getenv("IDLE_TIMEOUT_SEC", "3.0"))

# Viewports narrower than this are treated as mobile: entering fullscreen
# also tries to lock the screen to landscape.
MOBILE_MAX_WIDTH = int(os.getenv("MOBILE_MAX_WIDTH", "768"))

# Size of the per-player log ring shown in the UI
PLAYER_LOG_MAX = int(os.getenv("PLAYER_LOG_MAX", "300"))

SKIP_SECONDS = 10

VOLUME_RANGE = (0.0, 1.0)
BRIGHTNESS_RANGE = (0.5, 1.5)

PLAYBACK_SPEEDS = (0.5, 0.75, 1.0, 1.25, 1.5, 1.75, 2.0)
SUBTITLE_OPTIONS = ("English", "Spanish", "Italian", "French", "Portuguese", "None")

# Players nobody has polled or driven for this long are unmounted on the
# next mount (tabs closed without unmounting)
PLAYER_STALE_SEC = float(os.getenv("PLAYER_STALE_SEC", "900"))
