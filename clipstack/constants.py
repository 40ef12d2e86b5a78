# -----------------------------
# App constants
# -----------------------------
APP_NAME = "ClipStack"
APP_ID = "clipstack"
VENDOR = "ClipStack"

APP_VERSION = "1.0.0"

DEFAULT_MAX_HISTORY = 25
MIN_HISTORY = 5
MAX_HISTORY = 100

# Auto-clear interval is in hours; 0 disables it.
MAX_AUTO_CLEAR_HOURS = 24 * 30
AUTO_CLEAR_CHOICES = (0, 1, 6, 24, 168)

DEFAULT_HOTKEY = "ctrl+shift+v"

POLL_MS = 500
SWEEP_MS = 60_000

PREVIEW_LIMIT = 100

TEXT = "text"
IMAGE = "image"
