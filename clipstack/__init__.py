"""
ClipStack

Watches the system clipboard and keeps a short, deduplicated history of
text and image copies. A global hotkey toggles a small window listing the
history; picking an entry copies it back to the clipboard.

Dependencies:
  pyperclip
  platformdirs
  Pillow
  keyboard
  ttkbootstrap
"""

from .constants import APP_NAME, APP_VERSION

__all__ = ["APP_NAME", "APP_VERSION"]
