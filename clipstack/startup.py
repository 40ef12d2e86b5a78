from __future__ import annotations

import os
import sys

from .constants import APP_NAME

# Windows start-on-login
try:
    import winreg  # type: ignore
except ImportError:
    winreg = None

RUN_KEY = r"Software\Microsoft\Windows\CurrentVersion\Run"


def launch_command() -> str:
    exe = sys.executable
    if getattr(sys, "frozen", False):
        return f'"{exe}"'
    return f'"{exe}" -m clipstack'


def set_launch_at_startup(enabled: bool, storage=None) -> bool:
    """Add or remove the per-user Run entry. Returns False where unsupported or on failure."""
    if winreg is None or os.name != "nt":
        return False
    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY, 0, winreg.KEY_SET_VALUE) as k:
            if enabled:
                winreg.SetValueEx(k, APP_NAME, 0, winreg.REG_SZ, launch_command())
            else:
                try:
                    winreg.DeleteValue(k, APP_NAME)
                except FileNotFoundError:
                    pass
        return True
    except Exception as e:
        if storage is not None:
            storage.log(f"updating startup entry failed: {e!r}")
        return False
