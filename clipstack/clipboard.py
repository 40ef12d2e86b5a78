from __future__ import annotations

import ctypes
import io
import os

import pyperclip
from PIL import Image, ImageGrab

GMEM_MOVEABLE = 0x0002
CF_DIB = 8


def dib_bytes(png: bytes) -> bytes:
    """CF_DIB payload for a PNG image: a BMP file minus its 14-byte file header.

    CF_DIB has no alpha channel, so transparency is flattened here.
    """
    img = Image.open(io.BytesIO(png)).convert("RGB")
    with io.BytesIO() as output:
        img.save(output, "BMP")
        return output.getvalue()[14:]


def _win32_api():
    user32 = ctypes.windll.user32
    kernel32 = ctypes.windll.kernel32

    user32.OpenClipboard.argtypes = [ctypes.c_void_p]
    user32.SetClipboardData.argtypes = [ctypes.c_uint, ctypes.c_void_p]
    user32.SetClipboardData.restype = ctypes.c_void_p
    user32.RegisterClipboardFormatW.argtypes = [ctypes.c_wchar_p]
    user32.RegisterClipboardFormatW.restype = ctypes.c_uint
    kernel32.GlobalAlloc.argtypes = [ctypes.c_uint, ctypes.c_size_t]
    kernel32.GlobalAlloc.restype = ctypes.c_void_p
    kernel32.GlobalLock.argtypes = [ctypes.c_void_p]
    kernel32.GlobalLock.restype = ctypes.c_void_p
    kernel32.GlobalUnlock.argtypes = [ctypes.c_void_p]
    kernel32.GlobalFree.argtypes = [ctypes.c_void_p]
    kernel32.GlobalFree.restype = ctypes.c_void_p
    return user32, kernel32


def _put_clipboard_bytes(user32, kernel32, fmt: int, data: bytes) -> bool:
    hglob = kernel32.GlobalAlloc(GMEM_MOVEABLE, len(data))
    if not hglob:
        return False
    lp = kernel32.GlobalLock(hglob)
    if not lp:
        kernel32.GlobalFree(hglob)
        return False
    ctypes.memmove(lp, data, len(data))
    kernel32.GlobalUnlock(hglob)
    # On success, the clipboard owns the memory handle.
    if user32.SetClipboardData(fmt, hglob):
        return True
    kernel32.GlobalFree(hglob)
    return False


# -----------------------------
# Clipboard helpers
# -----------------------------
class SystemClipboard:
    """Reads and writes the OS clipboard.

    Reads raise on failure; the poller logs and skips the tick.
    """

    def read_image(self) -> bytes | None:
        """PNG bytes of the clipboard image, or None when there is no image."""
        data = ImageGrab.grabclipboard()
        if not isinstance(data, Image.Image):
            return None
        buf = io.BytesIO()
        data.save(buf, format="PNG")
        return buf.getvalue()

    def read_text(self) -> str | None:
        t = pyperclip.paste()
        return t if isinstance(t, str) else None

    def write_text(self, text_value: str) -> bool:
        pyperclip.copy(text_value)
        return True

    def write_image(self, png: bytes) -> bool:
        """Put a PNG image on the Windows clipboard.

        The bytes go out unchanged under the registered "PNG" format, which
        keeps alpha and is what ``ImageGrab.grabclipboard`` reads back first.
        A CF_DIB copy is added for programs that only understand bitmaps.
        Returns False on non-Windows platforms.
        """
        if os.name != "nt":
            return False
        dib = dib_bytes(png)
        user32, kernel32 = _win32_api()
        png_format = user32.RegisterClipboardFormatW("PNG")

        if not user32.OpenClipboard(None):
            return False
        try:
            user32.EmptyClipboard()
            png_ok = bool(png_format) and _put_clipboard_bytes(user32, kernel32, png_format, png)
            dib_ok = _put_clipboard_bytes(user32, kernel32, CF_DIB, dib)
            return png_ok or dib_ok
        finally:
            user32.CloseClipboard()
