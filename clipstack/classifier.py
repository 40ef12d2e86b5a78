from __future__ import annotations

import base64
import re
from dataclasses import dataclass

from .constants import IMAGE, TEXT

PNG_DATA_URL_PREFIX = "data:image/png;base64,"
_DATA_URL_RE = re.compile(r"^data:image/[a-z]+;base64,")

# Characters that, together with letters and digits, make text look like a secret.
SPECIAL_CHARS = frozenset("!@#$%^&*()_+-=[]{};':\"\\|,.<>/?`~")
MIN_PASSWORD_LEN = 8

EMPTY = "empty"
LOOKS_LIKE_PASSWORD = "looks_like_password"


@dataclass(frozen=True)
class Snapshot:
    """What one poll saw on the clipboard: PNG bytes for images, a str for text."""
    kind: str
    raw: bytes | str

    @property
    def identity(self) -> tuple:
        return (self.kind, self.raw)


@dataclass(frozen=True)
class Accept:
    kind: str
    content: str


@dataclass(frozen=True)
class Reject:
    reason: str


def encode_image(png: bytes) -> str:
    return PNG_DATA_URL_PREFIX + base64.b64encode(png).decode("ascii")


def decode_image(data_url: str) -> bytes:
    return base64.b64decode(_DATA_URL_RE.sub("", data_url, count=1))


def looks_like_password(text: str) -> bool:
    """
    Heuristic only. True when the text is one token of at least 8 characters
    mixing letters, digits and at least one special character.
    """
    if len(text) < MIN_PASSWORD_LEN:
        return False
    if any(ch.isspace() for ch in text):
        return False
    has_digit = any(ch.isdigit() for ch in text)
    has_alpha = any(ch.isalpha() for ch in text)
    has_special = any(ch in SPECIAL_CHARS for ch in text)
    return has_digit and has_alpha and has_special


class ContentClassifier:
    def __init__(self, prefs):
        self.prefs = prefs

    def classify(self, snapshot: Snapshot) -> Accept | Reject:
        if snapshot.kind == IMAGE:
            return Accept(IMAGE, encode_image(snapshot.raw))

        text = snapshot.raw if isinstance(snapshot.raw, str) else ""
        if not text.strip():
            return Reject(EMPTY)
        if self.prefs.current.exclude_passwords and looks_like_password(text):
            return Reject(LOOKS_LIKE_PASSWORD)
        return Accept(TEXT, text)
