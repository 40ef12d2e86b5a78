"""Tests for clipstack.classifier"""

import pytest

from clipstack.classifier import (
    EMPTY,
    LOOKS_LIKE_PASSWORD,
    Accept,
    ContentClassifier,
    Reject,
    Snapshot,
    decode_image,
    encode_image,
    looks_like_password,
)
from clipstack.constants import IMAGE, TEXT
from clipstack.preferences import Preferences, PreferencesModel


def classifier(exclude_passwords=True):
    return ContentClassifier(PreferencesModel(current=Preferences(exclude_passwords=exclude_passwords)))


def test_password_rejected_when_excluding():
    assert classifier().classify(Snapshot(TEXT, "abc123!@#x")) == Reject(LOOKS_LIKE_PASSWORD)


def test_password_accepted_when_not_excluding():
    assert classifier(False).classify(Snapshot(TEXT, "abc123!@#x")) == Accept(TEXT, "abc123!@#x")


@pytest.mark.parametrize("text", ["", "   ", "\n\t "])
def test_blank_text_is_empty(text):
    assert classifier().classify(Snapshot(TEXT, text)) == Reject(EMPTY)


@pytest.mark.parametrize("text", [
    "abc 123!@#x",      # whitespace
    "a1!b2@",           # too short
    "abcdefgh!",        # no digit
    "12345678!",        # no letter
    "abc12345xyz",      # no special character
    "https://example.com/page",  # no digit
])
def test_not_password_like(text):
    assert looks_like_password(text) is False
    assert classifier().classify(Snapshot(TEXT, text)) == Accept(TEXT, text)


@pytest.mark.parametrize("text", ["P@ssw0rd", "hunter2-secret", "x9{}y8[]z7", "S3cure`key~"])
def test_password_like(text):
    assert looks_like_password(text) is True


def test_text_is_not_trimmed_on_accept():
    assert classifier().classify(Snapshot(TEXT, "  hi  ")) == Accept(TEXT, "  hi  ")


def test_image_always_accepted():
    png = b"\x89PNG\r\n\x1a\nfake"
    outcome = classifier().classify(Snapshot(IMAGE, png))
    assert outcome.kind == IMAGE
    assert outcome.content.startswith("data:image/png;base64,")
    assert decode_image(outcome.content) == png


def test_decode_accepts_other_image_types():
    assert decode_image("data:image/jpeg;base64,AAEC") == b"\x00\x01\x02"


def test_encode_image():
    assert encode_image(b"\x00\x01\x02") == "data:image/png;base64,AAEC"


def test_exclusion_is_read_live():
    model = PreferencesModel(current=Preferences(exclude_passwords=True))
    c = ContentClassifier(model)
    assert isinstance(c.classify(Snapshot(TEXT, "abc123!@#x")), Reject)
    model.current = Preferences(exclude_passwords=False)
    assert isinstance(c.classify(Snapshot(TEXT, "abc123!@#x")), Accept)
