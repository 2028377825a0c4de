# src/cache/fingerprint.py - v3
"""Content-addressed query fingerprints for the nutrition cache.

Three query shapes are supported: normalized text, an image (first 2KB plus
total size) and the combination of both. Every digest is prefixed with a type
tag so a text and an image can never share a key. MD5 is used because this
is a dedup key, not a security boundary.
"""

from __future__ import annotations

import base64
import hashlib
import re

from smartsaver.cache.models import QueryType

IMAGE_PREFIX_BYTES = 2048

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]")


def normalize_text(text: str) -> str:
    """Lowercase, collapse whitespace and strip punctuation.

    Punctuation is removed before whitespace is collapsed so that
    ``"rajma , chawal"`` and ``"rajma chawal"`` normalize identically.
    """
    text = (text or "").lower()
    text = _NON_WORD_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()  # noqa: S324


def fingerprint_text(text: str) -> str:
    """Fingerprint of the normalized text, tagged ``text:``."""
    return _md5(f"text:{normalize_text(text)}")


def fingerprint_image(data: bytes, total_size: int | None = None) -> str:
    """Fingerprint of an image from its first 2KB and total byte length.

    Two images sharing the same leading 2KB and the same size collide.
    ``total_size`` defaults to ``len(data)`` when the full payload is given.
    """
    data = data or b""
    size = len(data) if total_size is None else total_size
    prefix = base64.b64encode(data[:IMAGE_PREFIX_BYTES]).decode("ascii")
    return _md5(f"image:{size}:{prefix}")


def fingerprint_combined(text: str, image: bytes | None = None) -> str:
    """Fingerprint of text plus optional image; text-only when no image."""
    text_hash = fingerprint_text(text)
    if not image:
        return text_hash
    image_hash = fingerprint_image(image)
    return _md5(f"{text_hash}:{image_hash}")


def compute_fingerprint(
    text: str | None = None, image: bytes | None = None
) -> tuple[str, QueryType]:
    """Pick the fingerprint variant for a query and report its type tag.

    Image with non-blank text is ``combined``; image alone is ``image``;
    anything else is ``text`` (an empty string still yields a defined key).
    """
    has_text = bool(text and text.strip())
    if image and has_text:
        return fingerprint_combined(text or "", image), "combined"
    if image:
        return fingerprint_image(image), "image"
    return fingerprint_text(text or ""), "text"
