"""Localized text helpers for catalog rows."""

from __future__ import annotations

from typing import Any

from ..constants import Language
from ..packing.errors import EncodingError, E_ENCODE_RANGE

__all__ = ["localized", "clip_text"]


def localized(value: Any, language: Language, default: str = "") -> str:
    """Pick the string for ``language`` from a plain or per-language value.

    Per-language values are mappings keyed by lower-case language name
    (``{"english": ..., "french": ...}``); English is the fallback.
    """
    if value is None:
        return default
    if isinstance(value, dict):
        key = language.name.lower()
        if key in value:
            return str(value[key])
        if "english" in value:
            return str(value["english"])
        return default
    return str(value)


def clip_text(text: str, chars: int) -> str:
    """Shorten ``text`` to at most ``chars`` UTF-16 code units."""
    try:
        raw = text.encode("utf-16-be")
    except UnicodeEncodeError as exc:
        raise EncodingError(
            E_ENCODE_RANGE,
            "Text is not encodable as UTF-16 (lone surrogate)",
            {"text": text},
        ) from exc
    if len(raw) <= chars * 2:
        return text
    clipped = raw[: chars * 2].decode("utf-16-be", errors="ignore")
    return clipped
