"""Slug helpers for materialized directory paths."""

from __future__ import annotations

import re
import unicodedata

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(text: str | None) -> str:
    """Return a lower-case, ASCII, hyphen-separated token for ``text``.

    Diacritics are stripped after NFD normalisation, ``&`` becomes ``and`` and
    anything outside ``[a-z0-9\\s-]`` is dropped.

    >>> slugify("Ministère de l'Example & Co")
    'ministere-de-lexample-and-co'
    """

    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    value = stripped.lower().strip()
    value = value.replace("&amp;", "and").replace("&", "and")
    value = _DISALLOWED.sub("", value)
    value = _WHITESPACE.sub("-", value)
    value = _HYPHENS.sub("-", value)
    return value.strip("-")


def english_acronym(value: str | None) -> str | None:
    """Resolve an ``ENGLISH-FRENCH`` acronym field to its lower-cased English part."""

    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    english = trimmed.split("-", 1)[0]
    return english.lower() or None
