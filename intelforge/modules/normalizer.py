#!/usr/bin/env python3

"""
Refanging of obfuscated indicators before pattern matching.

Threat reports routinely defang indicators (``hxxp://``, ``evil[.]com``,
``evil(dot)com``) and copy/paste leaves zero-width characters behind. Both
defeat naive regular expressions, so text is rewritten into canonical form
first. Nothing else is touched: the URL matcher needs the original casing.
"""

from __future__ import annotations

import re
from re import Pattern

SCHEME_PATTERN: Pattern[str] = re.compile(r"\bhxxp(s?)\b", re.IGNORECASE)

# [.] (.) {.} [dot] (dot) {dot}, with optional inner spaces
DOT_PATTERN: Pattern[str] = re.compile(
    r"\[\s*(?:\.|dot)\s*\]|\(\s*(?:\.|dot)\s*\)|\{\s*(?:\.|dot)\s*\}",
    re.IGNORECASE,
)

ZERO_WIDTH_PATTERN: Pattern[str] = re.compile(r"[\u200b-\u200d\ufeff]")


def refang_schemes(text: str) -> str:
    """Rewrite ``hxxp``/``hxxps`` in any casing to ``http``/``https``."""
    return SCHEME_PATTERN.sub(lambda match: "http" + match.group(1).lower(), text)


def refang_dots(text: str) -> str:
    """Rewrite bracketed dot obfuscations to a literal dot."""
    return DOT_PATTERN.sub(".", text)


def strip_zero_width(text: str) -> str:
    """Remove zero-width spaces, joiners and byte-order marks."""
    return ZERO_WIDTH_PATTERN.sub("", text)


def normalize(text: str) -> str:
    """
    Rewrite defanged text into canonical form.

    Args:
        text: Raw report text

    Returns:
        Text with schemes refanged, dot obfuscations replaced and zero-width
        characters removed
    """
    if not text:
        return ""
    return strip_zero_width(refang_dots(refang_schemes(text)))
