"""Split French practice text into comparable word tokens.

Apostrophes and hyphens are kept: they are part of the word in
"c'est", "aujourd'hui" or "peut-être", and splitting on them would
inflate the word counts with fragments like "c" and "est".
"""

from __future__ import annotations

import re

# Sentence punctuation, including French guillemets and curly quotes.
_PUNCTUATION = re.compile(r"[.,!?;:\"“”«»()\[\]{}]")
_WHITESPACE = re.compile(r"\s+")


def parse_words(text) -> list[str]:
    """Lower-case *text*, strip punctuation and split it into words.

    Non-string or blank input yields an empty list rather than an error.
    """
    if not text or not isinstance(text, str):
        return []

    normalised = _PUNCTUATION.sub(" ", text.lower())
    normalised = _WHITESPACE.sub(" ", normalised).strip()
    return [word for word in normalised.split(" ") if word]


def unique_words(text) -> list[str]:
    """Distinct words of *text*, in order of first appearance."""
    return list(dict.fromkeys(parse_words(text)))
