"""Name normalisation applied before rows are written."""

from __future__ import annotations

import re
import unicodedata

_ROMAN_NUMERAL = re.compile(
    r"^M{0,3}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})$", re.IGNORECASE
)
_WHITESPACE = re.compile(r"\s+")
_SPECIAL_CHARACTER = re.compile(r"[^\w\s'-]")


def is_roman_numeral(token: str) -> bool:
    return bool(token) and _ROMAN_NUMERAL.match(token) is not None


def _strip_special_characters(text: str) -> str:
    # \w does not match combining marks, so accents are kept explicitly.
    return "".join(
        char
        for char in text
        if unicodedata.category(char) == "Mn" or not _SPECIAL_CHARACTER.match(char)
    )


def capitalize_except_roman(value: str) -> str:
    """Title-case each word of ``value`` while keeping Roman numerals upper-case.

    Punctuation other than apostrophes and hyphens is removed; accented letters
    survive and the result is returned in NFC form.
    """

    if not value:
        return value
    text = _strip_special_characters(unicodedata.normalize("NFD", value))
    text = _WHITESPACE.sub(" ", text.strip())
    words = []
    for word in text.split(" "):
        if not word:
            continue
        if is_roman_numeral(word):
            words.append(word.upper())
        else:
            words.append(word[0].upper() + word[1:].lower())
    return unicodedata.normalize("NFC", " ".join(words))


__all__ = ["capitalize_except_roman", "is_roman_numeral"]
