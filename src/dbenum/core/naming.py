"""Identifier normalization for generated member names.

Row labels are arbitrary text; member names must be valid identifiers.
``normalize`` turns one into the other, spelling out a leading numeral so the
result never starts with a digit.
"""

import re
import string

_ONES = (
    "Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
)
_TENS = (
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
)
# Short scale
_SCALES = (
    "", "Thousand", "Million", "Billion", "Trillion", "Quadrillion", "Quintillion",
    "Sextillion", "Septillion", "Octillion", "Nonillion", "Decillion",
)

_LEADING_NUMERAL = re.compile(r"^[0-9]+")


def number_to_words(n: int) -> str:
    """Spell an integer in English words.

    Args:
        n: Any integer whose magnitude is below one thousand decillion.

    Returns:
        Space-separated capitalized words, e.g. ``"Minus Two Thousand Five"``.

    Raises:
        ValueError: If the number is too large to spell.
    """
    if n < 0:
        return "Minus " + number_to_words(-n)
    if n < 20:
        return _ONES[n]
    if n >= 1000 ** len(_SCALES):
        raise ValueError(f"Number too large to spell: {n}")

    words: list[str] = []
    for power in range(len(_SCALES) - 1, -1, -1):
        chunk = (n // 1000**power) % 1000
        if chunk:
            words.extend(_spell_hundreds(chunk))
            if _SCALES[power]:
                words.append(_SCALES[power])
    return " ".join(words)


def _spell_hundreds(n: int) -> list[str]:
    """Spell 1..999 as a list of words."""
    words: list[str] = []
    hundreds, rest = divmod(n, 100)
    if hundreds:
        words.extend([_ONES[hundreds], "Hundred"])
    if rest >= 20:
        tens, ones = divmod(rest, 10)
        words.append(_TENS[tens])
        if ones:
            words.append(_ONES[ones])
    elif rest:
        words.append(_ONES[rest])
    return words


def _spell_numeral(numeral: str) -> str:
    try:
        return number_to_words(int(numeral))
    except ValueError:
        return " ".join(_ONES[int(digit)] for digit in numeral)


def _collapse(text: str) -> str:
    """Drop non-identifier characters, capitalizing after each skipped run."""
    out: list[str] = []
    capitalize = True
    for ch in text:
        if ch.isalpha() or ch in string.digits:
            out.append(ch.upper() if capitalize else ch)
            capitalize = False
        elif ch == "%":
            out.append("Percent")
            capitalize = True
        elif ch in "_-":
            out.append("_")
            capitalize = False
        else:
            capitalize = True
    return "".join(out)


def normalize(label: str) -> str:
    """Convert label text into a valid identifier.

    Whitespace and punctuation are dropped and the letter following them is
    capitalized, ``%`` becomes ``Percent`` and ``_``/``-`` become ``_``. A
    leading numeral is spelled out in words.

    Not injective: ``"CAD "`` and ``"CAD"`` both give ``"CAD"``. Callers detect
    collisions. May return an empty string for labels with no usable characters.
    """
    identifier = _collapse(label)
    match = _LEADING_NUMERAL.match(identifier)
    if match is None:
        return identifier
    return _collapse(_spell_numeral(match.group())) + _collapse(identifier[match.end():])
