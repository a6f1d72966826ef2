"""Word splitting and case conversion for generated identifiers."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


def _is_upper(c: str) -> bool:
    return c.isupper()


def _is_lower(c: str) -> bool:
    return c.islower()


def _is_digit(c: str) -> bool:
    return c in "0123456789"


class Boundary(Enum):
    """A place where an identifier is split into words.

    The value of each member is its canonical name.
    """

    HYPHEN = "Hyphen"
    UNDERSCORE = "Underscore"
    SPACE = "Space"
    LOWER_UPPER = "LowerUpper"
    UPPER_LOWER = "UpperLower"
    DIGIT_UPPER = "DigitUpper"
    UPPER_DIGIT = "UpperDigit"
    DIGIT_LOWER = "DigitLower"
    LOWER_DIGIT = "LowerDigit"
    ACRONYM = "Acronym"

    @classmethod
    def list_from(cls, text: str) -> list[Boundary]:
        """Return every boundary that occurs somewhere in ``text``."""
        chars = list(text)
        found = []
        for boundary in cls:
            if (
                any(_detect_one(boundary, c) for c in chars)
                or any(_detect_two(boundary, a, b) for a, b in zip(chars, chars[1:]))
                or any(
                    _detect_three(boundary, a, b, c)
                    for a, b, c in zip(chars, chars[1:], chars[2:])
                )
            ):
                found.append(boundary)
        return found


_DELIMITERS = {
    Boundary.HYPHEN: "-",
    Boundary.UNDERSCORE: "_",
    Boundary.SPACE: " ",
}

_PAIRS = {
    Boundary.LOWER_UPPER: (_is_lower, _is_upper),
    Boundary.UPPER_LOWER: (_is_upper, _is_lower),
    Boundary.DIGIT_UPPER: (_is_digit, _is_upper),
    Boundary.UPPER_DIGIT: (_is_upper, _is_digit),
    Boundary.DIGIT_LOWER: (_is_digit, _is_lower),
    Boundary.LOWER_DIGIT: (_is_lower, _is_digit),
}

DEFAULT_BOUNDARIES: tuple[Boundary, ...] = (
    Boundary.UNDERSCORE,
    Boundary.HYPHEN,
    Boundary.SPACE,
    Boundary.LOWER_UPPER,
    Boundary.UPPER_DIGIT,
    Boundary.DIGIT_UPPER,
    Boundary.DIGIT_LOWER,
    Boundary.LOWER_DIGIT,
    Boundary.ACRONYM,
)


def _detect_one(boundary: Boundary, c: str) -> bool:
    return _DELIMITERS.get(boundary) == c


def _detect_two(boundary: Boundary, first: str, second: str) -> bool:
    pair = _PAIRS.get(boundary)
    return pair is not None and pair[0](first) and pair[1](second)


def _detect_three(boundary: Boundary, first: str, second: str, third: str) -> bool:
    return (
        boundary is Boundary.ACRONYM
        and _is_upper(first)
        and _is_upper(second)
        and _is_lower(third)
    )


def split_words(text: str, boundaries: Iterable[Boundary] | None = None) -> list[str]:
    """Split ``text`` into words at the given boundaries.

    Delimiter characters are dropped; empty words are discarded.
    """
    active = DEFAULT_BOUNDARIES if boundaries is None else tuple(boundaries)
    chars = list(text)
    words: list[str] = []
    current: list[str] = []

    for i, c in enumerate(chars):
        if any(_detect_one(b, c) for b in active):
            words.append("".join(current))
            current = []
            continue
        if i > 0:
            prev = chars[i - 1]
            split_here = any(_detect_two(b, prev, c) for b in active)
            if not split_here and i + 1 < len(chars):
                split_here = any(_detect_three(b, prev, c, chars[i + 1]) for b in active)
            if split_here:
                words.append("".join(current))
                current = []
        current.append(c)

    words.append("".join(current))
    return [word for word in words if word]


def to_pascal_case(text: str) -> str:
    """Convert ``text`` to PascalCase using the default boundaries."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(text))