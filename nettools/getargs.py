"""Splitting of a line into whitespace-separated, optionally quoted fields."""

from __future__ import annotations

_MAX_ARGS = 31
_BLANKS = " \t"
_QUOTES = "\"'"


def getargs(text: str) -> list[str]:
    """Split a line into at most 31 fields.

    A field starting with a single or double quote runs to the matching
    quote that is not preceded by a backslash; the backslash is kept.
    """
    args: list[str] = []
    pos = 0
    end = len(text)
    while pos < end and len(args) < _MAX_ARGS:
        while pos < end and text[pos] in _BLANKS:
            pos += 1
        field: list[str] = []
        if pos < end and text[pos] in _QUOTES:
            want = text[pos]
            pos += 1
            while pos < end:
                if text[pos] == want and text[pos - 1] != "\\":
                    pos += 1
                    break
                field.append(text[pos])
                pos += 1
        else:
            while pos < end and text[pos] not in _BLANKS:
                field.append(text[pos])
                pos += 1
        args.append("".join(field))
        while pos < end and text[pos] in _BLANKS:
            pos += 1
    return args