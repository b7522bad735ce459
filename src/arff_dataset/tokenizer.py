"""Quote-aware tokenizer for ARFF header lines."""

from typing import List

from .constants import QUOTE_CHARS

# Scanner states
NORMAL = "normal"
SPACE = "space"
SINGLE_QUOTE = "single_quote"
DOUBLE_QUOTE = "double_quote"

_WHITESPACE = " \t\r\n"
_QUOTE_STATES = {"'": SINGLE_QUOTE, '"': DOUBLE_QUOTE}
_CLOSING_QUOTE = {SINGLE_QUOTE: "'", DOUBLE_QUOTE: '"'}


def split_header_line(line: str) -> List[str]:
    """
    Split a header line into whitespace-delimited fields.

    A field that starts with ``'`` or ``"`` runs to the matching quote and is
    emitted without its quotes, whitespace and commas included. A quote in
    the middle of an unquoted field opens a span that stays part of the field
    verbatim, so ``{'a b',c}`` is a single field. Between ``{`` and ``}`` every
    quoted label keeps its quotes, so the nominal interior can be split again
    with the quote-aware row splitter. An unterminated quote is closed at the
    end of the line. Blank input gives an empty list.

    Only used for ``@relation``, ``@attribute`` and ``@data`` lines; data rows
    go through :mod:`arff_dataset.rows`.

    Args:
        line: One header line, with or without its line terminator

    Returns:
        List of non-empty field strings

    Example:
        >>> split_header_line("@attribute 'a b' numeric")
        ['@attribute', 'a b', 'numeric']
    """
    fields: List[str] = []
    chars: List[str] = []
    state = SPACE
    # True when the current field was opened by a quote
    quoted_field = False
    # True between an unquoted "{" and its "}"; quoted labels there keep their quotes
    in_braces = False

    for ch in line:
        if state == SPACE:
            if ch in _WHITESPACE:
                continue
            chars = []
            if ch in _QUOTE_STATES:
                state = _QUOTE_STATES[ch]
                quoted_field = not in_braces
                if in_braces:
                    chars.append(ch)
            else:
                chars.append(ch)
                state = NORMAL
                quoted_field = False
                in_braces = _brace_state(ch, in_braces)
        elif state == NORMAL:
            if ch in _WHITESPACE:
                _emit(fields, chars)
                chars = []
                state = SPACE
            else:
                chars.append(ch)
                if ch in _QUOTE_STATES:
                    state = _QUOTE_STATES[ch]
                else:
                    in_braces = _brace_state(ch, in_braces)
        else:
            if ch != _CLOSING_QUOTE[state]:
                chars.append(ch)
            elif quoted_field:
                _emit(fields, chars)
                chars = []
                quoted_field = False
                state = SPACE
            else:
                chars.append(ch)
                state = NORMAL

    _emit(fields, chars)
    return fields


def _brace_state(ch: str, in_braces: bool) -> bool:
    if ch == "{":
        return True
    if ch == "}":
        return False
    return in_braces


def _emit(fields: List[str], chars: List[str]) -> None:
    if chars:
        fields.append("".join(chars))


def strip_quotes(token: str) -> str:
    """Trim whitespace and remove one surrounding pair of matching quotes."""
    token = token.strip()
    if len(token) >= 2 and token[0] in QUOTE_CHARS and token[-1] == token[0]:
        return token[1:-1]
    return token
