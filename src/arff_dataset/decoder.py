"""Type-directed conversion of raw data tokens into decoded values."""

import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .attributes import Attribute, DateAttribute, NominalAttribute
from .constants import ISO_DATE_FORMATS, MISSING_TOKEN
from .diagnostics import WARNING, Diagnostics, record
from .exceptions import ValueDecodeError
from .tokenizer import strip_quotes


class _Missing:
    """Singleton marker for an absent value; never equal to 0 or ''."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


def is_missing_token(token: str, missing_token: str = MISSING_TOKEN) -> bool:
    """``?`` (or the configured token) and blank tokens are missing for every type."""
    stripped = token.strip()
    return not stripped or stripped == missing_token


# Java SimpleDateFormat letter runs -> strptime directives
_JAVA_PATTERN = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|[^A-Za-z']+")


def _directive(letters: str) -> str:
    letter, width = letters[0], len(letters)
    if letter == "y":
        return "%y" if width == 2 else "%Y"
    if letter == "M":
        if width <= 2:
            return "%m"
        return "%b" if width == 3 else "%B"
    if letter == "E":
        return "%a" if width <= 3 else "%A"
    simple = {
        "d": "%d",
        "H": "%H",
        "h": "%I",
        "m": "%M",
        "s": "%S",
        "S": "%f",
        "a": "%p",
        "D": "%j",
        "Z": "%z",
        "X": "%z",
        "z": "%Z",
    }
    if letter not in simple:
        raise ValueError(f"Unsupported date pattern letter '{letter}'")
    return simple[letter]


def java_to_strptime(pattern: str) -> str:
    """
    Convert a Java ``SimpleDateFormat`` pattern into a ``strptime`` format.

    Quoted text (``'T'``) becomes literal text and ``''`` an apostrophe.

    Raises:
        ValueError: If the pattern uses a letter with no strptime equivalent

    Example:
        >>> java_to_strptime("yyyy-MM-dd'T'HH:mm:ss")
        '%Y-%m-%dT%H:%M:%S'
    """
    parts: List[str] = []
    for match in _JAVA_PATTERN.finditer(pattern):
        text = match.group(0)
        if text.startswith("'"):
            literal = text[1:-1].replace("''", "'") if len(text) > 2 else "'"
            parts.append(literal.replace("%", "%%"))
        elif match.group(1):
            parts.append(_directive(text))
        else:
            parts.append(text.replace("%", "%%"))
    return "".join(parts)


def parse_date(text: str, pattern: str = "") -> datetime:
    """
    Parse ``text`` with a Java pattern.

    An empty pattern tries ``yyyy-MM-dd'T'HH:mm:ss`` then ``yyyy-MM-dd``.

    Raises:
        ValueError: If the text does not match, or the pattern is unsupported
    """
    if pattern:
        return datetime.strptime(text, java_to_strptime(pattern))
    for iso_pattern in ISO_DATE_FORMATS:
        try:
            return datetime.strptime(text, java_to_strptime(iso_pattern))
        except ValueError:
            continue
    raise ValueError(f"'{text}' does not match {' or '.join(ISO_DATE_FORMATS)}")


def _decode_float(attribute: Attribute, token: str, diagnostics, line_number) -> float:
    try:
        return float(token.strip())
    except ValueError as e:
        raise ValueDecodeError(
            f"Cannot convert '{token}' to a number for attribute '{attribute.name}'",
            line_number=line_number,
        ) from e


def _decode_integer(attribute: Attribute, token: str, diagnostics, line_number) -> int:
    text = token.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        value = None
    if value is not None and value.is_integer():
        return int(value)
    raise ValueDecodeError(
        f"Cannot convert '{token}' to an integer for attribute '{attribute.name}'",
        line_number=line_number,
    )


def _decode_string(attribute: Attribute, token: str, diagnostics, line_number) -> str:
    return strip_quotes(token)


def _decode_nominal(attribute: NominalAttribute, token: str, diagnostics, line_number):
    label = strip_quotes(token)
    ordinal = attribute.values.get(label)
    if ordinal is None:
        record(
            diagnostics,
            WARNING,
            f"Unknown label '{label}' for nominal attribute '{attribute.name}'; value treated as missing",
            line_number,
        )
        return MISSING
    return ordinal


def _decode_date(attribute: DateAttribute, token: str, diagnostics, line_number):
    text = strip_quotes(token)
    try:
        return parse_date(text, attribute.format)
    except ValueError as e:
        record(
            diagnostics,
            WARNING,
            f"Cannot parse date '{text}' for attribute '{attribute.name}': {e}; value treated as missing",
            line_number,
        )
        return MISSING


_DECODERS: Dict[str, Callable] = {
    "numeric": _decode_float,
    "real": _decode_float,
    "integer": _decode_integer,
    "string": _decode_string,
    "nominal": _decode_nominal,
    "date": _decode_date,
}


def decoder_kinds():
    """Attribute kinds that have a decode branch."""
    return tuple(_DECODERS)


def decode_value(
    attribute: Attribute,
    token: str,
    diagnostics: Optional[Diagnostics] = None,
    line_number: Optional[int] = None,
    missing_token: str = MISSING_TOKEN,
):
    """
    Decode one raw token for its attribute.

    Missing tokens are recognised before dispatch and give :data:`MISSING`
    whatever the type. Unknown nominal labels and unparsable dates also give
    :data:`MISSING`, with a warning. Malformed numbers raise.

    Args:
        attribute: Attribute owning the column
        token: Raw token produced by a row splitter
        diagnostics: Channel for nominal/date warnings
        line_number: Line number used in diagnostics and errors
        missing_token: Token that marks a missing value

    Returns:
        float, int, str, datetime, nominal ordinal or MISSING

    Raises:
        ValueDecodeError: If a numeric or integer token is malformed
    """
    if is_missing_token(token, missing_token):
        return MISSING
    decoder = _DECODERS.get(attribute.kind)
    if decoder is None:
        raise ValueDecodeError(f"No decoder for attribute kind '{attribute.kind}'", line_number=line_number)
    return decoder(attribute, token, diagnostics, line_number)
