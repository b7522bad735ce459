"""Data row splitting for the dense and sparse ARFF row syntaxes."""

import re
from typing import List, Optional

from .constants import QUOTE_CHARS, SPARSE_DEFAULT_TOKEN
from .diagnostics import WARNING, Diagnostics, record

_SPARSE_BODY = re.compile(r"\{(.*)\}", re.DOTALL)


def split_dense_row(line: str, delimiter: str = ",") -> List[str]:
    """
    Split a comma-separated data line into trimmed fields.

    The first ``'`` or ``"`` seen opens a quoted span that only the same
    character closes; delimiters inside it are kept. A backslash makes the
    next character literal. Span-delimiting quotes and escaping backslashes
    are not part of the output.

    Args:
        line: Data line
        delimiter: Field separator

    Returns:
        List of whitespace-trimmed fields (at least one)

    Example:
        >>> split_dense_row('a,"b,c",d')
        ['a', 'b,c', 'd']
    """
    fields: List[str] = []
    chars: List[str] = []
    quote = None
    escaped = False

    for ch in line:
        if escaped:
            chars.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote is not None:
            if ch == quote:
                quote = None
            else:
                chars.append(ch)
        elif ch in QUOTE_CHARS:
            quote = ch
        elif ch == delimiter:
            fields.append("".join(chars).strip())
            chars = []
        else:
            chars.append(ch)

    fields.append("".join(chars).strip())
    return fields


def is_sparse_line(line: str) -> bool:
    """True when the line is a ``{...}`` sparse row."""
    stripped = line.strip()
    return stripped.startswith("{") and stripped.endswith("}")


def expand_sparse_row(
    line: str,
    n_attributes: int,
    diagnostics: Optional[Diagnostics] = None,
    line_number: Optional[int] = None,
    default: str = SPARSE_DEFAULT_TOKEN,
) -> List[str]:
    """
    Expand a ``{index value, ...}`` row into a full-width list of raw tokens.

    Indices in the file are 0-based and address column ``index + 1``.
    Entries that do not split into an index and a value, whose index is not an
    integer, or whose column falls outside ``[1, n_attributes]`` are dropped.
    A later entry for the same column overwrites an earlier one.

    Args:
        line: Data line holding one ``{...}`` body
        n_attributes: Number of declared attributes
        diagnostics: Channel for the missing-body warning
        line_number: Line number used in diagnostics
        default: Token used for unspecified columns

    Returns:
        List of ``n_attributes`` raw tokens

    Example:
        >>> expand_sparse_row("{0 1.5, 2 yes}", 5)
        ['1.5', '0', 'yes', '0', '0']
    """
    row = [default] * n_attributes

    match = _SPARSE_BODY.search(line)
    if match is None:
        record(diagnostics, WARNING, f"Sparse row has no {{...}} body: {line.strip()!r}", line_number)
        return row

    body = match.group(1)
    if not body.strip():
        return row

    for piece in split_dense_row(body):
        parts = piece.split(None, 1)
        if len(parts) != 2:
            continue
        try:
            index = int(parts[0])
        except ValueError:
            continue
        column = index + 1
        if 1 <= column <= n_attributes:
            row[column - 1] = parts[1]

    return row
