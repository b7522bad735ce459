"""Error types raised while reading ARFF data.

Fatal errors derive from :class:`ArffFatalError` and abort a parse.
:class:`ValueDecodeError` is recoverable: the assembler catches it for a
single value and records the value as missing.
"""

from typing import Optional


class ArffError(ValueError):
    """Base class for all ARFF parsing errors."""

    def __init__(self, message: str, source: Optional[str] = None, line_number: Optional[int] = None):
        self.message = message
        self.source = source
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.source:
            location.append(str(self.source))
        if self.line_number is not None:
            location.append(f"line {self.line_number}")
        if location:
            return f"{':'.join(location)}: {self.message}"
        return self.message


class ValueDecodeError(ArffError):
    """A single raw token could not be converted for its attribute."""


class ArffFatalError(ArffError):
    """Condition that aborts the whole parse."""


class ArffFileError(ArffFatalError):
    """The ARFF file does not exist or cannot be read."""


class NoAttributesError(ArffFatalError):
    """The header declared no usable attributes."""


class NoDataRowsError(ArffFatalError):
    """The data section produced zero accepted rows."""


class ClassIndexError(ArffFatalError):
    """An explicit class index lies outside the attribute range."""


class ArffStrictError(ArffFatalError):
    """Strict mode is on and the scan recorded warnings."""
