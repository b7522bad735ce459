"""Typed attribute declarations and the ``@attribute`` grammar.

Attributes form a tagged union discriminated on ``kind``. Every variant is a
frozen pydantic model, so an attribute cannot change once the header has been
read.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .constants import DEFAULT_DATE_FORMAT
from .diagnostics import WARNING, Diagnostics, record
from .rows import split_dense_row
from .tokenizer import strip_quotes


class Attribute(BaseModel):
    """Common base of every attribute variant."""

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str = Field(..., min_length=1, description="Declared attribute name, quotes removed")

    # True when decoded values are numbers (floats, ints or nominal ordinals)
    numeric: ClassVar[bool] = False

    @property
    def is_numeric(self) -> bool:
        return self.numeric

    def type_label(self) -> str:
        """ARFF type text of this attribute."""
        return self.kind.upper()


class NumericAttribute(Attribute):
    kind: Literal["numeric"] = "numeric"
    numeric: ClassVar[bool] = True


class IntegerAttribute(Attribute):
    kind: Literal["integer"] = "integer"
    numeric: ClassVar[bool] = True


class RealAttribute(Attribute):
    kind: Literal["real"] = "real"
    numeric: ClassVar[bool] = True


class StringAttribute(Attribute):
    kind: Literal["string"] = "string"


class DateAttribute(Attribute):
    """Date attribute; an empty ``format`` means the ISO-like default."""

    kind: Literal["date"] = "date"
    format: str = Field(DEFAULT_DATE_FORMAT, description="Java SimpleDateFormat pattern")

    def type_label(self) -> str:
        if self.format:
            return f'DATE "{self.format}"'
        return "DATE"


class NominalAttribute(Attribute):
    """
    Attribute restricted to an enumerated set of labels.

    ``labels`` keeps declaration order; ``values`` maps each label to its
    1-based ordinal and is read-only.
    """

    kind: Literal["nominal"] = "nominal"
    labels: Tuple[str, ...]
    numeric: ClassVar[bool] = True

    _values: Dict[str, int] = PrivateAttr(default_factory=dict)

    @field_validator("labels")
    @classmethod
    def check_labels(cls, v):
        """Nominal labels must be present and unique."""
        if not v:
            raise ValueError("Nominal attribute needs at least one label")
        if len(set(v)) != len(v):
            raise ValueError(f"Nominal labels must be unique, got {list(v)}")
        return v

    def model_post_init(self, __context: Any) -> None:
        self._values = {label: idx for idx, label in enumerate(self.labels, start=1)}

    @property
    def values(self) -> Mapping[str, int]:
        return MappingProxyType(self._values)

    def type_label(self) -> str:
        return "{" + ",".join(self.labels) + "}"


AttributeType = Annotated[
    Union[
        NumericAttribute,
        IntegerAttribute,
        RealAttribute,
        StringAttribute,
        DateAttribute,
        NominalAttribute,
    ],
    Field(discriminator="kind"),
]

ATTRIBUTE_TYPES: Dict[str, type] = {
    "numeric": NumericAttribute,
    "integer": IntegerAttribute,
    "real": RealAttribute,
    "string": StringAttribute,
    "date": DateAttribute,
    "nominal": NominalAttribute,
}

_SIMPLE_TYPES = {
    "numeric": NumericAttribute,
    "integer": IntegerAttribute,
    "real": RealAttribute,
    "string": StringAttribute,
}
_RELATIONAL_TYPES = ("relational", "@relational")


def attribute_kinds() -> Tuple[str, ...]:
    """Every attribute kind, in declaration order of the union."""
    return tuple(ATTRIBUTE_TYPES)


def is_relational_declaration(fields: Sequence[str]) -> bool:
    """True for an ``@attribute <name> relational`` line."""
    return len(fields) >= 3 and fields[2].lower() in _RELATIONAL_TYPES


def create_attribute(
    fields: Sequence[str],
    diagnostics: Optional[Diagnostics] = None,
    line_number: Optional[int] = None,
) -> Optional[Attribute]:
    """
    Build an attribute from the tokenized fields of an ``@attribute`` line.

    Expected shape is ``["@attribute", name, type, ...]``. The type is matched
    case-insensitively against NUMERIC, INTEGER, REAL, STRING and DATE (with
    an optional format as the 4th field). A type starting with ``{`` is a
    nominal enumeration; its fields are rejoined because the header tokenizer
    splits ``{a, b}`` on whitespace. Relational and unknown types are
    rejected.

    Args:
        fields: Output of :func:`~arff_dataset.tokenizer.split_header_line`
        diagnostics: Channel receiving the reason for a rejection
        line_number: Line number used in diagnostics

    Returns:
        The attribute, or None when the declaration is invalid
    """
    if len(fields) < 3:
        record(
            diagnostics,
            WARNING,
            f"Invalid attribute declaration {list(fields)}: expected '@attribute <name> <type>'",
            line_number,
        )
        return None

    name = strip_quotes(fields[1])
    if not name:
        record(diagnostics, WARNING, f"Invalid attribute declaration {list(fields)}: empty name", line_number)
        return None

    type_token = fields[2]
    type_name = type_token.lower()

    if type_name in _SIMPLE_TYPES:
        if len(fields) > 3:
            record(
                diagnostics,
                WARNING,
                f"Ignoring trailing fields {list(fields[3:])} of attribute '{name}'",
                line_number,
            )
        return _SIMPLE_TYPES[type_name](name=name)

    if type_name == "date":
        date_format = strip_quotes(fields[3]) if len(fields) > 3 else DEFAULT_DATE_FORMAT
        if len(fields) > 4:
            record(
                diagnostics,
                WARNING,
                f"Ignoring trailing fields {list(fields[4:])} of attribute '{name}'",
                line_number,
            )
        return DateAttribute(name=name, format=date_format)

    if type_name in _RELATIONAL_TYPES:
        record(
            diagnostics,
            WARNING,
            f"Relational attribute '{name}' is not supported; declaration skipped",
            line_number,
        )
        return None

    if type_token.startswith("{"):
        return _create_nominal(name, " ".join(fields[2:]), diagnostics, line_number)

    record(
        diagnostics,
        WARNING,
        f"Unsupported type '{type_token}' for attribute '{name}'; attribute dropped",
        line_number,
    )
    return None


def _create_nominal(
    name: str,
    type_text: str,
    diagnostics: Optional[Diagnostics],
    line_number: Optional[int],
) -> Optional[NominalAttribute]:
    """Parse ``{a, b, ...}``. First occurrence of a label wins; repeats are dropped."""
    if not type_text.endswith("}"):
        record(
            diagnostics,
            WARNING,
            f"Unterminated nominal specification '{type_text}' for attribute '{name}'",
            line_number,
        )
        return None

    interior = type_text[1:-1]
    labels: List[str] = []
    if interior.strip():
        for piece in split_dense_row(interior):
            label = strip_quotes(piece)
            if not label:
                record(diagnostics, WARNING, f"Empty label in nominal attribute '{name}' ignored", line_number)
                continue
            if label in labels:
                record(
                    diagnostics,
                    WARNING,
                    f"Duplicate label '{label}' in nominal attribute '{name}'; keeping first occurrence",
                    line_number,
                )
                continue
            labels.append(label)

    if not labels:
        record(diagnostics, WARNING, f"Nominal attribute '{name}' declares no labels; attribute dropped", line_number)
        return None

    return NominalAttribute(name=name, labels=tuple(labels))
