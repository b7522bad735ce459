"""Relation assembly: line scan, row accumulation and feature/label split."""

import re
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict

from .attributes import (
    Attribute,
    AttributeType,
    DateAttribute,
    NominalAttribute,
    create_attribute,
    is_relational_declaration,
)
from .config import ParserConfig
from .constants import (
    ATTRIBUTE_TAG,
    CLASS_CANDIDATES,
    COMMENT_PREFIX,
    DATA_TAG,
    END_TAG,
    RELATION_TAG,
    REPLACEMENT_CHAR,
)
from .decoder import MISSING, decode_value
from .diagnostics import Diagnostic, Diagnostics
from .exceptions import (
    ArffStrictError,
    ClassIndexError,
    NoAttributesError,
    NoDataRowsError,
    ValueDecodeError,
)
from .rows import expand_sparse_row, is_sparse_line, split_dense_row
from .tokenizer import split_header_line, strip_quotes
from .utils.logger import get_logger

logger = get_logger(__name__)

# Scan states
HEADER = "header"
DATA = "data"

# Data section syntax, fixed once per file
DENSE = "dense"
SPARSE = "sparse"

_DATA_LINE = re.compile(r"^@data(?=[\s{]|$)", re.IGNORECASE)


class Relation:
    """Relation name, attributes and accepted rows; read-only once built."""

    def __init__(self, name: str, attributes: Sequence[Attribute], rows: Sequence[Sequence]):
        self._name = name
        self._attributes = tuple(attributes)
        self._rows = tuple(tuple(row) for row in rows)

    @property
    def name(self) -> str:
        return self._name

    @property
    def attributes(self) -> Tuple[Attribute, ...]:
        return self._attributes

    @property
    def rows(self) -> Tuple[tuple, ...]:
        return self._rows

    @property
    def attribute_names(self) -> List[str]:
        return [a.name for a in self._attributes]

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Relation):
            return NotImplemented
        return (self._name, self._attributes, self._rows) == (other._name, other._attributes, other._rows)

    def __repr__(self) -> str:
        return f"Relation(name={self._name!r}, attributes={len(self._attributes)}, rows={len(self._rows)})"


class RowResult(NamedTuple):
    """Outcome of one data line: an accepted row or the reason it was skipped."""

    line_number: int
    row: Optional[tuple]
    reason: Optional[str]

    @property
    def accepted(self) -> bool:
        return self.row is not None

    @classmethod
    def ok(cls, line_number: int, row: tuple) -> "RowResult":
        return cls(line_number, row, None)

    @classmethod
    def skip(cls, line_number: int, reason: str) -> "RowResult":
        return cls(line_number, None, reason)


class RelationMetadata(BaseModel):
    """Everything about a parsed relation except the values themselves."""

    model_config = ConfigDict(frozen=True)

    name: str
    attributes: Tuple[AttributeType, ...]
    class_index: int
    feature_names: Tuple[str, ...]
    class_labels: Optional[Tuple[str, ...]] = None
    n_rows: int
    sparse: bool = False
    source: Optional[str] = None
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def class_attribute(self) -> Attribute:
        return self.attributes[self.class_index]

    @property
    def class_name(self) -> str:
        return self.class_attribute.name

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity != "info")


class ArffDataset:
    """
    Feature matrix, label vector and metadata of one parsed file.

    Unpacks as ``features, labels, metadata = dataset``.
    """

    def __init__(self, features: np.ndarray, labels: np.ndarray, metadata: RelationMetadata, relation: Relation):
        self.features = features
        self.labels = labels
        self.metadata = metadata
        self.relation = relation

    def __iter__(self):
        return iter((self.features, self.labels, self.metadata))

    def __len__(self) -> int:
        return len(self.labels)

    def __repr__(self) -> str:
        return (
            f"ArffDataset(relation={self.metadata.name!r}, rows={len(self)}, "
            f"features={self.features.shape[1]}, class={self.metadata.class_name!r})"
        )

    def to_dataframe(self, decode_nominals: bool = True) -> pd.DataFrame:
        """
        Build a DataFrame with one column per attribute, in declaration order.

        Missing values become NaN/NaT/None. Nominal columns become
        ``pandas.Categorical`` over the declared labels, or stay as float
        ordinals when ``decode_nominals`` is False.
        """
        rows = self.relation.rows
        columns = {}
        for position, attribute in enumerate(self.relation.attributes):
            values = [row[position] for row in rows]
            columns[position] = _column_series(attribute, values, decode_nominals)
        df = pd.DataFrame(columns)
        df.columns = self.relation.attribute_names
        return df


def _column_series(attribute: Attribute, values: list, decode_nominals: bool) -> pd.Series:
    if isinstance(attribute, NominalAttribute) and decode_nominals:
        codes = [-1 if v is MISSING else v - 1 for v in values]
        return pd.Series(pd.Categorical.from_codes(codes, categories=list(attribute.labels)))
    if attribute.kind == "integer" and not any(v is MISSING for v in values):
        return pd.Series(values, dtype="int64")
    if attribute.is_numeric:
        return pd.Series([np.nan if v is MISSING else v for v in values], dtype="float64")
    if isinstance(attribute, DateAttribute):
        return pd.Series(pd.to_datetime([None if v is MISSING else v for v in values]))
    return pd.Series([None if v is MISSING else v for v in values], dtype=object)


def resolve_class_index(
    attributes: Sequence[Attribute],
    class_index: Optional[int] = None,
    candidates: Sequence[str] = CLASS_CANDIDATES,
    source: Optional[str] = None,
) -> int:
    """
    Pick the class column.

    An explicit 1-based ``class_index`` wins (``-1`` means the last column)
    and must lie within the attribute range. Otherwise the first name of
    ``candidates`` matching an attribute case-insensitively is used, falling
    back to the last attribute.

    Returns:
        0-based position of the class column

    Raises:
        ClassIndexError: If the explicit index is out of range
    """
    n_attributes = len(attributes)
    if class_index is not None:
        if class_index == -1:
            return n_attributes - 1
        if not 1 <= class_index <= n_attributes:
            raise ClassIndexError(
                f"Class index {class_index} is out of range; expected 1..{n_attributes}",
                source=source,
            )
        return class_index - 1

    lowered = [a.name.lower() for a in attributes]
    for candidate in candidates:
        if candidate.lower() in lowered:
            return lowered.index(candidate.lower())
    return n_attributes - 1


def split_features_labels(relation: Relation, class_position: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split accepted rows into a feature matrix and a label vector.

    Features keep attribute order without the class column. All-numeric
    features give a float64 matrix with NaN for missing values, anything
    else an object matrix with None. Nominal labels are shifted to 0-based
    class codes.
    """
    attributes = relation.attributes
    rows = relation.rows
    positions = [i for i in range(len(attributes)) if i != class_position]

    if all(attributes[i].is_numeric for i in positions):
        features = np.array(
            [[np.nan if row[i] is MISSING else row[i] for i in positions] for row in rows],
            dtype=np.float64,
        ).reshape(len(rows), len(positions))
    else:
        features = np.empty((len(rows), len(positions)), dtype=object)
        for r, row in enumerate(rows):
            for c, i in enumerate(positions):
                features[r, c] = None if row[i] is MISSING else row[i]

    class_attribute = attributes[class_position]
    raw = [row[class_position] for row in rows]
    if isinstance(class_attribute, NominalAttribute):
        raw = [v if v is MISSING else v - 1 for v in raw]
    has_missing = any(v is MISSING for v in raw)

    if class_attribute.kind in ("integer", "nominal") and not has_missing:
        labels = np.array(raw, dtype=np.int64)
    elif class_attribute.is_numeric:
        labels = np.array([np.nan if v is MISSING else v for v in raw], dtype=np.float64)
    else:
        labels = np.empty(len(raw), dtype=object)
        for r, value in enumerate(raw):
            labels[r] = None if value is MISSING else value

    return features, labels


class RelationAssembler:
    """
    Single-pass scanner turning ARFF lines into an :class:`ArffDataset`.

    One instance serves one parse. Header lines are tokenized and
    dispatched on their directive until ``@data``; after that every line is
    a dense or sparse row, the syntax being fixed by the ``@data`` line or,
    failing that, by the first data row.
    """

    def __init__(self, config: Optional[ParserConfig] = None, source: Optional[str] = None):
        self.config = config or ParserConfig()
        self.source = source
        self.diagnostics = Diagnostics(logger)
        self.state = HEADER
        self.row_format: Optional[str] = None
        self.relation_name = ""
        self.attributes: List[Attribute] = []
        self.rows: List[tuple] = []
        self.skipped_rows = 0
        # Names of relational attributes whose nested declarations are being skipped
        self._relational_blocks: List[str] = []

    def scan(self, lines: Iterable[str]) -> "RelationAssembler":
        for line_number, line in enumerate(lines, start=1):
            self.feed(line, line_number)
        return self

    def feed(self, line: str, line_number: int) -> None:
        if REPLACEMENT_CHAR in line:
            self.diagnostics.warning(
                f"Line contains bytes not valid in {self.config.encoding}; they were replaced with U+FFFD",
                line_number,
            )
        if self.state == HEADER:
            self._process_header_line(line, line_number)
            return
        self._add_data_line(line, line_number)

    def _add_data_line(self, line: str, line_number: int) -> None:
        result = self.process_data_line(line, line_number)
        if result is None:
            return
        if result.accepted:
            self.rows.append(result.row)
        else:
            self.skipped_rows += 1
            self.diagnostics.warning(result.reason, line_number)

    def _process_header_line(self, line: str, line_number: int) -> None:
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            return

        if _DATA_LINE.match(stripped):
            self._enter_data(stripped[len(DATA_TAG):].strip(), line_number)
            return

        if self._relational_blocks:
            self._skip_relational_line(stripped)
            return

        if not stripped.startswith("@"):
            logger.debug(f"Line {line_number}: ignoring non-directive header line")
            return

        fields = split_header_line(stripped)
        keyword = fields[0].lower()

        if keyword == RELATION_TAG:
            if self.relation_name:
                self.diagnostics.warning(f"Relation name redeclared; keeping '{self.relation_name}'", line_number)
            else:
                self.relation_name = strip_quotes(fields[1]) if len(fields) > 1 else ""
        elif keyword == ATTRIBUTE_TAG:
            self._add_attribute(fields, line_number)
        elif keyword == END_TAG:
            self.diagnostics.warning("'@end' without an open relational attribute ignored", line_number)
        else:
            self.diagnostics.warning(f"Unknown header directive '{fields[0]}'; line skipped", line_number)

    def _add_attribute(self, fields: List[str], line_number: int) -> None:
        if is_relational_declaration(fields):
            create_attribute(fields, self.diagnostics, line_number)
            self._relational_blocks.append(strip_quotes(fields[1]))
            return

        attribute = create_attribute(fields, self.diagnostics, line_number)
        if attribute is None:
            return
        if isinstance(attribute, DateAttribute) and not attribute.format and self.config.default_date_format:
            attribute = attribute.model_copy(update={"format": self.config.default_date_format})
        if attribute.name.lower() in (a.name.lower() for a in self.attributes):
            self.diagnostics.warning(f"Duplicate attribute name '{attribute.name}'", line_number)
        self.attributes.append(attribute)
        logger.debug(f"Line {line_number}: attribute '{attribute.name}' ({attribute.kind})")

    def _skip_relational_line(self, stripped: str) -> None:
        fields = split_header_line(stripped)
        if not fields:
            return
        keyword = fields[0].lower()
        if keyword == ATTRIBUTE_TAG and is_relational_declaration(fields):
            self._relational_blocks.append(strip_quotes(fields[1]))
        elif keyword == END_TAG:
            name = strip_quotes(fields[1]) if len(fields) > 1 else self._relational_blocks[-1]
            if name == self._relational_blocks[-1]:
                self._relational_blocks.pop()

    def _enter_data(self, remainder: str, line_number: int) -> None:
        self.state = DATA
        if self._relational_blocks:
            self.diagnostics.warning(
                f"Relational attribute '{self._relational_blocks[-1]}' not closed before @data",
                line_number,
            )
            self._relational_blocks.clear()
        if "{" in remainder and "}" in remainder:
            self.row_format = SPARSE
        logger.info(
            f"Header complete at line {line_number}: relation '{self.relation_name}', "
            f"{len(self.attributes)} attributes"
        )
        if remainder:
            self._add_data_line(remainder, line_number)

    def process_data_line(self, line: str, line_number: int) -> Optional[RowResult]:
        """
        Split and decode one data line.

        Returns None for blank and comment lines (and when there are no
        attributes to align with); otherwise a :class:`RowResult`.
        """
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX) or not self.attributes:
            return None

        sparse_line = is_sparse_line(stripped)
        if self.row_format is None:
            self.row_format = SPARSE if sparse_line else DENSE
            logger.debug(f"Line {line_number}: data section uses {self.row_format} rows")

        if self.row_format == SPARSE and not sparse_line:
            return RowResult.skip(line_number, "Dense row in a sparse data section; mixed row syntax is not supported")
        if self.row_format == DENSE and sparse_line:
            return RowResult.skip(line_number, "Sparse row in a dense data section; mixed row syntax is not supported")

        n_attributes = len(self.attributes)
        if self.row_format == SPARSE:
            tokens = expand_sparse_row(
                stripped, n_attributes, self.diagnostics, line_number, default=self.config.sparse_default
            )
        else:
            tokens = split_dense_row(stripped)

        if len(tokens) != n_attributes:
            return RowResult.skip(
                line_number, f"Expected {n_attributes} values but found {len(tokens)}; row skipped"
            )
        return RowResult.ok(line_number, self._decode_row(tokens, line_number))

    def _decode_row(self, tokens: List[str], line_number: int) -> tuple:
        values = []
        for attribute, token in zip(self.attributes, tokens):
            try:
                value = decode_value(attribute, token, self.diagnostics, line_number, self.config.missing_token)
            except ValueDecodeError as e:
                self.diagnostics.warning(f"{e.message}; value treated as missing", line_number)
                value = MISSING
            values.append(value)
        return tuple(values)

    def finish(self, class_index: Optional[int] = None) -> ArffDataset:
        """
        Validate the scan and build the dataset.

        Raises:
            NoAttributesError: If no attribute was declared
            NoDataRowsError: If no row was accepted
            ClassIndexError: If the explicit class index is out of range
            ArffStrictError: If strict mode is on and warnings were recorded
        """
        if not self.attributes:
            raise NoAttributesError("No valid attributes declared in header", source=self.source)
        if self.state == HEADER:
            raise NoDataRowsError("No @data section found", source=self.source)
        if not self.rows:
            raise NoDataRowsError(
                f"Data section contains no valid rows ({self.skipped_rows} skipped)", source=self.source
            )

        if class_index is None:
            class_index = self.config.class_index

        relation = Relation(self.relation_name, self.attributes, self.rows)
        position = resolve_class_index(
            relation.attributes, class_index, self.config.class_candidates, source=self.source
        )
        features, labels = split_features_labels(relation, position)

        warnings = self.diagnostics.warnings
        if self.config.strict and warnings:
            raise ArffStrictError(
                f"{len(warnings)} warning(s) recorded in strict mode; first: {warnings[0]}",
                source=self.source,
            )

        class_attribute = relation.attributes[position]
        metadata = RelationMetadata(
            name=relation.name,
            attributes=relation.attributes,
            class_index=position,
            feature_names=tuple(a.name for i, a in enumerate(relation.attributes) if i != position),
            class_labels=class_attribute.labels if isinstance(class_attribute, NominalAttribute) else None,
            n_rows=len(relation),
            sparse=self.row_format == SPARSE,
            source=self.source,
            diagnostics=self.diagnostics.records,
        )
        logger.info(
            f"Parsed relation '{relation.name}': {len(relation)} rows, "
            f"{len(self.attributes)} attributes, class '{class_attribute.name}', "
            f"{self.skipped_rows} rows skipped, {len(warnings)} warnings"
        )
        return ArffDataset(features, labels, metadata, relation)


def parse_lines(
    lines: Iterable[str],
    class_index: Optional[int] = None,
    config: Optional[ParserConfig] = None,
    source: Optional[str] = None,
) -> ArffDataset:
    """
    Parse ARFF text lines into a dataset.

    Args:
        lines: Any iterable of lines, e.g. an open file
        class_index: 1-based class column (-1 = last); overrides the config
        config: Parser settings
        source: Name used in error messages (typically the file path)

    Returns:
        ArffDataset, which unpacks as ``(features, labels, metadata)``

    Raises:
        ArffFatalError: If the parse cannot produce a dataset
    """
    assembler = RelationAssembler(config=config, source=source)
    assembler.scan(lines)
    return assembler.finish(class_index)


def parse_text(
    text: str,
    class_index: Optional[int] = None,
    config: Optional[ParserConfig] = None,
    source: Optional[str] = None,
) -> ArffDataset:
    """Parse a whole ARFF document held in a string."""
    return parse_lines(text.splitlines(), class_index=class_index, config=config, source=source)
