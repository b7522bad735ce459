"""Read ARFF files into feature matrices, label vectors and relation metadata."""

import logging

from .attributes import (
    ATTRIBUTE_TYPES,
    Attribute,
    DateAttribute,
    IntegerAttribute,
    NominalAttribute,
    NumericAttribute,
    RealAttribute,
    StringAttribute,
    attribute_kinds,
    create_attribute,
)
from .config import ParserConfig
from .constants import LOGGER_NAME
from .data_io import load_arff, load_arff_dataframe
from .decoder import MISSING, decode_value, is_missing
from .diagnostics import Diagnostic, Diagnostics
from .exceptions import (
    ArffError,
    ArffFatalError,
    ArffFileError,
    ArffStrictError,
    ClassIndexError,
    NoAttributesError,
    NoDataRowsError,
    ValueDecodeError,
)
from .relation import (
    ArffDataset,
    Relation,
    RelationAssembler,
    RelationMetadata,
    parse_lines,
    parse_text,
    resolve_class_index,
)
from .rows import expand_sparse_row, split_dense_row
from .tokenizer import split_header_line

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ATTRIBUTE_TYPES",
    "ArffDataset",
    "ArffError",
    "ArffFatalError",
    "ArffFileError",
    "ArffStrictError",
    "Attribute",
    "ClassIndexError",
    "DateAttribute",
    "Diagnostic",
    "Diagnostics",
    "IntegerAttribute",
    "MISSING",
    "NoAttributesError",
    "NoDataRowsError",
    "NominalAttribute",
    "NumericAttribute",
    "ParserConfig",
    "RealAttribute",
    "Relation",
    "RelationAssembler",
    "RelationMetadata",
    "StringAttribute",
    "ValueDecodeError",
    "attribute_kinds",
    "create_attribute",
    "decode_value",
    "expand_sparse_row",
    "is_missing",
    "load_arff",
    "load_arff_dataframe",
    "parse_lines",
    "parse_text",
    "resolve_class_index",
    "split_dense_row",
    "split_header_line",
]
