import math
import pickle

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from arff_dataset.attributes import NominalAttribute, NumericAttribute, StringAttribute
from arff_dataset.config import ParserConfig
from arff_dataset.decoder import MISSING
from arff_dataset.exceptions import (
    ArffFatalError,
    ArffStrictError,
    ClassIndexError,
    NoAttributesError,
    NoDataRowsError,
)
from arff_dataset.relation import (
    RelationAssembler,
    parse_lines,
    parse_text,
    resolve_class_index,
)


# =============================================================================
# End to end
# =============================================================================

@pytest.mark.unit
def test_minimal_document():
    text = "@relation t\n@attribute x numeric\n@attribute class {0,1}\n@data\n1.5,0\n2.5,1\n"

    features, labels, metadata = parse_text(text)

    np.testing.assert_array_equal(features, np.array([[1.5], [2.5]]))
    assert features.dtype == np.float64
    assert labels.tolist() == [0, 1]
    assert metadata.name == "t"
    assert metadata.class_index == 1
    assert metadata.class_labels == ("0", "1")
    assert metadata.feature_names == ("x",)


def test_weather(weather_arff):
    dataset = parse_text(weather_arff)
    features, labels, metadata = dataset

    assert len(dataset) == 5
    assert features.shape == (5, 4)
    assert features.dtype == np.float64
    # Nominal features keep their 1-based ordinals
    assert features[0].tolist() == [1.0, 85.0, 85.0, 2.0]
    assert labels.tolist() == [1, 1, 0, 0, 0]
    assert metadata.class_name == "play"
    assert metadata.feature_names == ("outlook", "temperature", "humidity", "windy")
    assert not metadata.sparse
    assert metadata.warnings == ()


def test_parse_lines_accepts_any_iterable(weather_arff):
    lines = (line + "\n" for line in weather_arff.splitlines())
    assert parse_lines(lines).metadata.n_rows == 5


def test_parse_is_deterministic(weather_arff):
    first = parse_text(weather_arff)
    second = parse_text(weather_arff)

    np.testing.assert_array_equal(first.features, second.features)
    np.testing.assert_array_equal(first.labels, second.labels)
    assert first.metadata == second.metadata
    assert first.relation == second.relation


def test_directives_are_case_insensitive():
    text = "@RELATION t\n@ATTRIBUTE x NUMERIC\n@Attribute y REAL\n@DATA\n1,2\n"
    _, labels, metadata = parse_text(text)
    assert labels.tolist() == [2.0]
    assert metadata.name == "t"


def test_comments_and_blank_lines_are_ignored():
    text = "% header\n\n@relation t\n% between\n@attribute x numeric\n@attribute y numeric\n@data\n% row comment\n\n1,2\n"
    assert parse_text(text).metadata.n_rows == 1


# =============================================================================
# Missing values and row recovery
# =============================================================================

def test_missing_values_give_nan_features():
    text = "@relation t\n@attribute a numeric\n@attribute b numeric\n@attribute class {x,y}\n@data\n?,1,x\n2,?,y\n"

    features, labels, _ = parse_text(text)

    assert math.isnan(features[0, 0])
    assert math.isnan(features[1, 1])
    assert labels.tolist() == [0, 1]


def test_missing_nominal_label_gives_float_labels():
    text = "@relation t\n@attribute a numeric\n@attribute class {x,y}\n@data\n1,x\n2,?\n"

    _, labels, _ = parse_text(text)

    assert labels.dtype == np.float64
    assert labels[0] == 0.0
    assert math.isnan(labels[1])


def test_wrong_value_count_skips_row_with_warning():
    text = "@relation t\n@attribute a numeric\n@attribute b numeric\n@data\n1,2\n1,2,3\n3,4\n"

    dataset = parse_text(text)

    assert dataset.metadata.n_rows == 2
    warnings = dataset.metadata.warnings
    assert len(warnings) == 1
    assert warnings[0].line_number == 6
    assert "Expected 2 values but found 3" in warnings[0].message


def test_bad_number_is_missing_and_row_kept():
    text = "@relation t\n@attribute a numeric\n@attribute b numeric\n@data\nabc,1\n"

    dataset = parse_text(text)

    assert math.isnan(dataset.features[0, 0])
    assert len(dataset.metadata.warnings) == 1


def test_unknown_nominal_label_warns():
    text = "@relation t\n@attribute a numeric\n@attribute class {x,y}\n@data\n1,z\n2,x\n"

    dataset = parse_text(text)

    assert dataset.relation.rows[0][1] is MISSING
    assert "Unknown label 'z'" in dataset.metadata.warnings[0].message


def test_invalid_attribute_is_dropped_and_columns_realign():
    text = "@relation t\n@attribute a numeric\n@attribute b money\n@attribute c numeric\n@data\n1,2\n"

    dataset = parse_text(text)

    assert dataset.relation.attribute_names == ["a", "c"]
    assert dataset.labels.tolist() == [2.0]


def test_duplicate_attribute_names_warn():
    text = "@relation t\n@attribute a numeric\n@attribute A numeric\n@data\n1,2\n"

    dataset = parse_text(text)

    assert dataset.relation.attribute_names == ["a", "A"]
    assert "Duplicate attribute name" in dataset.metadata.warnings[0].message


def test_unknown_directive_and_redeclared_relation_warn():
    text = "@relation t\n@relation u\n@foo bar\n@attribute a numeric\n@data\n1\n"

    dataset = parse_text(text)

    assert dataset.metadata.name == "t"
    assert len(dataset.metadata.warnings) == 2


def test_row_on_data_line():
    text = "@relation t\n@attribute a numeric\n@attribute b numeric\n@data 1,2\n3,4\n"
    assert parse_text(text).metadata.n_rows == 2


# =============================================================================
# Sparse data
# =============================================================================

def test_sparse_document(sparse_arff):
    features, labels, metadata = parse_text(sparse_arff)

    assert metadata.sparse
    assert features.dtype == object
    assert features[0].tolist() == [1.5, 0.0, "0"]
    assert features[1].tolist() == [0.0, 2.0, "hello"]
    assert labels.tolist() == [0, 1]


def test_sparse_and_dense_rows_are_not_mixed(sparse_arff):
    text = sparse_arff + "1,2,x,pos\n"

    dataset = parse_text(text)

    assert dataset.metadata.n_rows == 2
    assert "mixed row syntax" in dataset.metadata.warnings[-1].message


def test_dense_section_rejects_sparse_row(weather_arff):
    dataset = parse_text(weather_arff + "{0 sunny}\n")
    assert dataset.metadata.n_rows == 5
    assert len(dataset.metadata.warnings) == 1


def test_sparse_default_from_config(sparse_arff):
    config = ParserConfig(sparse_default="?")
    features, _, _ = parse_text(sparse_arff, config=config)
    assert features[0, 1] is None


# =============================================================================
# Dates, strings and relational blocks
# =============================================================================

def test_dates_and_strings(events_arff):
    features, labels, metadata = parse_text(events_arff)

    assert features.dtype == object
    assert features[0, 0] == pd.Timestamp("2024-01-05 10:30:00").to_pydatetime()
    assert features[0, 1] == "hello, world"
    assert features[1, 0] is None
    assert labels[0] == 1.5
    assert math.isnan(labels[1])
    # Only the unparsable date is reported; the missing target is not a problem
    assert len(metadata.warnings) == 1


def test_default_date_format_applies_to_bare_dates():
    text = "@relation t\n@attribute d date\n@attribute y numeric\n@data\n05/01/2024,1\n"

    dataset = parse_text(text, config=ParserConfig(default_date_format="dd/MM/yyyy"))

    assert dataset.metadata.attributes[0].format == "dd/MM/yyyy"
    assert dataset.features[0, 0].year == 2024


def test_relational_block_is_skipped(relational_arff):
    dataset = parse_text(relational_arff)

    assert dataset.relation.attribute_names == ["id", "class"]
    assert dataset.labels.tolist() == [0, 1]
    assert any("not supported" in d.message for d in dataset.metadata.warnings)


def test_unclosed_relational_block_does_not_hide_data():
    text = "@relation t\n@attribute id numeric\n@attribute bag relational\n@attribute x numeric\n@data\n1\n"

    dataset = parse_text(text)

    assert dataset.metadata.n_rows == 1
    assert any("not closed" in d.message for d in dataset.metadata.warnings)


# =============================================================================
# Class column
# =============================================================================

def _attrs(*names):
    return [NumericAttribute(name=n) for n in names]


@pytest.mark.parametrize(
    "names, class_index, expected",
    [
        (["a", "b", "c"], None, 2),
        (["Class", "b", "c"], None, 0),
        (["a", "TARGET", "c"], None, 1),
        (["label", "outcome", "c"], None, 0),
        (["a", "b", "c"], 1, 0),
        (["a", "b", "c"], -1, 2),
        (["class", "b", "c"], 3, 2),
    ],
)
def test_resolve_class_index(names, class_index, expected):
    assert resolve_class_index(_attrs(*names), class_index) == expected


@pytest.mark.parametrize("class_index", [0, 4, -2])
def test_resolve_class_index_out_of_range(class_index):
    with pytest.raises(ClassIndexError):
        resolve_class_index(_attrs("a", "b", "c"), class_index)


def test_explicit_class_index(weather_arff):
    features, labels, metadata = parse_text(weather_arff, class_index=1)

    assert metadata.class_name == "outlook"
    assert labels.tolist() == [0, 0, 1, 2, 2]
    assert features.shape == (5, 4)


def test_class_index_from_config(weather_arff):
    metadata = parse_text(weather_arff, config=ParserConfig(class_index=2)).metadata
    assert metadata.class_name == "temperature"


def test_argument_overrides_config(weather_arff):
    metadata = parse_text(weather_arff, class_index=-1, config=ParserConfig(class_index=2)).metadata
    assert metadata.class_name == "play"


def test_string_class_gives_object_labels():
    text = "@relation t\n@attribute x numeric\n@attribute class string\n@data\n1,spam\n2,?\n"

    _, labels, _ = parse_text(text)

    assert labels.dtype == object
    assert labels.tolist() == ["spam", None]


def test_integer_class_gives_int_labels():
    text = "@relation t\n@attribute x numeric\n@attribute y integer\n@data\n1,3\n2,4\n"
    _, labels, _ = parse_text(text)
    assert labels.dtype == np.int64


def test_single_attribute_gives_empty_feature_matrix():
    text = "@relation t\n@attribute class {a,b}\n@data\na\nb\n"

    features, labels, _ = parse_text(text)

    assert features.shape == (2, 0)
    assert labels.tolist() == [0, 1]


# =============================================================================
# Fatal errors
# =============================================================================

@pytest.mark.parametrize(
    "text, error",
    [
        ("@relation t\n@data\n1,2\n", NoAttributesError),
        ("@relation t\n@attribute x money\n@data\n1\n", NoAttributesError),
        ("@relation t\n@attribute x numeric\n", NoDataRowsError),
        ("@relation t\n@attribute x numeric\n@data\n% nothing\n", NoDataRowsError),
        ("@relation t\n@attribute x numeric\n@attribute y numeric\n@data\n1,2,3\n", NoDataRowsError),
        ("", NoAttributesError),
    ],
)
def test_fatal_errors(text, error):
    with pytest.raises(error):
        parse_text(text, source="mem.arff")


def test_fatal_errors_carry_source():
    with pytest.raises(ArffFatalError) as exc_info:
        parse_text("@relation t\n", source="mem.arff")
    assert exc_info.value.source == "mem.arff"
    assert "mem.arff" in str(exc_info.value)


def test_out_of_range_class_index_is_fatal(weather_arff):
    with pytest.raises(ClassIndexError):
        parse_text(weather_arff, class_index=9)


def test_strict_mode_turns_warnings_into_errors(weather_arff):
    with pytest.raises(ArffStrictError):
        parse_text(weather_arff + "sunny,1\n", config=ParserConfig(strict=True))


def test_strict_mode_accepts_clean_file(weather_arff):
    assert parse_text(weather_arff, config=ParserConfig(strict=True)).metadata.n_rows == 5


# =============================================================================
# Assembler and DataFrame view
# =============================================================================

def test_assembler_row_results():
    assembler = RelationAssembler()
    assembler.scan(["@relation t", "@attribute a numeric", "@attribute b numeric", "@data"])

    accepted = assembler.process_data_line("1,2", 5)
    skipped = assembler.process_data_line("1", 6)

    assert accepted.accepted and accepted.row == (1.0, 2.0)
    assert not skipped.accepted and "Expected 2 values" in skipped.reason
    assert assembler.process_data_line("% comment", 7) is None


def test_metadata_is_frozen(weather_arff):
    metadata = parse_text(weather_arff).metadata
    with pytest.raises(ValidationError):
        metadata.name = "other"


def test_to_dataframe(weather_arff):
    df = parse_text(weather_arff).to_dataframe()

    assert list(df.columns) == ["outlook", "temperature", "humidity", "windy", "play"]
    assert isinstance(df["outlook"].dtype, pd.CategoricalDtype)
    assert list(df["outlook"].cat.categories) == ["sunny", "overcast", "rainy"]
    assert df["play"].tolist() == ["no", "no", "yes", "yes", "yes"]
    assert df["temperature"].dtype == np.float64


def test_to_dataframe_with_ordinals_and_missing(events_arff):
    df = parse_text(events_arff).to_dataframe(decode_nominals=False)

    assert pd.isna(df["when"][1])
    assert df["note"].tolist() == ["hello, world", "plain"]
    assert pd.isna(df["target"][1])


def test_relation_view():
    text = "@relation t\n@attribute a numeric\n@attribute s string\n@data\n1,x\n"
    relation = parse_text(text).relation

    assert len(relation) == 1
    assert relation.attributes == (NumericAttribute(name="a"), StringAttribute(name="s"))
    assert isinstance(parse_text("@relation t\n@attribute c {a}\n@data\na\n").relation.attributes[0], NominalAttribute)


def test_quoted_nominal_label_with_comma_end_to_end():
    text = "@relation t\n@attribute x numeric\n@attribute class {a, 'b,c'}\n@data\n1,'b,c'\n2,a\n"

    dataset = parse_text(text)

    assert dataset.metadata.class_labels == ("a", "b,c")
    assert dataset.labels.tolist() == [1, 0]
    assert dataset.metadata.warnings == ()


def test_parsed_dataset_pickles(weather_arff):
    dataset = parse_text(weather_arff)

    restored = pickle.loads(pickle.dumps(dataset))

    assert restored.metadata == dataset.metadata
    assert restored.relation == dataset.relation
    np.testing.assert_array_equal(restored.labels, dataset.labels)
