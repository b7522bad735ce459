import pandas as pd

from arff_dataset.convert_arff_to_csv import convert_arff_to_csv


def test_convert_writes_csv_next_to_input(weather_file):
    assert convert_arff_to_csv(str(weather_file)) is True

    csv_path = weather_file.with_suffix(".csv")
    df = pd.read_csv(csv_path)
    assert list(df.columns) == ["outlook", "temperature", "humidity", "windy", "play"]
    assert df["play"].tolist() == ["no", "no", "yes", "yes", "yes"]
    assert len(df) == 5


def test_convert_missing_values_are_empty_cells(temp_dir, events_arff):
    arff_path = temp_dir / "events.arff"
    arff_path.write_text(events_arff, encoding="utf-8")
    csv_path = temp_dir / "out" / "events.csv"

    assert convert_arff_to_csv(str(arff_path), str(csv_path)) is True

    lines = csv_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "when,note,target"
    assert lines[2] == ",plain,"


def test_convert_reports_failure(temp_dir):
    assert convert_arff_to_csv(str(temp_dir / "missing.arff")) is False
