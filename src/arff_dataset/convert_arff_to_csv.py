#!/usr/bin/env python3
"""
ARFF to CSV Converter

Reads an ARFF file with the package parser and writes one CSV column per
attribute. Nominal values are written as their labels, missing values as
empty cells.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ParserConfig
from .data_io import load_arff
from .exceptions import ArffError


def convert_arff_to_csv(arff_path: str, csv_path: Optional[str] = None, config: Optional[ParserConfig] = None) -> bool:
    """Convert ARFF file to CSV format. Returns True on success."""

    arff_file = Path(arff_path)
    if csv_path is None:
        csv_path = arff_file.with_suffix(".csv")

    logging.getLogger(__name__).info(f"Converting {arff_path} to {csv_path}")

    try:
        dataset = load_arff(arff_file, config=config)
    except ArffError as e:
        logging.getLogger(__name__).error(f"Error converting file: {e}")
        return False

    df = dataset.to_dataframe(decode_nominals=True)
    logging.getLogger(__name__).info(f"Found {df.shape[1]} attributes")
    logging.getLogger(__name__).debug(f"Attributes: {list(df.columns)}")

    Path(csv_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(csv_path, index=False, encoding="utf-8")

    logging.getLogger(__name__).info(f"Converted {len(df)} data rows")
    if dataset.metadata.warnings:
        logging.getLogger(__name__).warning(
            f"{len(dataset.metadata.warnings)} warning(s) while reading {arff_path}"
        )
    logging.getLogger(__name__).info(f"Successfully converted to {csv_path}")
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        logging.getLogger(__name__).error("Usage: python -m arff_dataset.convert_arff_to_csv <arff_file> [output_csv]")
        logging.getLogger(__name__).error(
            "Example: python -m arff_dataset.convert_arff_to_csv data/dataset.arff data/dataset.csv"
        )
        sys.exit(1)

    arff_path = sys.argv[1]
    csv_path = sys.argv[2] if len(sys.argv) > 2 else None

    success = convert_arff_to_csv(arff_path, csv_path)
    sys.exit(0 if success else 1)
