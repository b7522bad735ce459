#!/usr/bin/env python3
"""
ARFF Dataset Tool

Inspect an ARFF file or convert it to CSV.

Usage:
    - Summary: python -m arff_dataset.main summary <file.arff> [--class-index N]
    - Convert: python -m arff_dataset.main convert <file.arff> [--output out.csv]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config import ParserConfig
from .constants import LOGGER_NAME
from .convert_arff_to_csv import convert_arff_to_csv
from .data_io import load_arff
from .exceptions import ArffError
from .relation import ArffDataset
from .utils.logger import setup_logger


def load_run_config(config_path: Optional[str] = None) -> ParserConfig:
    """Load parser settings from a YAML/JSON file, else from the environment."""
    if not config_path:
        return ParserConfig.from_env()
    return ParserConfig.from_file(config_path)


def format_summary(dataset: ArffDataset) -> str:
    """Human-readable description of a parsed dataset."""
    metadata = dataset.metadata
    lines = [
        f"Relation: {metadata.name or '(unnamed)'}",
        f"Rows: {metadata.n_rows}",
        f"Row syntax: {'sparse' if metadata.sparse else 'dense'}",
        f"Attributes ({len(metadata.attributes)}):",
    ]
    for position, attribute in enumerate(metadata.attributes, start=1):
        marker = " (class)" if position - 1 == metadata.class_index else ""
        lines.append(f"  {position:>3}. {attribute.name}: {attribute.type_label()}{marker}")
    lines.append(f"Features: {dataset.features.shape[1]} columns, dtype {dataset.features.dtype}")
    lines.append(f"Labels: dtype {dataset.labels.dtype}")
    if metadata.warnings:
        lines.append(f"Warnings ({len(metadata.warnings)}):")
        lines.extend(f"  {d}" for d in metadata.warnings)
    return "\n".join(lines)


def summary_dict(dataset: ArffDataset) -> dict:
    metadata = dataset.metadata
    return {
        "relation": metadata.name,
        "rows": metadata.n_rows,
        "sparse": metadata.sparse,
        "class_index": metadata.class_index + 1,
        "class_name": metadata.class_name,
        "class_labels": list(metadata.class_labels) if metadata.class_labels else None,
        "attributes": [a.model_dump() for a in metadata.attributes],
        "warnings": [d._asdict() for d in metadata.warnings],
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the requested action; returns the exit code."""
    parser = argparse.ArgumentParser(description="ARFF Dataset Tool")
    parser.add_argument("action", choices=["summary", "convert"], help="Action to perform")
    parser.add_argument("input", help="Path to the ARFF file")
    parser.add_argument("--output", help="CSV path for convert (default: input with .csv suffix)")
    parser.add_argument("--class-index", type=int, help="1-based class column (-1 for the last attribute)")
    parser.add_argument("--config", help="Path to YAML/JSON parser config")
    parser.add_argument("--strict", action="store_true", help="Fail when any warning is recorded")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from config)",
    )
    parser.add_argument("--log-file", help="Optional rotating log file")
    args = parser.parse_args(argv)

    try:
        config = load_run_config(args.config)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    updates = {}
    if args.strict:
        updates["strict"] = True
    if args.class_index is not None:
        updates["class_index"] = args.class_index
    if args.log_level:
        updates["log_level"] = args.log_level
    if updates:
        try:
            config = ParserConfig(**{**config.model_dump(), **updates})
        except ValidationError as e:
            print(f"Invalid option: {e}", file=sys.stderr)
            return 1

    setup_logger(
        LOGGER_NAME,
        level=config.log_level,
        log_file=Path(args.log_file) if args.log_file else None,
        # stdout carries the JSON document
        stream=sys.stderr if args.json else None,
    )
    logger = logging.getLogger("arff_dataset.main")

    if args.action == "convert":
        ok = convert_arff_to_csv(args.input, args.output, config=config)
        return 0 if ok else 1

    try:
        dataset = load_arff(args.input, config=config)
    except ArffError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summary_dict(dataset), indent=2, default=str))
    else:
        print(format_summary(dataset))
    return 0


if __name__ == "__main__":
    sys.exit(main())
