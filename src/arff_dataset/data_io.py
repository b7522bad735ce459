import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import ParserConfig
from .exceptions import ArffFileError
from .relation import ArffDataset, parse_lines


def load_arff(
    path: Union[str, Path],
    class_index: Optional[int] = None,
    config: Optional[ParserConfig] = None,
) -> ArffDataset:
    """Open an ARFF file and parse it line by line."""
    config = config or ParserConfig()
    arff_path = Path(path)
    if not arff_path.is_file():
        logging.getLogger(__name__).error(f"ARFF file not found: {arff_path}")
        raise ArffFileError("File not found", source=str(arff_path))

    logging.getLogger(__name__).info(f"Loading ARFF data from {arff_path}")
    try:
        with open(arff_path, "r", encoding=config.encoding, errors="replace") as f:
            return parse_lines(f, class_index=class_index, config=config, source=str(arff_path))
    except OSError as e:
        raise ArffFileError(f"Cannot read file: {e}", source=str(arff_path)) from e


def load_arff_dataframe(
    path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    decode_nominals: bool = True,
) -> pd.DataFrame:
    """Load an ARFF file as a DataFrame with one column per attribute."""
    dataset = load_arff(path, config=config)
    df = dataset.to_dataframe(decode_nominals=decode_nominals)
    logging.getLogger(__name__).info(f"Data loaded: {df.shape[0]} rows, {df.shape[1]} columns")
    return df
