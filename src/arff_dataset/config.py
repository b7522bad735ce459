"""
Configuration management using Pydantic for type-safe, validated parser settings.

Settings can be loaded from YAML or JSON files, from environment variables, or
left at their defaults.
"""

import json
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import (
    CLASS_CANDIDATES,
    DEFAULT_DATE_FORMAT,
    DEFAULT_ENCODING,
    MISSING_TOKEN,
    SPARSE_DEFAULT_TOKEN,
)


class ParserConfig(BaseModel):
    """Settings for reading an ARFF file into a dataset."""

    class_index: Optional[int] = Field(
        None, description="1-based class column, -1 for the last one, None for name lookup"
    )
    class_candidates: List[str] = Field(
        default_factory=lambda: list(CLASS_CANDIDATES),
        description="Attribute names searched (case-insensitively, in order) for the class column",
    )
    default_date_format: str = Field(
        DEFAULT_DATE_FORMAT,
        description="Pattern for DATE attributes declared without one (empty = yyyy-MM-dd'T'HH:mm:ss or yyyy-MM-dd)",
    )
    encoding: str = Field(DEFAULT_ENCODING, description="Text encoding of ARFF files")
    missing_token: str = Field(MISSING_TOKEN, min_length=1, description="Token marking a missing value")
    sparse_default: str = Field(SPARSE_DEFAULT_TOKEN, description="Token for columns absent from a sparse row")
    strict: bool = Field(False, description="Fail the parse when any warning was recorded")
    log_level: str = Field("WARNING", description="Logging level")

    @field_validator("class_index")
    @classmethod
    def check_class_index(cls, v):
        """Class index is 1-based; 0 and values below -1 are never valid."""
        if v is not None and (v == 0 or v < -1):
            raise ValueError("class_index must be a 1-based position or -1 for the last attribute")
        return v

    @field_validator("class_candidates")
    @classmethod
    def check_class_candidates(cls, v):
        """Candidates are compared case-insensitively, so store them lower-cased."""
        cleaned = [name.strip().lower() for name in v if name.strip()]
        if not cleaned:
            raise ValueError("class_candidates must contain at least one name")
        return cleaned

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v):
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @classmethod
    def from_yaml(cls, path: str) -> "ParserConfig":
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If YAML is invalid
            pydantic.ValidationError: If config values are invalid
        """
        with open(path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

    @classmethod
    def from_json(cls, path: str) -> "ParserConfig":
        """
        Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If JSON is invalid
            pydantic.ValidationError: If config values are invalid
        """
        with open(path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        return cls(**config_dict)

    @classmethod
    def from_file(cls, path: str) -> "ParserConfig":
        """Load from ``.yaml``/``.yml`` or ``.json`` based on the extension."""
        suffix = Path(path).suffix.lower()
        if suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if suffix == ".json":
            return cls.from_json(path)
        raise ValueError("Config file must have extension .yaml, .yml, or .json")

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """
        Load configuration from environment variables.

        Environment variable names:
        - ARFF_CLASS_INDEX, ARFF_CLASS_CANDIDATES (comma-separated)
        - ARFF_DATE_FORMAT, ARFF_ENCODING, ARFF_MISSING_TOKEN
        - ARFF_SPARSE_DEFAULT, ARFF_STRICT, ARFF_LOG_LEVEL

        Returns:
            ParserConfig instance with values from environment
        """
        class_index = os.getenv("ARFF_CLASS_INDEX")
        candidates = os.getenv("ARFF_CLASS_CANDIDATES")
        return cls(
            class_index=int(class_index) if class_index else None,
            class_candidates=candidates.split(",") if candidates else list(CLASS_CANDIDATES),
            default_date_format=os.getenv("ARFF_DATE_FORMAT", DEFAULT_DATE_FORMAT),
            encoding=os.getenv("ARFF_ENCODING", DEFAULT_ENCODING),
            missing_token=os.getenv("ARFF_MISSING_TOKEN", MISSING_TOKEN),
            sparse_default=os.getenv("ARFF_SPARSE_DEFAULT", SPARSE_DEFAULT_TOKEN),
            strict=os.getenv("ARFF_STRICT", "false").lower() == "true",
            log_level=os.getenv("ARFF_LOG_LEVEL", "WARNING"),
        )

    def save(self, path: str):
        """
        Save configuration to file.

        File format is determined by extension (.yaml, .yml, or .json).

        Raises:
            ValueError: If extension is not .yaml, .yml, or .json
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        if path.endswith(".yaml") or path.endswith(".yml"):
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
        elif path.endswith(".json"):
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.model_dump(), f, indent=2)
        else:
            raise ValueError("Config file must have extension .yaml, .yml, or .json")
