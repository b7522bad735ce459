import os

# ARFF header keywords, compared case-insensitively
RELATION_TAG = "@relation"
ATTRIBUTE_TAG = "@attribute"
DATA_TAG = "@data"
END_TAG = "@end"
COMMENT_PREFIX = "%"

MISSING_TOKEN = "?"
SPARSE_DEFAULT_TOKEN = "0"
QUOTE_CHARS = ("'", '"')

# Date pattern for DATE attributes declared without one; empty means ISO_DATE_FORMATS
DEFAULT_DATE_FORMAT = ""
# Patterns tried in order for that empty default
ISO_DATE_FORMATS = ("yyyy-MM-dd'T'HH:mm:ss", "yyyy-MM-dd")

# Searched in order, case-insensitively, when no explicit class index is given
CLASS_CANDIDATES = ["class", "target", "label", "outcome"]

DEFAULT_ENCODING = os.getenv("ARFF_ENCODING", "utf-8")
# Inserted by errors="replace" in place of undecodable bytes
REPLACEMENT_CHAR = "\ufffd"
LOGGER_NAME = "arff_dataset"
