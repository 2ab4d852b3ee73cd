from .reader import (
    SUPPORTED_EXTENSIONS,
    EmptyFileError,
    FileLevelError,
    NoSheetsError,
    UnreadableFileError,
    UnsupportedFileError,
    normalize_record,
    read_upload,
)
from .template import write_template

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "FileLevelError",
    "UnsupportedFileError",
    "UnreadableFileError",
    "EmptyFileError",
    "NoSheetsError",
    "read_upload",
    "normalize_record",
    "write_template",
]
