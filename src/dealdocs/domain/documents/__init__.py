"""Documents domain module - upload validation, download lifecycle, storage ports"""

from .download_state import (
    ALLOWED_TRANSITIONS,
    DownloadState,
    InvalidDownloadTransition,
    can_transition,
    headers_committed,
    is_terminal,
)
from .validation import (
    DEFAULT_MAX_FILE_SIZE,
    SUPPORTED_MIME_TYPES,
    detect_mime_type,
    is_supported_mime_type,
    normalize_mime_type,
    validate_file_content,
    validate_file_size,
    validate_filename,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "DownloadState",
    "InvalidDownloadTransition",
    "can_transition",
    "headers_committed",
    "is_terminal",
    "DEFAULT_MAX_FILE_SIZE",
    "SUPPORTED_MIME_TYPES",
    "detect_mime_type",
    "is_supported_mime_type",
    "normalize_mime_type",
    "validate_file_content",
    "validate_file_size",
    "validate_filename",
]
