"""File validation utilities for deal document uploads

The client-declared content type is never trusted on its own: libmagic
inspects the payload and the detected type must equal the declared one. This
stops an executable relabeled as an image from being stored and later served
to other deal participants.
"""

from typing import Optional, Tuple

import magic


# Accepted document kinds
SUPPORTED_MIME_TYPES = {
    'application/pdf',
    'image/jpeg',
    'image/png',
}

# Bytes handed to libmagic; enough for every supported header
SNIFF_LENGTH = 2048

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """Strip parameters and case from a MIME type

    Example:
        >>> normalize_mime_type('Image/JPEG; charset=binary')
        'image/jpeg'
    """
    if not mime_type:
        return ''
    return mime_type.split(';', 1)[0].strip().lower()


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is accepted for upload

    Example:
        >>> is_supported_mime_type('application/pdf')
        True
        >>> is_supported_mime_type('application/x-msdownload')
        False
    """
    return normalize_mime_type(mime_type) in SUPPORTED_MIME_TYPES


def detect_mime_type(data: bytes) -> str:
    """MIME type libmagic reports for the payload's leading bytes

    Example:
        >>> detect_mime_type(b'%PDF-1.7 ...')
        'application/pdf'
    """
    return normalize_mime_type(magic.from_buffer(data[:SNIFF_LENGTH], mime=True))


def validate_file_content(data: bytes, declared_mime_type: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate that the payload's detected type matches the declared type

    Args:
        data: Full file payload (only the leading bytes are inspected)
        declared_mime_type: Content type supplied by the client

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_content(b'%PDF-1.7 ...', 'application/pdf')
        (True, None)
        >>> validate_file_content(b'MZ\\x90\\x00...', 'image/jpeg')
        (False, 'File content mismatch: declared image/jpeg but detected application/x-dosexec')
    """
    if not is_supported_mime_type(declared_mime_type):
        return False, (
            f"Invalid file type: {declared_mime_type or 'unknown'}. "
            f"Supported types: PDF, JPEG, PNG"
        )

    mime_type = normalize_mime_type(declared_mime_type)
    detected = detect_mime_type(data)
    if detected != mime_type:
        return False, (
            f"File content mismatch: declared {mime_type} but detected {detected}"
        )

    return True, None


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to DEFAULT_MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = DEFAULT_MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    The filename becomes part of the storage key and of the
    Content-Disposition header on download, so anything that could escape the
    deal's key prefix or break the header is rejected.

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal (../, ..\\) or directory separators
    - No null bytes or control characters

    Example:
        >>> validate_filename('contract.pdf')
        (True, None)
        >>> validate_filename('../../etc/passwd')
        (False, 'Filename contains path traversal or directory separators')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 or ord(c) == 127 for c in filename):
        return False, "Filename contains control characters"

    return True, None
