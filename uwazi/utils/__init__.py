"""
Utility functions for the Uwazi eligibility proof service
"""

from .validators import (
    format_file_size,
    guess_mime_type,
    sanitize_filename,
    validate_file_extension,
    validate_file_size,
    validate_upload
)

__all__ = [
    "format_file_size",
    "guess_mime_type",
    "sanitize_filename",
    "validate_file_extension",
    "validate_file_size",
    "validate_upload"
]
