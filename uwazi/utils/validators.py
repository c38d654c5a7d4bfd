"""
Utility functions for validation and file handling
"""
import re
from typing import List, Optional
from pathlib import Path
from ..config import settings

# Content types the classifier can read, keyed by file extension
MIME_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def validate_file_extension(filename: str, allowed_extensions: List[str] = None) -> bool:
    """
    Validate file extension

    Args:
        filename: Name of the file to validate
        allowed_extensions: List of allowed extensions (defaults to settings)

    Returns:
        True if extension is allowed, False otherwise
    """
    if allowed_extensions is None:
        allowed_extensions = settings.get_allowed_extensions_list()

    file_ext = Path(filename).suffix.lower()
    return file_ext in allowed_extensions


def validate_file_size(file_size: int, max_size: int = None) -> bool:
    """
    Validate file size

    Args:
        file_size: Size of the file in bytes
        max_size: Maximum allowed size in bytes (defaults to settings)

    Returns:
        True if file size is within limit, False otherwise
    """
    if max_size is None:
        max_size = settings.max_file_size

    return 0 < file_size <= max_size


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    """Prefer a declared supported content type, else infer from the extension"""
    if declared and declared in MIME_TYPES.values():
        return declared
    return MIME_TYPES.get(Path(filename).suffix.lower(), declared or "application/octet-stream")


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename for safe storage

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Remove or replace unsafe characters
    unsafe_chars = r'[<>:"/\\|?*]'
    sanitized = re.sub(unsafe_chars, '_', filename or "")

    # Remove leading/trailing dots and spaces
    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed_file"

    # Limit length
    if len(sanitized) > 255:
        name, ext = Path(sanitized).stem, Path(sanitized).suffix
        max_name_length = 255 - len(ext)
        sanitized = name[:max_name_length] + ext

    return sanitized


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while size_bytes >= 1024 and i < len(size_names) - 1:
        size_bytes /= 1024.0
        i += 1

    return f"{size_bytes:.1f} {size_names[i]}"


def validate_upload(file) -> Optional[str]:
    """
    Check an uploaded file before it is sent for classification

    Returns:
        A user-facing reason if the file is unusable, None otherwise
    """
    if not validate_file_extension(file.filename):
        allowed = ", ".join(settings.get_allowed_extensions_list())
        return f"Unsupported file type. Allowed types: {allowed}"
    if file.mime_type not in MIME_TYPES.values():
        return f"Unsupported content type: {file.mime_type}"
    if not validate_file_size(file.size):
        if file.size == 0:
            return "The file is empty."
        return f"File too large. Maximum size is {format_file_size(settings.max_file_size)}"
    return None
