"""
Utility functions for the PDF Chat Backend.
"""

import inspect
import functools
import re
import time
import uuid
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging

from .config import settings

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def validate_file_type(filename: str, content_type: Optional[str] = None) -> bool:
    """Validate if the file type is allowed."""
    if content_type == "application/pdf":
        return True
    if not filename or '.' not in filename:
        return False

    file_extension = filename.lower().rsplit('.', 1)[-1]
    return file_extension in settings.allowed_file_types


def validate_file_size(file_size: int) -> bool:
    """Validate if the file size is within limits."""
    max_size_bytes = settings.max_file_size_mb * 1024 * 1024
    return file_size <= max_size_bytes


def measure_time(func):
    """Decorator to measure function execution time."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                execution_time = time.perf_counter() - start_time
                logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
    return wrapper


def create_document_metadata(filename: str, page_num: int, total_pages: int,
                             additional_metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Create metadata for an extracted page."""
    base_metadata = {
        'source': filename,
        'filename': filename,
        'page': page_num,
        'total_pages': total_pages,
    }

    if additional_metadata:
        base_metadata.update(additional_metadata)

    return base_metadata


def generate_point_id(source: str, chunk_index: int) -> str:
    """Derive the vector index id for a chunk from its source and position."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{source}-{chunk_index}"))


def clean_text(text: str) -> str:
    """
    Clean and normalize extracted text.

    Runs of spaces and tabs collapse to one space, trailing whitespace is
    dropped from each line and blank-line runs collapse to a single
    paragraph break.
    """
    if not text:
        return ""

    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = re.sub(r'[ \t\f\v]+', ' ', text)
    text = re.sub(r' *\n *', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()


def make_preview(text: str, length: Optional[int] = None) -> str:
    """Truncate text to a preview, marking the cut with an ellipsis."""
    if length is None:
        length = settings.preview_length

    if len(text) <= length:
        return text
    return text[:length] + ELLIPSIS


def log_processing_info(operation: str, details: Dict[str, Any]) -> None:
    """Log processing information."""
    logger.info(f"{operation}: {details}")


def handle_processing_error(operation: str, error: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
    """Handle and log processing errors."""
    error_info = {
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': format_timestamp()
    }

    if context:
        error_info.update(context)

    logger.error(f"Processing error: {error_info}")
    return error_info
