"""
Logging configuration and error handling framework for the document structure engine.
"""

import logging
import sys
from typing import Optional


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). When omitted
            the logger keeps its current level (INFO on first use).

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("docstruct")

    if level is not None:
        logger.setLevel(getattr(logging, level.upper()))
        for handler in logger.handlers:
            handler.setLevel(getattr(logging, level.upper()))
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    return logger


class DocumentProcessingError(Exception):
    """Base exception for document processing errors."""
    pass


class DocumentDecodeError(DocumentProcessingError):
    """Exception raised when the document container cannot be decoded."""
    pass


class SummarizerError(DocumentProcessingError):
    """Exception raised when the remote summarizer fails or replies in an unexpected shape."""
    pass


class JSONOutputError(DocumentProcessingError):
    """Exception raised when JSON output generation fails."""
    pass


def handle_document_error(source: str, error: Exception, logger: logging.Logger) -> None:
    """
    Handle document processing errors with appropriate logging.

    Args:
        source: Path or name of the document that caused the error
        error: The exception that occurred
        logger: Logger instance for error reporting
    """
    error_msg = f"Error processing document '{source}': {str(error)}"

    if isinstance(error, DocumentProcessingError):
        logger.error(error_msg)
    else:
        logger.exception(error_msg)
