"""Logging configuration helpers for the exam portal."""

import logging


def configure_logging(level='INFO'):
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("exam_portal")
