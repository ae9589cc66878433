"""Logging configuration."""

import logging
import sys
from typing import Any


def configure_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    # Convert string log level to logging constant
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger = logging.getLogger("search_refinery")
    logger.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    # Avoid stacking handlers when configure_logging is called repeatedly
    logger.handlers = [
        h for h in logger.handlers if not isinstance(h, logging.StreamHandler)
    ]
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger in the search_refinery hierarchy."""
    return logging.getLogger(name)


def log_deduplication(
    logger: logging.Logger,
    input_count: int,
    output_count: int,
    groups: int,
):
    """
    Log the outcome of a deduplication run.

    Args:
        logger: Logger instance
        input_count: Number of records before deduplication
        output_count: Number of records kept
        groups: Number of duplicate groups found
    """
    logger.info(
        f"Deduplication kept {output_count}/{input_count} results "
        f"({input_count - output_count} removed, {groups} groups)"
    )


def log_pipeline_result(logger: logging.Logger, result: Any):
    """
    Log result pipeline statistics.

    Args:
        logger: Logger instance
        result: PipelineResult of a completed run
    """
    logger.info(
        f"Pipeline processed {result.original_count} results: "
        f"{result.filtered_count} after filtering, "
        f"{len(result.results)} returned in {result.processing_time_ms:.1f}ms"
    )
    if result.module_metrics:
        logger.debug(f"Module metrics: {result.module_metrics}")
