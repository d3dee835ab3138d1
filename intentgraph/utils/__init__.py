"""Utility functions for intentgraph."""

from intentgraph.utils.identifiers import (
    IdentifierGenerator,
    sanitize_name,
    to_base36,
    utc_timestamp,
)
from intentgraph.utils.logging import configure_default_logging, get_logger, setup_logging

__all__ = [
    "IdentifierGenerator",
    "sanitize_name",
    "to_base36",
    "utc_timestamp",
    "configure_default_logging",
    "get_logger",
    "setup_logging",
]
