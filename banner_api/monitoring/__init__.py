"""
Logging setup and filters
"""

from .logger import ErrorDeduplicationFilter, SensitiveDataFilter, setup_logging

__all__ = [
    "ErrorDeduplicationFilter",
    "SensitiveDataFilter",
    "setup_logging",
]
