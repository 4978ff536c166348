"""
Desired-state loading and validation.

Usage:
    from duckkit.loader import load_directory, validate

    state = load_directory("config/")
    issues = validate(state)
"""

from .loader import LoadOptions, load_directory
from .schema import API_VERSION
from .validator import find_cycles, validate, validate_or_raise

__all__ = [
    "API_VERSION",
    "LoadOptions",
    "find_cycles",
    "load_directory",
    "validate",
    "validate_or_raise",
]
