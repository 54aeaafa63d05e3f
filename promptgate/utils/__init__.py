"""Utility functions for promptgate."""

from .templating import VARIABLE_PATTERN, find_variables, substitute, unresolved_variables

__all__ = [
    "VARIABLE_PATTERN",
    "find_variables",
    "substitute",
    "unresolved_variables",
]
