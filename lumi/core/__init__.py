"""
Core: shared building blocks for the personalization engines.
"""

from lumi.core.errors import (
    InvalidInputError,
    LumiError,
    RuleTableError,
    require_non_negative,
)

__all__ = [
    "LumiError",
    "InvalidInputError",
    "RuleTableError",
    "require_non_negative",
]
