"""Rule data loading for the Ten-Second City puzzle."""

from .loader import (
    RuleLoader,
    RuleLoadError,
    load_rules,
    load_default_rules,
)

__all__ = [
    "RuleLoader",
    "RuleLoadError",
    "load_rules",
    "load_default_rules",
]
