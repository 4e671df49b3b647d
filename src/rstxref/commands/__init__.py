"""
rstxref.commands - CLI command implementations
"""

__all__ = [
    "anchors",
    "expand",
    "init",
    "validate",
]
