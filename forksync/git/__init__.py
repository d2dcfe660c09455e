"""
Git helpers — repository handle and commit-range rendering.
"""

from .commits import CommitRange, collect_range
from .repo import GitRepository

__all__ = [
    "GitRepository",
    "CommitRange",
    "collect_range",
]
