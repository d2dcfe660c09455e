"""
forksync — Keep a fork rebased on its upstream and tell the team about it.
"""

__version__ = "1.0.0"
