"""
Repository layer for data access
"""

from .entry_log import EntryLog


__all__ = [
    'EntryLog'
]
