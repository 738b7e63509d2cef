"""
Change Tracking Module

Collapsing change bookkeeping and write-equality rules.
"""

from fieldaudit.tracking.equality import same_value_zero
from fieldaudit.tracking.tracker import ChangeTracker

__all__ = [
    "ChangeTracker",
    "same_value_zero",
]
