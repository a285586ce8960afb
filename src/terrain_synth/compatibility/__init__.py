"""
Input validation for world snapshots.
"""

from .snapshot_validator import SnapshotValidator

__all__ = ["SnapshotValidator"]
