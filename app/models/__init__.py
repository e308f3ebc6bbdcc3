"""
Data models for the grouping system.
"""

from .models import (
    TeeTimePreference,
    Golfer,
    PreferenceEdge,
    GuestAttachment,
    Group,
    GroupAssignment,
    UnplacedGuest,
    GroupingResult,
    GroupingConstraint,
    GroupingValidationResult,
    StoredGroupMember,
    StoredGrouping
)

__all__ = [
    "TeeTimePreference",
    "Golfer",
    "PreferenceEdge",
    "GuestAttachment",
    "Group",
    "GroupAssignment",
    "UnplacedGuest",
    "GroupingResult",
    "GroupingConstraint",
    "GroupingValidationResult",
    "StoredGroupMember",
    "StoredGrouping"
]
