"""
Data models for the Club Grouping Engine.
Defines all data structures used throughout the application.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

from app.core.config import TEE_TIME_ALIASES
from app.core.exceptions import GroupingInputError


class TeeTimePreference(Enum):
    NONE = "none"
    EARLY = "early"
    LATE = "late"

    @classmethod
    def parse(cls, value) -> 'TeeTimePreference':
        """Accept an enum member, a stored string, or None."""
        if isinstance(value, TeeTimePreference):
            return value
        if value is None:
            return cls.NONE

        normalized = str(value).strip().lower()
        normalized = TEE_TIME_ALIASES.get(normalized, normalized)
        for item in cls:
            if item.value == normalized:
                return item

        raise GroupingInputError(f"Unknown tee time preference: {value!r}")


@dataclass(frozen=True)
class Golfer:
    profile_id: str
    tee_time_preference: TeeTimePreference = TeeTimePreference.NONE


@dataclass(frozen=True)
class PreferenceEdge:
    from_profile_id: str
    to_profile_id: str
    rank: int  # 1 = strongest


@dataclass(frozen=True)
class GuestAttachment:
    guest_request_id: str
    host_profile_id: str


@dataclass
class Group:
    group_number: int
    members: List[str] = field(default_factory=list)
    tee_order: int = 0
    harmony_score: float = 0.0
    captured_affinity: int = 0
    earliness: float = 0.0
    guests: List[str] = field(default_factory=list)  # Guest request IDs, outside capacity

    def __str__(self):
        return f"Group {self.group_number} (tee {self.tee_order}): {', '.join(self.members)}"

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def player_count(self) -> int:
        return len(self.members) + len(self.guests)

    def contains(self, profile_id: str) -> bool:
        return profile_id in self.members

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_number": self.group_number,
            "tee_order": self.tee_order,
            "members": list(self.members),
            "guests": list(self.guests),
            "harmony_score": self.harmony_score,
            "captured_affinity": self.captured_affinity,
            "earliness": self.earliness,
        }


@dataclass
class GroupAssignment:
    profile_id: str
    group_number: int
    tee_order: int


@dataclass
class UnplacedGuest:
    guest_request_id: str
    host_profile_id: str
    reason: str = "host not among confirmed golfers"


@dataclass
class GroupingResult:
    groups: List[Group] = field(default_factory=list)  # Ordered by tee order
    capacity: int = 4
    total_affinity: int = 0
    initial_affinity: int = 0
    optimizer_iterations: int = 0
    converged: bool = True
    unplaced_guests: List[UnplacedGuest] = field(default_factory=list)

    @property
    def assignments(self) -> List[GroupAssignment]:
        return [
            GroupAssignment(profile_id=profile_id, group_number=group.group_number, tee_order=group.tee_order)
            for group in self.groups
            for profile_id in group.members
        ]

    @property
    def golfer_count(self) -> int:
        return sum(group.size for group in self.groups)

    def get_group_for(self, profile_id: str) -> Optional[Group]:
        for group in self.groups:
            if group.contains(profile_id):
                return group
        return None

    def get_group_by_number(self, group_number: int) -> Optional[Group]:
        for group in self.groups:
            if group.group_number == group_number:
                return group
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "total_affinity": self.total_affinity,
            "initial_affinity": self.initial_affinity,
            "optimizer_iterations": self.optimizer_iterations,
            "converged": self.converged,
            "groups": [group.to_dict() for group in self.groups],
            "unplaced_guests": [
                {
                    "guest_request_id": guest.guest_request_id,
                    "host_profile_id": guest.host_profile_id,
                    "reason": guest.reason,
                }
                for guest in self.unplaced_guests
            ],
        }


@dataclass
class GroupingConstraint:
    constraint_type: str
    severity: str
    description: str
    affected_groups: List[int] = field(default_factory=list)
    affected_profiles: List[str] = field(default_factory=list)


@dataclass
class GroupingValidationResult:
    is_valid: bool
    hard_constraint_violations: List[GroupingConstraint] = field(default_factory=list)
    soft_constraint_violations: List[GroupingConstraint] = field(default_factory=list)

    def add_violation(self, constraint: GroupingConstraint):
        if constraint.severity == 'hard':
            self.hard_constraint_violations.append(constraint)
            self.is_valid = False
        else:
            self.soft_constraint_violations.append(constraint)

    def get_summary(self) -> str:
        summary = f"Grouping Valid: {self.is_valid}\n"
        summary += f"Hard Violations: {len(self.hard_constraint_violations)}\n"
        summary += f"Soft Violations: {len(self.soft_constraint_violations)}\n"
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "hard_violations": len(self.hard_constraint_violations),
            "soft_violations": len(self.soft_constraint_violations),
            "messages": [
                v.description
                for v in self.hard_constraint_violations + self.soft_constraint_violations
            ],
        }


@dataclass
class StoredGroupMember:
    profile_id: Optional[str]
    guest_request_id: Optional[str]
    first_name: str
    last_name: str
    phone: str = ""
    email: str = ""
    ghin_number: str = ""
    is_guest: bool = False
    host_name: Optional[str] = None  # "J. Herrera" format for guests
    host_profile_id: Optional[str] = None
    tee_time_preference: Optional[str] = None  # 'early' / 'late', None = no preference
    preferred_partners_in_group: List[str] = field(default_factory=list)


@dataclass
class StoredGrouping:
    group_number: int
    tee_order: int
    harmony_score: Optional[float]
    members: List[StoredGroupMember] = field(default_factory=list)
