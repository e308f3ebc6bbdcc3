"""
Grouping validation module for the Club Grouping Engine.
Re-checks a finished GroupingResult against the grouping invariants before it
is stored.
"""

from collections import Counter
from typing import List, Optional

from app.models import (
    Golfer, GuestAttachment, GroupingResult, GroupingConstraint,
    GroupingValidationResult
)
from app.services.scoring import earliness_score
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class GroupingValidator:
    """
    Validates groupings against hard constraints (must hold for the result to
    be stored) and soft constraints (worth surfacing to an admin).
    """

    def validate_result(
        self,
        result: GroupingResult,
        golfers: List[Golfer],
        guests: Optional[List[GuestAttachment]] = None
    ) -> GroupingValidationResult:
        """
        Validate a grouping result against the roster it was built from.

        Args:
            result: The grouping to validate
            golfers: The confirmed golfers passed to the engine
            guests: The guest requests passed to the engine, if any

        Returns:
            GroupingValidationResult with all violations found
        """
        validation = GroupingValidationResult(is_valid=True)

        self._check_completeness(result, golfers, validation)
        self._check_capacity(result, validation)
        self._check_harmony_bounds(result, validation)
        self._check_tee_order(result, golfers, validation)
        self._check_guest_placement(result, guests or [], validation)
        self._check_unmatched_groups(result, validation)
        self._check_convergence(result, validation)

        logger.info(
            "Validation: valid=%s, %d hard, %d soft violations",
            validation.is_valid,
            len(validation.hard_constraint_violations),
            len(validation.soft_constraint_violations)
        )
        for violation in validation.hard_constraint_violations[:10]:  # Show first 10
            logger.warning("  - %s: %s", violation.constraint_type, violation.description)

        return validation

    def _check_completeness(self, result: GroupingResult, golfers: List[Golfer], validation: GroupingValidationResult):
        """Every golfer appears in exactly one group, and nobody else does."""
        placed = Counter(profile_id for group in result.groups for profile_id in group.members)
        expected = {golfer.profile_id for golfer in golfers}

        duplicates = sorted(pid for pid, count in placed.items() if count > 1)
        if duplicates:
            validation.add_violation(GroupingConstraint(
                constraint_type="duplicate_golfer",
                severity="hard",
                description=f"Golfers placed more than once: {', '.join(duplicates)}",
                affected_profiles=duplicates
            ))

        missing = sorted(expected - set(placed))
        if missing:
            validation.add_violation(GroupingConstraint(
                constraint_type="missing_golfer",
                severity="hard",
                description=f"Confirmed golfers not in any group: {', '.join(missing)}",
                affected_profiles=missing
            ))

        unexpected = sorted(set(placed) - expected)
        if unexpected:
            validation.add_violation(GroupingConstraint(
                constraint_type="unknown_golfer",
                severity="hard",
                description=f"Grouped golfers who are not confirmed: {', '.join(unexpected)}",
                affected_profiles=unexpected
            ))

    def _check_capacity(self, result: GroupingResult, validation: GroupingValidationResult):
        """1 <= size <= capacity, and at most one group is short."""
        short_groups = []
        for group in result.groups:
            if group.size < 1 or group.size > result.capacity:
                validation.add_violation(GroupingConstraint(
                    constraint_type="group_size",
                    severity="hard",
                    description=f"Group {group.group_number} has {group.size} members (capacity {result.capacity})",
                    affected_groups=[group.group_number]
                ))
            elif group.size < result.capacity:
                short_groups.append(group.group_number)

        if len(short_groups) > 1:
            validation.add_violation(GroupingConstraint(
                constraint_type="multiple_short_groups",
                severity="hard",
                description=f"{len(short_groups)} groups are below capacity (at most 1 allowed)",
                affected_groups=short_groups
            ))

    def _check_harmony_bounds(self, result: GroupingResult, validation: GroupingValidationResult):
        for group in result.groups:
            out_of_range = not 0.0 <= group.harmony_score <= 1.0
            singleton_scored = group.size <= 1 and group.harmony_score != 0.0
            if out_of_range or singleton_scored:
                validation.add_violation(GroupingConstraint(
                    constraint_type="harmony_bounds",
                    severity="hard",
                    description=f"Group {group.group_number} has harmony {group.harmony_score} with {group.size} members",
                    affected_groups=[group.group_number]
                ))

    def _check_tee_order(self, result: GroupingResult, golfers: List[Golfer], validation: GroupingValidationResult):
        """Tee orders are 1..k and earliness never increases down the tee sheet."""
        tee_orders = sorted(group.tee_order for group in result.groups)
        if tee_orders != list(range(1, len(result.groups) + 1)):
            validation.add_violation(GroupingConstraint(
                constraint_type="tee_order_sequence",
                severity="hard",
                description=f"Tee orders are not 1..{len(result.groups)}: {tee_orders}",
                affected_groups=[group.group_number for group in result.groups]
            ))
            return

        preferences = {golfer.profile_id: golfer.tee_time_preference for golfer in golfers}
        ordered = sorted(result.groups, key=lambda g: g.tee_order)
        for previous, current in zip(ordered, ordered[1:]):
            if earliness_score(current.members, preferences) > earliness_score(previous.members, preferences):
                validation.add_violation(GroupingConstraint(
                    constraint_type="tee_order_earliness",
                    severity="hard",
                    description=(
                        f"Group {current.group_number} (tee {current.tee_order}) wants an earlier time "
                        f"than group {previous.group_number} (tee {previous.tee_order})"
                    ),
                    affected_groups=[previous.group_number, current.group_number]
                ))

    def _check_guest_placement(
        self,
        result: GroupingResult,
        guests: List[GuestAttachment],
        validation: GroupingValidationResult
    ):
        """Each guest listing is either with its host or in the unplaced report."""
        reported = {(guest.guest_request_id, guest.host_profile_id) for guest in result.unplaced_guests}
        for guest in guests:
            if (guest.guest_request_id, guest.host_profile_id) in reported:
                continue
            host_group = result.get_group_for(guest.host_profile_id)
            holders = [g.group_number for g in result.groups if guest.guest_request_id in g.guests]

            if host_group is not None:
                if holders != [host_group.group_number]:
                    validation.add_violation(GroupingConstraint(
                        constraint_type="guest_not_with_host",
                        severity="hard",
                        description=(
                            f"Guest {guest.guest_request_id} should be in group {host_group.group_number} "
                            f"with host {guest.host_profile_id}, found in {holders or 'no group'}"
                        ),
                        affected_groups=holders,
                        affected_profiles=[guest.host_profile_id]
                    ))
            else:
                validation.add_violation(GroupingConstraint(
                    constraint_type="guest_dropped",
                    severity="hard",
                    description=f"Guest {guest.guest_request_id} has no confirmed host and is not reported as unplaced",
                    affected_profiles=[guest.host_profile_id]
                ))

        for unplaced in result.unplaced_guests:
            validation.add_violation(GroupingConstraint(
                constraint_type="guest_unplaced",
                severity="soft",
                description=f"Guest {unplaced.guest_request_id} unplaced: host {unplaced.host_profile_id} {unplaced.reason}",
                affected_profiles=[unplaced.host_profile_id]
            ))

    def _check_unmatched_groups(self, result: GroupingResult, validation: GroupingValidationResult):
        for group in result.groups:
            if group.size > 1 and group.captured_affinity == 0:
                validation.add_violation(GroupingConstraint(
                    constraint_type="no_partner_preferences_met",
                    severity="soft",
                    description=f"Group {group.group_number} contains no preferred partner pairs",
                    affected_groups=[group.group_number]
                ))

    def _check_convergence(self, result: GroupingResult, validation: GroupingValidationResult):
        if not result.converged:
            validation.add_violation(GroupingConstraint(
                constraint_type="optimizer_not_converged",
                severity="soft",
                description=f"Optimizer stopped after {result.optimizer_iterations} swaps without converging"
            ))
