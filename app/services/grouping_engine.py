"""
Grouping engine for the Club Grouping Engine.
Turns one game date's confirmed golfers and their partner preferences into
tee groups with a tee order and a harmony score per group.

The engine is a pure computation: it performs no I/O and keeps no state
between runs, so the same inputs always give the same result.
"""

from typing import Dict, List, Optional

from app.models import (
    Golfer, PreferenceEdge, GuestAttachment, GroupingResult, TeeTimePreference
)
from app.services.affinity import AffinityModel
from app.services.group_former import GroupFormer
from app.services.optimizer import LocalSearchOptimizer
from app.services.scoring import score_groups
from app.services.guests import GuestAttacher
from app.core.config import DEFAULT_GROUP_CAPACITY
from app.core.exceptions import GroupingInputError
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class GroupingEngine:
    """
    Pipeline: affinity model -> greedy formation -> swap optimization ->
    tee order and harmony scoring -> guest placement.
    """

    def __init__(self, capacity: Optional[int] = None, max_iterations: Optional[int] = None):
        """
        Args:
            capacity: Maximum members per group (guests excluded). Defaults to
                the configured group capacity.
            max_iterations: Optimizer swap cap. Defaults to a multiple of the
                roster size.
        """
        self.capacity = DEFAULT_GROUP_CAPACITY if capacity is None else capacity
        self.max_iterations = max_iterations

    def generate(
        self,
        golfers: List[Golfer],
        preferences: List[PreferenceEdge],
        guests: Optional[List[GuestAttachment]] = None
    ) -> GroupingResult:
        """
        Generate groupings for one game date.

        Args:
            golfers: Confirmed golfers, in any order
            preferences: All partner preferences for the event, unfiltered
            guests: Approved guest requests tagged with their host

        Returns:
            GroupingResult with groups ordered by tee order

        Raises:
            GroupingInputError: If the roster or capacity is unusable
        """
        self._validate_input(golfers)

        model = AffinityModel.build(golfers, preferences)
        initial_groups = GroupFormer(model, self.capacity).form_groups()

        optimizer = LocalSearchOptimizer(model, self.max_iterations)
        outcome = optimizer.optimize(initial_groups)

        tee_preferences: Dict[str, TeeTimePreference] = {
            golfer.profile_id: golfer.tee_time_preference for golfer in golfers
        }
        groups = score_groups(outcome.groups, model, tee_preferences)

        result = GroupingResult(
            groups=groups,
            capacity=self.capacity,
            total_affinity=outcome.final_affinity,
            initial_affinity=outcome.initial_affinity,
            optimizer_iterations=outcome.iterations,
            converged=outcome.converged
        )

        if guests:
            GuestAttacher().attach(result, guests)

        logger.info(
            "Grouped %d golfers into %d groups (capacity %d): affinity %d -> %d in %d swaps%s",
            len(golfers), len(groups), self.capacity,
            outcome.initial_affinity, outcome.final_affinity, outcome.iterations,
            "" if outcome.converged else " (iteration cap reached)"
        )
        return result

    def _validate_input(self, golfers: List[Golfer]):
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity < 1:
            raise GroupingInputError(f"Group capacity must be a positive integer, got {self.capacity!r}")

        if not golfers:
            raise GroupingInputError("Cannot generate groupings: no confirmed golfers")

        seen = set()
        duplicates = set()
        for golfer in golfers:
            if not golfer.profile_id:
                raise GroupingInputError("Golfer with empty profile ID")
            if golfer.profile_id in seen:
                duplicates.add(golfer.profile_id)
            seen.add(golfer.profile_id)

        if duplicates:
            raise GroupingInputError(
                f"Duplicate profile IDs in confirmed golfers: {', '.join(sorted(duplicates))}"
            )


def generate_groupings(
    golfers: List[Golfer],
    preferences: List[PreferenceEdge],
    guests: Optional[List[GuestAttachment]] = None,
    capacity: Optional[int] = None
) -> GroupingResult:
    """Convenience wrapper around GroupingEngine.generate."""
    return GroupingEngine(capacity=capacity).generate(golfers, preferences, guests)
