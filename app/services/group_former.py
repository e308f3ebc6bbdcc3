"""
Greedy group formation for the Club Grouping Engine.
Builds the initial partition that the local-search optimizer then improves.
"""

from typing import List, Optional, Set, Tuple

from app.services.affinity import AffinityModel
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class GroupFormer:
    """
    Seeds each group with the strongest remaining pair, then grows it one
    golfer at a time with whoever adds the most affinity to the group.

    Every choice breaks ties on the lowest profile ID so that the same roster
    always produces the same partition, regardless of input order.
    """

    def __init__(self, model: AffinityModel, capacity: int):
        self.model = model
        self.capacity = capacity

    def form_groups(self) -> List[List[str]]:
        """
        Partition all golfers into groups of at most `capacity`.
        Only the last group formed can be short.
        """
        unplaced: Set[str] = set(self.model.profile_ids)
        groups: List[List[str]] = []

        while unplaced:
            group = self._seed_group(unplaced)
            for profile_id in group:
                unplaced.discard(profile_id)

            while len(group) < self.capacity and unplaced:
                candidate = self._best_candidate(group, unplaced)
                group.append(candidate)
                unplaced.discard(candidate)

            logger.debug(
                "Formed group %d: %s (affinity %d)",
                len(groups) + 1, group, self.model.group_affinity(group)
            )
            groups.append(group)

        return groups

    def _seed_group(self, unplaced: Set[str]) -> List[str]:
        if self.capacity >= 2:
            pair = self._strongest_pair(unplaced)
            if pair:
                return list(pair)
        # No positive pair left: lowest ID starts the group
        return [min(unplaced)]

    def _strongest_pair(self, unplaced: Set[str]) -> Optional[Tuple[str, str]]:
        best_key = None
        best_pair = None
        for (a, b), score in self.model.pair_scores.items():
            if score <= 0 or a not in unplaced or b not in unplaced:
                continue
            key = (-score, a, b)
            if best_key is None or key < best_key:
                best_key = key
                best_pair = (a, b)
        return best_pair

    def _best_candidate(self, group: List[str], unplaced: Set[str]) -> str:
        return min(
            unplaced,
            key=lambda profile_id: (-self.model.affinity_to_group(profile_id, group), profile_id)
        )
