"""
Affinity model for the Club Grouping Engine.
Turns ranked partner preferences into symmetric pairwise affinity scores.
"""

from typing import Dict, Iterable, List, Tuple

from app.models import Golfer, PreferenceEdge
from app.core.config import MIN_PREFERENCE_RANK, MAX_PREFERENCE_RANK
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def rank_to_weight(rank: int) -> int:
    """
    Convert a partner preference rank to a directional weight.
    Rank 1 -> 10, rank 10 -> 1, anything outside 1..10 -> 0.
    """
    if rank < MIN_PREFERENCE_RANK or rank > MAX_PREFERENCE_RANK:
        return 0
    return max(0, MAX_PREFERENCE_RANK + 1 - rank)


# Both directions at rank 1
MAX_PAIR_AFFINITY = 2 * rank_to_weight(MIN_PREFERENCE_RANK)


def pair_key(a: str, b: str) -> Tuple[str, str]:
    """Order-independent key for a pair of golfer IDs."""
    return (a, b) if a < b else (b, a)


class AffinityModel:
    """
    Symmetric affinity table over the confirmed golfers of one run.
    Pairs missing from the table have affinity 0.
    """

    def __init__(self, profile_ids: Iterable[str], pair_scores: Dict[Tuple[str, str], int] = None):
        self.profile_ids: List[str] = sorted(profile_ids)
        self.pair_scores: Dict[Tuple[str, str], int] = dict(pair_scores or {})

    @classmethod
    def build(cls, golfers: List[Golfer], preferences: List[PreferenceEdge]) -> 'AffinityModel':
        """
        Build the table from the preference list, keeping only edges whose
        endpoints are both confirmed this run.
        """
        confirmed_ids = {golfer.profile_id for golfer in golfers}

        # Strongest rank per direction
        best_rank: Dict[Tuple[str, str], int] = {}
        stale = 0
        ignored = 0

        for edge in preferences:
            if edge.from_profile_id not in confirmed_ids or edge.to_profile_id not in confirmed_ids:
                stale += 1
                continue
            if edge.from_profile_id == edge.to_profile_id or rank_to_weight(edge.rank) == 0:
                ignored += 1
                continue

            direction = (edge.from_profile_id, edge.to_profile_id)
            if direction not in best_rank or edge.rank < best_rank[direction]:
                best_rank[direction] = edge.rank

        pair_scores: Dict[Tuple[str, str], int] = {}
        for (source, target), rank in best_rank.items():
            key = pair_key(source, target)
            pair_scores[key] = pair_scores.get(key, 0) + rank_to_weight(rank)

        logger.debug(
            "Affinity model: %d golfers, %d scored pairs (%d stale edges, %d ignored)",
            len(confirmed_ids), len(pair_scores), stale, ignored
        )
        return cls(confirmed_ids, pair_scores)

    def get(self, a: str, b: str) -> int:
        if a == b:
            return 0
        return self.pair_scores.get(pair_key(a, b), 0)

    def affinity_to_group(self, profile_id: str, members: Iterable[str]) -> int:
        """Total affinity between one golfer and every other golfer in `members`."""
        return sum(self.get(profile_id, other) for other in members if other != profile_id)

    def group_affinity(self, members: List[str]) -> int:
        """Sum of pair affinities inside a group."""
        score = 0
        for i in range(len(members)):
            for j in range(i + 1, len(members)):
                score += self.get(members[i], members[j])
        return score

    def partition_affinity(self, partition: Iterable[List[str]]) -> int:
        return sum(self.group_affinity(members) for members in partition)

    def has_preferences(self) -> bool:
        return any(score > 0 for score in self.pair_scores.values())
