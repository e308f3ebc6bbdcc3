"""
Local-search optimizer for the Club Grouping Engine.
Hill-climbs on total captured affinity by swapping golfers between groups.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from app.services.affinity import AffinityModel, pair_key
from app.core.config import OPTIMIZER_ITERATION_FACTOR
from app.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class SwapMove:
    delta: int
    first_group: int   # Index into the partition
    first_member: str
    second_group: int
    second_member: str

    def sort_key(self) -> Tuple:
        # Largest delta first, then lowest pair of profile IDs
        return (-self.delta,) + pair_key(self.first_member, self.second_member)


@dataclass
class OptimizationOutcome:
    groups: List[List[str]] = field(default_factory=list)
    initial_affinity: int = 0
    final_affinity: int = 0
    iterations: int = 0
    converged: bool = True


class LocalSearchOptimizer:
    """
    Best-improvement pairwise swap search.

    A swap exchanges one golfer from each of two groups, so group sizes never
    change and the capacity layout from formation is preserved. The search
    stops when no swap has a positive delta or the iteration cap is hit; in the
    latter case the best partition found so far is returned.
    """

    def __init__(self, model: AffinityModel, max_iterations: Optional[int] = None):
        self.model = model
        if max_iterations is None:
            max_iterations = OPTIMIZER_ITERATION_FACTOR * len(model.profile_ids)
        self.max_iterations = max(0, max_iterations)

    def optimize(self, partition: List[List[str]]) -> OptimizationOutcome:
        groups = [list(members) for members in partition]
        initial_affinity = self.model.partition_affinity(groups)
        current_affinity = initial_affinity

        iterations = 0
        converged = False
        while iterations < self.max_iterations:
            move = self._find_best_swap(groups)
            if move is None:
                converged = True
                break

            self._apply(groups, move)
            current_affinity += move.delta
            iterations += 1
            logger.debug(
                "Swap %d: %s <-> %s (+%d, total %d)",
                iterations, move.first_member, move.second_member, move.delta, current_affinity
            )
        else:
            converged = self._find_best_swap(groups) is None

        if not converged:
            logger.info(
                "Optimizer stopped at iteration cap (%d) before converging", self.max_iterations
            )

        return OptimizationOutcome(
            groups=groups,
            initial_affinity=initial_affinity,
            final_affinity=current_affinity,
            iterations=iterations,
            converged=converged
        )

    def swap_delta(self, first: List[str], a: str, second: List[str], b: str) -> int:
        """Change in total affinity if `a` (in `first`) and `b` (in `second`) trade places."""
        model = self.model
        cross = model.get(a, b)
        gained = model.affinity_to_group(a, second) + model.affinity_to_group(b, first) - 2 * cross
        lost = model.affinity_to_group(a, first) + model.affinity_to_group(b, second)
        return gained - lost

    def _find_best_swap(self, groups: List[List[str]]) -> Optional[SwapMove]:
        best: Optional[SwapMove] = None
        for i in range(len(groups)):
            for j in range(i + 1, len(groups)):
                for a in groups[i]:
                    for b in groups[j]:
                        delta = self.swap_delta(groups[i], a, groups[j], b)
                        if delta <= 0:
                            continue
                        move = SwapMove(delta, i, a, j, b)
                        if best is None or move.sort_key() < best.sort_key():
                            best = move
        return best

    def _apply(self, groups: List[List[str]], move: SwapMove):
        first = groups[move.first_group]
        second = groups[move.second_group]
        first[first.index(move.first_member)] = move.second_member
        second[second.index(move.second_member)] = move.first_member
