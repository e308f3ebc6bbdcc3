"""
Tee order and harmony scoring for finished groups.
"""

from fractions import Fraction
from math import comb
from typing import Dict, List

from app.models import Group, TeeTimePreference
from app.services.affinity import AffinityModel, MAX_PAIR_AFFINITY


def earliness_score(members: List[str], preferences: Dict[str, TeeTimePreference]) -> Fraction:
    """
    (early - late) / size. Positive groups want to go off first.
    Kept as a Fraction so equal ratios sort as equal.
    """
    if not members:
        return Fraction(0)
    early = sum(1 for m in members if preferences.get(m) == TeeTimePreference.EARLY)
    late = sum(1 for m in members if preferences.get(m) == TeeTimePreference.LATE)
    return Fraction(early - late, len(members))


def harmony_score(captured_affinity: int, size: int) -> float:
    """
    Captured affinity normalized against every pair at the strongest weight.
    A singleton (or empty) group has nothing to satisfy and scores 0.
    """
    if size <= 1:
        return 0.0
    return captured_affinity / (MAX_PAIR_AFFINITY * comb(size, 2))


def assign_tee_order(groups: List[Group], preferences: Dict[str, TeeTimePreference]) -> List[Group]:
    """
    Set `tee_order` 1..k on each group: highest earliness first, ties by
    ascending group number. Returns the groups in tee order.
    """
    keyed = [(earliness_score(group.members, preferences), group) for group in groups]
    keyed.sort(key=lambda item: (-item[0], item[1].group_number))

    ordered = []
    for position, (earliness, group) in enumerate(keyed, start=1):
        group.tee_order = position
        group.earliness = float(earliness)
        ordered.append(group)
    return ordered


def score_groups(
    partition: List[List[str]],
    model: AffinityModel,
    preferences: Dict[str, TeeTimePreference]
) -> List[Group]:
    """
    Turn a partition into scored Group records. Group numbers follow the
    partition's formation order; members are listed by profile ID.
    """
    groups = []
    for number, members in enumerate(partition, start=1):
        ordered_members = sorted(members)
        captured = model.group_affinity(ordered_members)
        groups.append(Group(
            group_number=number,
            members=ordered_members,
            captured_affinity=captured,
            harmony_score=harmony_score(captured, len(ordered_members))
        ))
    return assign_tee_order(groups, preferences)
