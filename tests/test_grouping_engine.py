"""
End-to-end tests for the grouping engine: partition completeness, capacity,
determinism, tee order, harmony bounds and guest placement.
"""

import random

import pytest

from app.core.exceptions import GroupingInputError
from app.models import Golfer, GuestAttachment, PreferenceEdge, TeeTimePreference
from app.services.grouping_engine import GroupingEngine, generate_groupings
from app.services.scoring import earliness_score


def random_roster(seed, roster_factory):
    rng = random.Random(seed)
    ids = [f"p{i:03d}" for i in range(rng.randint(1, 30))]
    early = set(rng.sample(ids, rng.randint(0, len(ids) // 2)))
    late = set(rng.sample([i for i in ids if i not in early], rng.randint(0, (len(ids) - len(early)) // 2)))
    golfers = roster_factory(*ids, early=early, late=late)
    preferences = [
        PreferenceEdge(rng.choice(ids), rng.choice(ids + ["not-confirmed"]), rng.randint(1, 10))
        for _ in range(rng.randint(0, 3 * len(ids)))
    ]
    return golfers, preferences, rng.randint(1, 6)


def test_mutual_pair_and_one_sided_pair_scenario(roster_factory, mutual_edges):
    golfers = roster_factory("a", "b", "c", "d", "e", "f", "g", "h")
    preferences = mutual_edges("a", "b") + [PreferenceEdge("c", "d", 2)]

    result = generate_groupings(golfers, preferences, capacity=4)

    assert len(result.groups) == 2
    assert result.get_group_for("a") is result.get_group_for("b")
    assert result.get_group_for("c") is result.get_group_for("d")
    assert [g.members for g in result.groups] == [["a", "b", "c", "d"], ["e", "f", "g", "h"]]
    assert result.groups[0].harmony_score == pytest.approx(29 / 120)
    assert result.groups[1].harmony_score == 0.0
    assert result.total_affinity == 29


def test_five_golfers_make_a_foursome_and_a_single(roster_factory):
    result = generate_groupings(roster_factory("a", "b", "c", "d", "e"), [], capacity=4)

    assert sorted(g.size for g in result.groups) == [1, 4]
    single = next(g for g in result.groups if g.size == 1)
    assert single.harmony_score == 0.0


def test_full_mutual_foursome_scores_one(roster_factory, mutual_edges):
    ids = ["a", "b", "c", "d"]
    preferences = [edge for i, x in enumerate(ids) for y in ids[i + 1:] for edge in mutual_edges(x, y)]

    result = generate_groupings(roster_factory(*ids), preferences)

    assert result.groups[0].harmony_score == 1.0


def test_single_golfer(roster_factory):
    result = generate_groupings(roster_factory("solo"), [])

    assert len(result.groups) == 1
    assert result.groups[0].members == ["solo"]
    assert result.groups[0].tee_order == 1
    assert result.groups[0].harmony_score == 0.0


def test_everyone_prefers_the_same_golfer(roster_factory):
    ids = [f"g{i}" for i in range(9)]
    preferences = [PreferenceEdge(i, "g0", 1) for i in ids[1:]]

    result = generate_groupings(roster_factory(*ids), preferences)

    assert sorted(g.size for g in result.groups) == [1, 4, 4]
    assert result.get_group_for("g0").size == 4


def test_properties_hold_for_random_rosters(roster_factory):
    for seed in range(40):
        golfers, preferences, capacity = random_roster(seed, roster_factory)
        result = GroupingEngine(capacity=capacity).generate(golfers, preferences)

        placed = [m for g in result.groups for m in g.members]
        assert sorted(placed) == sorted(g.profile_id for g in golfers)

        sizes = [g.size for g in result.groups]
        assert all(1 <= size <= capacity for size in sizes)
        assert sum(1 for size in sizes if size < capacity) <= 1

        assert all(0.0 <= g.harmony_score <= 1.0 for g in result.groups)
        assert all(g.harmony_score == 0.0 for g in result.groups if g.size == 1)

        tee_prefs = {g.profile_id: g.tee_time_preference for g in golfers}
        ordered = sorted(result.groups, key=lambda g: g.tee_order)
        assert [g.tee_order for g in ordered] == list(range(1, len(ordered) + 1))
        earliness = [earliness_score(g.members, tee_prefs) for g in ordered]
        assert earliness == sorted(earliness, reverse=True)

        assert sorted(g.group_number for g in result.groups) == list(range(1, len(result.groups) + 1))
        assert result.total_affinity >= result.initial_affinity


def test_same_result_for_permuted_input(roster_factory):
    for seed in range(10):
        golfers, preferences, capacity = random_roster(seed, roster_factory)
        guests = [GuestAttachment(f"guest-{i}", golfers[i % len(golfers)].profile_id) for i in range(3)]
        guests.append(GuestAttachment("guest-orphan", "nobody"))

        first = GroupingEngine(capacity=capacity).generate(golfers, preferences, guests)

        rng = random.Random(seed + 100)
        shuffled_golfers = golfers[:]
        shuffled_preferences = preferences[:]
        shuffled_guests = guests[:]
        rng.shuffle(shuffled_golfers)
        rng.shuffle(shuffled_preferences)
        rng.shuffle(shuffled_guests)

        second = GroupingEngine(capacity=capacity).generate(shuffled_golfers, shuffled_preferences, shuffled_guests)

        assert first == second


def test_early_groups_tee_off_first(roster_factory, mutual_edges):
    golfers = roster_factory(
        "a", "b", "c", "d", "e", "f", "g", "h",
        early=("e", "f", "g", "h"), late=("a", "b")
    )
    preferences = mutual_edges("a", "b") + mutual_edges("e", "f")

    result = generate_groupings(golfers, preferences)

    first_off = result.groups[0]
    assert first_off.tee_order == 1
    assert {"e", "f"} <= set(first_off.members)
    assert result.get_group_for("a").tee_order == 2


def test_guests_follow_hosts_and_orphans_are_reported(roster_factory):
    golfers = roster_factory("a", "b", "c", "d", "e")
    guests = [GuestAttachment("guest-1", "e"), GuestAttachment("guest-2", "gone")]

    result = generate_groupings(golfers, [], guests)

    assert result.get_group_for("e").guests == ["guest-1"]
    assert [g.guest_request_id for g in result.unplaced_guests] == ["guest-2"]
    assert result.get_group_for("e").harmony_score == 0.0


def test_assignments_flatten_groups(roster_factory):
    result = generate_groupings(roster_factory("a", "b", "c", "d", "e"), [])

    assignments = {a.profile_id: (a.group_number, a.tee_order) for a in result.assignments}
    assert assignments == {"a": (1, 1), "b": (1, 1), "c": (1, 1), "d": (1, 1), "e": (2, 2)}


def test_empty_roster_is_rejected():
    with pytest.raises(GroupingInputError, match="no confirmed golfers"):
        generate_groupings([], [])


def test_bad_capacity_is_rejected(roster_factory):
    with pytest.raises(GroupingInputError, match="capacity"):
        GroupingEngine(capacity=0).generate(roster_factory("a"), [])


def test_duplicate_golfer_is_rejected():
    golfers = [Golfer("a"), Golfer("b"), Golfer("a", TeeTimePreference.EARLY)]
    with pytest.raises(GroupingInputError, match="Duplicate profile IDs"):
        generate_groupings(golfers, [])


def test_unknown_tee_time_preference_is_rejected():
    with pytest.raises(GroupingInputError):
        TeeTimePreference.parse("sunrise")
    assert TeeTimePreference.parse("no_preference") is TeeTimePreference.NONE
    assert TeeTimePreference.parse(None) is TeeTimePreference.NONE
    assert TeeTimePreference.parse(" Early ") is TeeTimePreference.EARLY
