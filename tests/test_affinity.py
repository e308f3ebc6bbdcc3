"""
Tests for the affinity model built from ranked partner preferences.
"""

from app.models import PreferenceEdge
from app.services.affinity import AffinityModel, rank_to_weight, pair_key, MAX_PAIR_AFFINITY


def test_rank_to_weight_covers_all_ranks():
    assert [rank_to_weight(rank) for rank in range(1, 11)] == [10, 9, 8, 7, 6, 5, 4, 3, 2, 1]


def test_rank_to_weight_out_of_range_is_zero():
    assert rank_to_weight(0) == 0
    assert rank_to_weight(-3) == 0
    assert rank_to_weight(11) == 0
    assert MAX_PAIR_AFFINITY == 20


def test_pair_key_is_order_independent():
    assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")


def test_one_sided_preference(roster_factory):
    golfers = roster_factory("a", "b")
    model = AffinityModel.build(golfers, [PreferenceEdge("a", "b", 3)])

    assert model.get("a", "b") == 8
    assert model.get("b", "a") == 8


def test_mutual_preference_adds_both_directions(roster_factory):
    golfers = roster_factory("a", "b")
    model = AffinityModel.build(golfers, [PreferenceEdge("a", "b", 1), PreferenceEdge("b", "a", 4)])

    assert model.get("a", "b") == 10 + 7


def test_stale_preferences_are_dropped(roster_factory):
    golfers = roster_factory("a", "b")
    preferences = [
        PreferenceEdge("a", "zed", 1),   # partner not confirmed this week
        PreferenceEdge("zed", "b", 1),   # golfer not confirmed this week
        PreferenceEdge("a", "b", 2),
    ]
    model = AffinityModel.build(golfers, preferences)

    assert model.pair_scores == {("a", "b"): 9}
    assert model.get("a", "zed") == 0


def test_self_and_out_of_range_preferences_are_ignored(roster_factory):
    golfers = roster_factory("a", "b")
    preferences = [
        PreferenceEdge("a", "a", 1),
        PreferenceEdge("a", "b", 0),
        PreferenceEdge("b", "a", 12),
    ]
    model = AffinityModel.build(golfers, preferences)

    assert model.get("a", "b") == 0
    assert not model.has_preferences()


def test_duplicate_direction_keeps_strongest_rank(roster_factory):
    golfers = roster_factory("a", "b")
    preferences = [PreferenceEdge("a", "b", 5), PreferenceEdge("a", "b", 2)]
    model = AffinityModel.build(golfers, preferences)

    assert model.get("a", "b") == 9


def test_no_preferences_gives_all_zero_table(roster_factory):
    golfers = roster_factory("a", "b", "c")
    model = AffinityModel.build(golfers, [])

    assert model.profile_ids == ["a", "b", "c"]
    assert model.group_affinity(["a", "b", "c"]) == 0
    assert not model.has_preferences()


def test_group_and_partition_affinity(roster_factory, mutual_edges):
    golfers = roster_factory("a", "b", "c", "d")
    preferences = mutual_edges("a", "b") + [PreferenceEdge("c", "a", 2)]
    model = AffinityModel.build(golfers, preferences)

    assert model.group_affinity(["a", "b", "c"]) == 20 + 9
    assert model.affinity_to_group("a", ["a", "b", "c"]) == 29
    assert model.partition_affinity([["a", "b"], ["c", "d"]]) == 20
