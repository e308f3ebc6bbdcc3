"""
Services for grouping generation, validation, and Supabase integration.
"""

from .affinity import AffinityModel, rank_to_weight
from .group_former import GroupFormer
from .optimizer import LocalSearchOptimizer
from .guests import GuestAttacher
from .grouping_engine import GroupingEngine, generate_groupings
from .validator import GroupingValidator

__all__ = [
    "AffinityModel",
    "rank_to_weight",
    "GroupFormer",
    "LocalSearchOptimizer",
    "GuestAttacher",
    "GroupingEngine",
    "generate_groupings",
    "GroupingValidator"
]
