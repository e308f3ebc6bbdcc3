"""
Error types raised by the grouping engine and its Supabase collaborators.
"""


class GroupingInputError(ValueError):
    """Engine input is unusable (empty roster, bad capacity, duplicate golfer...)."""


class GroupingDataError(RuntimeError):
    """A Supabase read or write failed."""


class ScheduleNotFoundError(LookupError):
    """The requested schedule does not exist."""


class AutoGroupingDisabledError(RuntimeError):
    """The schedule's event does not allow automatic grouping."""
