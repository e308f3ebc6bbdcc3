"""
Shared fixtures: golfer rosters and an in-memory stand-in for the Supabase client.
"""

import copy
import sys
import os

import pytest

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models import Golfer, PreferenceEdge, TeeTimePreference


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the subset of the postgrest query builder the services use."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.orders = []
        self._negate = False

    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, rows):
        self.action = "insert"
        self.payload = rows
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    @property
    def not_(self):
        self._negate = True
        return self

    def is_(self, column, value):
        self.filters.append(("not_is" if self._negate else "is", column, value))
        self._negate = False
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def _matches(self, row):
        for op, column, value in self.filters:
            current = row.get(column)
            if op == "eq" and current != value:
                return False
            if op == "in" and current not in value:
                return False
            if op == "is" and current is not None:
                return False
            if op == "not_is" and current is None:
                return False
        return True

    def execute(self):
        if self.table in self.client.failing_tables:
            raise RuntimeError(f"{self.table} unavailable")

        self.client.calls.append((self.table, self.action, list(self.filters)))
        rows = self.client.tables.setdefault(self.table, [])

        if self.action == "insert":
            rows.extend(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(self.payload))

        if self.action == "delete":
            deleted = [row for row in rows if self._matches(row)]
            rows[:] = [row for row in rows if not self._matches(row)]
            return FakeResponse(deleted)

        matched = [copy.deepcopy(row) for row in rows if self._matches(row)]
        for column, desc in reversed(self.orders):
            matched.sort(
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                reverse=desc
            )
        return FakeResponse(matched)


class FakeSupabaseClient:
    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables or {})
        self.calls = []
        self.failing_tables = set()

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_client():
    return FakeSupabaseClient()


@pytest.fixture
def seeded_client():
    """One event, one schedule with six confirmed golfers, a declined golfer and two guests."""
    return FakeSupabaseClient({
        "event_schedules": [
            {"id": "sched-1", "event_id": "event-1", "events": {"allow_auto_grouping": True}},
            {"id": "sched-off", "event_id": "event-1", "events": {"allow_auto_grouping": False}},
        ],
        "rsvps": [
            {"schedule_id": "sched-1", "profile_id": "p1", "status": "in", "tee_time_preference": "early", "responded_at": "2026-10-01T08:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p2", "status": "in", "tee_time_preference": "no_preference", "responded_at": "2026-10-01T09:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p3", "status": "in", "tee_time_preference": None, "responded_at": "2026-10-01T10:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p4", "status": "in", "tee_time_preference": "late", "responded_at": "2026-10-01T11:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p5", "status": "in", "tee_time_preference": "late", "responded_at": "2026-10-01T12:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p6", "status": "in", "tee_time_preference": "early", "responded_at": "2026-10-01T13:00:00"},
            {"schedule_id": "sched-1", "profile_id": "p7", "status": "out", "tee_time_preference": "early", "responded_at": "2026-10-01T14:00:00"},
            {"schedule_id": "sched-off", "profile_id": "p1", "status": "in", "tee_time_preference": "early", "responded_at": "2026-10-01T08:00:00"},
        ],
        "playing_partner_preferences": [
            {"event_id": "event-1", "profile_id": "p1", "preferred_partner_id": "p6", "rank": 1},
            {"event_id": "event-1", "profile_id": "p6", "preferred_partner_id": "p1", "rank": 1},
            {"event_id": "event-1", "profile_id": "p4", "preferred_partner_id": "p5", "rank": 1},
            {"event_id": "event-1", "profile_id": "p2", "preferred_partner_id": "p7", "rank": 1},
        ],
        "guest_requests": [
            {"id": "guest-1", "schedule_id": "sched-1", "requested_by": "p1", "status": "approved"},
            {"id": "guest-2", "schedule_id": "sched-1", "requested_by": "p7", "status": "approved"},
            {"id": "guest-3", "schedule_id": "sched-1", "requested_by": "p2", "status": "pending"},
        ],
    })


def make_golfers(*profile_ids, early=(), late=()):
    golfers = []
    for profile_id in profile_ids:
        if profile_id in early:
            preference = TeeTimePreference.EARLY
        elif profile_id in late:
            preference = TeeTimePreference.LATE
        else:
            preference = TeeTimePreference.NONE
        golfers.append(Golfer(profile_id=profile_id, tee_time_preference=preference))
    return golfers


def mutual(a, b, rank=1):
    return [PreferenceEdge(a, b, rank), PreferenceEdge(b, a, rank)]


@pytest.fixture
def roster_factory():
    return make_golfers


@pytest.fixture
def mutual_edges():
    return mutual
