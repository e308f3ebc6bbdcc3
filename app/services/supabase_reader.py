"""
Supabase data reader for the Club Grouping Engine.
Fetches the engine's inputs (confirmed golfers, partner preferences, approved
guests) and reads stored groupings back for display.
"""

from typing import Dict, List, Optional, Set, Tuple
from supabase import create_client, Client

from app.models import (
    Golfer, PreferenceEdge, GuestAttachment, TeeTimePreference,
    StoredGrouping, StoredGroupMember
)
from app.core.config import (
    SUPABASE_URL, SUPABASE_SERVICE_KEY,
    TABLE_RSVPS, TABLE_PARTNER_PREFERENCES, TABLE_GUEST_REQUESTS,
    TABLE_EVENT_SCHEDULES, TABLE_GROUPINGS
)
from app.core.exceptions import GroupingDataError, GroupingInputError, ScheduleNotFoundError
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def create_supabase_client() -> Client:
    """Create a Supabase client from the configured URL and service key."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        raise ValueError(
            "Supabase credentials not found. Please set:\n"
            "  - SUPABASE_URL\n"
            "  - SUPABASE_SERVICE_KEY (or SUPABASE_ANON_KEY)"
        )
    return create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)


def short_name(first_name: str, last_name: str) -> str:
    """'J. Herrera' display format."""
    initial = f"{first_name[0]}. " if first_name else ""
    return f"{initial}{last_name}".strip()


class SupabaseReader:
    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or create_supabase_client()

    def fetch_schedule(self, schedule_id: str) -> Dict:
        """
        Fetch a game date and its event's grouping flag.

        Raises:
            ScheduleNotFoundError: If no schedule has this ID
        """
        try:
            response = (
                self.client.table(TABLE_EVENT_SCHEDULES)
                .select('id, event_id, events(allow_auto_grouping)')
                .eq('id', schedule_id)
                .execute()
            )
        except Exception as e:
            logger.exception("Error fetching schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to load schedule {schedule_id}: {e}") from e

        if not response.data:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")

        row = response.data[0]
        event = row.get('events') or {}
        return {
            'id': row['id'],
            'event_id': row.get('event_id'),
            'allow_auto_grouping': bool(event.get('allow_auto_grouping', False))
        }

    def fetch_confirmed_golfers(self, schedule_id: str) -> List[Golfer]:
        """Golfers whose RSVP for this schedule is 'in', with their tee time preference."""
        try:
            response = (
                self.client.table(TABLE_RSVPS)
                .select('profile_id, tee_time_preference')
                .eq('schedule_id', schedule_id)
                .eq('status', 'in')
                .order('responded_at')
                .execute()
            )
        except Exception as e:
            logger.exception("Error fetching confirmed golfers for schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to load confirmed golfers: {e}") from e

        golfers = []
        for row in response.data:
            try:
                preference = TeeTimePreference.parse(row.get('tee_time_preference'))
            except GroupingInputError:
                logger.warning(
                    "Unknown tee time preference %r for %s, treating as none",
                    row.get('tee_time_preference'), row['profile_id']
                )
                preference = TeeTimePreference.NONE
            golfers.append(Golfer(profile_id=str(row['profile_id']), tee_time_preference=preference))

        logger.info("Loaded %d confirmed golfers for schedule %s", len(golfers), schedule_id)
        return golfers

    def fetch_partner_preferences(self, event_id: str) -> List[PreferenceEdge]:
        """All ranked partner preferences for an event; the engine filters to confirmed golfers."""
        try:
            response = (
                self.client.table(TABLE_PARTNER_PREFERENCES)
                .select('profile_id, preferred_partner_id, rank')
                .eq('event_id', event_id)
                .execute()
            )
        except Exception as e:
            logger.exception("Error fetching partner preferences for event %s", event_id)
            raise GroupingDataError(f"Failed to load partner preferences: {e}") from e

        preferences = [
            PreferenceEdge(
                from_profile_id=str(row['profile_id']),
                to_profile_id=str(row['preferred_partner_id']),
                rank=int(row.get('rank') or 1)
            )
            for row in response.data
        ]
        logger.info("Loaded %d partner preferences for event %s", len(preferences), event_id)
        return preferences

    def fetch_approved_guests(self, schedule_id: str) -> List[GuestAttachment]:
        """Approved guest requests for this schedule, tagged with the host's profile ID."""
        try:
            response = (
                self.client.table(TABLE_GUEST_REQUESTS)
                .select('id, requested_by')
                .eq('schedule_id', schedule_id)
                .eq('status', 'approved')
                .execute()
            )
        except Exception as e:
            logger.exception("Error fetching approved guests for schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to load approved guests: {e}") from e

        guests = [
            GuestAttachment(guest_request_id=str(row['id']), host_profile_id=str(row['requested_by']))
            for row in response.data
        ]
        logger.info("Loaded %d approved guests for schedule %s", len(guests), schedule_id)
        return guests

    def load_grouping_inputs(
        self, schedule_id: str
    ) -> Tuple[Dict, List[Golfer], List[PreferenceEdge], List[GuestAttachment]]:
        schedule = self.fetch_schedule(schedule_id)
        golfers = self.fetch_confirmed_golfers(schedule_id)
        preferences = self.fetch_partner_preferences(schedule['event_id']) if schedule['event_id'] else []
        guests = self.fetch_approved_guests(schedule_id)
        return schedule, golfers, preferences, guests

    def fetch_stored_groupings(self, schedule_id: str) -> List[StoredGrouping]:
        """
        Fetch stored groupings for a schedule, with profile and guest details.
        Returns groups sorted by tee order. Within each group, members are
        sorted by name and each guest follows its host.
        """
        try:
            member_rows = (
                self.client.table(TABLE_GROUPINGS)
                .select(
                    'group_number, tee_order, harmony_score, profile_id, '
                    'profile:profiles(id, first_name, last_name, phone, email, ghin_number)'
                )
                .eq('schedule_id', schedule_id)
                .not_.is_('profile_id', 'null')
                .order('tee_order')
                .order('group_number')
                .execute()
            ).data or []
        except Exception as e:
            logger.exception("Error fetching member groupings for schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to load stored groupings: {e}") from e

        try:
            guest_rows = (
                self.client.table(TABLE_GROUPINGS)
                .select(
                    'group_number, tee_order, harmony_score, guest_request_id, '
                    'guest:guest_requests(id, requested_by, guest_first_name, guest_last_name, '
                    'guest_email, guest_phone, guest_ghin_number)'
                )
                .eq('schedule_id', schedule_id)
                .not_.is_('guest_request_id', 'null')
                .order('group_number')
                .execute()
            ).data or []
        except Exception:
            # Display-only read: show members even if guest details fail
            logger.exception("Error fetching guest groupings for schedule %s", schedule_id)
            guest_rows = []

        if not member_rows and not guest_rows:
            return []

        profile_ids = [row['profile_id'] for row in member_rows if row.get('profile_id')]
        tee_times = self._fetch_tee_times(schedule_id, profile_ids)
        event_id = self._event_id_for(schedule_id) if profile_ids else None
        partner_prefs = self._fetch_partner_map(event_id, profile_ids)

        names: Dict[str, str] = {}
        for row in member_rows:
            profile = row.get('profile')
            if profile:
                names[profile['id']] = short_name(profile.get('first_name', ''), profile.get('last_name', ''))

        groups: Dict[int, StoredGrouping] = {}
        for row in member_rows:
            group = groups.setdefault(row['group_number'], StoredGrouping(
                group_number=row['group_number'],
                tee_order=row['tee_order'],
                harmony_score=row.get('harmony_score')
            ))
            profile = row.get('profile')
            if not profile:
                continue
            group.members.append(StoredGroupMember(
                profile_id=profile['id'],
                guest_request_id=None,
                first_name=profile.get('first_name') or '',
                last_name=profile.get('last_name') or '',
                phone=profile.get('phone') or '',
                email=profile.get('email') or '',
                ghin_number=profile.get('ghin_number') or '',
                tee_time_preference=tee_times.get(profile['id'])
            ))

        for row in guest_rows:
            group = groups.get(row['group_number'])
            guest = row.get('guest')
            if group is None or not guest:
                continue
            group.members.append(StoredGroupMember(
                profile_id=None,
                guest_request_id=guest['id'],
                first_name=guest.get('guest_first_name') or '',
                last_name=guest.get('guest_last_name') or '',
                phone=guest.get('guest_phone') or '',
                email=guest.get('guest_email') or '',
                ghin_number=guest.get('guest_ghin_number') or '',
                is_guest=True,
                host_name=names.get(guest.get('requested_by'), "Member"),
                host_profile_id=guest.get('requested_by')
            ))

        ordered = sorted(groups.values(), key=lambda g: (g.tee_order, g.group_number))
        for group in ordered:
            in_group = {m.profile_id for m in group.members if m.profile_id}
            for member in group.members:
                if member.is_guest:
                    continue
                for partner_id in sorted(partner_prefs.get(member.profile_id, set())):
                    if partner_id in in_group and partner_id in names:
                        member.preferred_partners_in_group.append(names[partner_id])
            group.members = self._order_members(group.members)

        return ordered

    def _fetch_tee_times(self, schedule_id: str, profile_ids: List[str]) -> Dict[str, Optional[str]]:
        if not profile_ids:
            return {}
        try:
            rows = (
                self.client.table(TABLE_RSVPS)
                .select('profile_id, tee_time_preference')
                .eq('schedule_id', schedule_id)
                .in_('profile_id', profile_ids)
                .execute()
            ).data or []
        except Exception:
            logger.exception("Error fetching tee time preferences for schedule %s", schedule_id)
            return {}

        tee_times = {}
        for row in rows:
            value = row.get('tee_time_preference')
            tee_times[row['profile_id']] = value if value in ('early', 'late') else None
        return tee_times

    def _event_id_for(self, schedule_id: str) -> Optional[str]:
        try:
            return self.fetch_schedule(schedule_id)['event_id']
        except (GroupingDataError, ScheduleNotFoundError):
            logger.warning("Could not load event for schedule %s", schedule_id)
            return None

    def _fetch_partner_map(self, event_id: Optional[str], profile_ids: List[str]) -> Dict[str, Set[str]]:
        """profile ID -> preferred partner IDs who are also confirmed this week."""
        if not event_id or not profile_ids:
            return {}
        try:
            rows = (
                self.client.table(TABLE_PARTNER_PREFERENCES)
                .select('profile_id, preferred_partner_id')
                .eq('event_id', event_id)
                .in_('profile_id', profile_ids)
                .execute()
            ).data or []
        except Exception:
            logger.exception("Error fetching partner preferences for event %s", event_id)
            return {}

        confirmed = set(profile_ids)
        partner_map: Dict[str, Set[str]] = {}
        for row in rows:
            if row['preferred_partner_id'] in confirmed:
                partner_map.setdefault(row['profile_id'], set()).add(row['preferred_partner_id'])
        return partner_map

    def _order_members(self, members: List[StoredGroupMember]) -> List[StoredGroupMember]:
        def by_name(m: StoredGroupMember):
            return (m.last_name.lower(), m.first_name.lower())

        regulars = sorted([m for m in members if not m.is_guest], key=by_name)
        guests = [m for m in members if m.is_guest]

        ordered = []
        for member in regulars:
            ordered.append(member)
            ordered.extend(sorted(
                [g for g in guests if g.host_profile_id == member.profile_id], key=by_name
            ))

        placed = {m.guest_request_id for m in ordered if m.is_guest}
        ordered.extend(g for g in guests if g.guest_request_id not in placed)
        return ordered
