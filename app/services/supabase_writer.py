"""
Supabase writer for the Club Grouping Engine.
Stores a GroupingResult as one row per golfer and one row per placed guest.
"""

from typing import Dict, List, Optional
from supabase import Client

from app.models import GroupingResult
from app.services.supabase_reader import create_supabase_client
from app.core.config import TABLE_GROUPINGS
from app.core.exceptions import GroupingDataError
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class SupabaseWriter:
    """
    Writes groupings to the `groupings` table. Each store fully replaces the
    schedule's previous groupings so re-runs never merge with stale rows.
    """

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or create_supabase_client()

    def build_rows(self, schedule_id: str, result: GroupingResult) -> List[Dict]:
        rows = []
        for group in result.groups:
            base = {
                'schedule_id': schedule_id,
                'group_number': group.group_number,
                'tee_order': group.tee_order,
                'harmony_score': round(group.harmony_score, 4),
            }
            for profile_id in group.members:
                rows.append({**base, 'profile_id': profile_id, 'guest_request_id': None})
            for guest_request_id in group.guests:
                rows.append({**base, 'profile_id': None, 'guest_request_id': guest_request_id})
        return rows

    def store_groupings(self, schedule_id: str, result: GroupingResult) -> int:
        """
        Replace the stored groupings for a schedule.

        Returns:
            Number of rows written

        Raises:
            GroupingDataError: If the delete or insert fails
        """
        rows = self.build_rows(schedule_id, result)

        try:
            self.client.table(TABLE_GROUPINGS).delete().eq('schedule_id', schedule_id).execute()
        except Exception as e:
            logger.exception("Error deleting old groupings for schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to clear old groupings: {e}") from e

        if not rows:
            return 0

        try:
            self.client.table(TABLE_GROUPINGS).insert(rows).execute()
        except Exception as e:
            logger.exception("Error inserting groupings for schedule %s", schedule_id)
            raise GroupingDataError(f"Failed to store groupings: {e}") from e

        logger.info("Stored %d grouping rows for schedule %s", len(rows), schedule_id)
        return len(rows)
