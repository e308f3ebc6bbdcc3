"""
Schedule-level grouping workflow.
Loads a game date's inputs from Supabase, runs the engine, validates the
result and stores it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models import Golfer, GuestAttachment, GroupingResult, GroupingValidationResult, StoredGrouping
from app.services.grouping_engine import GroupingEngine
from app.services.validator import GroupingValidator
from app.services.supabase_reader import SupabaseReader
from app.services.supabase_writer import SupabaseWriter
from app.core.exceptions import AutoGroupingDisabledError, GroupingDataError
from app.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class GroupingRun:
    schedule_id: str
    result: GroupingResult
    validation: GroupingValidationResult
    stored_rows: int = 0
    persisted: bool = False
    generation_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule_id": self.schedule_id,
            "persisted": self.persisted,
            "stored_rows": self.stored_rows,
            "generation_time": self.generation_time,
            "grouping": self.result.to_dict(),
            "validation": self.validation.to_dict(),
        }


class GroupingService:
    def __init__(
        self,
        reader: Optional[SupabaseReader] = None,
        writer: Optional[SupabaseWriter] = None,
        validator: Optional[GroupingValidator] = None
    ):
        self.reader = reader or SupabaseReader()
        self.writer = writer or SupabaseWriter(self.reader.client)
        self.validator = validator or GroupingValidator()

    def generate_for_schedule(
        self,
        schedule_id: str,
        capacity: Optional[int] = None,
        force: bool = False,
        persist: bool = True
    ) -> GroupingRun:
        """
        Generate (and by default store) groupings for one game date.

        Args:
            schedule_id: The event schedule (game date) to group
            capacity: Group capacity override
            force: Generate even if the event has auto-grouping turned off
            persist: Write the result to Supabase

        Raises:
            ScheduleNotFoundError: Unknown schedule
            AutoGroupingDisabledError: Event disallows auto grouping and force is off
            GroupingInputError: No confirmed golfers or bad capacity
            GroupingDataError: Supabase read/write failed, or the result
                failed validation and was not stored
        """
        start_time = datetime.now()

        schedule, golfers, preferences, guests = self.reader.load_grouping_inputs(schedule_id)
        if not schedule['allow_auto_grouping'] and not force:
            raise AutoGroupingDisabledError(
                f"Auto grouping is disabled for the event of schedule {schedule_id}"
            )

        result = GroupingEngine(capacity=capacity).generate(golfers, preferences, guests)
        run = GroupingRun(
            schedule_id=schedule_id,
            result=result,
            validation=self.validate(result, golfers, guests)
        )

        if persist:
            if not run.validation.is_valid:
                raise GroupingDataError(
                    f"Refusing to store invalid groupings for schedule {schedule_id}: "
                    f"{len(run.validation.hard_constraint_violations)} hard violations"
                )
            run.stored_rows = self.writer.store_groupings(schedule_id, result)
            run.persisted = True

        run.generation_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            "Schedule %s: %d groups, %d unplaced guests, persisted=%s (%.2fs)",
            schedule_id, len(result.groups), len(result.unplaced_guests),
            run.persisted, run.generation_time
        )
        return run

    def validate(
        self,
        result: GroupingResult,
        golfers: List[Golfer],
        guests: List[GuestAttachment]
    ) -> GroupingValidationResult:
        return self.validator.validate_result(result, golfers, guests)

    def get_stored_groupings(self, schedule_id: str) -> List[StoredGrouping]:
        return self.reader.fetch_stored_groupings(schedule_id)
