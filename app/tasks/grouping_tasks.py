"""
Celery tasks for grouping generation.
"""

import traceback

from app.core.celery_app import celery_app
from app.core.logging_config import get_logger
from app.services.grouping_service import GroupingService

logger = get_logger(__name__)


@celery_app.task(bind=True, name="generate_groupings")
def generate_groupings_task(self, schedule_id: str, capacity: int = None, force: bool = False):
    """
    Async task to generate and store groupings for one game date.
    
    Returns:
        dict: Grouping data with validation results
    """
    try:
        self.update_state(
            state="PROGRESS",
            meta={"status": f"Generating groupings for schedule {schedule_id}..."}
        )

        run = GroupingService().generate_for_schedule(schedule_id, capacity=capacity, force=force)

        return {
            "success": True,
            "message": f"Generated {len(run.result.groups)} groups for {run.result.golfer_count} golfers",
            **run.to_dict()
        }

    except Exception as e:
        error_trace = traceback.format_exc()
        logger.error("Error in generate_groupings_task: %s", error_trace)

        return {
            "success": False,
            "message": f"Grouping generation failed: {str(e)}",
            "error": str(e),
            "traceback": error_trace
        }
