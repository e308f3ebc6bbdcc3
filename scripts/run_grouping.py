"""
Generate groupings for one game date from the command line.
"""

import sys
import argparse
import logging
from datetime import datetime
import os

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.logging_config import setup_logging
from app.core.exceptions import (
    GroupingInputError, GroupingDataError, ScheduleNotFoundError, AutoGroupingDisabledError
)
from app.services.grouping_service import GroupingService


def main():
    """
    Load a schedule's confirmed golfers, generate groupings, validate them
    and (unless --dry-run) store them.
    """
    parser = argparse.ArgumentParser(
        description='Club Grouping Engine - Generate weekly tee groups for a game date'
    )
    parser.add_argument('schedule_id', help='Event schedule (game date) ID')
    parser.add_argument(
        '--capacity',
        type=int,
        default=None,
        help='Maximum golfers per group (default: GROUP_CAPACITY or 4)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Generate and validate but do not write to Supabase'
    )
    parser.add_argument(
        '--force',
        action='store_true',
        help='Generate even if the event has auto grouping turned off'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging (formation and swap details)'
    )
    
    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    print("\n" + "=" * 80)
    print("CLUB GROUPING ENGINE")
    print("=" * 80)
    print(f"Schedule: {args.schedule_id}")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    try:
        run = GroupingService().generate_for_schedule(
            args.schedule_id,
            capacity=args.capacity,
            force=args.force,
            persist=not args.dry_run
        )
    except (ScheduleNotFoundError, AutoGroupingDisabledError, GroupingInputError) as e:
        print(f"ERROR: {e}")
        return 1
    except GroupingDataError as e:
        print(f"ERROR: Supabase operation failed: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nGrouping interrupted by user.")
        return 1

    result = run.result
    print("\nTEE SHEET")
    print("-" * 80)
    for group in result.groups:
        guests = f"  + guests: {', '.join(group.guests)}" if group.guests else ""
        print(
            f"Tee {group.tee_order:>2}  Group {group.group_number:>2}  "
            f"harmony {group.harmony_score:.2f}  {', '.join(group.members)}{guests}"
        )

    if result.unplaced_guests:
        print("\nUNPLACED GUESTS")
        for guest in result.unplaced_guests:
            print(f"  - {guest.guest_request_id} (host {guest.host_profile_id}): {guest.reason}")

    print("\n" + "=" * 80)
    print("VALIDATION SUMMARY")
    print("=" * 80)
    print(run.validation.get_summary())
    print(f"Affinity: {result.initial_affinity} (greedy) -> {result.total_affinity} "
          f"after {result.optimizer_iterations} swaps")
    print(f"Stored: {'Yes, ' + str(run.stored_rows) + ' rows' if run.persisted else 'No (dry run)'}")
    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    return 0 if run.validation.is_valid else 1


if __name__ == '__main__':
    sys.exit(main())
