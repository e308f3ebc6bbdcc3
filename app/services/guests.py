"""
Guest placement for the Club Grouping Engine.
Guests ride along in their host's group and never touch scoring or capacity.
"""

from typing import Dict, List

from app.models import Group, GroupingResult, GuestAttachment, UnplacedGuest
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class GuestAttacher:

    def attach(self, result: GroupingResult, guests: List[GuestAttachment]) -> GroupingResult:
        """
        Place each guest in the group of its host. Guests whose host is not a
        confirmed golfer are reported in `result.unplaced_guests`. A guest
        listed under several hosts stays with the first host in sorted order;
        the other listings are reported as unplaced.
        """
        host_groups: Dict[str, Group] = {}
        for group in result.groups:
            for profile_id in group.members:
                host_groups[profile_id] = group

        placed_with: Dict[str, str] = {}
        for guest in sorted(guests, key=lambda g: (g.host_profile_id, g.guest_request_id)):
            first_host = placed_with.get(guest.guest_request_id)
            if first_host is not None:
                if first_host != guest.host_profile_id:
                    logger.warning(
                        "Guest %s listed under hosts %s and %s, keeping %s",
                        guest.guest_request_id, first_host, guest.host_profile_id, first_host
                    )
                    result.unplaced_guests.append(UnplacedGuest(
                        guest_request_id=guest.guest_request_id,
                        host_profile_id=guest.host_profile_id,
                        reason=f"conflicts with host {first_host}, guest already placed"
                    ))
                continue

            group = host_groups.get(guest.host_profile_id)
            if group is None:
                logger.warning(
                    "Guest %s host %s not found in any group",
                    guest.guest_request_id, guest.host_profile_id
                )
                result.unplaced_guests.append(UnplacedGuest(
                    guest_request_id=guest.guest_request_id,
                    host_profile_id=guest.host_profile_id
                ))
                continue
            group.guests.append(guest.guest_request_id)
            placed_with[guest.guest_request_id] = guest.host_profile_id

        return result
