"""
Derived check-in status of a guest
"""

from enum import Enum
from typing import Any, Dict, Union

from .options import GuestCustomData


class GuestStatus(str, Enum):
    NOT_ASSIGNED = "not_assigned"
    ASSIGNED = "assigned"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


def derive_guest_status(custom_data: Union[GuestCustomData, Dict[str, Any], str, None]) -> GuestStatus:
    """Compute a guest's status from their custom-data document.

    A check-out timestamp wins over everything else, then a check-in
    timestamp, then a hotel or room assignment.
    """
    if not isinstance(custom_data, GuestCustomData):
        custom_data = GuestCustomData.parse(custom_data)

    if custom_data.checked_out_at:
        return GuestStatus.CHECKED_OUT
    if custom_data.checked_in_at:
        return GuestStatus.CHECKED_IN
    if custom_data.is_assigned:
        return GuestStatus.ASSIGNED
    return GuestStatus.NOT_ASSIGNED
