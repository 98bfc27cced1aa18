from datetime import date, datetime
from typing import Optional, Union

from .models import UserProfile
from .places import extract_location


def schedule_location(profile: Optional[UserProfile], target_date: Union[date, datetime]) -> Optional[str]:
    """Place implied by the user's own schedule for that day, if any."""
    if profile is None or not profile.schedule:
        return None
    day = target_date.date() if isinstance(target_date, datetime) else target_date
    for entry in profile.schedule:
        if entry.date != day:
            continue
        if entry.location:
            return entry.location
        found = extract_location(entry.title)
        if found:
            return found
    return None
