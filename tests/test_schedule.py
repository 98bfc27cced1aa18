from datetime import date, datetime

from orchestrator.models import ScheduleEntry, UserProfile
from orchestrator.schedule import schedule_location


def _profile(*entries: ScheduleEntry) -> UserProfile:
    return UserProfile(name="민서", schedule=list(entries))


def test_entry_location_wins():
    profile = _profile(ScheduleEntry(date=date(2025, 5, 15), title="부산 출장", location="해운대구"))
    assert schedule_location(profile, datetime(2025, 5, 15, 9)) == "해운대구"


def test_location_read_from_title():
    profile = _profile(ScheduleEntry(date=date(2025, 5, 15), title="부산 출장"))
    assert schedule_location(profile, date(2025, 5, 15)) == "부산광역시"


def test_other_days_are_ignored():
    profile = _profile(ScheduleEntry(date=date(2025, 5, 16), title="제주 여행"))
    assert schedule_location(profile, date(2025, 5, 15)) is None


def test_no_profile():
    assert schedule_location(None, date(2025, 5, 15)) is None


def test_profile_accepts_wire_format():
    profile = UserProfile.model_validate({
        "name": "Minseo",
        "sensitiveFactors": ["꽃가루"],
        "schedule": [{"date": "2025-05-15", "title": "대전 회의"}],
    })
    assert profile.sensitive_factors == ["꽃가루"]
    assert schedule_location(profile, date(2025, 5, 15)) == "대전광역시"
