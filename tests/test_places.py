import pytest

from orchestrator.places import canonicalize, extract_location, strip_particles, strip_time_expressions


@pytest.mark.parametrize(
    "text",
    [
        "미세먼지 알려줘",
        "습도 알려줘",
        "꽃가루 어때?",
        "내일 우산 필요해?",
        "오늘 뭐 입을까",
        "다음주 월요일 날씨 알려줘",
        "What's the weather?",
        "How's the weather today?",
        "Hey, is it going to rain?",
        "Are there clouds today?",
        "Give me the AQI for today",
        "Check the PM2.5 please",
        "",
    ],
)
def test_no_location(text):
    assert extract_location(text) is None


@pytest.mark.parametrize(
    "text,expected",
    [
        ("서울 날씨 어때", "서울특별시"),
        ("부산에서 비 와?", "부산광역시"),
        ("내일 대구 날씨", "대구광역시"),
        ("다음주 월요일 제주 날씨", "제주특별자치도"),
        ("세종은 미세먼지 어때", "세종특별자치시"),
        ("해운대구 날씨 어때?", "해운대구"),
        ("강남구에는 비 와?", "강남구"),
        ("구로 날씨", "구로"),
        ("서울날씨 알려줘", "서울특별시"),
        ("3일 뒤 수원 날씨", "수원"),
        ("테헤란로 날씨", "테헤란로"),
        ("세종로 날씨", "세종로"),
        ("을지로 미세먼지", "을지로"),
        ("동래 날씨 어때", "동래"),
        ("동래에서 비 와?", "동래"),
        ("중앙로 날씨", "중앙로"),
        ("서울로 가는데 날씨 어때", "서울특별시"),
    ],
)
def test_korean_locations(text, expected):
    assert extract_location(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("What's the weather in Tokyo tomorrow?", "Tokyo"),
        ("air quality for New York", "New York"),
        ("Seoul 날씨 어때", "Seoul"),
        ("Hey, what's it like in Busan?", "Busan"),
        ("Is it cold in Jeju today?", "Jeju"),
        ("Tomorrow, will Osaka be rainy?", "Osaka"),
    ],
)
def test_english_locations(text, expected):
    assert extract_location(text) == expected


def test_time_expressions_are_removed_before_matching():
    cleaned = strip_time_expressions("다음주 월요일 오후 3시 광주 날씨")
    assert "월요일" not in cleaned
    assert "3시" not in cleaned
    assert "광주" in cleaned


def test_particle_stripping_keeps_two_syllables():
    assert strip_particles("부산에서") == "부산"
    assert strip_particles("인천으로") == "인천"
    assert strip_particles("구로") == "구로"


def test_canonicalize_leaves_unknown_names():
    assert canonicalize("서울") == "서울특별시"
    assert canonicalize("울산") == "울산광역시"
    assert canonicalize("춘천") == "춘천"


def test_bare_ro_is_kept_on_road_names():
    assert strip_particles("을지로") == "을지로"
    assert strip_particles("서울로") == "서울"
    assert strip_particles("강남구로") == "강남구"
    assert strip_particles("세종로") == "세종로"
