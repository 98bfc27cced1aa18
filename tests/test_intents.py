import pytest

from orchestrator.intents import Feature, calls_from_features, detect_features, detect_language, required_domains


@pytest.mark.parametrize(
    "text,expected",
    [
        ("미세먼지 알려줘", {Feature.AIR}),
        ("마스크 써야 해?", {Feature.AIR}),
        ("꽃가루 어때", {Feature.POLLEN}),
        ("서울 날씨 어때", {Feature.WEATHER}),
        ("오늘 기온 그래프 보여줘", {Feature.WEATHER, Feature.GRAPH}),
        ("뭐 입을까?", {Feature.GRAPH}),
        ("How's the AIR QUALITY in Seoul", {Feature.AIR}),
        ("What should I wear tomorrow", {Feature.GRAPH}),
        ("Is pollen bad and will it rain?", {Feature.POLLEN, Feature.WEATHER}),
        ("안녕", set()),
    ],
)
def test_detect_features(text, expected):
    assert detect_features(text) == expected


def test_latin_triggers_need_word_boundaries():
    assert Feature.AIR not in detect_features("I need a new chair")
    assert Feature.WEATHER not in detect_features("that was a brainstorm")


def test_detect_language():
    assert detect_language("서울 날씨") == "ko"
    assert detect_language("Seoul 날씨") == "ko"
    assert detect_language("weather in Seoul") == "en"
    assert detect_language("") == "en"


def test_fine_calls_follow_features():
    calls = calls_from_features({Feature.AIR, Feature.POLLEN})
    assert [c.name for c in calls] == ["get_air_quality", "get_pollen_info"]

    calls = calls_from_features({Feature.GRAPH})
    assert [c.name for c in calls] == ["get_weather"]
    assert calls[0].arguments["graphNeeded"] is True

    assert [c.name for c in calls_from_features(set())] == ["get_weather"]


def test_coarse_calls_use_full_weather():
    calls = calls_from_features({Feature.AIR}, mode="coarse")
    assert [c.name for c in calls] == ["get_full_weather"]
    assert calls[0].arguments["graphNeeded"] is False


def test_required_domains():
    assert required_domains({Feature.AIR}) == ["air"]
    assert required_domains({Feature.POLLEN, Feature.GRAPH}) == ["weather", "pollen"]
    assert required_domains(set()) == []


@pytest.mark.parametrize("text", ["여행 준비 다 했어", "비행기 표 샀어", "눈물이 나", "눈치 없네"])
def test_one_syllable_triggers_inside_words_do_not_fire(text):
    assert Feature.WEATHER not in detect_features(text)


@pytest.mark.parametrize("text", ["비 와?", "비가 올까", "내일 비올까", "눈이 와?", "눈 소식 있어?", "비"])
def test_one_syllable_triggers_standing_alone(text):
    assert Feature.WEATHER in detect_features(text)
