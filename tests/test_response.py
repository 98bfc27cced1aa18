from datetime import datetime

import pytest

from orchestrator.intents import Feature
from orchestrator.models import ChatResponse, GraphPoint, ResolvedTarget, ResponseContext
from orchestrator.response import assemble, attach_air_summary, attach_graph, format_reply
from weather_tools.routers.air import AirGrade, AirQualityRecord


SAMPLES = [
    "**민서님**, 서울은 맑아요 • 기온은 **20도** • 오늘 예상 날씨: 맑고 따뜻해요",
    "Seoul is sunny • - wind 3 m/s • Today's forecast: clear skies",
    "• 첫 항목 • 오늘 예상 날씨: 흐림",
    "그냥 한 문장이에요.",
    "  **굵게**만 있어요  ",
    "a •  • b •",
    "",
]


def test_format_reply_layout():
    text = "**민서님**, 서울은 맑아요 • 기온은 **20도** • 오늘 예상 날씨: 맑고 따뜻해요"
    assert format_reply(text) == "민서님, 서울은 맑아요\n- 기온은 20도\n\n- 오늘 예상 날씨: 맑고 따뜻해요"


def test_format_reply_english_forecast_label():
    assert format_reply("Seoul is sunny • - wind 3 m/s • Today's forecast: clear skies") == (
        "Seoul is sunny\n- wind 3 m/s\n\n- Today's forecast: clear skies"
    )


def test_format_reply_without_header():
    assert format_reply("• 첫 항목 • 오늘 예상 날씨: 흐림") == "- 첫 항목\n\n- 오늘 예상 날씨: 흐림"


def test_format_reply_handles_none():
    assert format_reply(None) == ""


@pytest.mark.parametrize("text", SAMPLES)
def test_format_reply_is_idempotent(text):
    once = format_reply(text)
    assert format_reply(once) == once


def _context(graph=None, air=None) -> ResponseContext:
    target = ResolvedTarget(lat=37.5, lon=127.0, display_name="서울특별시", date=datetime(2025, 5, 14, 10), is_today=True)
    return ResponseContext(location_name="서울특별시", date_label="2025-05-14 (수)", target=target, graph=graph, air=air)


GRAPH = [GraphPoint(hour="10am", temp=20), GraphPoint(hour="1pm", temp=23)]
AIR = AirQualityRecord(pm25=40.0, pm10=70.0, grade=AirGrade.POOR)


def test_graph_attached_only_when_asked():
    base = ChatResponse(reply="ok")
    assert attach_graph(base, _context(graph=GRAPH), {Feature.GRAPH}).graph == GRAPH
    assert attach_graph(base, _context(graph=GRAPH), {Feature.WEATHER}).graph is None
    assert attach_graph(base, _context(graph=None), {Feature.GRAPH}).graph is None


def test_air_summary_attached_only_when_asked():
    base = ChatResponse(reply="ok")
    dust = attach_air_summary(base, _context(air=AIR), {Feature.AIR}, "ko").dust
    assert (dust.value, dust.level) == (40.0, "나쁨")
    assert attach_air_summary(base, _context(air=AIR), {Feature.WEATHER}).dust is None
    assert attach_air_summary(base, _context(air=None), {Feature.AIR}).dust is None


def test_assemble_attaches_both():
    response = assemble("**a** • b", _context(graph=GRAPH, air=AIR), {Feature.GRAPH, Feature.AIR}, "en")
    assert response.reply == "a\n- b"
    assert response.graph == GRAPH
    assert response.dust.level == "Poor"
