import os

# Read once at import by the config modules, so set before anything imports them
os.environ["TOOLS_API_KEY"] = "test-key"
os.environ["TOOLS_RATE_LIMIT"] = "1000/minute"
os.environ["CHAT_RATE_LIMIT"] = "1000/minute"
os.environ["OPENWEATHER_API_KEY"] = "ow-test"
os.environ["AMBEE_API_KEY"] = "ambee-test"
os.environ["AIR_VERSIONS"] = "3.0,2.5"
os.environ["LOCAL_TIMEZONE"] = "Asia/Seoul"
os.environ.pop("KAKAO_REST_API_KEY", None)

from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import httpx
import pytest


SEOUL = ZoneInfo("Asia/Seoul")
# A Wednesday
NOW = datetime(2025, 5, 14, 10, 0, tzinfo=SEOUL)


def onecall_payload(start_ts: int, hours: int = 48, tz_offset: int = 32400) -> dict:
    """One Call 3.0 shaped payload whose hourly temperature rises 1°C per hour from 10°C."""
    def sample(i: int) -> dict:
        return {
            "dt": start_ts + i * 3600,
            "temp": 10.0 + i,
            "feels_like": 9.0 + i,
            "humidity": 55,
            "wind_speed": 3.2,
            "wind_deg": 90,
            "clouds": 20,
            "dew_point": 4.5,
            "visibility": 10000,
            "uvi": 4.0,
            "pop": 0.1 * (i % 10),
            "weather": [{"description": "맑음", "icon": "01d"}],
        }

    current = dict(sample(0), sunrise=start_ts - 4 * 3600, sunset=start_ts + 9 * 3600)
    current.pop("pop")
    return {
        "timezone_offset": tz_offset,
        "current": current,
        "hourly": [sample(i) for i in range(hours)],
        "daily": [
            {"dt": start_ts + d * 86400, "temp": {"min": 8.0 + d, "max": 24.0 + d}, "sunrise": 0, "sunset": 0}
            for d in range(3)
        ],
    }


class FakeProviders:
    """Every upstream the services talk to, behind one httpx.MockTransport."""

    def __init__(self, start_ts: int):
        self.onecall = onecall_payload(start_ts)
        self.air = {"list": [{"components": {"pm2_5": 22.0, "pm10": 41.0}}]}
        self.pollen = {
            "data": [{
                "Risk": {"grass_pollen": "Low", "tree_pollen": "High", "weed_pollen": "Medium"},
                "Count": {"grass_pollen": 3, "tree_pollen": 120, "weed_pollen": 10},
                "updatedAt": "2025-05-14T01:00:00.000Z",
            }]
        }
        self.search: list = [{"lat": "37.5665", "lon": "126.9780", "display_name": "서울특별시, 대한민국"}]
        self.reverse = {"address": {"city": "Seoul", "country_code": "kr"}}
        self.kakao = {"documents": [{"x": "129.16", "y": "35.16", "place_name": "해운대구"}]}
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing:
            return httpx.Response(500, json={"message": "upstream down"})
        if path.endswith("/onecall"):
            return httpx.Response(200, json=self.onecall)
        if path.endswith("/air_pollution"):
            return httpx.Response(200, json=self.air)
        if path == "/latest/pollen/by-lat-lng":
            return httpx.Response(200, json=self.pollen)
        if path == "/search":
            return httpx.Response(200, json=self.search)
        if path == "/reverse":
            return httpx.Response(200, json=self.reverse)
        if path == "/v2/local/search/keyword.json":
            return httpx.Response(200, json=self.kakao)
        return httpx.Response(404, json={"message": f"unexpected path {path}"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def params_for(self, suffix: str) -> list[httpx.QueryParams]:
        return [r.url.params for r in self.requests if r.url.path.endswith(suffix)]


class FakeLLM:
    """Stands in for GeminiClient: scripted tool calls and reply text."""

    def __init__(self, calls: Optional[list] = None, reply: str = "좋은 하루예요 • 기온 20도 • 오늘 예상 날씨: 맑음", error: Optional[Exception] = None):
        self.calls = calls or []
        self.reply = reply
        self.error = error
        self.reply_requests: list[dict[str, Any]] = []

    async def select_tools(self, utterance: str, language: str):
        if self.error is not None:
            raise self.error
        return list(self.calls)

    async def generate_reply(self, utterance, language, calls, outputs, profile=None, history=(), location=None):
        self.reply_requests.append({
            "utterance": utterance,
            "language": language,
            "calls": list(calls),
            "outputs": list(outputs),
            "profile": profile,
            "history": list(history),
            "location": location,
        })
        return self.reply


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders(int(NOW.timestamp()))


@pytest.fixture
def make_llm():
    return FakeLLM
