import math

import httpx
import pytest

from weather_tools.errors import ProviderPayloadError
from weather_tools.routers.air import (
    AirGrade,
    classify_pm25,
    fetch_air_quality,
    grade_label,
    parse_air_pollution,
)


SEVERITY = [AirGrade.GOOD, AirGrade.MODERATE, AirGrade.POOR, AirGrade.VERY_POOR]


@pytest.mark.parametrize(
    "pm25,grade",
    [
        (0, AirGrade.GOOD),
        (15, AirGrade.GOOD),
        (16, AirGrade.MODERATE),
        (35, AirGrade.MODERATE),
        (36, AirGrade.POOR),
        (75, AirGrade.POOR),
        (76, AirGrade.VERY_POOR),
        (112, AirGrade.VERY_POOR),
    ],
)
def test_classify_boundaries(pm25, grade):
    assert classify_pm25(pm25) == grade


def test_classify_is_total_and_monotonic():
    previous = 0
    for step in range(0, 401):
        rank = SEVERITY.index(classify_pm25(step / 2))
        assert rank >= previous
        previous = rank


@pytest.mark.parametrize("bad", [-1, -0.01, math.nan])
def test_classify_rejects_negative_and_nan(bad):
    with pytest.raises(ValueError):
        classify_pm25(bad)


def test_grade_labels():
    assert grade_label(AirGrade.POOR, "ko") == "나쁨"
    assert grade_label(AirGrade.VERY_POOR, "en") == "Very Poor"
    assert grade_label(AirGrade.GOOD, "fr") == "Good"


def test_parse_air_pollution():
    record = parse_air_pollution({"list": [{"components": {"pm2_5": 44.2, "pm10": 80}}]})
    assert record.pm25 == 44.2
    assert record.pm10 == 80.0
    assert record.grade == AirGrade.POOR


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"list": []},
        {"list": [{"components": {"pm10": 3}}]},
        {"list": [{"components": {"pm2_5": "n/a", "pm10": 3}}]},
        {"list": [{"components": {"pm2_5": -4, "pm10": 3}}]},
        None,
    ],
)
def test_parse_air_pollution_rejects_malformed(payload):
    with pytest.raises(ProviderPayloadError):
        parse_air_pollution(payload)


async def test_primary_version_used_when_healthy(providers):
    async with providers.client() as client:
        record = await fetch_air_quality(client, 37.5, 127.0)
    assert record.grade == AirGrade.MODERATE
    assert providers.paths() == ["/data/3.0/air_pollution"]


async def test_falls_back_to_older_version(providers):
    providers.failing.add("/data/3.0/air_pollution")
    async with providers.client() as client:
        record = await fetch_air_quality(client, 37.5, 127.0)
    assert record is not None
    assert providers.paths() == ["/data/3.0/air_pollution", "/data/2.5/air_pollution"]


async def test_malformed_primary_payload_also_falls_back(providers):
    calls = []

    def handler(request):
        calls.append(request.url.path)
        if "/3.0/" in request.url.path:
            return httpx.Response(200, json={"list": []})
        return httpx.Response(200, json=providers.air)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        record = await fetch_air_quality(client, 37.5, 127.0)
    assert record.pm25 == 22.0
    assert len(calls) == 2


async def test_all_versions_failing_resolves_to_none(providers):
    providers.failing.update({"/data/3.0/air_pollution", "/data/2.5/air_pollution"})
    async with providers.client() as client:
        assert await fetch_air_quality(client, 37.5, 127.0) is None


async def test_network_error_resolves_to_none():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await fetch_air_quality(client, 37.5, 127.0) is None
