from enum import Enum
from typing import Any, Optional
import logging
import time

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..config import CONFIG
from ..deps import get_api_key, get_http_client
from ..errors import ProviderPayloadError, UpstreamError
from ..logs import log_tool_call


router = APIRouter(dependencies=[Depends(get_api_key)])


class AirGrade(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    POOR = "Poor"
    VERY_POOR = "VeryPoor"


# Lower bound of each band, inclusive (Korean Ministry of Environment PM2.5 scale)
PM25_BANDS: list[tuple[float, AirGrade]] = [
    (76.0, AirGrade.VERY_POOR),
    (36.0, AirGrade.POOR),
    (16.0, AirGrade.MODERATE),
    (0.0, AirGrade.GOOD),
]

GRADE_LABELS = {
    "ko": {
        AirGrade.GOOD: "좋음",
        AirGrade.MODERATE: "보통",
        AirGrade.POOR: "나쁨",
        AirGrade.VERY_POOR: "매우 나쁨",
    },
    "en": {
        AirGrade.GOOD: "Good",
        AirGrade.MODERATE: "Moderate",
        AirGrade.POOR: "Poor",
        AirGrade.VERY_POOR: "Very Poor",
    },
}


class AirQualityRecord(BaseModel):
    pm25: float
    pm10: float
    grade: AirGrade


class AirRequest(BaseModel):
    lat: float
    lon: float


def classify_pm25(pm25: float) -> AirGrade:
    # also rejects NaN
    if not pm25 >= 0:
        raise ValueError(f"pm2.5 must be a non-negative number: {pm25}")
    for lower, grade in PM25_BANDS:
        if pm25 >= lower:
            return grade
    return AirGrade.GOOD


def grade_label(grade: AirGrade, language: str = "ko") -> str:
    return GRADE_LABELS.get(language, GRADE_LABELS["en"])[grade]


def parse_air_pollution(data: Any) -> AirQualityRecord:
    try:
        components = data["list"][0]["components"]
        pm25 = float(components["pm2_5"])
        pm10 = float(components["pm10"])
        grade = classify_pm25(pm25)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ProviderPayloadError(f"air_pollution payload malformed: {e}") from e
    return AirQualityRecord(pm25=pm25, pm10=pm10, grade=grade)


async def _fetch_air_version(client: httpx.AsyncClient, version: str, lat: float, lon: float) -> AirQualityRecord:
    start_time = time.monotonic()
    url = f"{CONFIG.openweather_base}/{version}/air_pollution"
    params = {"lat": lat, "lon": lon, "appid": CONFIG.openweather_key or ""}
    try:
        resp = await client.get(url, params=params, headers={"User-Agent": CONFIG.user_agent})
    except httpx.HTTPError as e:
        log_tool_call("air", f"air_pollution_v{version}", start_time, ok=False)
        raise UpstreamError(f"air_pollution v{version} request failed: {e}") from e
    if resp.status_code != 200:
        log_tool_call("air", f"air_pollution_v{version}", start_time, ok=False, http_status=resp.status_code)
        raise UpstreamError(f"air_pollution v{version} error: {resp.status_code}", http_status=resp.status_code)
    try:
        data = resp.json()
    except ValueError as e:
        log_tool_call("air", f"air_pollution_v{version}", start_time, ok=False, http_status=resp.status_code)
        raise ProviderPayloadError(f"air_pollution v{version} returned invalid JSON: {e}") from e
    try:
        record = parse_air_pollution(data)
    except ProviderPayloadError:
        log_tool_call("air", f"air_pollution_v{version}", start_time, ok=False, http_status=resp.status_code)
        raise
    log_tool_call("air", f"air_pollution_v{version}", start_time, ok=True, http_status=resp.status_code)
    return record


async def fetch_air_quality(client: httpx.AsyncClient, lat: float, lon: float) -> Optional[AirQualityRecord]:
    """
    Walk the configured endpoint versions (newest first) and return the first
    parsable reading. Resolves to None once every version has failed.
    """
    for version in CONFIG.air_versions:
        try:
            return await _fetch_air_version(client, version, lat, lon)
        except UpstreamError as e:
            logging.warning("air quality v%s failed, trying next version: %s", version, e)
    logging.error("air quality unavailable for (%s, %s): all versions failed", lat, lon)
    return None


@router.post("/quality", response_model=AirQualityRecord)
async def quality(req: AirRequest, client: httpx.AsyncClient = Depends(get_http_client)) -> AirQualityRecord:
    record = await fetch_air_quality(client, req.lat, req.lon)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No air quality data available")
    return record
