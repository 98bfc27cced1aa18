from typing import Any, Callable, Optional, Sequence, TypeVar
import time

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..config import CONFIG
from ..deps import get_api_key, get_http_client
from ..errors import ProviderPayloadError, UpstreamError
from ..logs import log_tool_call


router = APIRouter(dependencies=[Depends(get_api_key)])

T = TypeVar("T")

WIND_DIRECTIONS_KO = ["북", "북동", "동", "남동", "남", "남서", "서", "북서"]
WIND_DIRECTIONS_EN = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


class HourlyPoint(BaseModel):
    ts: int
    temp: float
    pop: float = 0.0


class WeatherSnapshot(BaseModel):
    observed_at: int
    temp: float
    feels_like: float
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    condition: str = ""
    icon: str = ""
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None  # m/s
    wind_deg: Optional[float] = None
    clouds: Optional[float] = None
    dew_point: Optional[float] = None
    visibility: Optional[float] = None  # metres
    uvi: Optional[float] = None
    pop: Optional[float] = None  # 0..1
    rain_1h: float = 0.0
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    timezone_offset: int = 0
    hourly: list[HourlyPoint] = Field(default_factory=list)


class SnapshotRequest(BaseModel):
    lat: float
    lon: float
    as_of: Optional[int] = None  # unix seconds; omitted means current conditions


def nearest_by_time(items: Sequence[T], target_ts: float, key: Callable[[T], float]) -> T:
    """Item with the smallest |key(item) - target_ts|; the earlier one wins a tie."""
    if not items:
        raise ValueError("no samples to choose from")
    best = items[0]
    best_diff = abs(key(best) - target_ts)
    for item in items[1:]:
        diff = abs(key(item) - target_ts)
        if diff < best_diff:
            best, best_diff = item, diff
    return best


def wind_direction_label(deg: Optional[float], language: str = "ko") -> str:
    if deg is None:
        return "정보 없음" if language == "ko" else "unknown"
    names = WIND_DIRECTIONS_KO if language == "ko" else WIND_DIRECTIONS_EN
    return names[round(deg / 45) % 8]


def uv_level(uvi: Optional[float]) -> Optional[str]:
    if uvi is None:
        return None
    if uvi < 3:
        return "Low"
    if uvi < 6:
        return "Moderate"
    if uvi < 8:
        return "High"
    if uvi < 11:
        return "VeryHigh"
    return "Extreme"


def _rain_1h(sample: dict) -> float:
    rain = sample.get("rain")
    if isinstance(rain, dict):
        return float(rain.get("1h") or 0.0)
    return 0.0


def parse_onecall(data: Any, as_of: Optional[int] = None) -> WeatherSnapshot:
    if not isinstance(data, dict) or not isinstance(data.get("current"), dict):
        raise ProviderPayloadError("One Call payload has no 'current' block")

    current = data["current"]
    hourly_raw = [h for h in (data.get("hourly") or []) if isinstance(h, dict) and "dt" in h]
    daily_raw = [d for d in (data.get("daily") or []) if isinstance(d, dict) and "dt" in d]

    if as_of is None:
        target = current
        # current has no pop; borrow it from the first hourly slot
        pop = hourly_raw[0].get("pop") if hourly_raw else None
    else:
        if not hourly_raw:
            raise ProviderPayloadError("One Call payload has no hourly series")
        target = nearest_by_time(hourly_raw, as_of, key=lambda h: h["dt"])
        pop = target.get("pop")

    day = nearest_by_time(daily_raw, target["dt"], key=lambda d: d["dt"]) if daily_raw else {}
    day_temp = day.get("temp") if isinstance(day.get("temp"), dict) else {}

    try:
        hourly = [
            HourlyPoint(ts=int(h["dt"]), temp=float(h["temp"]), pop=float(h.get("pop") or 0.0))
            for h in hourly_raw
        ]
        description = (target.get("weather") or [{}])[0]
        return WeatherSnapshot(
            observed_at=int(target["dt"]),
            temp=round(float(target["temp"])),
            feels_like=round(float(target["feels_like"])),
            temp_min=day_temp.get("min"),
            temp_max=day_temp.get("max"),
            condition=description.get("description") or "",
            icon=description.get("icon") or "",
            humidity=target.get("humidity"),
            wind_speed=target.get("wind_speed"),
            wind_deg=target.get("wind_deg"),
            clouds=target.get("clouds"),
            dew_point=target.get("dew_point"),
            visibility=target.get("visibility"),
            uvi=target.get("uvi"),
            pop=pop,
            rain_1h=_rain_1h(target),
            sunrise=current.get("sunrise") or day.get("sunrise"),
            sunset=current.get("sunset") or day.get("sunset"),
            timezone_offset=int(data.get("timezone_offset") or 0),
            hourly=hourly,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ProviderPayloadError(f"One Call payload malformed: {e}") from e


async def fetch_weather(
    client: httpx.AsyncClient, lat: float, lon: float, as_of: Optional[int] = None
) -> WeatherSnapshot:
    start_time = time.monotonic()
    url = f"{CONFIG.openweather_base}/{CONFIG.onecall_version}/onecall"
    params = {
        "lat": lat,
        "lon": lon,
        "exclude": "minutely,alerts",
        "appid": CONFIG.openweather_key or "",
        "units": "metric",
        "lang": "kr",
    }
    headers = {"User-Agent": CONFIG.user_agent}
    try:
        resp = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        log_tool_call("weather", "onecall", start_time, ok=False)
        raise UpstreamError(f"OpenWeather request failed: {e}") from e

    if resp.status_code != 200:
        log_tool_call("weather", "onecall", start_time, ok=False, http_status=resp.status_code)
        raise UpstreamError(f"OpenWeather error: {resp.status_code}", http_status=resp.status_code)

    try:
        data = resp.json()
    except ValueError as e:
        log_tool_call("weather", "onecall", start_time, ok=False, http_status=resp.status_code)
        raise ProviderPayloadError(f"OpenWeather returned invalid JSON: {e}") from e

    try:
        snapshot = parse_onecall(data, as_of)
    except ProviderPayloadError:
        log_tool_call("weather", "onecall", start_time, ok=False, http_status=resp.status_code)
        raise

    log_tool_call("weather", "onecall", start_time, ok=True, http_status=resp.status_code)
    return snapshot


@router.post("/snapshot", response_model=WeatherSnapshot)
async def snapshot(req: SnapshotRequest, client: httpx.AsyncClient = Depends(get_http_client)) -> WeatherSnapshot:
    try:
        return await fetch_weather(client, req.lat, req.lon, req.as_of)
    except UpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
