"""
Tool orchestration: the model's declared tool calls -> one ResponseContext.

Location and date are resolved once for all calls, coordinates are looked up,
then every data source the calls need is fetched concurrently. A failed
source is logged and left empty; only an unresolvable location stops the run,
and it does so before any data fetch.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Union

import httpx

from weather_tools.routers.air import fetch_air_quality
from weather_tools.routers.pollen import fetch_pollen
from weather_tools.routers.weather import HourlyPoint, fetch_weather, nearest_by_time

from . import settings
from .dates import date_label, match_date, nearest_forecast_bucket
from .geo import GeoResolver
from .intents import Feature, detect_features, detect_language
from .models import Clarification, Coords, GraphPoint, ResolvedTarget, ResponseContext, ToolCall, UserProfile, domains_for_tool
from .places import canonicalize, extract_location
from .schedule import schedule_location
from .tools import CURRENT_LOCATION


logger = logging.getLogger(__name__)

DOMAIN_ORDER = ("weather", "air", "pollen")
GRAPH_POINTS = 6
GRAPH_STEP_HOURS = 3
# targets closer to now than this read current conditions instead of a forecast hour
CURRENT_WINDOW = timedelta(hours=1)


def hour_label(hour: int) -> str:
    suffix = "am" if hour < 12 else "pm"
    return f"{hour % 12 or 12}{suffix}"


def build_temperature_graph(hourly: Sequence[HourlyPoint], tz_offset: int, now_ts: float) -> List[GraphPoint]:
    """Six points three hours apart from the current local hour, each from the closest hourly sample."""
    if not hourly:
        return []
    local_now = datetime.fromtimestamp(now_ts + tz_offset, tz=timezone.utc)
    start_ts = local_now.replace(minute=0, second=0, microsecond=0).timestamp() - tz_offset
    points: List[GraphPoint] = []
    for i in range(GRAPH_POINTS):
        ts = start_ts + i * GRAPH_STEP_HOURS * 3600
        sample = nearest_by_time(hourly, ts, key=lambda p: p.ts)
        local = datetime.fromtimestamp(ts + tz_offset, tz=timezone.utc)
        points.append(GraphPoint(hour=hour_label(local.hour), temp=int(round(sample.temp))))
    return points


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def merge_arguments(calls: Sequence[ToolCall]) -> Dict[str, Any]:
    """One location / date / graph flag for the whole turn; the first call that states one wins."""
    merged: Dict[str, Any] = {"location": None, "date": None, "graphNeeded": False}
    for call in calls:
        args = call.arguments or {}
        location = args.get("location")
        if merged["location"] is None and isinstance(location, str) and location.strip():
            merged["location"] = location.strip()
        date = args.get("date")
        if merged["date"] is None and isinstance(date, str) and date.strip():
            merged["date"] = date.strip()
        if _truthy(args.get("graphNeeded") or args.get("graph_needed")):
            merged["graphNeeded"] = True
    return merged


class ToolOrchestrator:
    def __init__(
        self,
        client: httpx.AsyncClient,
        prefer_schedule: bool = settings.PREFER_SCHEDULE_LOCATION,
        tz=settings.LOCAL_TIMEZONE,
    ):
        self.client = client
        self.geo = GeoResolver(client)
        self.prefer_schedule = prefer_schedule
        self.tz = tz

    def resolve_date(self, date_arg: Optional[str], utterance: str, now: datetime) -> datetime:
        if date_arg:
            parsed = match_date(date_arg, now)
            if not parsed.defaulted:
                return parsed.value
        return match_date(utterance, now).value

    def resolve_location_name(
        self,
        location_arg: Optional[str],
        utterance: str,
        profile: Optional[UserProfile],
        coords: Optional[Coords],
        when: datetime,
    ) -> Optional[str]:
        """Place name to geocode, or None to use the device coordinates (if any)."""
        if location_arg and location_arg != CURRENT_LOCATION:
            return canonicalize(location_arg)
        if location_arg is None:
            named = extract_location(utterance)
            if named:
                return named
        scheduled = schedule_location(profile, when)
        if scheduled and (self.prefer_schedule or coords is None):
            logger.info("using schedule location %r for %s", scheduled, when.date())
            return scheduled
        return None

    def _fetchers(self, lat: float, lon: float, as_of: Optional[int]) -> Dict[str, Callable[[], Awaitable[Any]]]:
        return {
            "weather": lambda: fetch_weather(self.client, lat, lon, as_of),
            "air": lambda: fetch_air_quality(self.client, lat, lon),
            "pollen": lambda: fetch_pollen(self.client, lat, lon),
        }

    async def run(
        self,
        calls: Sequence[ToolCall],
        utterance: str,
        coords: Optional[Coords] = None,
        profile: Optional[UserProfile] = None,
        now: Optional[datetime] = None,
        features: Optional[Set[Feature]] = None,
    ) -> Union[ResponseContext, Clarification]:
        now = now or datetime.now(self.tz)
        language = detect_language(utterance)
        if features is None:
            features = detect_features(utterance)
        args = merge_arguments(calls)

        when = self.resolve_date(args["date"], utterance, now)
        is_today = when.date() == now.date()
        name = self.resolve_location_name(args["location"], utterance, profile, coords, when)
        place = await self.geo.resolve(name, coords, language)
        if isinstance(place, Clarification):
            return place
        target = ResolvedTarget(
            lat=place.lat, lon=place.lon, display_name=place.display_name, date=when, is_today=is_today
        )

        wanted = {d for call in calls for d in domains_for_tool(call.name)}
        domains = [d for d in DOMAIN_ORDER if d in wanted] or ["weather"]
        as_of = None if abs(when - now) < CURRENT_WINDOW else nearest_forecast_bucket(when)
        fetchers = self._fetchers(target.lat, target.lon, as_of)
        results = await asyncio.gather(*(fetchers[d]() for d in domains), return_exceptions=True)

        data: Dict[str, Any] = {}
        unavailable: List[str] = []
        for domain, result in zip(domains, results):
            if isinstance(result, BaseException):
                logger.warning("%s fetch failed for %s: %s", domain, target.display_name, result)
                result = None
            if result is None:
                unavailable.append(domain)
            data[domain] = result

        graph = None
        weather = data.get("weather")
        if weather is not None and (args["graphNeeded"] or Feature.GRAPH in features):
            start = now if is_today else when
            graph = build_temperature_graph(weather.hourly, weather.timezone_offset, start.timestamp()) or None

        return ResponseContext(
            location_name=target.display_name,
            date_label=date_label(when, language),
            target=target,
            weather=weather,
            air=data.get("air"),
            pollen=data.get("pollen"),
            graph=graph,
            requested=domains,
            unavailable=unavailable,
        )
