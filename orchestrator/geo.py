import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from weather_tools.errors import UpstreamError
from weather_tools.routers.geo import geocode, reverse_geocode

from .models import Clarification, Coords
from .prompts import message
from .tools import CURRENT_LOCATION


logger = logging.getLogger(__name__)

CURRENT_LOCATION_LABELS = {"ko": "현재 위치", "en": "current location"}


@dataclass(frozen=True)
class ResolvedPlace:
    lat: float
    lon: float
    display_name: str


class GeoResolver:
    """Place name or device coordinates -> coordinates plus a display name."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _geocode(self, name: str):
        try:
            return await geocode(self.client, name)
        except UpstreamError as e:
            logger.warning("geocode failed for %r: %s", name, e)
            return None

    async def _region_name(self, coords: Coords, language: str) -> str:
        try:
            name = await reverse_geocode(self.client, coords.lat, coords.lon, language)
        except UpstreamError as e:
            logger.warning("reverse geocode failed for %s,%s: %s", coords.lat, coords.lon, e)
            name = None
        return name or CURRENT_LOCATION_LABELS.get(language, CURRENT_LOCATION_LABELS["en"])

    async def from_coords(self, coords: Coords, language: str = "ko") -> ResolvedPlace:
        return ResolvedPlace(coords.lat, coords.lon, await self._region_name(coords, language))

    async def resolve(
        self, name: Optional[str], coords: Optional[Coords], language: str = "ko"
    ) -> Union[ResolvedPlace, Clarification]:
        if name and name != CURRENT_LOCATION:
            result = await self._geocode(name)
            if result is not None:
                return ResolvedPlace(result.lat, result.lon, name)
            if coords is not None:
                logger.info("no coordinates for %r, using device location", name)
                return await self.from_coords(coords, language)
            return Clarification(
                reply=message("location_not_found", language, name=name),
                reason="location_not_found",
            )
        if coords is not None:
            return await self.from_coords(coords, language)
        return Clarification(reply=message("no_location", language), reason="no_location")
