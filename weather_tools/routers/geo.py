from typing import Any, Optional
import time

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..config import CONFIG
from ..deps import get_api_key, get_http_client
from ..errors import ProviderPayloadError, UpstreamError
from ..logs import log_tool_call


router = APIRouter(dependencies=[Depends(get_api_key)])


class GeocodeRequest(BaseModel):
    name: str


class GeocodeResult(BaseModel):
    lat: float
    lon: float
    display_name: str


class ReverseRequest(BaseModel):
    lat: float
    lon: float
    language: str = "ko"


class ReverseResponse(BaseModel):
    name: str


async def _get_json(client: httpx.AsyncClient, fn: str, url: str, params: dict, headers: dict) -> Any:
    start_time = time.monotonic()
    try:
        resp = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        log_tool_call("geo", fn, start_time, ok=False)
        raise UpstreamError(f"{fn} request failed: {e}") from e
    if resp.status_code != 200:
        log_tool_call("geo", fn, start_time, ok=False, http_status=resp.status_code)
        raise UpstreamError(f"{fn} error: {resp.status_code}", http_status=resp.status_code)
    try:
        data = resp.json()
    except ValueError as e:
        log_tool_call("geo", fn, start_time, ok=False, http_status=resp.status_code)
        raise ProviderPayloadError(f"{fn} returned invalid JSON") from e
    log_tool_call("geo", fn, start_time, ok=True, http_status=resp.status_code)
    return data


async def _geocode_kakao(client: httpx.AsyncClient, name: str) -> Optional[GeocodeResult]:
    data = await _get_json(
        client,
        "kakao_keyword",
        f"{CONFIG.kakao_base}/v2/local/search/keyword.json",
        params={"query": name},
        headers={"Authorization": f"KakaoAK {CONFIG.kakao_key}", "User-Agent": CONFIG.user_agent},
    )
    docs = data.get("documents") if isinstance(data, dict) else None
    if not docs:
        return None
    if not isinstance(docs, list) or not isinstance(docs[0], dict):
        raise ProviderPayloadError("Kakao documents malformed")
    first = docs[0]
    try:
        # Kakao puts longitude in x and latitude in y
        return GeocodeResult(
            lat=float(first["y"]),
            lon=float(first["x"]),
            display_name=first.get("place_name") or first.get("address_name") or name,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderPayloadError(f"Kakao document malformed: {e}") from e


async def _geocode_nominatim(client: httpx.AsyncClient, name: str) -> Optional[GeocodeResult]:
    data = await _get_json(
        client,
        "nominatim_search",
        f"{CONFIG.nominatim_base}/search",
        params={"q": name, "format": "jsonv2", "limit": 1, "addressdetails": 0},
        headers={"User-Agent": CONFIG.user_agent},
    )
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    try:
        return GeocodeResult(
            lat=float(first["lat"]),
            lon=float(first["lon"]),
            display_name=first.get("display_name") or name,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderPayloadError(f"Nominatim result malformed: {e}") from e


async def geocode(client: httpx.AsyncClient, name: str) -> Optional[GeocodeResult]:
    """Coordinates for a place name, or None when the provider knows no such place."""
    if CONFIG.kakao_key:
        return await _geocode_kakao(client, name)
    return await _geocode_nominatim(client, name)


def format_region(address: dict) -> Optional[str]:
    city = (
        address.get("city")
        or address.get("town")
        or address.get("county")
        or address.get("village")
        or address.get("state")
    )
    if not city:
        return None
    country = (address.get("country_code") or "").upper()
    return f"{city}, {country}" if country else city


async def reverse_geocode(
    client: httpx.AsyncClient, lat: float, lon: float, language: str = "ko"
) -> Optional[str]:
    data = await _get_json(
        client,
        "nominatim_reverse",
        f"{CONFIG.nominatim_base}/reverse",
        params={"lat": lat, "lon": lon, "format": "jsonv2", "zoom": 10, "accept-language": language},
        headers={"User-Agent": CONFIG.user_agent},
    )
    address = data.get("address") if isinstance(data, dict) else None
    if not isinstance(address, dict):
        return None
    return format_region(address)


@router.post("/geocode", response_model=GeocodeResult)
async def geocode_endpoint(req: GeocodeRequest, client: httpx.AsyncClient = Depends(get_http_client)) -> GeocodeResult:
    try:
        result = await geocode(client, req.name)
    except UpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No results")
    return result


@router.post("/reverse", response_model=ReverseResponse)
async def reverse_endpoint(req: ReverseRequest, client: httpx.AsyncClient = Depends(get_http_client)) -> ReverseResponse:
    try:
        name = await reverse_geocode(client, req.lat, req.lon, req.language)
    except UpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if name is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No region at these coordinates")
    return ReverseResponse(name=name)
