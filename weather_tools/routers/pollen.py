from datetime import datetime
from enum import Enum
from typing import Any, Optional
import logging
import time

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..config import CONFIG
from ..deps import get_api_key, get_http_client
from ..logs import log_tool_call


router = APIRouter(dependencies=[Depends(get_api_key)])


class PollenType(str, Enum):
    GRASS = "grass"
    TREE = "tree"
    WEED = "weed"
    RAGWEED = "ragweed"


class PollenRisk(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"

    @property
    def rank(self) -> int:
        return RISK_RANK[self]


RISK_RANK = {
    PollenRisk.LOW: 1,
    PollenRisk.MODERATE: 2,
    PollenRisk.HIGH: 3,
    PollenRisk.VERY_HIGH: 4,
}

# Provider spellings -> our enum
RISK_ALIASES = {
    "low": PollenRisk.LOW,
    "medium": PollenRisk.MODERATE,
    "moderate": PollenRisk.MODERATE,
    "high": PollenRisk.HIGH,
    "very high": PollenRisk.VERY_HIGH,
    "veryhigh": PollenRisk.VERY_HIGH,
    "very_high": PollenRisk.VERY_HIGH,
}


class PollenRecord(BaseModel):
    type: PollenType
    risk: PollenRisk
    count: int
    observed_at: Optional[datetime] = None


class PollenRequest(BaseModel):
    lat: float
    lon: float


def normalize_risk(value: Any) -> Optional[PollenRisk]:
    if not isinstance(value, str):
        return None
    return RISK_ALIASES.get(value.strip().lower())


def normalize_type(key: str) -> Optional[PollenType]:
    # Ambee keys look like "grass_pollen"
    name = key.lower().removesuffix("_pollen")
    try:
        return PollenType(name)
    except ValueError:
        return None


def select_dominant_pollen(
    risks: dict[str, Any], counts: dict[str, Any], observed_at: Any = None
) -> Optional[PollenRecord]:
    """
    Pick the species with the highest risk. Iteration follows provider order,
    so on a tie the first species encountered is kept.
    """
    best: Optional[tuple[PollenType, PollenRisk, str]] = None
    for key, raw_risk in risks.items():
        species = normalize_type(key)
        risk = normalize_risk(raw_risk)
        if species is None or risk is None:
            continue
        if best is None or risk.rank > best[1].rank:
            best = (species, risk, key)
    if best is None:
        return None
    species, risk, key = best
    try:
        count = int(counts.get(key) or 0)
    except (TypeError, ValueError):
        count = 0
    return PollenRecord(type=species, risk=risk, count=count, observed_at=observed_at or None)


def parse_ambee(data: Any) -> Optional[PollenRecord]:
    entries = data.get("data") if isinstance(data, dict) else None
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        logging.warning("Ambee response has no data array")
        return None
    info = entries[0]
    risks = info.get("Risk")
    counts = info.get("Count")
    if not isinstance(risks, dict) or not isinstance(counts, dict):
        logging.warning("Ambee response is missing the Risk or Count map")
        return None
    try:
        return select_dominant_pollen(risks, counts, info.get("updatedAt"))
    except ValueError as e:
        logging.warning("Ambee response could not be parsed: %s", e)
        return None


async def fetch_pollen(client: httpx.AsyncClient, lat: float, lon: float) -> Optional[PollenRecord]:
    if not CONFIG.ambee_key:
        logging.warning("AMBEE_API_KEY not configured; skipping pollen lookup")
        return None
    start_time = time.monotonic()
    headers = {
        "x-api-key": CONFIG.ambee_key,
        "Accept": "application/json",
        "User-Agent": CONFIG.user_agent,
    }
    try:
        resp = await client.get(
            f"{CONFIG.ambee_base}/latest/pollen/by-lat-lng",
            params={"lat": lat, "lng": lon},
            headers=headers,
        )
    except httpx.HTTPError as e:
        log_tool_call("pollen", "latest", start_time, ok=False)
        logging.warning("Ambee request failed: %s", e)
        return None
    if resp.status_code != 200:
        log_tool_call("pollen", "latest", start_time, ok=False, http_status=resp.status_code)
        return None
    try:
        data = resp.json()
    except ValueError:
        log_tool_call("pollen", "latest", start_time, ok=False, http_status=resp.status_code)
        return None
    record = parse_ambee(data)
    log_tool_call("pollen", "latest", start_time, ok=record is not None, http_status=resp.status_code)
    return record


@router.post("/latest", response_model=PollenRecord)
async def latest(req: PollenRequest, client: httpx.AsyncClient = Depends(get_http_client)) -> PollenRecord:
    record = await fetch_pollen(client, req.lat, req.lon)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No pollen data available")
    return record
