from typing import Any, Dict, List


CURRENT_LOCATION = "CURRENT_LOCATION"

_LOCATION = {
    "type": "STRING",
    "description": (
        "Place name exactly as the user wrote it (e.g. '서울', '해운대구', 'Tokyo'). "
        f"Use '{CURRENT_LOCATION}' when the user names no place."
    ),
}
_DATE = {
    "type": "STRING",
    "description": "Date or time expression from the user's message, e.g. '내일', '다음주 월요일', 'tomorrow 3pm'.",
}
_GRAPH = {
    "type": "BOOLEAN",
    "description": "True when the user asks about temperature, clothing or a temperature graph.",
}

GET_WEATHER = {
    "name": "get_weather",
    "description": "Current or forecast weather (temperature, rain, wind, humidity, UV, sunrise/sunset).",
    "parameters": {
        "type": "OBJECT",
        "properties": {"location": _LOCATION, "date": _DATE, "graphNeeded": _GRAPH},
        "required": ["location"],
    },
}
GET_AIR_QUALITY = {
    "name": "get_air_quality",
    "description": "Fine dust (PM2.5 / PM10) levels and air-quality grade.",
    "parameters": {
        "type": "OBJECT",
        "properties": {"location": _LOCATION, "date": _DATE},
        "required": ["location"],
    },
}
GET_POLLEN_INFO = {
    "name": "get_pollen_info",
    "description": "Dominant pollen type and its risk level.",
    "parameters": {
        "type": "OBJECT",
        "properties": {"location": _LOCATION},
        "required": ["location"],
    },
}
GET_FULL_WEATHER = {
    "name": "get_full_weather",
    "description": "Weather, air quality and pollen for one place and date in a single call.",
    "parameters": {
        "type": "OBJECT",
        "properties": {"location": _LOCATION, "date": _DATE, "graphNeeded": _GRAPH},
        "required": ["location"],
    },
}

FINE_TOOLS: List[Dict[str, Any]] = [GET_WEATHER, GET_AIR_QUALITY, GET_POLLEN_INFO]
COARSE_TOOLS: List[Dict[str, Any]] = [GET_FULL_WEATHER]

KNOWN_TOOLS = {t["name"] for t in FINE_TOOLS + COARSE_TOOLS}


def declarations_for(mode: str) -> List[Dict[str, Any]]:
    return COARSE_TOOLS if mode == "coarse" else FINE_TOOLS
