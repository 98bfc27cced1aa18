from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from weather_tools.routers.air import AirQualityRecord
from weather_tools.routers.pollen import PollenRecord
from weather_tools.routers.weather import WeatherSnapshot


class Coords(BaseModel):
    lat: float
    lon: float


class ChatRequest(BaseModel):
    user_input: str = Field(..., alias="userInput", min_length=1)
    coords: Optional[Coords] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    class Config:
        populate_by_name = True


class ResetRequest(BaseModel):
    session_id: str = Field(..., alias="sessionId")

    class Config:
        populate_by_name = True


class GraphPoint(BaseModel):
    hour: str
    temp: int


class DustSummary(BaseModel):
    value: float
    level: str


class ChatResponse(BaseModel):
    reply: str
    graph: Optional[List[GraphPoint]] = None
    dust: Optional[DustSummary] = None


class ScheduleEntry(BaseModel):
    date: date
    title: str
    location: Optional[str] = None


class UserProfile(BaseModel):
    name: Optional[str] = None
    hobbies: List[str] = Field(default_factory=list)
    sensitive_factors: List[str] = Field(default_factory=list, alias="sensitiveFactors")
    schedule: List[ScheduleEntry] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ToolCall(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolOutput(BaseModel):
    tool_name: str
    payload: Dict[str, Any]


class ConversationTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ResolvedTarget(BaseModel):
    lat: float
    lon: float
    display_name: str
    date: datetime
    is_today: bool


class Clarification(BaseModel):
    """A user-facing answer produced instead of a data context."""

    reply: str
    reason: Literal["no_location", "location_not_found", "data_unavailable"]


class ResponseContext(BaseModel):
    location_name: str
    date_label: str
    target: ResolvedTarget
    weather: Optional[WeatherSnapshot] = None
    air: Optional[AirQualityRecord] = None
    pollen: Optional[PollenRecord] = None
    graph: Optional[List[GraphPoint]] = None
    requested: List[str] = Field(default_factory=list)
    unavailable: List[str] = Field(default_factory=list)

    def tool_outputs(self, calls: List[ToolCall]) -> List[ToolOutput]:
        """Payload slice for each call, in call order."""
        base = {"location": self.location_name, "date": self.date_label, "isToday": self.target.is_today}
        outputs: List[ToolOutput] = []
        for call in calls:
            payload = dict(base)
            for domain in domains_for_tool(call.name):
                record = getattr(self, domain)
                payload[domain] = record.model_dump(mode="json") if record is not None else None
            if call.name in ("get_weather", "get_full_weather") and self.graph:
                payload["graph"] = [p.model_dump() for p in self.graph]
            if self.unavailable:
                payload["unavailable"] = list(self.unavailable)
            outputs.append(ToolOutput(tool_name=call.name, payload=payload))
        return outputs


TOOL_DOMAINS: Dict[str, tuple] = {
    "get_weather": ("weather",),
    "get_air_quality": ("air",),
    "get_pollen_info": ("pollen",),
    "get_full_weather": ("weather", "air", "pollen"),
}


def domains_for_tool(name: str) -> tuple:
    return TOOL_DOMAINS.get(name, ())
