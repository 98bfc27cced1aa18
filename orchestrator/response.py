import re
from typing import Optional, Set

from weather_tools.routers.air import grade_label

from .intents import Feature
from .models import ChatResponse, DustSummary, ResponseContext


BULLET = "•"
FORECAST_LABELS = ("오늘 예상 날씨:", "Today's forecast:")

_LEADING_DASH_RE = re.compile(r"^[-*]\s*")


def format_reply(text: Optional[str]) -> str:
    """Plain-text layout for the model's answer: no bold markers, one "- " line per bullet."""
    text = (text or "").replace("**", "")
    header, *rest = text.split(BULLET)
    lines = [header.strip()] if header.strip() else []
    for raw in rest:
        item = _LEADING_DASH_RE.sub("", raw.strip())
        if not item:
            continue
        if item.startswith(FORECAST_LABELS) and lines:
            lines.append("")
        lines.append(f"- {item}")
    return "\n".join(lines).strip()


def attach_graph(response: ChatResponse, context: ResponseContext, features: Set[Feature]) -> ChatResponse:
    if context.graph and Feature.GRAPH in features:
        return response.model_copy(update={"graph": list(context.graph)})
    return response


def attach_air_summary(
    response: ChatResponse, context: ResponseContext, features: Set[Feature], language: str = "ko"
) -> ChatResponse:
    if context.air is not None and Feature.AIR in features:
        dust = DustSummary(value=context.air.pm25, level=grade_label(context.air.grade, language))
        return response.model_copy(update={"dust": dust})
    return response


def assemble(reply: str, context: Optional[ResponseContext], features: Set[Feature], language: str = "ko") -> ChatResponse:
    response = ChatResponse(reply=format_reply(reply))
    if context is None:
        return response
    response = attach_graph(response, context, features)
    return attach_air_summary(response, context, features, language)
