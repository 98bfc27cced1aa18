"""
Keyword rule table: each Feature is switched on by a set of trigger phrases.

The table is evaluated once per utterance; the resulting feature set drives the
tool fallback when the model declares no call, the graph decision, the
required-data check and which payloads are attached to the reply.
"""
import re
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Set

from .models import ToolCall


class Feature(str, Enum):
    WEATHER = "weather"
    AIR = "air"
    POLLEN = "pollen"
    GRAPH = "graph"


TRIGGERS: Dict[Feature, FrozenSet[str]] = {
    Feature.WEATHER: frozenset({
        "날씨", "기온", "온도", "체감", "습도", "바람", "풍속", "비", "우산", "눈", "소나기", "강수",
        "자외선", "일출", "일몰", "구름", "안개", "가시거리", "덥", "춥", "더워", "추워",
        "weather", "forecast", "temperature", "temp", "humidity", "wind", "rain", "umbrella",
        "snow", "uv", "sunrise", "sunset", "cloud", "cloudy", "fog", "visibility", "hot", "cold",
    }),
    Feature.AIR: frozenset({
        "미세먼지", "초미세먼지", "먼지", "황사", "공기", "대기질", "마스크",
        "dust", "air quality", "air", "mask", "pm2.5", "pm10", "smog",
    }),
    Feature.POLLEN: frozenset({
        "꽃가루", "알레르기", "알러지", "화분",
        "pollen", "allergy", "allergies", "hay fever",
    }),
    Feature.GRAPH: frozenset({
        "그래프", "기온", "온도", "옷", "옷차림", "입을", "뭐 입", "겉옷",
        "graph", "chart", "temperature", "temp", "wear", "clothing", "clothes", "outfit", "jacket",
    }),
}

FEATURE_DOMAINS: Dict[Feature, str] = {
    Feature.WEATHER: "weather",
    Feature.GRAPH: "weather",
    Feature.AIR: "air",
    Feature.POLLEN: "pollen",
}

_HANGUL_RE = re.compile(r"[가-힣]")

# One-syllable nouns that also occur inside unrelated words ("준비", "비행기", "눈물"):
# they must stand alone or be followed by a particle, 오다 or 내리다
BOUNDED_SYLLABLES = frozenset({"비", "눈"})
_SYLLABLE_FOLLOW = r"(?=$|[^가-힣]|[가이은는도를을랑와올오온내]|소식|예보)"


def _compile(phrases: Iterable[str]) -> re.Pattern:
    parts = []
    for phrase in sorted(phrases, key=len, reverse=True):
        escaped = re.escape(phrase)
        # Latin words need boundaries ("air" must not fire on "chair"); Hangul matches inside words
        if phrase in BOUNDED_SYLLABLES:
            parts.append(rf"(?<![가-힣]){escaped}{_SYLLABLE_FOLLOW}")
        elif _HANGUL_RE.search(phrase):
            parts.append(escaped)
        else:
            parts.append(rf"(?<![a-z0-9]){escaped}(?![a-z0-9])")
    return re.compile("|".join(parts))


_PATTERNS: Dict[Feature, re.Pattern] = {feature: _compile(phrases) for feature, phrases in TRIGGERS.items()}


def detect_features(text: str) -> Set[Feature]:
    lower = (text or "").lower()
    return {feature for feature, pattern in _PATTERNS.items() if pattern.search(lower)}


def detect_language(text: str) -> str:
    return "ko" if _HANGUL_RE.search(text or "") else "en"


def required_domains(features: Iterable[Feature]) -> List[str]:
    """Data domains the user explicitly asked about, in a stable order."""
    wanted = {FEATURE_DOMAINS[f] for f in features}
    return [d for d in ("weather", "air", "pollen") if d in wanted]


def calls_from_features(features: Set[Feature], mode: str = "fine") -> List[ToolCall]:
    """Tool calls to run when the model declared none."""
    graph = Feature.GRAPH in features
    if mode == "coarse":
        return [ToolCall(name="get_full_weather", arguments={"graphNeeded": graph})]
    calls: List[ToolCall] = []
    if Feature.WEATHER in features or graph or not (features & {Feature.AIR, Feature.POLLEN}):
        calls.append(ToolCall(name="get_weather", arguments={"graphNeeded": graph}))
    if Feature.AIR in features:
        calls.append(ToolCall(name="get_air_quality"))
    if Feature.POLLEN in features:
        calls.append(ToolCall(name="get_pollen_info"))
    return calls
