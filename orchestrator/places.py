"""
Place names in free text.

Time expressions are removed first so a weekday or "3일 뒤" is never read as part
of a place. Each remaining Hangul run is trimmed of trailing particles and of a
glued-on weather word ("서울날씨" -> "서울"), then rejected if it belongs to the
weather vocabulary or reads like a predicate ("알려줘"). The first survivor is
canonicalised. A few known names (road names ending in 로, districts that end
like a verb) skip the suffix rules. English reads "in/at/for <Name>", else a
capitalised word that does not open a sentence.
"""
import re
from typing import Optional


CANONICAL_NAMES = {
    "서울": "서울특별시",
    "서울시": "서울특별시",
    "부산": "부산광역시",
    "부산시": "부산광역시",
    "대구": "대구광역시",
    "대구시": "대구광역시",
    "인천": "인천광역시",
    "인천시": "인천광역시",
    "광주": "광주광역시",
    "광주시": "광주광역시",
    "대전": "대전광역시",
    "대전시": "대전광역시",
    "울산": "울산광역시",
    "울산시": "울산광역시",
    "세종": "세종특별자치시",
    "세종시": "세종특별자치시",
    "제주": "제주특별자치도",
    "제주도": "제주특별자치도",
}

WEATHER_VOCAB_KO = frozenset({
    "날씨", "기상", "예보", "일기예보", "기온", "온도", "체감", "체감온도", "최고기온", "최저기온",
    "습도", "건조", "습해", "습하", "축축", "끈적", "불쾌", "불쾌지수", "이슬점",
    "바람", "풍속", "풍향", "강풍", "바람세기",
    "옷", "옷차림", "겉옷", "패딩", "반팔", "긴팔", "코디",
    "비", "우산", "소나기", "장마", "강수", "강수량", "강수확률", "눈", "폭설", "태풍",
    "미세먼지", "초미세먼지", "먼지", "황사", "공기", "공기질", "대기", "마스크",
    "꽃가루", "알레르기", "자외선", "햇빛", "햇살", "선크림", "썬크림", "태양",
    "가시거리", "시야", "안개", "구름", "구름량", "흐림", "맑음", "하늘",
    "일출", "일몰", "해돋이", "해넘이", "그래프", "수치", "농도", "등급", "지수",
    "정보", "상태", "상황", "지역", "위치", "현재", "지금", "여기", "거기", "우리", "동네", "근처",
    "오전", "오후", "아침", "점심", "저녁", "새벽", "주말", "평일", "이번", "다음", "요즘",
    "외출", "산책", "운동", "조깅", "출근", "퇴근", "등산", "나들이",
    "어때", "어떄", "어떻게", "어떤", "어떨까", "알려줘", "알려", "궁금해", "궁금",
    "필요해", "필요", "괜찮아", "괜찮을까", "얼마나", "정도", "입을까", "입지", "입어",
    "추워", "더워", "춥다", "덥다", "추울까", "더울까", "올까", "와", "써야", "챙겨",
    "안녕", "고마워", "감사", "부탁", "해줘", "좀", "그럼", "그리고", "그래서",
})

PREDICATE_ENDINGS = (
    "줘", "까", "요", "니", "냐", "래", "야", "돼", "지", "고", "어", "워", "다",
    "어때", "세요", "나요", "는지", "을지", "는데", "던데",
)

# Names the particle and predicate rules would mangle ("세종로" is not "세종", "동래" is not a verb)
KNOWN_PLACES = frozenset({
    "종로", "세종로", "을지로", "충무로", "퇴계로", "테헤란로", "청계천로", "동래", "수지", "봉래",
})

ADMIN_SUFFIXES = ("특별시", "광역시", "자치시", "자치도", "시", "도", "군", "구", "동", "읍", "면", "리")

PARTICLES = ("에서는", "에서도", "에서", "에는", "에선", "으로", "에게", "까지", "부터", "로", "에", "의", "은", "는", "이", "가")

WEATHER_VOCAB_EN = frozenset({
    "weather", "forecast", "temperature", "temp", "feels", "humidity", "humid", "dew",
    "wind", "windy", "rain", "rainy", "umbrella", "snow", "storm", "air", "quality", "dust",
    "mask", "pollen", "allergy", "uv", "sun", "sunscreen", "sunny", "visibility", "fog",
    "cloud", "clouds", "cloudy", "sunrise", "sunset", "clothing", "outfit", "wear", "graph",
    "today", "tomorrow", "tonight", "now", "morning", "afternoon", "evening", "night",
    "this", "next", "week", "weekend", "how", "what", "what's", "whats", "is", "the", "should",
    "do", "does", "will", "can", "could", "tell", "me", "please", "hi", "hello", "thanks",
    "i", "it", "my", "here", "there", "current", "location", "any", "need",
    "how's", "hows", "hey", "are", "give", "check", "show", "let", "let's", "get", "going", "go",
    "outside", "out", "be", "a", "an", "to", "in", "at", "for", "near", "was", "would", "am",
    "yes", "no", "ok", "okay", "so", "and", "but", "also", "well", "why", "when", "where", "which",
    "pm", "aqi",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
})

_TIME_EXPRESSION_RE = re.compile(
    r"(내일모레|오늘|내일|모레|글피"
    r"|(?:이번|다음)\s?주(?:\s?[월화수목금토일]요일)?"
    r"|[월화수목금토일]요일"
    r"|\d{1,2}\s*월\s*\d{1,2}\s*일"
    r"|(?:\d{1,3}\s*(?:일|시간|분)|하루|이틀|사흘|나흘|닷새|엿새|이레|열흘)\s*(?:뒤|후)"
    r"|\d{1,2}\s*시(?:\s*\d{1,2}\s*분|\s*반)?)"
)
_EN_TIME_EXPRESSION_RE = re.compile(
    r"\b(day after tomorrow|today|tomorrow|tonight|(?:this|next)\s+week"
    r"|in\s+\d{1,3}\s+(?:days?|hours?|minutes?|mins?)|\d{1,2}(?::\d{2})?\s*(?:am|pm))\b",
    re.IGNORECASE,
)
_HANGUL_RUN_RE = re.compile(r"[가-힣]+")
_EN_PREPOSITION_RE = re.compile(r"\b(?:in|at|for|near)\s+([A-Z][A-Za-z.'\-]*(?:\s+[A-Z][A-Za-z.'\-]*)*)")
_EN_CAPITALISED_RE = re.compile(r"\b([A-Z][A-Za-z.'\-]+)")
_CONTRACTION_RE = re.compile(r"'(?:s|re|ll|m|ve|d)$|n't$")

_VOCAB_BY_LENGTH = sorted((w for w in WEATHER_VOCAB_KO if len(w) >= 2), key=len, reverse=True)


def strip_time_expressions(text: str) -> str:
    text = _TIME_EXPRESSION_RE.sub(" ", text)
    return _EN_TIME_EXPRESSION_RE.sub(" ", text)


def strip_particles(word: str) -> str:
    if word in KNOWN_PLACES:
        return word
    for particle in PARTICLES:
        # never strip down to a single syllable ("구로" stays "구로")
        if word.endswith(particle) and len(word) - len(particle) >= 2:
            stem = word[: -len(particle)]
            # a bare 로 after anything but a city or district is a road name ("을지로")
            if particle == "로" and stem not in CANONICAL_NAMES and not stem.endswith(ADMIN_SUFFIXES):
                return word
            return stem
    return word


def _strip_glued_vocab(word: str) -> str:
    for term in _VOCAB_BY_LENGTH:
        if word.endswith(term) and len(word) - len(term) >= 2:
            return strip_particles(word[: -len(term)])
    return word


def is_excluded(candidate: str) -> bool:
    """True when the candidate equals, or is part of, a weather-domain word."""
    if candidate in WEATHER_VOCAB_KO:
        return True
    return any(candidate in term for term in WEATHER_VOCAB_KO)


def canonicalize(name: str) -> str:
    return CANONICAL_NAMES.get(name, name)


def _korean_candidate(text: str) -> Optional[str]:
    for token in _HANGUL_RUN_RE.findall(text):
        stem = strip_particles(token)
        if stem in KNOWN_PLACES:
            return stem
        if token.endswith(PREDICATE_ENDINGS):
            continue
        candidate = _strip_glued_vocab(stem)
        if len(candidate) < 2 or is_excluded(candidate):
            continue
        return canonicalize(candidate)
    return None


def _opens_sentence(text: str, start: int) -> bool:
    before = text[:start].rstrip()
    return not before or before[-1] in ".!?"


def _english_candidate(cleaned: str, original: str) -> Optional[str]:
    for m in _EN_PREPOSITION_RE.finditer(cleaned):
        words = [w.rstrip(".'-") for w in m.group(1).split() if w.lower().rstrip(".'-") not in WEATHER_VOCAB_EN]
        if words:
            return " ".join(words)
    # inside Korean text a Latin capital marks a name, not the start of a sentence
    mixed = bool(_HANGUL_RUN_RE.search(original))
    for m in _EN_CAPITALISED_RE.finditer(original):
        word = m.group(1).rstrip(".'-")
        bare = word.lower()
        if bare in WEATHER_VOCAB_EN or _CONTRACTION_RE.search(bare):
            continue
        if not mixed and _opens_sentence(original, m.start()):
            continue
        return word
    return None


def extract_location(text: str) -> Optional[str]:
    if not text:
        return None
    cleaned = strip_time_expressions(text)
    return _korean_candidate(cleaned) or _english_candidate(cleaned, text)
