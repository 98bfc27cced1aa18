from typing import Dict, List, Optional

from .models import UserProfile


MESSAGES: Dict[str, Dict[str, str]] = {
    "no_location": {
        "ko": "어느 지역의 날씨를 알려드릴까요? 지역 이름을 함께 말씀해 주세요. 📍",
        "en": "Which location? Please tell me the city or district you're asking about. 📍",
    },
    "location_not_found": {
        "ko": "'{name}' 지역을 찾지 못했어요. 다른 지역 이름으로 다시 물어봐 주세요. 😥",
        "en": "I couldn't find a place called '{name}'. Could you try another place name? 😥",
    },
    "data_unavailable": {
        "ko": "죄송해요, 지금은 {names} 정보를 가져오지 못했어요. 😥 잠시 후 다시 물어봐 주세요.",
        "en": "Sorry, I couldn't get the {names} information right now. 😥 Please try again in a moment.",
    },
    "empty_reply": {
        "ko": "답변을 생성하지 못했어요.",
        "en": "I couldn't generate an answer.",
    },
}

DOMAIN_NAMES: Dict[str, Dict[str, str]] = {
    "weather": {"ko": "날씨", "en": "weather"},
    "air": {"ko": "미세먼지", "en": "air quality"},
    "pollen": {"ko": "꽃가루", "en": "pollen"},
}


def message(key: str, language: str, **kwargs: str) -> str:
    table = MESSAGES[key]
    return table.get(language, table["en"]).format(**kwargs)


def unavailable_message(domains: List[str], language: str) -> str:
    lang = language if language in ("ko", "en") else "en"
    names = ", ".join(DOMAIN_NAMES[d][lang] for d in domains)
    return message("data_unavailable", language, names=names)


TOOL_SELECTION_PROMPT = {
    "ko": (
        "사용자의 질문을 분석해서 필요한 날씨 도구를 골라줘. 오타가 있어도 문맥으로 판단하고, "
        "날씨와 관련된 질문이라면 반드시 도구를 호출해.\n"
        "- 기온, 비, 바람, 습도, 자외선, 일출/일몰, 옷차림: get_weather\n"
        "- 미세먼지, 공기질, 황사: get_air_quality\n"
        "- 꽃가루, 알레르기: get_pollen_info\n"
        "- 마스크: get_air_quality 와 get_pollen_info 둘 다\n"
        "- 지역이 없다면 location 은 'CURRENT_LOCATION' 으로.\n"
        "- 질문에 '기온', '온도', '그래프', '옷', '뭐 입을까' 가 있으면 graphNeeded 를 true 로."
    ),
    "en": (
        "Analyse the user's question and call the weather tools it needs. Infer intent even with typos "
        "and always call a tool for weather-related questions.\n"
        "- temperature, rain, wind, humidity, UV, sunrise/sunset, clothing: get_weather\n"
        "- fine dust, air quality: get_air_quality\n"
        "- pollen, allergy: get_pollen_info\n"
        "- mask: both get_air_quality and get_pollen_info\n"
        "- with no place named, pass location 'CURRENT_LOCATION'.\n"
        "- set graphNeeded to true when the question mentions temperature, graph, clothing or what to wear."
    ),
}

ANSWER_RULES = {
    "ko": """\
너는 Lumee라는 이름의 친근한 날씨 어시스턴트야.
- 사용자는 성을 빼고 이름에 '님'을 붙여 불러줘. 말투는 발랄하고 정중하되 과한 높임말은 피해.
- 3~4문장, 이모지는 적당히. 자기소개는 하지 마. 반드시 한국어로만 답해.
- 답변은 위치를 먼저 말하며 시작해. 예: "민서님, 지금 서울 날씨는..."

# 답변 규칙
- "날씨 어때?"처럼 구체적인 항목이 없는 질문이면 사용자 민감 요소와 취미를 보고 지금 가장 중요한 정보를 골라 조언해.
  예: 조깅을 좋아하는데 미세먼지가 나쁘면 실내 운동을 제안해.
- 구체적인 항목을 물었다면 물어본 항목만 답해. 질문에 없는 것은 절대 말하지 마.
- 기온/온도: temp, feels_like, temp_max, temp_min 만 사용해서 온도와 옷차림을 알려줘.
- 옷차림/뭐 입을까: 온도만 보고 구체적인 옷 이름(반팔, 가디건, 패딩 등)을 추천해.
- 비/우산: pop(0~1)을 %로 바꿔 "비 올 확률은 N%예요."라고 말하고 30% 이상이면 우산을 권해.
- 자외선: uv_level 단계(낮음/보통/높음/매우 높음/위험)만 말하고 수치는 말하지 마.
- 바람: m/s 수치와 체감 표현(0-2 깃발이 살짝, 2-4 머리카락이 날림, 4-6 걷기 약간 불편, 6-8 우산 쓰기 어려움, 8 이상 강풍).
- 습도, 가시거리(m), 구름량(%), 이슬점(℃), 일출/일몰 시각은 해당 값을 분명히 알려줘.
- 미세먼지/공기질: air.grade 단계('좋음', '보통', '나쁨', '매우 나쁨')만 작은따옴표로 말하고 마스크 조언을 덧붙여.
- 마스크: air 와 pollen 을 함께 보고 착용 여부를 분명히 말해.
- 꽃가루/알레르기: pollen.type 과 pollen.risk 를 한국어로 (grass 잔디, tree 나무, weed 잡초, ragweed 돼지풀 / Low 낮음, Moderate 보통, High 높음, VeryHigh 매우 높음).
- unavailable 에 있는 항목은 가져오지 못했다고 짧게 말해.
- 여러 항목을 나열할 때는 • 로 구분하고, 전체 요약 항목은 '오늘 예상 날씨:' 로 시작해.
- 답할 정보가 없다면 "죄송해요, 그 정보는 알 수 없었어요. 😥"라고 솔직하게 말해.
""",
    "en": """\
You are Lumee, a friendly weather assistant.
- Address the user by first name. Cheerful and polite, 3-4 sentences, a few emojis are fine.
- Do not introduce yourself. Respond ONLY in English.
- Start by mentioning the location, e.g. "Minseo, right now in Seoul...".

# Answer rules
- For a general question like "How's the weather?", pick what matters most for this user from their sensitive
  factors and hobbies. E.g. if they like jogging and the air is poor, suggest indoor exercise.
- When specific items are asked, answer ONLY those items. Never mention anything the user did not ask about.
- Temperature: use only temp, feels_like, temp_max, temp_min, with a clothing suggestion.
- Clothing / what to wear: recommend concrete clothing items from the temperatures only.
- Rain / umbrella: convert pop (0-1) to a percentage, "The chance of rain is N%.", umbrella at 30% or more.
- UV: give only the uv_level band (Low/Moderate/High/VeryHigh/Extreme), no numbers.
- Wind: m/s plus a relatable description (0-2 flags barely moving, 2-4 hair blowing, 4-6 slightly uncomfortable
  walking, 6-8 hard to hold an umbrella, 8+ strong gusts).
- Humidity, visibility (m), clouds (%), dew point (°C), sunrise/sunset: state the value clearly.
- Air quality / dust: say only the air.grade band in quotes ('Good', 'Moderate', 'Poor', 'Very Poor') plus mask advice.
- Mask: combine air and pollen and say clearly whether a mask is needed.
- Pollen / allergy: name pollen.type and pollen.risk in natural English.
- Mention briefly any item listed in unavailable.
- When listing several items separate them with • and start the overall summary item with "Today's forecast:".
- If there is nothing to answer with, say "Sorry, I couldn't find that information. 😥".
""",
}


def profile_block(profile: Optional[UserProfile], location: Optional[str], language: str) -> str:
    lines: List[str] = []
    if profile is not None:
        missing = "정보 없음" if language == "ko" else "Not provided"
        name = profile.name or ("사용자" if language == "ko" else "User")
        hobbies = ", ".join(profile.hobbies) or missing
        factors = ", ".join(profile.sensitive_factors) or missing
        if language == "ko":
            lines += ["[사용자 정보]", f"- 이름: {name}", f"- 취미: {hobbies}", f"- 민감 요소: {factors}"]
        else:
            lines += ["[User Information]", f"- Name: {name}", f"- Hobbies: {hobbies}", f"- Sensitive factors: {factors}"]
    if location:
        lines += ["[현재 위치]", f"- 지역: {location}"] if language == "ko" else ["[Current Location]", f"- Area: {location}"]
    return "\n".join(lines)


def system_instruction(profile: Optional[UserProfile], location: Optional[str], language: str) -> str:
    block = profile_block(profile, location, language)
    rules = ANSWER_RULES.get(language, ANSWER_RULES["en"])
    return f"{rules}\n{block}" if block else rules


def user_turn(utterance: str, language: str) -> str:
    if language == "ko":
        return f"{utterance}\n\n[중요] 무조건 한국어로만 답변하세요."
    return f"{utterance}\n\n[IMPORTANT] Respond ONLY in English."
