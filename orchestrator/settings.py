import os
from zoneinfo import ZoneInfo


GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
# "fine" offers get_weather / get_air_quality / get_pollen_info, "coarse" offers get_full_weather
TOOL_MODE = os.getenv("TOOL_MODE", "fine").lower()
PROFILE_STORE_PATH = os.getenv("PROFILE_STORE_PATH", "data/profiles.json")
PREFER_SCHEDULE_LOCATION = os.getenv("PREFER_SCHEDULE_LOCATION", "true").lower() in ("1", "true", "yes", "on")
CHAT_RATE_LIMIT = os.getenv("CHAT_RATE_LIMIT", "30/minute")
LOCAL_TIMEZONE = ZoneInfo(os.getenv("LOCAL_TIMEZONE", "Asia/Seoul"))
try:
    HISTORY_WINDOW = int(os.getenv("HISTORY_WINDOW", "10"))
except ValueError:
    HISTORY_WINDOW = 10
try:
    CONVERSATION_LIMIT = int(os.getenv("CONVERSATION_LIMIT", "1000"))
except ValueError:
    CONVERSATION_LIMIT = 1000
try:
    HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "8"))
except ValueError:
    HTTP_TIMEOUT_SEC = 8.0
