import os
from typing import Final


class _Config:
    def __init__(self) -> None:
        # Security / limits
        self.api_key: str | None = os.getenv("TOOLS_API_KEY")
        self.rate_limit: str = os.getenv("TOOLS_RATE_LIMIT", "60/minute")

        # HTTP behavior
        self.user_agent: str = os.getenv("USER_AGENT", "LumeeWeather-Tools")
        try:
            self.http_timeout_sec: float = float(os.getenv("HTTP_TIMEOUT_SEC", "8"))
        except ValueError:
            self.http_timeout_sec = 8.0

        # Provider credentials
        self.openweather_key: str | None = os.getenv("OPENWEATHER_API_KEY")
        self.ambee_key: str | None = os.getenv("AMBEE_API_KEY")
        self.kakao_key: str | None = os.getenv("KAKAO_REST_API_KEY")

        # External API bases
        self.openweather_base: str = os.getenv("OPENWEATHER_BASE", "https://api.openweathermap.org/data")
        self.onecall_version: str = os.getenv("ONECALL_VERSION", "3.0")
        # Air pollution endpoint versions, tried in order
        self.air_versions: list[str] = [
            v.strip() for v in os.getenv("AIR_VERSIONS", "3.0,2.5").split(",") if v.strip()
        ]
        self.ambee_base: str = os.getenv("AMBEE_BASE", "https://api.ambeedata.com")
        self.kakao_base: str = os.getenv("KAKAO_BASE", "https://dapi.kakao.com")
        self.nominatim_base: str = os.getenv("NOMINATIM_BASE", "https://nominatim.openstreetmap.org")


CONFIG: Final[_Config] = _Config()
