import os
import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from weather_tools.routers.geo import router as geo_router
from weather_tools.routers.weather import router as weather_router
from weather_tools.routers.air import router as air_router
from weather_tools.routers.pollen import router as pollen_router
from .config import CONFIG
from .deps import get_api_key


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

limiter = Limiter(key_func=get_remote_address, default_limits=[CONFIG.rate_limit])


@asynccontextmanager
async def lifespan(app: FastAPI):
    http_client = httpx.AsyncClient(timeout=CONFIG.http_timeout_sec)
    app.state.http_client = http_client
    try:
        yield
    finally:
        await http_client.aclose()


app = FastAPI(title="Weather Tools", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=512)
app.include_router(geo_router, prefix="/geo")
app.include_router(weather_router, prefix="/weather")
app.include_router(air_router, prefix="/air")
app.include_router(pollen_router, prefix="/pollen")


@app.get("/", dependencies=[Depends(get_api_key)])
async def root():
    return {
        "status": "ok",
        "providers": {
            "openweather": bool(CONFIG.openweather_key),
            "ambee": bool(CONFIG.ambee_key),
            "kakao": bool(CONFIG.kakao_key),
        },
    }


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3001"))
    uvicorn.run(app, host="0.0.0.0", port=port)
