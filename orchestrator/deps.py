import httpx
from fastapi import Depends, HTTPException, Request, status

from weather_tools.deps import get_http_client

from .conversation import ConversationRegistry
from .engine import ToolOrchestrator
from .gemini import GeminiClient
from .profiles import ProfileStore


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not initialized",
        )
    return value


def get_llm(request: Request) -> GeminiClient:
    return _state(request, "llm")


def get_conversations(request: Request) -> ConversationRegistry:
    return _state(request, "conversations")


def get_profiles(request: Request) -> ProfileStore:
    return _state(request, "profiles")


def get_orchestrator(client: httpx.AsyncClient = Depends(get_http_client)) -> ToolOrchestrator:
    return ToolOrchestrator(client)
