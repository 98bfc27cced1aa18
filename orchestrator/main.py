import os
import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from weather_tools.deps import get_http_client

from . import settings
from .chat import handle_chat
from .conversation import ConversationRegistry
from .deps import get_conversations, get_llm, get_orchestrator, get_profiles
from .engine import ToolOrchestrator
from .gemini import GeminiClient, LLMError
from .models import ChatRequest, ChatResponse, ResetRequest
from .profiles import ProfileStore


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.CHAT_RATE_LIMIT])


@asynccontextmanager
async def lifespan(app: FastAPI):
    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC)
    app.state.http_client = http_client
    app.state.llm = GeminiClient()
    app.state.conversations = ConversationRegistry(settings.CONVERSATION_LIMIT)
    app.state.profiles = ProfileStore(settings.PROFILE_STORE_PATH)
    app.state.profiles.load()
    try:
        yield
    finally:
        await http_client.aclose()


app = FastAPI(title="Lumee Weather - Orchestrator", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=512)


@app.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    req: ChatRequest,
    llm: GeminiClient = Depends(get_llm),
    orchestrator: ToolOrchestrator = Depends(get_orchestrator),
    conversations: ConversationRegistry = Depends(get_conversations),
    profiles: ProfileStore = Depends(get_profiles),
) -> ChatResponse:
    try:
        return await handle_chat(req, llm, orchestrator, conversations, profiles)
    except LLMError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.post("/chat/reset")
async def reset(req: ResetRequest, conversations: ConversationRegistry = Depends(get_conversations)):
    return {"sessionId": req.session_id, "reset": conversations.reset(req.session_id)}


@app.get("/")
async def root(_client: httpx.AsyncClient = Depends(get_http_client)):
    return {"status": "ok", "model": settings.GEMINI_MODEL, "toolMode": settings.TOOL_MODE}


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3002"))
    uvicorn.run(app, host="0.0.0.0", port=port)
