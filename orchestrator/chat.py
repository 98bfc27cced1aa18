import logging
from datetime import datetime
from typing import Optional

from . import settings
from .conversation import ConversationRegistry
from .engine import ToolOrchestrator
from .gemini import GeminiClient
from .intents import calls_from_features, detect_features, detect_language, required_domains
from .models import ChatRequest, ChatResponse, Clarification
from .profiles import ProfileStore
from .prompts import unavailable_message
from .response import assemble
from .tools import KNOWN_TOOLS


logger = logging.getLogger(__name__)


async def handle_chat(
    req: ChatRequest,
    llm: GeminiClient,
    orchestrator: ToolOrchestrator,
    conversations: ConversationRegistry,
    profiles: ProfileStore,
    now: Optional[datetime] = None,
) -> ChatResponse:
    """
    One chat turn: tool selection, data orchestration, final reply.

    A missing location or a failure of every data source the user asked about is
    answered directly without a second model call. LLMError propagates.
    """
    utterance = req.user_input.strip()
    language = detect_language(utterance)
    features = detect_features(utterance)
    conversation = conversations.session(ConversationRegistry.key_for(req.session_id, req.user_id))
    profile = profiles.get(req.user_id)

    selected = await llm.select_tools(utterance, language)
    calls = [c for c in selected if c.name in KNOWN_TOOLS]
    if not calls:
        calls = calls_from_features(features, settings.TOOL_MODE)
        logger.info("no tool call from model, using %s", [c.name for c in calls])

    context = await orchestrator.run(calls, utterance, req.coords, profile, now, features)
    if isinstance(context, Clarification):
        logger.info("clarification (%s) for %r", context.reason, utterance)
        response = ChatResponse(reply=context.reply)
    else:
        required = [d for d in required_domains(features) if d in context.requested] or context.requested
        if all(d in context.unavailable for d in required):
            logger.warning("required data unavailable: %s", required)
            response = ChatResponse(reply=unavailable_message(required, language))
        else:
            text = await llm.generate_reply(
                utterance,
                language,
                calls,
                context.tool_outputs(calls),
                profile=profile,
                history=conversation.history(),
                location=context.location_name,
            )
            response = assemble(text, context, features, language)

    conversation.append("user", utterance)
    conversation.append("model", response.reply)
    conversation.trim_to_last(settings.HISTORY_WINDOW)
    return response
