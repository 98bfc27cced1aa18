import logging
from typing import Any, List, Optional, Sequence

import google.generativeai as genai

from . import settings
from .models import ConversationTurn, ToolCall, ToolOutput, UserProfile
from .prompts import TOOL_SELECTION_PROMPT, message, system_instruction, user_turn
from .tools import declarations_for


logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The model could not be reached or returned an error."""


def _plain(value: Any) -> Any:
    # proto MapComposite / RepeatedComposite -> dict / list
    if isinstance(value, (str, bytes)):
        return value
    if hasattr(value, "items"):
        return {k: _plain(v) for k, v in value.items()}
    if hasattr(value, "__iter__"):
        return [_plain(v) for v in value]
    return value


def _parts(response: Any) -> list:
    try:
        return list(response.candidates[0].content.parts)
    except (AttributeError, IndexError, TypeError):
        return []


def parse_function_calls(response: Any) -> List[ToolCall]:
    calls: List[ToolCall] = []
    for part in _parts(response):
        fc = getattr(part, "function_call", None)
        name = getattr(fc, "name", None)
        if name:
            calls.append(ToolCall(name=name, arguments=_plain(fc.args) if fc.args else {}))
    return calls


def reply_text(response: Any) -> str:
    return "".join(getattr(p, "text", "") or "" for p in _parts(response)).strip()


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = settings.GEMINI_API_KEY,
        model_name: str = settings.GEMINI_MODEL,
        tool_mode: str = settings.TOOL_MODE,
    ):
        if api_key:
            genai.configure(api_key=api_key)
        self.model_name = model_name
        self.tool_mode = tool_mode
        self.tools = [{"function_declarations": declarations_for(tool_mode)}]

    async def select_tools(self, utterance: str, language: str) -> List[ToolCall]:
        model = genai.GenerativeModel(
            self.model_name,
            tools=self.tools,
            system_instruction=TOOL_SELECTION_PROMPT.get(language, TOOL_SELECTION_PROMPT["en"]),
            generation_config={"temperature": 0.0},
        )
        try:
            response = await model.generate_content_async(utterance)
        except Exception as e:
            logger.error("tool selection failed: %s", e)
            raise LLMError(f"Tool selection failed: {e}") from e
        calls = parse_function_calls(response)
        logger.info("tool selection: %s", [c.name for c in calls])
        return calls

    async def generate_reply(
        self,
        utterance: str,
        language: str,
        calls: Sequence[ToolCall],
        outputs: Sequence[ToolOutput],
        profile: Optional[UserProfile] = None,
        history: Sequence[ConversationTurn] = (),
        location: Optional[str] = None,
    ) -> str:
        contents: List[Any] = [{"role": t.role, "parts": [t.text]} for t in history]
        contents.append({"role": "user", "parts": [user_turn(utterance, language)]})
        if calls:
            contents.append({
                "role": "model",
                "parts": [
                    genai.protos.Part(function_call=genai.protos.FunctionCall(name=c.name, args=c.arguments))
                    for c in calls
                ],
            })
            contents.append({
                "role": "user",
                "parts": [
                    genai.protos.Part(
                        function_response=genai.protos.FunctionResponse(
                            name=o.tool_name, response={"content": o.payload}
                        )
                    )
                    for o in outputs
                ],
            })
        model = genai.GenerativeModel(
            self.model_name,
            tools=self.tools,
            tool_config={"function_calling_config": {"mode": "NONE"}},
            system_instruction=system_instruction(profile, location, language),
            generation_config={"temperature": 0.4},
        )
        try:
            response = await model.generate_content_async(contents)
        except Exception as e:
            logger.error("final reply generation failed: %s", e)
            raise LLMError(f"Reply generation failed: {e}") from e
        return reply_text(response) or message("empty_reply", language)
