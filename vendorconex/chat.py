"""Conversational replies through the Gemini ``generateContent`` API."""
from typing import Any, Dict, List, Optional, Tuple

import httpx

from . import config
from .errors import InternalError, UpstreamServiceError
from .logger import get_logger

logger = get_logger("chat")

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class CompletionClient:
    def __init__(self, api_key: Optional[str], model: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "CompletionClient":
        settings = config.get_settings()
        return cls(settings.gemini_api_key, settings.gemini_model, settings.chat_timeout_seconds)

    async def complete(self, conversation: List[Dict[str, Any]]) -> str:
        """Send the whole conversation and return the model's reply text."""
        if not self.api_key:
            logger.error("GEMINI_API_KEY is not set")
            raise InternalError("Server error: Gemini API key is missing.")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    GEMINI_URL.format(model=self.model),
                    params={"key": self.api_key},
                    json={"contents": conversation},
                )
        except httpx.RequestError as e:
            logger.error("chat request failed: %s", e)
            raise UpstreamServiceError(502, "Error communicating with Gemini API.") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.status_code != 200:
            logger.error("Gemini API error response (HTTP %s): %s", response.status_code, result)
            error = result.get("error") if isinstance(result, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise UpstreamServiceError(response.status_code, message or "Error communicating with Gemini API.", details=result)

        try:
            return result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("unexpected Gemini response structure: %s", result)
            raise UpstreamServiceError(
                502, "Could not get a valid response from the chatbot. Please try again."
            ) from e


async def converse(client: CompletionClient, message: str, history: List[Dict[str, Any]]) -> Tuple[str, List[Dict[str, Any]]]:
    conversation = list(history)
    conversation.append({"role": "user", "parts": [{"text": message}]})
    reply = await client.complete(list(conversation))
    conversation.append({"role": "model", "parts": [{"text": reply}]})
    return reply, conversation
