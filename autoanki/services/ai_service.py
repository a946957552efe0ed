"""
AI Service - chat completion client for the study assistant.

Talks to an OpenAI-compatible /chat/completions endpoint in two shapes:
- Freeform chat: role/content messages in, assistant text out
- Function invocation: a function schema is forced and its JSON arguments
  are returned, with a fallback to a JSON array in the text content

Transport failures are retried a fixed number of times with a fixed delay;
every other failure surfaces immediately.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..config import Config, SettingsManager
from ..models import Message
from .errors import (
    MissingCredentialError,
    NetworkError,
    ParseError,
    ResponseError,
)

logger = logging.getLogger(__name__)


@dataclass
class AIConfig:
    """Configuration for the completion client."""
    api_key: Optional[str] = None
    base_url: str = Config.AI_BASE_URL
    model: str = Config.AI_MODEL
    chat_temperature: float = Config.CHAT_TEMPERATURE
    integration_temperature: float = Config.INTEGRATION_TEMPERATURE
    retries: int = Config.RETRIES
    chat_retry_delay: float = Config.CHAT_RETRY_DELAY
    integration_retry_delay: float = Config.INTEGRATION_RETRY_DELAY
    timeout: int = Config.TIMEOUT
    integration_timeout: int = Config.INTEGRATION_TIMEOUT
    integration_resource_timeout: int = Config.INTEGRATION_RESOURCE_TIMEOUT

    @classmethod
    def from_settings(cls, settings: SettingsManager) -> "AIConfig":
        """Create config from persisted settings (environment already applied)."""
        return cls(
            api_key=settings.get("OPENAI_API_KEY", "") or None,
            base_url=settings.get("AI_BASE_URL", Config.AI_BASE_URL),
            model=settings.get("AI_MODEL", Config.AI_MODEL),
            chat_temperature=float(settings.get("CHAT_TEMPERATURE", Config.CHAT_TEMPERATURE)),
            integration_temperature=float(
                settings.get("INTEGRATION_TEMPERATURE", Config.INTEGRATION_TEMPERATURE)
            ),
            retries=int(settings.get("RETRIES", Config.RETRIES)),
            timeout=int(settings.get("TIMEOUT", Config.TIMEOUT)),
        )


class CompletionClient:
    """
    Client for the chat completion endpoint.

    Usage:
        async with CompletionClient(AIConfig(api_key="sk-...")) as client:
            answer = await client.chat([Message("user", "What is $e^{i\\pi}$?")])
    """

    def __init__(self, config: AIConfig):
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.config.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def chat(
        self,
        messages: Sequence[Message],
        temperature: Optional[float] = None,
        integration: bool = False,
    ) -> str:
        """
        Freeform chat completion.

        Args:
            messages: Ordered role/content messages
            temperature: Sampling temperature (defaults to the chat temperature)
            integration: Use the extended timeout and the integration retry delay

        Returns:
            Assistant text content, stripped

        Raises:
            MissingCredentialError, NetworkError, ResponseError, ParseError
        """
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_api() for m in messages],
            "temperature": self.config.chat_temperature if temperature is None else temperature,
        }

        data = await self._request_with_retry(payload, integration=integration)
        message = self._message_from(data)

        content = message.get("content")
        if not isinstance(content, str):
            raise ParseError("Invalid response format: missing message content")
        return content.strip()

    async def call_function(
        self,
        messages: Sequence[Message],
        function: Dict[str, Any],
        temperature: Optional[float] = None,
    ) -> Any:
        """
        Chat completion with a forced function call.

        Args:
            messages: Ordered role/content messages
            function: Function schema ({"name", "description", "parameters"})
            temperature: Optional sampling temperature

        Returns:
            The decoded function arguments, or the decoded text content when
            the model answered with a plain JSON array instead

        Raises:
            MissingCredentialError, NetworkError, ResponseError, ParseError
        """
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_api() for m in messages],
            "functions": [function],
            "function_call": {"name": function["name"]},
        }
        if temperature is not None:
            payload["temperature"] = temperature

        data = await self._request_with_retry(payload, integration=False)
        message = self._message_from(data)

        function_call = message.get("function_call")
        if isinstance(function_call, dict) and isinstance(function_call.get("arguments"), str):
            try:
                return json.loads(function_call["arguments"])
            except json.JSONDecodeError:
                logger.warning("Function arguments were not valid JSON, trying content")

        content = message.get("content")
        if isinstance(content, str):
            try:
                decoded = json.loads(content)
            except json.JSONDecodeError as e:
                raise ParseError("Response contained no usable function call") from e
            if isinstance(decoded, list):
                return decoded

        raise ParseError("Response contained no usable function call")

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _request_with_retry(self, payload: Dict[str, Any], integration: bool) -> Dict[str, Any]:
        """
        Send the payload, retrying transport failures only.

        At most one attempt is outstanding at any time.
        """
        if not self.config.api_key:
            raise MissingCredentialError("Missing API key")

        if integration:
            delay = self.config.integration_retry_delay
            timeout = aiohttp.ClientTimeout(
                total=self.config.integration_resource_timeout,
                sock_read=self.config.integration_timeout,
            )
        else:
            delay = self.config.chat_retry_delay
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        attempts = self.config.retries + 1
        for attempt in range(attempts):
            try:
                return await self._send(payload, timeout)
            except NetworkError as e:
                if attempt + 1 >= attempts:
                    logger.error("Completion request failed after %d attempts: %s", attempts, e)
                    raise
                logger.warning(
                    "Network error (%s), retrying in %.1fs (attempt %d of %d)",
                    e, delay, attempt + 2, attempts,
                )
                await asyncio.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise NetworkError("No attempt was made")

    async def _send(self, payload: Dict[str, Any], timeout: aiohttp.ClientTimeout) -> Dict[str, Any]:
        """
        Perform one HTTP POST and decode the JSON body.

        Raises:
            NetworkError: connection failure or timeout
            ResponseError: error object in the body, or non-2xx status
            ParseError: body is not UTF-8 or not a JSON object
        """
        session = await self._get_session()
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with session.post(self.endpoint, headers=headers, json=payload, timeout=timeout) as response:
                status = response.status
                body = await response.read()
        except asyncio.TimeoutError as e:
            raise NetworkError("Request timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error: {e}") from e

        return self._decode_body(status, body)

    @staticmethod
    def _decode_body(status: int, body: bytes) -> Dict[str, Any]:
        """Turn a raw response into a JSON object or a typed error."""
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            text = None

        data = None
        if text is not None:
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = None

        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                raise ResponseError(f"API Error: {error['message']}", {"status": status})

        if status >= 400:
            raise ResponseError(f"API Error: HTTP {status}", {"status": status, "body": (text or "")[:200]})

        if text is None:
            raise ParseError("Invalid response format: body is not UTF-8", {"status": status})
        if not isinstance(data, dict):
            raise ParseError("Invalid response format: body is not a JSON object", {"status": status})

        return data

    @staticmethod
    def _message_from(data: Dict[str, Any]) -> Dict[str, Any]:
        """Return choices[0].message or raise ParseError."""
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ParseError("Invalid response format: missing choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise ParseError("Invalid response format: missing message")
        return message


def create_completion_client(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[SettingsManager] = None,
) -> CompletionClient:
    """
    Create a completion client from settings with optional overrides.

    Args:
        api_key: API key (uses settings/environment if None)
        model: Model name (uses settings if None)
        settings: Settings manager (defaults to the shared instance)

    Returns:
        Configured CompletionClient
    """
    config = AIConfig.from_settings(settings or SettingsManager())
    if api_key is not None:
        config.api_key = api_key
    if model is not None:
        config.model = model
    return CompletionClient(config)
