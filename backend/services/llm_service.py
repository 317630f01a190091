"""LLM service for the shop estimator.

Provides LangChain/OpenAI chat completion with a hard request timeout.
"""

import asyncio
from typing import Dict, Any, Optional, List

import httpx
import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.settings import settings
from config.errors import ExternalModelError, ErrorCode

logger = structlog.get_logger()


class LLMService:
    """Service for LLM operations using LangChain.

    Provides a wrapper around ChatOpenAI with a request timeout and
    error classification. Calls are never retried.

    Each call opens its own async HTTP client and closes it before
    returning. Pooled connections are bound to the event loop that opened
    them, and the HTTP layer runs every request in a fresh loop.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ):
        """Initialize LLMService.

        Args:
            model: Model name (default from settings).
            temperature: Temperature (default from settings).
            api_key: OpenAI API key (default from settings).
            timeout_seconds: Request timeout (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.api_key = api_key or settings.openai_api_key
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds

    async def generate(self, messages: List[BaseMessage]) -> Dict[str, Any]:
        """Generate a response from the LLM.

        Args:
            messages: List of LangChain messages.

        Returns:
            Dict with content and token usage.

        Raises:
            ExternalModelError: If the call fails or times out.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as http_client:
                chat_model = self.create_chat_model(http_client)
                response = await asyncio.wait_for(
                    chat_model.ainvoke(messages),
                    timeout=self.timeout_seconds
                )
        except asyncio.TimeoutError:
            raise ExternalModelError(
                code=ErrorCode.LLM_TIMEOUT,
                message=f"LLM call timed out after {self.timeout_seconds}s",
                model=self.model
            )
        except Exception as e:
            error_msg = str(e)
            if "rate_limit" in error_msg.lower() or "rate limit" in error_msg.lower():
                code = ErrorCode.LLM_RATE_LIMIT
            elif "timeout" in error_msg.lower() or "timed out" in error_msg.lower():
                code = ErrorCode.LLM_TIMEOUT
            else:
                code = ErrorCode.LLM_ERROR
            raise ExternalModelError(
                code=code,
                message=f"LLM generation failed: {error_msg}",
                model=self.model,
                details={"original_error": error_msg}
            )

        # Track token usage if available
        metadata = getattr(response, "response_metadata", None) or {}
        usage = metadata.get("token_usage") or {}
        tokens_used = usage.get("total_tokens", 0)

        content = response.content if isinstance(response.content, str) else str(response.content)

        logger.info(
            "llm_generated",
            model=self.model,
            tokens_used=tokens_used,
            content_length=len(content)
        )

        return {
            "content": content,
            "tokens_used": tokens_used
        }

    async def generate_with_system_prompt(
        self,
        system_prompt: str,
        user_message: str
    ) -> Dict[str, Any]:
        """Generate a response with system prompt.

        Args:
            system_prompt: System prompt for context.
            user_message: User message/query.

        Returns:
            Dict with content and token usage.
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_message)
        ]
        return await self.generate(messages)

    def create_chat_model(self, http_async_client: Optional[httpx.AsyncClient] = None) -> ChatOpenAI:
        """Create a ChatOpenAI instance for this service's model.

        Args:
            http_async_client: HTTP client owned by the caller's event loop.

        Returns:
            Configured ChatOpenAI instance.
        """
        return ChatOpenAI(
            model=self.model,
            temperature=self.temperature,
            api_key=self.api_key,
            timeout=self.timeout_seconds,
            max_retries=0,
            http_async_client=http_async_client
        )
