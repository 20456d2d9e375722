"""OpenRouter resource with automatic cost tracking.

Thin HTTP client for the OpenRouter API. It handles:
- Authentication
- Request formatting
- Cost tracking (stored in PostgreSQL llm_costs table)

Prompts and response parsing live in profile_matching.llm.operations.
"""

import asyncio
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import httpx
from dagster import ConfigurableResource, get_dagster_logger
from pydantic import Field, PrivateAttr

from profile_matching.db import session_scope
from profile_matching.models.llm_costs import LLMCost


@dataclass
class LLMContext:
    """Context for attributing LLM costs to a run and step."""

    run_id: str = ""
    step_key: str = ""
    code_version: str = ""


class OpenRouterResource(ConfigurableResource):
    """OpenRouter client for chat completions and embeddings.

    Example usage in an op:
        openrouter.set_context(run_id=context.run_id, step_key="extract_profile_tags")
        result = asyncio.run(extract_profile_tags(openrouter, payload))
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""),
        description="OpenRouter API key (empty disables remote calls)",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL",
    )
    default_model: str = Field(
        default="openai/gpt-4o-mini",
        description="Default model to use for completions",
    )
    app_name: str = Field(
        default="Profile Matching",
        description="Application name for OpenRouter analytics",
    )
    request_timeout: float = Field(
        default=60.0,
        description="HTTP timeout in seconds when a call does not set its own",
    )
    track_costs: bool = Field(
        default=True,
        description="Store a row in llm_costs for every call",
    )
    _context: LLMContext = PrivateAttr(default_factory=LLMContext)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def set_context(self, run_id: str, step_key: str, code_version: str = "") -> None:
        """Set context for cost tracking. Call this at the start of each op.

        Args:
            run_id: Dagster run ID
            step_key: Name of the op or asset making calls
            code_version: Prompt version from the operation module
        """
        self._context = LLMContext(run_id=run_id, step_key=step_key, code_version=code_version)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": self.app_name,
        }

    async def _record_usage(
        self,
        data: dict[str, Any],
        operation: str,
        model: str,
        item_count: int = 1,
    ) -> None:
        """Log the call's cost and, if enabled, store it without blocking the event loop.

        A failed insert is logged and never fails the call that produced the usage.
        """
        usage = data.get("usage") or {}
        input_tokens = usage.get("prompt_tokens", usage.get("total_tokens", 0))
        output_tokens = usage.get("completion_tokens", 0)
        # OpenRouter returns cost directly
        cost_usd = Decimal(str(usage.get("cost", 0)))

        logger = get_dagster_logger()
        logger.info(
            f"LLM Cost: {operation} | {model} | "
            f"{input_tokens}+{output_tokens} tokens | ${cost_usd:.6f}"
        )
        if not self.track_costs:
            return

        record = LLMCost(
            run_id=self._context.run_id or "unknown",
            step_key=self._context.step_key or "unknown",
            operation=operation,
            model=model,
            item_count=item_count,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost_usd,
            code_version=self._context.code_version or None,
        )

        def _insert() -> None:
            with session_scope() as session:
                session.add(record)

        try:
            await asyncio.to_thread(_insert)
        except Exception as exc:
            logger.warning(
                f"Failed to store LLM cost for {operation} ({type(exc).__name__}: {exc})"
            )

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        operation: str,
        timeout: float | None = None,
        item_count: int = 1,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.base_url}{path}",
                headers=self._headers(),
                json=body,
                timeout=timeout or self.request_timeout,
            )
            response.raise_for_status()
            data = response.json()

        await self._record_usage(data, operation, body["model"], item_count)
        return data

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        operation: str = "completion",
        response_format: dict[str, Any] | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Make an async completion request and track costs.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model to use (defaults to default_model)
            operation: Operation type for cost tracking
            response_format: Response format (e.g., a json_schema spec)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response

        Returns:
            Full API response dict including usage information
        """
        body: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
        }
        if response_format:
            body["response_format"] = response_format
        if max_tokens:
            body["max_tokens"] = max_tokens

        return await self._post("/chat/completions", body, operation)

    async def embed(
        self,
        input: str | list[str],
        model: str = "openai/text-embedding-3-small",
        dimensions: int | None = None,
        operation: str = "embed",
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Generate embeddings using OpenRouter's embeddings API.

        Args:
            input: Text or list of texts to embed
            model: Embedding model to use
            dimensions: Requested output dimensions (models that support truncation)
            operation: Operation type for cost tracking
            timeout: HTTP timeout in seconds

        Returns:
            Full API response dict including embeddings and usage
        """
        texts = [input] if isinstance(input, str) else list(input)
        body: dict[str, Any] = {"model": model, "input": texts}
        if dimensions:
            body["dimensions"] = dimensions

        return await self._post(
            "/embeddings", body, operation, timeout=timeout, item_count=len(texts)
        )
