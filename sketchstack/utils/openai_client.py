"""OpenAI-compatible chat client with timeout, retry and exponential backoff.

The default endpoint is a local Ollama server (``/v1`` is its OpenAI-compatible
API). SDK-level retries are disabled so the attempt budget here is the only one.
"""
from __future__ import annotations

import atexit
import logging
import time
from functools import lru_cache
from typing import Callable, Dict, List, Optional

import httpx
import openai
from openai import OpenAI

from sketchstack.errors import UpstreamTimeoutError, UpstreamUnavailableError
from sketchstack.utils.config import settings


logger = logging.getLogger(__name__)

Message = Dict[str, str]


def _build_httpx_client(timeout_seconds: float) -> httpx.Client:
    client = httpx.Client(
        timeout=httpx.Timeout(timeout_seconds, connect=10.0),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        follow_redirects=True,
    )
    atexit.register(client.close)
    return client


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """Return a shared OpenAI client wired to the configured endpoint."""
    http_client = _build_httpx_client(settings.llm_timeout_seconds)
    client = OpenAI(
        api_key=settings.openai_api_key or "ollama",
        base_url=settings.llm_base_url,
        http_client=http_client,
        max_retries=0,
    )
    atexit.register(client.close)
    return client


class ChatClient:
    """Send chat messages and return the assistant text, retrying transient failures."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self.model = model or settings.llm_model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_retries = max(1, settings.llm_max_retries if max_retries is None else max_retries)
        self.backoff_seconds = settings.llm_backoff_seconds if backoff_seconds is None else backoff_seconds
        self._sleep = sleep

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def chat(self, messages: List[Message], *, model: Optional[str] = None, temperature: Optional[float] = None) -> str:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.client.chat.completions.create(
                    model=model or self.model,
                    messages=messages,
                    temperature=self.temperature if temperature is None else temperature,
                    response_format={"type": "json_object"},
                )
                return response.choices[0].message.content or ""
            except openai.APIError as exc:
                last_error = exc
                logger.warning("Chat attempt %d/%d failed: %s", attempt, self.max_retries, exc)
                if attempt < self.max_retries:
                    self._sleep(self.backoff_seconds * (2 ** (attempt - 1)))

        message = f"LLM chat failed after {self.max_retries} attempts: {last_error}"
        if isinstance(last_error, openai.APITimeoutError):
            raise UpstreamTimeoutError(message, attempts=self.max_retries, last_error=str(last_error))
        raise UpstreamUnavailableError(message, attempts=self.max_retries, last_error=str(last_error))
