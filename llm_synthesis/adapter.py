"""LLM adapters for table analysis.

Provides a base interface, a concrete adapter for OpenAI-compatible
chat completion APIs (Gemini is reached through its OpenAI-compatible
endpoint) and a deterministic mock for testing.
"""

from abc import ABC, abstractmethod
from typing import Optional

from openai import APIError, APIStatusError, OpenAI


class LLMGenerationError(Exception):
    """Raised when the text-generation call fails.

    Attributes:
        status_code: HTTP status reported by the provider, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    model_name: str = "unknown"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw free-text response from the model.

        Raises:
            LLMGenerationError: If the provider call fails.
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str = "gemini-flash-latest",
        max_tokens: int = 4096,
        temperature: float = 0.7,
        top_p: float = 0.9,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            temperature: Sampling temperature.
            top_p: Nucleus sampling cutoff.
            api_key: Provider API key.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        client_kwargs: dict = {"api_key": api_key or ""}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self.model_name = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._top_p = top_p

    def generate(self, prompt: str) -> str:
        """Call the chat completion API once. No retries are attempted."""
        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                top_p=self._top_p,
                max_tokens=self._max_tokens,
                n=1,
                stream=False,
            )
        except APIStatusError as exc:
            raise LLMGenerationError(exc.message, status_code=exc.status_code) from exc
        except APIError as exc:
            raise LLMGenerationError(exc.message) from exc

        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = """\
1. Executive Summary
Revenue across the reporting window remained stable with moderate month-over-month growth.
One customer segment accounts for the majority of recorded transactions.

2. Key Insights
- Total revenue reached the highest level in the most recent month
- The leading category holds the largest share of all recorded rows
- Average transaction value stayed within a narrow band across the period

3. Trends and Performance Assessment
- Record volume increased steadily from the first month to the latest month
- Higher-value transactions cluster in the most recent periods

4. Strategic Recommendations
- Focus retention campaigns on the dominant customer segment
- Review pricing for lower-value transactions to lift the average
"""


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed structured analysis.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    model_name = "mock"

    def generate(self, prompt: str) -> str:
        return _MOCK_RESPONSE
