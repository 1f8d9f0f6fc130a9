"""LLM-based pull request reviewer using the OpenAI chat completions API."""

import logging
from typing import Callable

import httpx
from pydantic import ValidationError

from pr_review.config import Settings, get_settings
from pr_review.errors import (
    DeserializationError,
    EmptyResponseError,
    RequestError,
    ResponseReadError,
    SerializationError,
)
from pr_review.models import ChatMessage, ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

# (diff, api_key) -> review text
ReviewFn = Callable[[str, str], str]

REVIEW_INSTRUCTIONS = (
    "\nPlease provide a final consideration for this PR in Markdown format, "
    "focusing only on potential issues and ensuring the application's stability. "
    "Include an 'Approved: true/false' statement at the end for easy "
    "decision-making.Thank you!"
)


class ReviewGenerator:
    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.settings = settings or get_settings()
        self.http_client = http_client

    def build_prompt(self, diff: str) -> str:
        return diff + REVIEW_INSTRUCTIONS

    def build_request(self, diff: str) -> ChatRequest:
        return ChatRequest(
            model=self.settings.openai_model,
            messages=[ChatMessage(role="user", content=self.build_prompt(diff))],
            temperature=self.settings.temperature,
        )

    def serialize_request(self, request: ChatRequest) -> bytes:
        try:
            return request.model_dump_json().encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"error marshaling OpenAI request: {e}") from e

    def generate(self, diff: str, api_key: str) -> str:
        """Ask the model for a review of ``diff`` and return its answer verbatim."""
        body = self.serialize_request(self.build_request(diff))

        if self.http_client is not None:
            return self._post(self.http_client, body, api_key)
        with httpx.Client(timeout=self.settings.openai_request_timeout) as client:
            return self._post(client, body, api_key)

    def _post(self, client: httpx.Client, body: bytes, api_key: str) -> str:
        try:
            request = client.build_request(
                "POST",
                self.settings.openai_completion_url,
                content=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {api_key}",
                },
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
            raise RequestError(f"error creating request to OpenAI API: {e}") from e

        logger.info(
            "Requesting review from %s (model %s)",
            self.settings.openai_completion_url,
            self.settings.openai_model,
        )
        try:
            response = client.send(request, stream=True)
        except httpx.RequestError as e:
            raise RequestError(f"error making request to OpenAI API: {e}") from e

        try:
            raw = response.read()
        except (httpx.StreamError, httpx.TransportError) as e:
            raise ResponseReadError(f"error reading response from OpenAI API: {e}") from e
        finally:
            response.close()

        if response.is_error:
            logger.warning("OpenAI API responded with HTTP %s", response.status_code)

        return self.extract_review(raw)

    def extract_review(self, raw: bytes | str) -> str:
        """Parse a chat completion payload and return the first choice's content."""
        try:
            completion = ChatResponse.model_validate_json(raw)
        except ValidationError as e:
            raise DeserializationError(f"error unmarshaling OpenAI response: {e}") from e

        if not completion.choices:
            message = "no response received from OpenAI API"
            if completion.error_message:
                message = f"{message}: {completion.error_message}"
            raise EmptyResponseError(message)

        if completion.usage is not None:
            logger.debug(
                "Token usage: prompt=%s completion=%s total=%s",
                completion.usage.prompt_tokens,
                completion.usage.completion_tokens,
                completion.usage.total_tokens,
            )
        first = completion.choices[0].message
        if first is None:
            return ""
        return first.content or ""
