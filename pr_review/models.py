from typing import Any

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float


class Usage(BaseModel):
    prompt_tokens: int | None = 0
    completion_tokens: int | None = 0
    total_tokens: int | None = 0


class ResponseMessage(BaseModel):
    role: str | None = ""
    content: str | None = ""


class Choice(BaseModel):
    message: ResponseMessage | None = Field(default_factory=ResponseMessage)
    finish_reason: str | None = None
    index: int | None = 0


class ChatResponse(BaseModel):
    """Chat completion payload. Every field is optional and nullable so that
    error payloads still parse (into a response with no choices)."""

    id: str | None = ""
    object: str | None = ""
    created: int | None = 0
    model: str | None = ""
    usage: Usage | None = None
    choices: list[Choice] | None = Field(default_factory=list)
    # Shape varies between providers; only read, never validated.
    error: Any = None

    @property
    def error_message(self) -> str:
        if isinstance(self.error, dict) and isinstance(self.error.get("message"), str):
            return self.error["message"]
        return ""
