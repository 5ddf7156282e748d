from typing import Optional

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    prompt: str
    max_tokens: int = Field(default=1024, gt=0)
    system_prompt: Optional[str] = None


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class GenerationResult(BaseModel):
    """Plain-text completion returned by a text generator."""

    text: str = ""
    stop_reason: Optional[str] = None
    usage: Optional[TokenUsage] = None
