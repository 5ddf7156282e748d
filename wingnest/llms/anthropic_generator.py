from anthropic import AsyncAnthropic
from loguru import logger

from wingnest.llms.schemas import GenerationRequest, GenerationResult, TokenUsage


class MissingAPIKeyError(RuntimeError):
    """Raised when a request is attempted without an Anthropic API key."""


class AnthropicTextGenerator:
    def __init__(
        self,
        api_key: str | None,
        model: str = "claude-sonnet-4-20250514",
        max_retries: int = 2,
    ) -> None:
        self.model = model
        self.client = AsyncAnthropic(api_key=api_key, max_retries=max_retries) if api_key else None

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        if self.client is None:
            raise MissingAPIKeyError(
                "No API key configured. Set ANTHROPIC_API_KEY to enable semantic scoring."
            )

        kwargs = {}
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=request.max_tokens,
            messages=[{"role": "user", "content": request.prompt}],
            **kwargs,
        )

        # Only text blocks carry the answer
        text = "".join(block.text for block in response.content if block.type == "text")
        logger.debug(f"Anthropic returned {len(text)} chars (stop_reason={response.stop_reason})")

        return GenerationResult(
            text=text,
            stop_reason=response.stop_reason,
            usage=TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            ),
        )
