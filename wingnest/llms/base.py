from typing import Protocol

from wingnest.llms.schemas import GenerationRequest, GenerationResult


class TextGenerator(Protocol):
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Return the model's text for a single prompt."""
        ...
