import logging
import sys

from loguru import logger

from wingnest.api import create_app
from wingnest.config import settings
from wingnest.llms.anthropic_generator import AnthropicTextGenerator
from wingnest.stores.local import LocalWingStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])
logging.basicConfig(level=settings.log_level)

if not settings.anthropic_api_key:
    logger.warning("ANTHROPIC_API_KEY not set, semantic similarity will score 0")

logger.info(f"Initializing connection service with {settings.anthropic_model}")
store = LocalWingStore(filepath=settings.local_wing_store_path)
generator = AnthropicTextGenerator(
    api_key=settings.anthropic_api_key,
    model=settings.anthropic_model,
    max_retries=settings.anthropic_max_retries,
)
app = create_app(store=store, generator=generator)
