# product_manager/services/content_service.py

import asyncio
from typing import Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from product_manager.adapters.mock_text import MockTextAdapter
from product_manager.adapters.openai_text import OpenAITextAdapter, TextGenerationError
from product_manager.config import Settings, settings
from product_manager.schemas.content_schema import (
    CONTENT_ANALYSIS_SCHEMA,
    MARKETING_COPY_SCHEMA,
    ContentAnalysis,
    MarketingCopy,
)
from product_manager.schemas.product_schema import Product
from product_manager.utils.logs import get_logger

log = get_logger("content", "AI")

DESCRIPTION_FALLBACK = "Failed to generate description. Please try again."

SYSTEM_MSG = (
    "You are an expert copywriter for digital products. "
    "You write clear, benefit-driven copy in plain English."
)

T = TypeVar("T", bound=BaseModel)


class AIGenerationError(Exception):
    """A structured generation call failed or returned an unusable response."""
    pass


def build_text_adapter(cfg: Settings = settings):
    """Pick the text-generation backend from settings. Requires the API key."""
    api_key = cfg.require_api_key()
    if cfg.AI_PROVIDER == "mock":
        return MockTextAdapter()
    return OpenAITextAdapter(api_key=api_key, timeout=cfg.AI_TIMEOUT_SECONDS)


class ContentService:
    """
    The three AI content operations. Each call is independent and stateless,
    so several may be in flight at once.

    Failure policy:
      - generate_description never raises; it returns DESCRIPTION_FALLBACK.
      - generate_marketing_copy / analyze_content raise AIGenerationError.
    Every call is bounded by ``timeout_seconds``; a timeout counts as a
    service failure.
    """

    def __init__(
        self,
        adapter,
        description_model: Optional[str] = None,
        structured_model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.adapter = adapter
        self.description_model = description_model or settings.DESCRIPTION_MODEL
        self.structured_model = structured_model or settings.STRUCTURED_MODEL
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS

    async def generate_description(self, name: str, category: str) -> str:
        prompt = (
            f'Generate a compelling and concise product description (around 50-70 words) '
            f'for a digital product named "{name}" in the category "{category}". '
            f"Focus on the key benefits for the user."
        )
        try:
            text = await asyncio.wait_for(
                self.adapter.generate_text(prompt, model=self.description_model, system=SYSTEM_MSG),
                timeout=self.timeout_seconds,
            )
            text = (text or "").strip()
            if not text:
                raise TextGenerationError("Empty description returned")
            return text
        except Exception as e:
            log.warning("Description generation failed for '%s': %r", name, e)
            return DESCRIPTION_FALLBACK

    async def generate_marketing_copy(self, product: Product) -> MarketingCopy:
        prompt = f"""
Based on the following digital product, generate marketing copy.
Product Name: {product.name}
Description: {product.description}
Category: {product.category}
Price: ${product.price:.2f}

Return a JSON object with the fields adHeadline, adBody and socialMediaPost.
- The ad headline should be catchy and under 10 words.
- The ad body should be persuasive and around 30-40 words.
- The social media post should be engaging, include 2-3 relevant hashtags, and be
  suitable for platforms like Twitter or LinkedIn.
""".strip()
        return await self._structured(
            prompt, "marketing_copy", MARKETING_COPY_SCHEMA, MarketingCopy, "generate marketing copy"
        )

    async def analyze_content(self, description: str) -> ContentAnalysis:
        prompt = f"""
Analyze the following product description:
"{description}"

Return a JSON object with the fields tone, clarityScore and suggestions.
- "tone": Describe the tone of the text (e.g. "Professional and confident", "Casual and friendly").
- "clarityScore": An integer from 1 to 10 rating how clear and easy to understand the description is.
- "suggestions": An array of 2-3 short, actionable suggestions to improve the description.
""".strip()
        return await self._structured(
            prompt, "content_analysis", CONTENT_ANALYSIS_SCHEMA, ContentAnalysis, "analyze content"
        )

    async def _structured(self, prompt: str, schema_name: str, schema: Dict, model_cls: Type[T], action: str) -> T:
        try:
            raw = await asyncio.wait_for(
                self.adapter.generate_json(
                    prompt,
                    model=self.structured_model,
                    schema_name=schema_name,
                    schema=schema,
                    system=SYSTEM_MSG,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            log.error("Failed to %s: timed out after %ss", action, self.timeout_seconds)
            raise AIGenerationError(f"Failed to {action}: request timed out.") from e
        except TextGenerationError as e:
            log.error("Failed to %s: %s", action, e)
            raise AIGenerationError(f"Failed to {action}.") from e
        except Exception as e:
            log.exception("Failed to %s: unexpected adapter error", action)
            raise AIGenerationError(f"Failed to {action}.") from e

        try:
            return model_cls.model_validate_json((raw or "").strip())
        except ValidationError as e:
            log.error("Failed to %s: malformed response (%d error(s))", action, e.error_count())
            raise AIGenerationError(f"Failed to {action}: malformed response.") from e

    def health_check(self) -> bool:
        return self.adapter.health_check()
