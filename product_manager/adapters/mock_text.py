import asyncio
import json
from typing import Dict, List, Optional

from product_manager.adapters.openai_text import TextGenerationError

DEFAULT_TEXT = (
    "A focused digital tool that saves you time every day. It removes repetitive work, "
    "keeps everything in one place and helps you ship better results with less effort, "
    "so you can spend your energy on the parts of the job that matter most to you."
)

DEFAULT_JSON: Dict[str, Dict] = {
    "marketing_copy": {
        "adHeadline": "Work Smarter, Ship Faster",
        "adBody": (
            "Cut the busywork and focus on what matters. Built for people who want "
            "results without the overhead, it fits right into the way you already work."
        ),
        "socialMediaPost": "Less busywork, more shipping. Try it today! #productivity #tools",
    },
    "content_analysis": {
        "tone": "Professional and confident",
        "clarityScore": 8,
        "suggestions": [
            "Lead with the single biggest benefit.",
            "Add one concrete example of the product in use.",
        ],
    },
}


class MockTextAdapter:
    """
    Deterministic stand-in for the OpenAI adapter (offline development and
    tests). Responses can be overridden per call kind; ``force_failure``
    simulates a service error and ``delay_ms`` simulates latency.
    """

    name = "mock"

    def __init__(
        self,
        delay_ms: int = 0,
        force_failure: bool = False,
        text_response: Optional[str] = None,
        json_responses: Optional[Dict[str, str]] = None,
    ):
        self.delay_seconds = delay_ms / 1000.0
        self.force_failure = force_failure
        self.text_response = text_response
        self.json_responses = json_responses or {}
        self.calls: List[Dict] = []

    async def _simulate(self):
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.force_failure:
            raise TextGenerationError("Simulated service failure")

    async def generate_text(self, prompt: str, *, model: str, system: Optional[str] = None) -> str:
        self.calls.append({"kind": "text", "model": model, "prompt": prompt})
        await self._simulate()
        return DEFAULT_TEXT if self.text_response is None else self.text_response

    async def generate_json(
        self,
        prompt: str,
        *,
        model: str,
        schema_name: str,
        schema: Dict,
        system: Optional[str] = None,
    ) -> str:
        self.calls.append({"kind": "json", "model": model, "prompt": prompt, "schema_name": schema_name})
        await self._simulate()
        if schema_name in self.json_responses:
            return self.json_responses[schema_name]
        return json.dumps(DEFAULT_JSON.get(schema_name, {}))

    def health_check(self) -> bool:
        return not self.force_failure
