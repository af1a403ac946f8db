from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError


class TextGenerationError(Exception):
    """Transport or service failure talking to the text-generation backend."""
    pass


class OpenAITextAdapter:
    """
    Thin async wrapper over the OpenAI chat completions API.

    ``generate_text`` returns the raw answer; ``generate_json`` asks for a
    response constrained to ``schema`` (structured outputs) and returns the
    raw JSON text, leaving validation to the caller.
    """

    name = "openai"

    def __init__(self, api_key: str, timeout: Optional[float] = None, client: Optional[AsyncOpenAI] = None):
        self.api_key = api_key
        # no retries; the user re-runs a failed action
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @staticmethod
    def _first_message(completion):
        if not completion.choices:
            raise TextGenerationError("No choices returned")
        return completion.choices[0].message

    @staticmethod
    def _messages(prompt: str, system: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate_text(self, prompt: str, *, model: str, system: Optional[str] = None) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=self._messages(prompt, system),
                temperature=0.7,
            )
        except OpenAIError as e:
            raise TextGenerationError(str(e)) from e
        return self._first_message(completion).content or ""

    async def generate_json(
        self,
        prompt: str,
        *,
        model: str,
        schema_name: str,
        schema: Dict,
        system: Optional[str] = None,
    ) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=self._messages(prompt, system),
                temperature=0.4,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema, "strict": True},
                },
            )
        except OpenAIError as e:
            raise TextGenerationError(str(e)) from e
        message = self._first_message(completion)
        if getattr(message, "refusal", None):
            raise TextGenerationError(f"Model refused: {message.refusal}")
        return message.content or ""

    def health_check(self) -> bool:
        return bool(self.api_key)
