# product_manager/schemas/content_schema.py
from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class MarketingCopy(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    ad_headline: StrictStr = Field(min_length=1)
    ad_body: StrictStr = Field(min_length=1)
    social_media_post: StrictStr = Field(min_length=1)


class ContentAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    tone: StrictStr = Field(min_length=1)
    clarity_score: int = Field(ge=1, le=10)
    suggestions: List[StrictStr] = Field(min_length=2, max_length=3)

    @field_validator("suggestions", mode="before")
    @classmethod
    def drop_blank(cls, v):
        if isinstance(v, list):
            return [s for s in v if not (isinstance(s, str) and not s.strip())]
        return v


# JSON schemas sent as the response format of the structured calls.
# Range and length limits are enforced by the models above, not the service.
MARKETING_COPY_SCHEMA = {
    "type": "object",
    "properties": {
        "adHeadline": {"type": "string"},
        "adBody": {"type": "string"},
        "socialMediaPost": {"type": "string"},
    },
    "required": ["adHeadline", "adBody", "socialMediaPost"],
    "additionalProperties": False,
}

CONTENT_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "tone": {"type": "string"},
        "clarityScore": {"type": "integer"},
        "suggestions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["tone", "clarityScore", "suggestions"],
    "additionalProperties": False,
}
