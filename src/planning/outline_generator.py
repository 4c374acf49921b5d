"""
Outline Generator module for planning articles.

Turns a raw topic (a title, a trending headline, a vague theme) into a
structured outline with an editorial angle, using the completion API in
JSON mode.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.config.locales import get_language_label
from src.config.topics import get_category_label
from src.utils.exceptions import InvalidOutline
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import get_logger

logger = get_logger(__name__)


class OutlineModel(BaseModel):
    """Accepts camelCase keys from the model as well as field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Null fields fall back to their defaults."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class OutlineIntroduction(OutlineModel):
    hook: str = Field(default="", description="Opening line that grabs attention")
    context: str = Field(default="", description="Problem or situation the article addresses")
    promise: str = Field(default="", description="What the reader will take away")


class OutlineSubsection(OutlineModel):
    h3: str = Field(description="Subsection heading")
    content: str = Field(default="", description="What the subsection covers")


class OutlineSection(OutlineModel):
    """A single H2 section in the outline."""

    h2: str = Field(description="Section heading")
    narrative_goal: str = Field(default="", description="What this section must achieve")
    key_points: list[str] = Field(default_factory=list)
    subsections: list[OutlineSubsection] = Field(default_factory=list)

    @field_validator("key_points", mode="before")
    @classmethod
    def split_key_points(cls, value: Any) -> Any:
        """Models sometimes return the key points as one comma separated string."""
        if isinstance(value, str):
            return [point.strip() for point in value.split(",") if point.strip()]
        return value

    @field_validator("subsections", mode="before")
    @classmethod
    def coerce_subsections(cls, value: Any) -> Any:
        """Bare strings become headings; entries without a heading are dropped."""
        if not isinstance(value, list):
            return []
        subsections = []
        for item in value:
            if isinstance(item, str):
                item = {"h3": item}
            if isinstance(item, dict) and item.get("h3"):
                subsections.append(item)
        return subsections


class OutlineConclusion(OutlineModel):
    type: str = Field(default="", description="e.g. call to action, open question, outlook")
    direction: str = Field(default="", description="How the article should close")


class Outline(OutlineModel):
    """Structured article outline."""

    title: str = Field(default="", description="Article title")
    article_type: str = Field(default="", description="e.g. guide, analysis, comparison, opinion")
    angle: str = Field(default="", description="The editorial angle chosen")
    target_audience: str = Field(default="")
    introduction: OutlineIntroduction = Field(default_factory=OutlineIntroduction)
    sections: list[OutlineSection] = Field(description="Ordered H2 sections, never empty")
    conclusion: OutlineConclusion = Field(default_factory=OutlineConclusion)
    estimated_word_count: Optional[Union[int, str]] = Field(default=None, description="1800 or \"1800-2200\"")

    @model_validator(mode="before")
    @classmethod
    def backfill_title(cls, data: Any) -> Any:
        """Older responses named the title ``proposedTitle``."""
        if isinstance(data, dict) and not data.get("title") and data.get("proposedTitle"):
            data = {**data, "title": data["proposedTitle"]}
        return data

    @field_validator("sections", mode="before")
    @classmethod
    def coerce_sections(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"h2": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("introduction", mode="before")
    @classmethod
    def coerce_introduction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"hook": value}
        return value

    @field_validator("conclusion", mode="before")
    @classmethod
    def coerce_conclusion(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"direction": value}
        return value

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Outline":
        """
        Validate a model response (camelCase or snake_case keys).

        Raises:
            InvalidOutline: If sections are missing or empty, or a section has no heading
        """
        sections = payload.get("sections")
        if not isinstance(sections, list) or not sections:
            raise InvalidOutline("Outline has no sections")

        try:
            outline = cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidOutline(f"Outline failed validation: {e}") from e

        if any(not section.h2.strip() for section in outline.sections):
            raise InvalidOutline("Outline has a section without a heading")
        return outline

    def summary(self) -> list[str]:
        return [section.h2 for section in self.sections]


class OutlinePlanner:
    """
    Plans an article: title, angle and section structure in one call.

    Usage:
        planner = OutlinePlanner(client)
        outline = await planner.plan_topic("Rust for web backends", category="webDevelopment")
    """

    SYSTEM_PROMPT = """
You are a senior tech content strategist. From a topic, a news item or a trend, you choose an original editorial angle and design a detailed, SEO-friendly article outline for developers and tech decision makers.

YOUR MISSION:
1. Analyze the topic and pick the angle that brings real value (avoid worn-out takes)
2. Pick the article type that fits: guide, tutorial, analysis, comparison, opinion, case study
3. Write a catchy title that states the subject clearly (no Title Case)
4. Structure the article in 4-6 H2 sections, with H3 subsections only when they help

STRUCTURE RULES:
- Each H2 has a distinct purpose and a narrative goal; headings are engaging, not generic
- Never use headings like "Introduction", "Conclusion", "Summary" or "FAQ"
- Key points are concrete: examples, data, code or decisions the reader can act on
- The progression must be logical, each section building on the previous one

Respond with valid JSON only, using exactly this structure:
{
  "title": "string",
  "articleType": "string",
  "angle": "string",
  "targetAudience": "string",
  "introduction": {"hook": "string", "context": "string", "promise": "string"},
  "sections": [
    {
      "h2": "string",
      "narrativeGoal": "string",
      "keyPoints": ["string"],
      "subsections": [{"h3": "string", "content": "string"}]
    }
  ],
  "conclusion": {"type": "string", "direction": "string"},
  "estimatedWordCount": 1800
}
"""

    def __init__(self, client: Optional[CompletionClient] = None):
        self.client = client or CompletionClient()

    def build_prompt(
        self,
        raw_input: str,
        category: Optional[str],
        language: str,
        online_context: Optional[str] = None,
    ) -> str:
        """Build the user prompt for one topic."""
        prompt = "Plan an article for the following input.\n\n"
        prompt += f"## Topic\n{raw_input}\n\n"
        prompt += f"## Category\n{get_category_label(category)}\n\n"
        prompt += f"## Language\nWrite the title and every heading in {get_language_label(language)}.\n\n"

        if online_context:
            prompt += "## Recent sources found online\n"
            prompt += f"{online_context}\n\n"
            prompt += "Use these sources to make the angle current and factual.\n\n"

        prompt += "Generate the JSON outline."
        return prompt

    async def plan_topic(
        self,
        raw_input: str,
        category: Optional[str] = None,
        language: str = "en",
        online_context: Optional[str] = None,
    ) -> Outline:
        """
        Plan an article for a topic.

        Args:
            raw_input: Topic string
            category: Category id or free-form label
            language: Locale of the article
            online_context: Optional research summary to ground the plan

        Returns:
            Validated outline with a non-empty section list

        Raises:
            InvalidOutline: If the response has no usable sections
        """
        logger.info(f"Planning outline for topic: {raw_input}")

        prompt = self.build_prompt(raw_input, category, language, online_context)
        payload = await self.client.complete_json(self.SYSTEM_PROMPT, prompt)

        outline = Outline.from_payload(payload)
        if not outline.title:
            outline.title = raw_input

        logger.info(f"Outline ready: '{outline.title}' with {len(outline.sections)} sections")
        return outline
