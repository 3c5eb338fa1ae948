import json
import logging

from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_random_exponential

from doypal.ai.capabilities import (
    LinkSuggestion,
    TemplateGeneration,
    TemplateProposal,
)

logger = logging.getLogger(__name__)

TRANSLATION_PROMPT = """
Translate the following description of a child's behaviour into English.
Keep it short and neutral. If it is already English, return it unchanged.
Respond with the translated text only.
"""

LINK_PROMPT = """
You match logged family events to reusable event templates.
For every event that clearly corresponds to one of the templates, return a match.
Only use ids that appear in the input.

Respond in JSON:
{"suggestions": [{"event_id": "...", "template_id": "...", "confidence": 0.0-1.0, "reason": "..."}]}
"""

TEMPLATE_PROMPT = """
You analyse logged family events (good behaviours that earned points) and propose
between 5 and 15 reusable templates that cover the recurring patterns.
For each template give a short name, a one sentence description, the typical
number of points (1-100), how many of the given events it would cover and your
confidence (0.0-1.0).

Respond in JSON:
{"templates": [{"name": "...", "description": "...", "default_points": 1,
"estimated_frequency": 0, "confidence": 0.0}]}
"""


class OpenAICapability:
    enabled = True

    def __init__(self, client: OpenAI, *, chat_model: str = "gpt-4o", embedding_model: str = "text-embedding-3-large"):
        self._client = client
        self._chat_model = chat_model
        self._embedding_model = embedding_model

    @retry(wait=wait_random_exponential(min=1, max=5), stop=stop_after_attempt(3), reraise=True)
    def _chat(self, system_prompt: str, content: str, *, json_mode: bool = False) -> str:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        res = self._client.chat.completions.create(
            model=self._chat_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": content},
            ],
            temperature=0.2,
            **kwargs,
        )
        return (res.choices[0].message.content or "").strip()


class OpenAITranslator(OpenAICapability):
    def translate(self, text: str) -> str:
        text = (text or "").strip()
        if not text:
            return text
        return self._chat(TRANSLATION_PROMPT, text) or text


class OpenAIEmbeddingGenerator(OpenAICapability):
    @retry(wait=wait_random_exponential(min=1, max=5), stop=stop_after_attempt(3), reraise=True)
    def embed(self, text: str) -> list[float]:
        text = (text or "").strip()
        if not text:
            raise ValueError("Cannot embed empty input")

        response = self._client.embeddings.create(
            input=[text],
            model=self._embedding_model,
        )
        return list(response.data[0].embedding)


class OpenAILinkSuggester(OpenAICapability):
    def suggest(self, events: list[dict], templates: list[dict]) -> list[LinkSuggestion]:
        content = json.dumps({"events": events, "templates": templates}, default=str)
        raw = self._chat(LINK_PROMPT, content, json_mode=True)

        suggestions = []
        for item in _load_json(raw).get("suggestions") or []:
            try:
                suggestions.append(
                    LinkSuggestion(
                        event_id=str(item["event_id"]),
                        template_id=str(item["template_id"]),
                        confidence=float(item.get("confidence") or 0),
                        reason=str(item.get("reason") or ""),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("skipping malformed link suggestion", extra={"item": item})
        return suggestions


class OpenAITemplateGenerator(OpenAICapability):
    def generate(self, events: list[dict]) -> TemplateGeneration:
        content = json.dumps({"events": events}, default=str)
        raw = self._chat(TEMPLATE_PROMPT, content, json_mode=True)

        proposals = []
        for item in _load_json(raw).get("templates") or []:
            try:
                proposals.append(
                    TemplateProposal(
                        name=str(item["name"]).strip(),
                        description=str(item.get("description") or "").strip(),
                        default_points=int(item.get("default_points") or 1),
                        estimated_frequency=int(item.get("estimated_frequency") or 0),
                        confidence=float(item["confidence"]) if item.get("confidence") is not None else None,
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("skipping malformed template proposal", extra={"item": item})

        return TemplateGeneration(
            proposals=proposals,
            model_input={"system": TEMPLATE_PROMPT, "user": content},
            model_output=raw,
        )


def _load_json(raw: str) -> dict:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("model returned non-JSON output", extra={"output": raw[:500]})
        return {}
    return data if isinstance(data, dict) else {}
