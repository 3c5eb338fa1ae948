"""Optional AI capabilities used by the admin tooling.

The points ledger never depends on these. Every capability has a null
implementation that is used unless AI features are enabled in the settings.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class LinkSuggestion:
    event_id: str
    template_id: str
    confidence: float
    reason: str = ""


@dataclass
class TemplateProposal:
    name: str
    description: str
    default_points: int
    estimated_frequency: int = 0
    confidence: float | None = None


@dataclass
class TemplateGeneration:
    proposals: list[TemplateProposal] = field(default_factory=list)
    model_input: Any = None
    model_output: str | None = None


class Translator(Protocol):
    enabled: bool

    def translate(self, text: str) -> str:
        ...


class EmbeddingGenerator(Protocol):
    enabled: bool

    def embed(self, text: str) -> list[float]:
        ...


class LinkSuggester(Protocol):
    enabled: bool

    def suggest(self, events: list[dict], templates: list[dict]) -> list[LinkSuggestion]:
        ...


class TemplateGenerator(Protocol):
    enabled: bool

    def generate(self, events: list[dict]) -> TemplateGeneration:
        ...


class NullTranslator:
    enabled = False

    def translate(self, text: str) -> str:
        return text


class NullEmbeddingGenerator:
    enabled = False

    def embed(self, text: str) -> list[float]:
        return []


class NullLinkSuggester:
    enabled = False

    def suggest(self, events: list[dict], templates: list[dict]) -> list[LinkSuggestion]:
        return []


class NullTemplateGenerator:
    enabled = False

    def generate(self, events: list[dict]) -> TemplateGeneration:
        return TemplateGeneration()
