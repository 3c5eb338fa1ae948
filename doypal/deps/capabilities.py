from functools import lru_cache

from fastapi import Depends
from openai import OpenAI

from doypal.ai.capabilities import (
    EmbeddingGenerator,
    LinkSuggester,
    NullEmbeddingGenerator,
    NullLinkSuggester,
    NullTemplateGenerator,
    NullTranslator,
    TemplateGenerator,
    Translator,
)
from doypal.ai.openai_provider import (
    OpenAIEmbeddingGenerator,
    OpenAILinkSuggester,
    OpenAITemplateGenerator,
    OpenAITranslator,
)
from doypal.config import Settings, get_settings
from doypal.storage import ImageStorage, build_image_storage


def _ai_available(settings: Settings) -> bool:
    return settings.ai_enabled and bool(settings.openai_api_key)


@lru_cache
def _openai_client(api_key: str) -> OpenAI:
    return OpenAI(api_key=api_key)


def _openai_kwargs(settings: Settings) -> dict:
    return {
        "chat_model": settings.openai_chat_model,
        "embedding_model": settings.openai_embedding_model,
    }


def get_translator(settings: Settings = Depends(get_settings)) -> Translator:
    if not _ai_available(settings):
        return NullTranslator()
    return OpenAITranslator(_openai_client(settings.openai_api_key), **_openai_kwargs(settings))


def get_embedder(settings: Settings = Depends(get_settings)) -> EmbeddingGenerator:
    if not _ai_available(settings):
        return NullEmbeddingGenerator()
    return OpenAIEmbeddingGenerator(_openai_client(settings.openai_api_key), **_openai_kwargs(settings))


def get_link_suggester(settings: Settings = Depends(get_settings)) -> LinkSuggester:
    if not _ai_available(settings):
        return NullLinkSuggester()
    return OpenAILinkSuggester(_openai_client(settings.openai_api_key), **_openai_kwargs(settings))


def get_template_generator(settings: Settings = Depends(get_settings)) -> TemplateGenerator:
    if not _ai_available(settings):
        return NullTemplateGenerator()
    return OpenAITemplateGenerator(_openai_client(settings.openai_api_key), **_openai_kwargs(settings))


@lru_cache
def _image_storage(settings: Settings) -> ImageStorage:
    return build_image_storage(settings)


def get_image_storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    return _image_storage(settings)
