import json
from types import SimpleNamespace

from doypal.ai.openai_provider import OpenAIEmbeddingGenerator, OpenAILinkSuggester, OpenAITemplateGenerator


class FakeOpenAI:
    def __init__(self, content="", embedding=None):
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))
        self.embeddings = SimpleNamespace(create=self._embed)
        self._content = content
        self._embedding = embedding or []

    def _complete(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def _embed(self, **kwargs):
        self.requests.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(embedding=self._embedding)])


def test_template_generator_parses_proposals():
    content = json.dumps(
        {
            "templates": [
                {"name": "Dishes", "description": "Wash up", "default_points": 3, "estimated_frequency": 4, "confidence": 0.8},
                {"description": "missing name"},
            ]
        }
    )
    client = FakeOpenAI(content)

    generation = OpenAITemplateGenerator(client, chat_model="gpt-test").generate([{"id": "1", "description": "dishes"}])

    assert [p.name for p in generation.proposals] == ["Dishes"]
    assert generation.proposals[0].confidence == 0.8
    assert generation.model_output == content
    assert client.requests[0]["model"] == "gpt-test"
    assert client.requests[0]["response_format"] == {"type": "json_object"}


def test_link_suggester_tolerates_non_json():
    suggestions = OpenAILinkSuggester(FakeOpenAI("sorry, no")).suggest([], [])

    assert suggestions == []


def test_embedding_generator():
    client = FakeOpenAI(embedding=[0.1, 0.2])

    embedding = OpenAIEmbeddingGenerator(client, embedding_model="emb-test").embed(" dishes ")

    assert embedding == [0.1, 0.2]
    assert client.requests == [{"input": ["dishes"], "model": "emb-test"}]
