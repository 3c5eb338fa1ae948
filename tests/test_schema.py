from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from doypal.models.event import EMBEDDING_DIMENSIONS, Event
from doypal.services.embedding_service import SIMILAR_EVENTS_SQL


def _ddl(dialect) -> str:
    return str(CreateTable(Event.__table__).compile(dialect=dialect))


def test_embedding_column_is_vector_on_postgres():
    assert f"description_embedding VECTOR({EMBEDDING_DIMENSIONS})" in _ddl(postgresql.dialect())


def test_embedding_column_is_json_on_sqlite():
    assert "description_embedding JSON" in _ddl(sqlite.dialect())


def test_similarity_query_binds_a_vector():
    compiled = SIMILAR_EVENTS_SQL.compile(dialect=postgresql.dialect())
    bind = compiled.binds["search_embedding"]

    assert bind.type.dim == EMBEDDING_DIMENSIONS
    assert "CAST(%(search_embedding)s AS vector)" in str(compiled)
