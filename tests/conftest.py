from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from doypal.ai.capabilities import (
    NullEmbeddingGenerator,
    NullLinkSuggester,
    NullTemplateGenerator,
    NullTranslator,
)
from doypal.config import Settings, get_settings
from doypal.db import Base, get_db
from doypal.deps.capabilities import (
    get_embedder,
    get_image_storage,
    get_link_suggester,
    get_template_generator,
    get_translator,
)
from doypal.main import app
from doypal.models.event import Event
from doypal.models.profile import Profile
from doypal.models.reward import Reward
from doypal.models.template import Template
from doypal.services.points_service import local_day_fields
from fakes import InMemoryImageStorage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", timezone="UTC")


@pytest.fixture
def storage():
    return InMemoryImageStorage()


@pytest.fixture
def client(session_factory, settings, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_image_storage] = lambda: storage
    app.dependency_overrides[get_translator] = NullTranslator
    app.dependency_overrides[get_embedder] = NullEmbeddingGenerator
    app.dependency_overrides[get_link_suggester] = NullLinkSuggester
    app.dependency_overrides[get_template_generator] = NullTemplateGenerator

    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


# ─── factories ────────────────────────────────────────────────────
@pytest.fixture
def make_profile(db):
    def _make(name="Alex", **kwargs):
        profile = Profile(name=name, is_active=True, **kwargs)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_event(db):
    def _make(points=5, description="Cleaned room", timestamp=None, **kwargs):
        timestamp = timestamp or datetime(2024, 3, 13, 12, 0)
        day_of_week, day_of_month = local_day_fields(timestamp)
        event = Event(
            description=description,
            points=points,
            timestamp=timestamp,
            day_of_week=kwargs.pop("day_of_week", day_of_week),
            day_of_month=kwargs.pop("day_of_month", day_of_month),
            is_active=kwargs.pop("is_active", True),
            **kwargs,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


@pytest.fixture
def make_reward(db):
    def _make(name="Ice cream", point_cost=10, **kwargs):
        reward = Reward(name=name, point_cost=point_cost, is_active=kwargs.pop("is_active", True), **kwargs)
        db.add(reward)
        db.commit()
        db.refresh(reward)
        return reward

    return _make


@pytest.fixture
def make_template(db):
    def _make(name="Homework", description="Finished homework", default_points=5, **kwargs):
        template = Template(
            name=name,
            description=description,
            default_points=default_points,
            frequency=kwargs.pop("frequency", 0),
            is_active=kwargs.pop("is_active", True),
            **kwargs,
        )
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    return _make


