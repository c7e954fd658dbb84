import pytest
from fastapi.testclient import TestClient

from main import app
from routers.predict import get_classifier, get_prediction_store
from routers.prediction_store import PredictionStore
from tests.fakes import FakeClassifier, FakeFirestore, make_image_bytes


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def image_bytes():
    return make_image_bytes()


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def overrides(fake_db, classifier):
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.dependency_overrides[get_prediction_store] = lambda: PredictionStore(fake_db)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    with TestClient(overrides) as c:
        yield c
