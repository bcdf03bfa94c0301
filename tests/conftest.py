import logging
import os
import sys
from pathlib import Path

import pytest
from pydantic import BaseModel

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from restclient import RestClient, StubTransport  # noqa: E402
from restclient import logging_config  # noqa: E402
from restclient.http import JSONEncoder  # noqa: E402


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


class TestModel(BaseModel):
    """Small response shape shared by the tests."""

    __test__ = False

    name: str


BASE_URL = "https://www.example.com"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep RESTCLIENT_* variables and stray .env files out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("RESTCLIENT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    """Undo any setup_logging call so caplog keeps seeing package records."""
    monkeypatch.setattr(logging_config, "_LOGGING_CONFIGURED", False)
    package_logger = logging.getLogger("restclient")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def model_type():
    return TestModel


@pytest.fixture
def model():
    return TestModel(name="name")


@pytest.fixture
def encoded_model(model):
    return JSONEncoder().encode(model)


@pytest.fixture
def stub_transport(encoded_model):
    """Transport answering every request with 200 and the encoded model."""
    return StubTransport(body=encoded_model, status_code=200)


@pytest.fixture
def client(stub_transport):
    return RestClient(BASE_URL, transport=stub_transport)


# Rely on pytest-asyncio for async test handling; no custom hook needed.
