from __future__ import annotations

import os
import tempfile

_TEST_DATA_DIR = tempfile.mkdtemp(prefix="nebulacv-tests-")
os.environ["APP_ENV"] = "test"
os.environ["DATA_DIR"] = _TEST_DATA_DIR
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DATA_DIR}/nebulacv-test.db"
os.environ["OPENAI_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"

import pytest  # noqa: E402

from nebulacv.db import models  # noqa: E402,F401
from nebulacv.db.base import Base  # noqa: E402
from nebulacv.db.session import engine  # noqa: E402
from nebulacv.types import ModelResponse  # noqa: E402


class ScriptedProvider:
    """Stands in for ``LLMProvider``: returns queued outputs in order, raising queued exceptions."""

    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.requests = []

    def complete(self, *, model, request):
        self.requests.append(request)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return ModelResponse(content=output)


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1", "X-User-Email": "dev@example.com"}
