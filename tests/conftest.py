from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeLLMClient:
    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


class FakeMailer:
    def __init__(self, preview_url="https://ethereal.email/message/abc123", error=None):
        self.preview_url = preview_url
        self.error = error
        self.sent = []

    def send(self, recipients, subject, html_body, text=""):
        self.sent.append({"recipients": recipients, "subject": subject, "html": html_body, "text": text})
        if self.error:
            raise self.error
        return self.preview_url


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def make_client(mailer):
    def _make(llm_client=None, **overrides):
        settings = Settings(**overrides)
        return TestClient(create_app(settings, llm_client=llm_client, mailer=mailer))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
