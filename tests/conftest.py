"""
Pytest configuration and shared fixtures for doctranslate tests.
"""
import os
import sys
import json
import asyncio
import base64
import pytest
import httpx
from unittest.mock import MagicMock, AsyncMock

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def settings():
    """Return settings pointing at the real API base with a dummy key."""
    from doctranslate.config import TranslatorSettings

    return TranslatorSettings(
        project_id="test-project",
        credential_info={"type": "service_account", "client_email": "svc@test-project.iam.gserviceaccount.com"},
    )


@pytest.fixture
def fake_credentials():
    """Credential provider that always hands out the same token."""
    creds = MagicMock()
    creds.get_access_token = AsyncMock(return_value="test-token")
    return creds


class UpstreamRecorder:
    """Stands in for translateDocument and records every request it receives."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = None

    def respond_with_document(self, content: bytes, mime_type: str):
        self.status_code = 200
        self.body = {
            "documentTranslation": {
                "byteStreamOutputs": [base64.b64encode(content).decode("ascii")],
                "mimeType": mime_type,
                "detectedLanguageCode": "ja",
            },
            "model": "projects/test-project/locations/global/models/general/nmt",
        }

    def respond_with_error(self, status_code: int, text: str):
        self.status_code = status_code
        self.body = text

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream():
    recorder = UpstreamRecorder()
    recorder.respond_with_document(b"translated", "application/pdf")
    return recorder


@pytest.fixture
def make_app(settings, fake_credentials, upstream):
    """Build the app around the fake credentials and recorded upstream."""
    from doctranslate.api_server import create_app

    def _make(**overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        return create_app(app_settings, credentials=fake_credentials, transport=httpx.MockTransport(upstream))

    return _make


@pytest.fixture
def test_client(make_app):
    from fastapi.testclient import TestClient

    with TestClient(make_app()) as client:
        yield client


class HangingUpstream:
    """translateDocument stand-in that never answers until it is cancelled."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False
        self.completed = False

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        self.completed = True
        return httpx.Response(200)


@pytest.fixture
def hanging_upstream():
    """Factory for HangingUpstream; call it inside the running test loop."""
    return HangingUpstream
