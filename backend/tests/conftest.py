"""
Shared pytest fixtures and configuration for all tests
"""
import pytest
import sys
import httpx
from pathlib import Path

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
EDITED_IMAGE_BASE64 = "ZWRpdGVkLWltYWdlLWJ5dGVz"
TEST_API_KEY = "test-gemini-key"


def gemini_image_response(data=EDITED_IMAGE_BASE64, mime_type="image/png"):
    """A generateContent response carrying a text part then an inline image"""
    return {
        "candidates": [{
            "content": {
                "role": "model",
                "parts": [
                    {"text": "Here is your edited image."},
                    {"inlineData": {"mimeType": mime_type, "data": data}}
                ]
            },
            "finishReason": "STOP"
        }]
    }


def gemini_error_response(message, status="INVALID_ARGUMENT", reason=None, code=400):
    error = {"code": code, "message": message, "status": status}
    if reason:
        error["details"] = [{
            "@type": "type.googleapis.com/google.rpc.ErrorInfo",
            "reason": reason,
            "domain": "googleapis.com"
        }]
    return {"error": error}


class FakeGeminiBackend:
    """Records requests sent to Gemini and replies with a canned response"""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = gemini_image_response()
        self.exception = None

    def respond_with(self, status_code, body=None):
        self.status_code = status_code
        self.body = body

    def fail_with(self, exception):
        self.exception = exception

    def handler(self, request):
        self.requests.append(request)
        if self.exception is not None:
            raise self.exception
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)


class FakeClock:
    """Manually advanced timer for TTL caches"""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_gemini():
    """Provide a fake Gemini backend"""
    return FakeGeminiBackend()


@pytest.fixture
def gemini_http_client(fake_gemini):
    """Provide an httpx client routed to the fake Gemini backend"""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_gemini.handler))


@pytest.fixture
def gemini_service(gemini_http_client):
    """Provide a GeminiImageService talking to the fake backend"""
    from services.gemini_service import GeminiImageService
    return GeminiImageService(
        api_key=TEST_API_KEY,
        base_url="https://gemini.test/v1beta",
        http_client=gemini_http_client
    )


@pytest.fixture
def image_store():
    """Provide an empty ImageStore"""
    from core.image_store import ImageStore
    return ImageStore(maxsize=16, ttl=60)


@pytest.fixture
def session_service(image_store):
    """Provide a SessionService backed by the test image store"""
    from services.session_service import SessionService
    return SessionService(image_store, maxsize=16, ttl=60)


@pytest.fixture
def edit_session(image_store):
    """Provide a fresh EditSession"""
    from services.edit_session import EditSession
    return EditSession("session-test", image_store)


@pytest.fixture
def client(gemini_service, session_service, image_store):
    """Provide FastAPI test client with the fake Gemini service injected"""
    from fastapi.testclient import TestClient
    from main import app
    from api.image_edit import get_gemini_service
    from core.image_store import get_image_store
    from services.session_service import get_session_service

    app.dependency_overrides[get_gemini_service] = lambda: gemini_service
    app.dependency_overrides[get_session_service] = lambda: session_service
    app.dependency_overrides[get_image_store] = lambda: image_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
